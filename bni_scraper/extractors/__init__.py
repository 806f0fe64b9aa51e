"""Extraction ports and directory page parsing."""

from .base_port import ExtractionPort
from .directory import DirectoryListing, build_filename, search_keyword
from .playwright_port import PageContext, PlaywrightPort

__all__ = [
    "ExtractionPort",
    "DirectoryListing",
    "build_filename",
    "search_keyword",
    "PageContext",
    "PlaywrightPort",
]
