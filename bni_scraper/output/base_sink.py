"""Base class for tabular output sinks."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from ..types.profiles import MergedProfile

# (field, header) pairs in export order
COLUMNS: list[tuple[str, str]] = [
    ("name", "NAME"),
    ("profile_link", "PROFILE LINK"),
    ("chapter", "CHAPTER"),
    ("company", "COMPANY"),
    ("city", "CITY"),
    ("industry_tag", "INDUSTRY TAG"),
    ("connect", "CONNECT"),
    ("detailed_name", "DETAILED NAME"),
    ("phone_no", "PHONE NO"),
    ("detailed_email", "EMAIL"),
    ("website", "WEBSITE"),
    ("phone_no_2", "PHONE NO 2"),
    ("detailed_address", "ADDRESS"),
    ("detailed_city", "DETAILED CITY"),
    ("postal_code", "POSTAL CODE"),
    ("country", "COUNTRY"),
    ("detailed_industry", "DETAILED INDUSTRY"),
    ("about", "ABOUT"),
    ("keyword", "KEYWORD"),
    ("other", "OTHER"),
]


class OutputSink(ABC):
    """Writes merged profile rows to a file."""

    extension: str = ""

    def __init__(self, output_dir: Optional[Path] = None):
        """Initialize the sink.

        Args:
            output_dir: Directory for output files. Relative filenames are
                resolved against it.
        """
        self._output_dir = output_dir

    @abstractmethod
    def write(self, rows: list[MergedProfile], filename: str) -> Path:
        """Write rows and return the path of the file written."""
        pass

    def _resolve(self, filename: str) -> Path:
        filepath = self._output_dir / filename if self._output_dir else Path(filename)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        return filepath

    @staticmethod
    def headers() -> list[str]:
        return [header for _, header in COLUMNS]

    @staticmethod
    def cells(row: MergedProfile) -> list[str]:
        data = row.model_dump()
        return [str(data.get(name) or "") for name, _ in COLUMNS]
