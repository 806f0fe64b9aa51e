"""Directory listing model and output filename derivation."""

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from urllib.parse import parse_qs, urlparse

from ..types.profiles import DashboardProfile
from ..types.targets import Target, build_targets
from .selectors import FILTER_QUERY_PARAMS

_KEYWORD_STRIP = re.compile(r"[^a-zA-Z0-9-]")


@dataclass
class DirectoryListing:
    """Rows read from one directory listing page."""

    url: str
    rows: list[DashboardProfile] = field(default_factory=list)
    filters: dict[str, str] = field(default_factory=dict)
    read_at: datetime = field(default_factory=datetime.now)

    @property
    def targets(self) -> list[Target]:
        """Targets for every row that links to a profile, indexed by row."""
        return build_targets([row.profile_link for row in self.rows])

    def limited(self, limit: Optional[int]) -> list[Target]:
        """First ``limit`` targets, or all of them."""
        targets = self.targets
        if limit is not None and limit >= 0:
            return targets[:limit]
        return targets

    def row_for(self, target: Target) -> Optional[DashboardProfile]:
        if 0 <= target.index < len(self.rows):
            return self.rows[target.index]
        return None

    def filename(
        self,
        prefix: str = "BNI",
        extension: str = "csv",
        when: Optional[datetime] = None,
    ) -> str:
        return build_filename(
            search_keyword(self.url, self.filters),
            prefix=prefix,
            extension=extension,
            when=when,
        )


def _clean_keyword(value: str) -> str:
    return _KEYWORD_STRIP.sub("", value).lower()


def search_keyword(page_url: str, filters: Optional[dict[str, str]] = None) -> str:
    """Pick one keyword describing the directory search.

    Known query parameters win over filters read from the page. Falls back
    to ``general`` when nothing usable is found.
    """
    params = parse_qs(urlparse(page_url).query)
    candidates = [params[name][0] for name in FILTER_QUERY_PARAMS if params.get(name)]

    if not candidates and filters:
        candidates = [value for value in filters.values() if value and value.strip()]

    for candidate in candidates:
        keyword = _clean_keyword(candidate.strip())
        if keyword:
            return keyword
    return "general"


def build_filename(
    keyword: str,
    prefix: str = "BNI",
    extension: str = "csv",
    when: Optional[datetime] = None,
) -> str:
    """Build ``<prefix>-<keyword>-<YYYYMMDD-HHMMSS>.<extension>``."""
    timestamp = (when or datetime.now()).strftime("%Y%m%d-%H%M%S")
    return f"{prefix}-{keyword}-{timestamp}.{extension}"
