"""Scrape targets and their per-attempt and final outcomes."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .profiles import ProfileRecord


@dataclass(frozen=True)
class Target:
    """One profile to scrape.

    ``index`` is the row's position on the listing page and is the only
    identity used for deduplication and for ordering the export, because
    the same URL may legitimately appear more than once.
    """

    index: int
    url: str

    @property
    def profile_number(self) -> int:
        """1-based number shown in progress output."""
        return self.index + 1


class AttemptStatus(str, Enum):
    """Outcome of a single attempt against a target."""

    PENDING = "pending"
    SUCCESS = "success"
    TIMEOUT = "timeout"
    EXTRACTION_FAILED = "extraction_failed"
    TRANSPORT_FAILED = "transport_failed"


@dataclass
class Attempt:
    """One execution of the extraction port against a target."""

    target: Target
    ordinal: int
    status: AttemptStatus = AttemptStatus.PENDING
    record: Optional[ProfileRecord] = None
    reason: Optional[str] = None


@dataclass(frozen=True)
class TargetOutcome:
    """Final resolution of a target. Exactly one exists per target."""

    target: Target
    succeeded: bool
    record: Optional[ProfileRecord] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    attempts: int = 0

    @classmethod
    def success(cls, target: Target, record: ProfileRecord, attempts: int) -> "TargetOutcome":
        return cls(target=target, succeeded=True, record=record, attempts=attempts)

    @classmethod
    def failure(
        cls,
        target: Target,
        error: str,
        error_type: Optional[str],
        attempts: int,
    ) -> "TargetOutcome":
        return cls(
            target=target,
            succeeded=False,
            error=error,
            error_type=error_type,
            attempts=attempts,
        )


def build_targets(urls: list[str], start_index: int = 0) -> list[Target]:
    """Create targets for a flat list of URLs, skipping blanks.

    Blank entries still consume an index so positions match the listing.
    """
    return [
        Target(index=start_index + i, url=url.strip())
        for i, url in enumerate(urls)
        if url and url.strip()
    ]
