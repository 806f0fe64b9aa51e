"""Join listing rows with scraped profile records."""

import logging
from typing import Iterable, Optional

from ..extractors.directory import DirectoryListing
from ..types.profiles import DashboardProfile, MergedProfile
from ..types.targets import TargetOutcome

logger = logging.getLogger(__name__)


def merge_profiles(
    listing: DirectoryListing,
    outcomes: Iterable[TargetOutcome],
) -> list[MergedProfile]:
    """Build export rows in listing order.

    Each resolved target produces one row. Failed targets keep their listing
    columns with empty detail columns; targets never resolved are left out.

    Args:
        listing: Directory listing the targets were taken from.
        outcomes: Outcomes in any order.

    Returns:
        Merged rows ordered by target index.
    """
    merged: list[MergedProfile] = []
    for outcome in sorted(outcomes, key=lambda o: o.target.index):
        row: Optional[DashboardProfile] = listing.row_for(outcome.target)
        if row is None:
            logger.warning(
                f"No listing row for profile {outcome.target.profile_number}, "
                "exporting detail columns only"
            )
        record = outcome.record if outcome.succeeded else None
        merged.append(MergedProfile.from_parts(row, record, url=outcome.target.url))
    return merged
