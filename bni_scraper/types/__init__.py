"""Type definitions and Pydantic models."""

from .profiles import DashboardProfile, ProfileRecord, MergedProfile
from .run import ProfileFailure, RunSnapshot, RunStatistics
from .targets import (
    Attempt,
    AttemptStatus,
    Target,
    TargetOutcome,
    build_targets,
)

__all__ = [
    # Profiles
    "DashboardProfile",
    "ProfileRecord",
    "MergedProfile",
    # Run
    "ProfileFailure",
    "RunSnapshot",
    "RunStatistics",
    # Targets
    "Attempt",
    "AttemptStatus",
    "Target",
    "TargetOutcome",
    "build_targets",
]
