"""Run statistics and snapshot models."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class ProfileFailure(BaseModel):
    """A profile that could not be scraped."""

    profile_number: int = Field(description="1-based position on the listing")
    url: str
    error_type: Optional[str] = Field(default=None, description="TargetTimeout, TargetNoData, ...")
    message: Optional[str] = Field(default=None)
    attempts: int = Field(default=0)


class RunStatistics(BaseModel):
    """Statistics for one scraping run."""

    total_targets: int = Field(default=0)
    succeeded: int = Field(default=0)
    failed: int = Field(default=0)
    unresolved: int = Field(default=0, description="Targets never dispatched (cancel/abort)")
    total_attempts: int = Field(default=0)
    cancelled: bool = Field(default=False)
    error: Optional[str] = Field(default=None, description="Run-level infrastructure failure")
    duration_seconds: float = Field(default=0.0)
    average_seconds_per_profile: float = Field(default=0.0)


class RunSnapshot(BaseModel):
    """Summary of a run written next to the exported table."""

    tool_version: str
    directory_url: Optional[str] = Field(default=None)
    started_at: datetime
    completed_at: Optional[datetime] = Field(default=None)
    batch_size: int
    statistics: RunStatistics
    pacing: dict[str, Any] = Field(default_factory=dict)
    files: dict[str, str] = Field(default_factory=dict)
    failures: list[ProfileFailure] = Field(default_factory=list)
