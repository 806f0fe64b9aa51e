"""Run snapshot writer.

Writes a JSON summary of a run (statistics, pacing and per-profile
failures) next to the exported table.
"""

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

import orjson

from .. import __version__
from ..types.run import RunSnapshot

if TYPE_CHECKING:
    from ..orchestration.scheduler import RunResult

logger = logging.getLogger(__name__)


def json_dumps(obj: Any) -> bytes:
    """Serialize object to JSON bytes using orjson."""
    return orjson.dumps(
        obj,
        option=orjson.OPT_INDENT_2 | orjson.OPT_NON_STR_KEYS,
        default=_json_default,
    )


def _json_default(obj: Any) -> Any:
    """Default serializer for non-standard types."""
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, Path):
        return str(obj)
    if hasattr(obj, "model_dump"):
        return obj.model_dump()
    raise TypeError(f"Cannot serialize {type(obj)}")


def build_snapshot(
    result: "RunResult",
    batch_size: int,
    directory_url: Optional[str] = None,
    files: Optional[dict[str, str]] = None,
) -> RunSnapshot:
    """Summarize a run result."""
    return RunSnapshot(
        tool_version=__version__,
        directory_url=directory_url,
        started_at=result.started_at,
        completed_at=result.completed_at,
        batch_size=batch_size,
        statistics=result.get_statistics(),
        pacing=result.pacing,
        files=files or {},
        failures=result.get_failures(),
    )


class SnapshotWriter:
    """Writes run snapshots to disk."""

    def __init__(self, output_dir: Path):
        """Initialize the snapshot writer.

        Args:
            output_dir: Directory the snapshot file is written to.
        """
        self._output_dir = output_dir

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    async def write(self, snapshot: RunSnapshot, filename: str) -> Path:
        """Write a snapshot as formatted JSON.

        Args:
            snapshot: Run snapshot to write.
            filename: File name inside the output directory.

        Returns:
            Path to the written file.
        """
        self._output_dir.mkdir(parents=True, exist_ok=True)
        path = self._output_dir / filename

        loop = asyncio.get_running_loop()
        await loop.run_in_executor(
            None,
            self._write_json_sync,
            path,
            snapshot.model_dump(mode="json"),
        )

        logger.info(f"Wrote run summary to {path}")
        return path

    def _write_json_sync(self, path: Path, data: Any) -> None:
        """Synchronous JSON write."""
        with open(path, "wb") as f:
            f.write(json_dumps(data))

