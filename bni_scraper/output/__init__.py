"""Output handling for scraped profiles."""

from .base_sink import COLUMNS, OutputSink
from .csv_exporter import CSVExporter
from .merger import merge_profiles
from .snapshot_writer import SnapshotWriter, build_snapshot
from .xlsx_exporter import XLSXExporter

__all__ = [
    # Merge
    "merge_profiles",
    # Sinks
    "COLUMNS",
    "OutputSink",
    "CSVExporter",
    "XLSXExporter",
    # Snapshot
    "SnapshotWriter",
    "build_snapshot",
]
