"""CSV exporter for scraped profiles.

Every cell is quoted and rows are separated by a bare newline.
"""

import csv
import logging
from io import StringIO
from pathlib import Path
from ..types.profiles import MergedProfile
from .base_sink import OutputSink

logger = logging.getLogger(__name__)


class CSVExporter(OutputSink):
    """Exports merged profiles to CSV."""

    extension = "csv"

    def render(self, rows: list[MergedProfile]) -> str:
        """Render rows, header first, as CSV text."""
        output = StringIO()
        writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(self.headers())
        for row in rows:
            writer.writerow(self.cells(row))
        # No trailing newline after the last row
        return output.getvalue().rstrip("\n")

    def write(self, rows: list[MergedProfile], filename: str) -> Path:
        filepath = self._resolve(filename)
        with open(filepath, "w", newline="", encoding="utf-8") as f:
            f.write(self.render(rows))

        logger.info(f"Wrote {len(rows)} profiles to {filepath}")
        return filepath

