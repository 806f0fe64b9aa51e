"""Excel workbook exporter for scraped profiles."""

import logging
from pathlib import Path
from typing import Optional

import xlsxwriter

from ..types.profiles import MergedProfile
from .base_sink import OutputSink

logger = logging.getLogger(__name__)

# Wider columns for free-text fields
_COLUMN_WIDTHS = {
    "PROFILE LINK": 50,
    "ADDRESS": 40,
    "ABOUT": 60,
    "KEYWORD": 40,
    "OTHER": 40,
}
_DEFAULT_WIDTH = 18


class XLSXExporter(OutputSink):
    """Exports merged profiles to a single-sheet workbook."""

    extension = "xlsx"

    def __init__(self, output_dir: Optional[Path] = None, sheet_name: str = "Profiles"):
        super().__init__(output_dir)
        self._sheet_name = sheet_name

    def write(self, rows: list[MergedProfile], filename: str) -> Path:
        filepath = self._resolve(filename)

        workbook = xlsxwriter.Workbook(str(filepath))
        try:
            sheet = workbook.add_worksheet(self._sheet_name)
            header_format = workbook.add_format({"bold": True, "bg_color": "#D9E1F2"})

            headers = self.headers()
            for col, header in enumerate(headers):
                sheet.write_string(0, col, header, header_format)
                sheet.set_column(col, col, _COLUMN_WIDTHS.get(header, _DEFAULT_WIDTH))

            for row_num, row in enumerate(rows, start=1):
                for col, value in enumerate(self.cells(row)):
                    # write_string keeps phone numbers and postal codes as text
                    sheet.write_string(row_num, col, value)

            sheet.freeze_panes(1, 0)
            if rows:
                sheet.autofilter(0, 0, len(rows), len(headers) - 1)
        finally:
            workbook.close()

        logger.info(f"Wrote {len(rows)} profiles to {filepath}")
        return filepath
