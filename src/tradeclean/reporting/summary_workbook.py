from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from tradeclean.errors import SinkWriteError
from tradeclean.model import ExceptionType

from .metrics import RunMetrics

logger = logging.getLogger(__name__)

SUMMARY_SHEET = "Run Summary"
EXCEPTIONS_SHEET = "Exceptions by Type"


def _autosize(sheet: Worksheet, max_width: int = 60, min_width: int = 10) -> None:
    for col in range(1, sheet.max_column + 1):
        max_len = 0
        for row in range(1, sheet.max_row + 1):
            v = sheet.cell(row=row, column=col).value
            if v is not None:
                max_len = max(max_len, len(str(v)))
        width = min(max_width, max(min_width, max_len + 2))
        sheet.column_dimensions[get_column_letter(col)].width = width


@dataclass
class SummaryWorkbookSink:
    """XLSX digest of a run: counters plus a per-exception-type breakdown."""

    out_path: Path

    def write(self, metrics: RunMetrics) -> Path:
        out_path = Path(self.out_path)
        wb = Workbook()

        # Remove the default sheet
        wb.remove(wb.active)

        ws = wb.create_sheet(title=SUMMARY_SHEET)
        ws.append(["Metric", "Value"])
        for label, value in metrics.summary_rows():
            ws.append([label, value])

        ws_exc = wb.create_sheet(title=EXCEPTIONS_SHEET)
        ws_exc.append(["Exception Type", "Count"])
        for exc_type in ExceptionType:
            ws_exc.append([exc_type.value, metrics.exceptions_by_type.get(exc_type, 0)])
        ws_exc.append(["Total", sum(metrics.exceptions_by_type.values())])

        for sheet in wb.worksheets:
            for cell in sheet[1]:
                cell.font = Font(bold=True)
            _autosize(sheet)

        try:
            out_path.parent.mkdir(parents=True, exist_ok=True)
            wb.save(out_path)
        except OSError as e:
            raise SinkWriteError(f"Failed to write summary workbook: {out_path}") from e
        logger.info("Wrote summary workbook to %s", out_path)
        return out_path
