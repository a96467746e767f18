import pytest
from openpyxl import load_workbook

from tradeclean.errors import SinkWriteError
from tradeclean.model import ExceptionType
from tradeclean.reporting import RunMetrics, SummaryWorkbookSink


def _metrics():
    m = RunMetrics()
    m.trades.rows_read = 5
    m.trades_cleaned = 2
    m.trades_cancelled = 1
    m.trades_excepted = 1
    m.record_exception(ExceptionType.PARSE_ERROR)
    m.record_exception(ExceptionType.DUPLICATE_TRADE_ID)
    m.stop()
    return m


def test_summary_workbook_sheets_and_headers(tmp_path):
    out = SummaryWorkbookSink(tmp_path / "out" / "summary.xlsx").write(_metrics())

    wb = load_workbook(out)
    assert wb.sheetnames == ["Run Summary", "Exceptions by Type"]
    ws = wb["Run Summary"]
    assert [c.value for c in ws[1]] == ["Metric", "Value"]
    assert ws["A1"].font.bold


def test_summary_workbook_counters(tmp_path):
    out = SummaryWorkbookSink(tmp_path / "summary.xlsx").write(_metrics())

    ws = load_workbook(out)["Run Summary"]
    values = {row[0]: row[1] for row in ws.iter_rows(min_row=2, values_only=True)}
    assert values["Trade rows read"] == 5
    assert values["Trades cleaned"] == 2
    assert values["Trades cancelled"] == 1


def test_exceptions_sheet_lists_every_type_and_total(tmp_path):
    out = SummaryWorkbookSink(tmp_path / "summary.xlsx").write(_metrics())

    ws = load_workbook(out)["Exceptions by Type"]
    rows = list(ws.iter_rows(min_row=2, values_only=True))
    assert [r[0] for r in rows[:-1]] == [t.value for t in ExceptionType]
    counts = dict(rows)
    assert counts["PARSE_ERROR"] == 1
    assert counts["DUPLICATE_TRADE_ID"] == 1
    assert counts["INVALID_SYMBOL"] == 0
    assert rows[-1] == ("Total", 2)


def test_unwritable_workbook_path_is_sink_error(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")
    with pytest.raises(SinkWriteError):
        SummaryWorkbookSink(blocker / "summary.xlsx").write(_metrics())


def test_columns_are_sized_to_longest_label(tmp_path):
    out = SummaryWorkbookSink(tmp_path / "summary.xlsx").write(_metrics())

    ws = load_workbook(out)["Run Summary"]
    longest = max(len(row[0]) for row in ws.iter_rows(values_only=True))
    assert ws.column_dimensions["A"].width == longest + 2
    assert ws.column_dimensions["B"].width == 10
