from .extract import (
    Failed,
    Parsed,
    RowResult,
    to_fill_record,
    to_symbol_reference,
    to_trade_record,
)
from .loaders import load_fills, load_symbols
from .metrics import RunMetrics, SourceCounters
from .pipeline import run_pipeline
from .reconcile import Transformer, has_discrepancy
from .report_sink import JsonArraySink, RecordSink, SinkRouter
from .summary_workbook import SummaryWorkbookSink

__all__ = [
    "Failed",
    "Parsed",
    "RowResult",
    "to_fill_record",
    "to_symbol_reference",
    "to_trade_record",
    "load_fills",
    "load_symbols",
    "RunMetrics",
    "SourceCounters",
    "run_pipeline",
    "Transformer",
    "has_discrepancy",
    "JsonArraySink",
    "RecordSink",
    "SinkRouter",
    "SummaryWorkbookSink",
]
