from .csv_source import CsvRow, CsvRowStream, read_rows, split_line
from .records import (
    CleanedTradeRecord,
    ExceptionRecord,
    ExceptionType,
    FillRecord,
    RawRow,
    Sector,
    SymbolReference,
    TradeRecord,
    TradeStatus,
)

__all__ = [
    "CleanedTradeRecord",
    "CsvRow",
    "CsvRowStream",
    "ExceptionRecord",
    "ExceptionType",
    "FillRecord",
    "RawRow",
    "Sector",
    "SymbolReference",
    "TradeRecord",
    "TradeStatus",
    "read_rows",
    "split_line",
]
