from __future__ import annotations

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Callable, Iterable, Mapping, Sequence, TypeVar

from tradeclean.model import CsvRowStream, FillRecord, SymbolReference, read_rows

from .extract import (
    FILL_COLS,
    SYMBOL_COLS,
    Failed,
    RowMapper,
    to_fill_record,
    to_symbol_reference,
)
from .metrics import RunMetrics, SourceCounters

logger = logging.getLogger(__name__)

R = TypeVar("R")


def warn_missing_columns(stream: CsvRowStream, expected: Sequence[str]) -> None:
    """Log absent columns once; their values will surface as parse errors."""
    missing = [c for c in expected if c not in stream.header]
    if missing:
        logger.warning("%s is missing columns: %s", stream.path.name, missing)


def _load_table(
    path: str | Path,
    mapper: RowMapper,
    key: Callable[[R], str],
    counters: SourceCounters,
    expected_cols: Iterable[str],
    kind: str,
) -> Mapping[str, R]:
    table: dict[str, R] = {}
    with read_rows(path) as rows:
        warn_missing_columns(rows, list(expected_cols))
        for row in rows:
            counters.rows_read += 1
            result = mapper(row, path)
            if isinstance(result, Failed):
                counters.parse_failed += 1
                logger.debug("Skipping invalid %s row: %s", kind, result.exception.details)
                continue

            record = result.value
            k = key(record)
            if k in table:
                # last row wins
                counters.overwritten += 1
                logger.debug(
                    "Duplicate %s key %s on row %d replaces earlier row",
                    kind,
                    k,
                    row.line_number,
                )
            table[k] = record
    return MappingProxyType(table)


def load_symbols(
    path: str | Path, metrics: RunMetrics
) -> Mapping[str, SymbolReference]:
    """Load the symbol reference file into a read-only map keyed by symbol."""
    return _load_table(
        path,
        to_symbol_reference,
        lambda s: s.symbol,
        metrics.symbols,
        SYMBOL_COLS,
        "symbol",
    )


def load_fills(path: str | Path, metrics: RunMetrics) -> Mapping[str, FillRecord]:
    """Load counterparty fills into a read-only map keyed by our trade id."""
    return _load_table(
        path,
        to_fill_record,
        lambda f: f.our_trade_id,
        metrics.fills,
        FILL_COLS,
        "fill",
    )
