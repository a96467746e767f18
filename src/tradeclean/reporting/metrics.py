from __future__ import annotations

import logging
import time
from collections import Counter
from dataclasses import dataclass, field

from tradeclean.model import ExceptionType


@dataclass
class SourceCounters:
    """Row accounting for one input file."""

    rows_read: int = 0
    parse_failed: int = 0
    overwritten: int = 0  # later rows replacing an earlier one with the same key


@dataclass
class RunMetrics:
    """Counters for a single pipeline run."""

    symbols: SourceCounters = field(default_factory=SourceCounters)
    fills: SourceCounters = field(default_factory=SourceCounters)
    trades: SourceCounters = field(default_factory=SourceCounters)
    trades_cancelled: int = 0
    trades_cleaned: int = 0
    trades_excepted: int = 0
    trades_confirmed: int = 0
    trades_flagged: int = 0
    exceptions_by_type: Counter[ExceptionType] = field(default_factory=Counter)
    started_at: float = field(default_factory=time.perf_counter)
    finished_at: float | None = None

    def record_exception(self, exception_type: ExceptionType) -> None:
        self.exceptions_by_type[exception_type] += 1

    def stop(self) -> None:
        if self.finished_at is None:
            self.finished_at = time.perf_counter()

    @property
    def elapsed_ms(self) -> int:
        end = self.finished_at if self.finished_at is not None else time.perf_counter()
        return int((end - self.started_at) * 1000)

    def summary_rows(self) -> list[tuple[str, int]]:
        return [
            ("Execution time (ms)", self.elapsed_ms),
            ("Symbol rows read", self.symbols.rows_read),
            ("Symbol rows failed to parse", self.symbols.parse_failed),
            ("Symbol rows overwritten", self.symbols.overwritten),
            ("Fill rows read", self.fills.rows_read),
            ("Fill rows failed to parse", self.fills.parse_failed),
            ("Fill rows overwritten", self.fills.overwritten),
            ("Trade rows read", self.trades.rows_read),
            ("Trade rows failed to parse", self.trades.parse_failed),
            ("Trades cancelled", self.trades_cancelled),
            ("Trades cleaned", self.trades_cleaned),
            ("Trades counterparty confirmed", self.trades_confirmed),
            ("Trades flagged for discrepancy", self.trades_flagged),
            ("Trades rejected by reconciliation", self.trades_excepted),
        ]

    def log_with(self, log: logging.Logger) -> None:
        log.info("===== Pipeline Metrics =====")
        for label, value in self.summary_rows():
            log.info("  %-34s: %d", label, value)
        for exc_type in ExceptionType:
            count = self.exceptions_by_type.get(exc_type, 0)
            if count:
                log.info("  %-34s: %d", exc_type.value, count)
        log.info("============================")
