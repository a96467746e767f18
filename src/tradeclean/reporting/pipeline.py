from __future__ import annotations

import logging
from pathlib import Path

from tradeclean.config import AppConfig
from tradeclean.model import CleanedTradeRecord, TradeStatus, read_rows

from .extract import TRADE_COLS, Failed, to_trade_record
from .loaders import load_fills, load_symbols, warn_missing_columns
from .metrics import RunMetrics
from .reconcile import Transformer
from .report_sink import SinkRouter
from .summary_workbook import SummaryWorkbookSink

logger = logging.getLogger(__name__)


def run_pipeline(config: AppConfig, metrics: RunMetrics | None = None) -> RunMetrics:
    """Reconcile the trades file and write both JSON reports.

    Reference data is loaded fully first. Trades are then streamed one row at
    a time and each row ends up in exactly one place: the cleaned output, the
    exception report, or (cancelled trades only) nowhere.

    Fatal conditions (unreadable input, unwritable output, faults inside the
    reconciliation logic) propagate as PipelineError subclasses.
    """
    metrics = metrics or RunMetrics()

    symbols = load_symbols(config.read.symbols_ref_file, metrics)
    fills = load_fills(config.read.fills_file, metrics)
    logger.info("Loaded %d symbols, %d fills", len(symbols), len(fills))

    transformer = Transformer(
        symbols,
        fills,
        price_discrepancy_threshold=config.validation.price_discrepancy_threshold,
    )
    trades_file: Path = config.read.trades_file

    with read_rows(trades_file) as rows, SinkRouter(
        config.write.cleaned_trades_file, config.write.exceptions_report_file
    ) as sinks:
        warn_missing_columns(rows, TRADE_COLS)
        logger.info("Processing trade records...")
        for row in rows:
            metrics.trades.rows_read += 1
            parsed = to_trade_record(row, trades_file)
            if isinstance(parsed, Failed):
                logger.debug("Parse failure: %s", parsed.exception.details)
                metrics.trades.parse_failed += 1
                metrics.record_exception(parsed.exception.exception_type)
                sinks.emit_exception(parsed.exception)
                continue

            trade = parsed.value
            if trade.status is TradeStatus.CANCELLED:
                logger.debug("Skipping cancelled trade: %s", trade.trade_id)
                metrics.trades_cancelled += 1
                continue

            result = transformer.reconcile(trade, trades_file)
            if isinstance(result, CleanedTradeRecord):
                metrics.trades_cleaned += 1
                if result.counterparty_confirmed:
                    metrics.trades_confirmed += 1
                if result.discrepancy_flag:
                    metrics.trades_flagged += 1
            else:
                metrics.trades_excepted += 1
                metrics.record_exception(result.exception_type)
            sinks.route(result)
        logger.info("Trade records processing complete.")

    metrics.stop()
    if config.write.summary_workbook_file is not None:
        SummaryWorkbookSink(config.write.summary_workbook_file).write(metrics)
    return metrics
