"""
Reconcile dark-pool trade executions against symbol reference data and
counterparty fill confirmations.

Reads three CSV inputs (symbols, fills, trades) named in the configuration
file and writes two JSON arrays: cleaned trades and an exception report.
Cancelled trades appear in neither output.

Usage
-----
    # Built-in defaults (data/*.csv -> output/*.json)
    tradeclean

    # External configuration merged over the defaults
    tradeclean -c ./recon.yaml -v

Config file (YAML or JSON):
    read-config:
      symbols-ref-file: data/symbols_reference.csv
      fills-file: data/counterparty_fills.csv
      trades-file: data/trades.csv
    write-config:
      cleaned-trades-file: output/cleaned_trades.json
      exceptions-report-file: output/exceptions_report.json
      summary-workbook-file: output/run_summary.xlsx   # optional
    validation-config:
      price-discrepancy-threshold: "0.01"
"""

from __future__ import annotations

import argparse
import logging

from tradeclean.config import load_config
from tradeclean.errors import (
    ConfigLoadError,
    CsvSourceError,
    PipelineError,
    SinkWriteError,
    TransformerError,
)
from tradeclean.logging import configure_logging, verbosity_to_level
from tradeclean.reporting import RunMetrics, run_pipeline

EXIT_OK = 0
EXIT_FATAL = 1

_FATAL_MESSAGES = {
    ConfigLoadError: "Exception thrown while loading configs",
    CsvSourceError: "Exception thrown while reading input data",
    TransformerError: "Exception thrown while transforming data",
    SinkWriteError: "Exception thrown while writing data",
}


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="tradeclean",
        description=(
            "Reconcile trade executions against symbol reference data and "
            "counterparty fills"
        ),
    )
    p.add_argument(
        "-c",
        "--config-file-path",
        type=str,
        default=None,
        metavar="FILE",
        help="YAML/JSON configuration merged over the built-in defaults",
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Enable per-row DEBUG logging",
    )
    p.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only log warnings and errors",
    )
    return p


def run(args: argparse.Namespace) -> int:
    logger = logging.getLogger(__name__)
    metrics = RunMetrics()
    try:
        config = load_config(args.config_file_path)
        run_pipeline(config, metrics)
    except PipelineError as e:
        message = _FATAL_MESSAGES.get(type(e), "Fatal error while running application")
        logger.exception("%s: %s", message, e)
        return EXIT_FATAL
    except Exception:
        logger.exception("Fatal error while running application")
        return EXIT_FATAL

    metrics.log_with(logger)
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    parser = build_argparser()
    args = parser.parse_args(argv)

    configure_logging(level=verbosity_to_level(args.verbose, args.quiet))

    return run(args)


if __name__ == "__main__":
    raise SystemExit(main())
