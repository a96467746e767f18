import sys
from pathlib import Path

import pytest

# Make 'src' and 'tests' importable without an installed package
ROOT = Path(__file__).resolve().parents[1]
for extra in (ROOT / "src", ROOT / "tests"):
    if str(extra) not in sys.path:
        sys.path.insert(0, str(extra))

from fixtures import FILL_HEADER, SYMBOL_HEADER, TRADE_HEADER, write_csv  # noqa: E402


@pytest.fixture
def write_inputs(tmp_path):
    """Write the three input CSVs under tmp_path/data and return a config dict.

    The returned mapping uses the same kebab-case layout as a config file, so
    tests can dump it to YAML/JSON or feed it to AppConfig.from_mapping.
    """

    def _write(symbols=(), fills=(), trades=(), threshold="0.01", workbook=None):
        data = tmp_path / "data"
        out = tmp_path / "output"
        return {
            "read-config": {
                "symbols-ref-file": str(
                    write_csv(data / "symbols_reference.csv", SYMBOL_HEADER, symbols)
                ),
                "fills-file": str(
                    write_csv(data / "counterparty_fills.csv", FILL_HEADER, fills)
                ),
                "trades-file": str(write_csv(data / "trades.csv", TRADE_HEADER, trades)),
            },
            "write-config": {
                "cleaned-trades-file": str(out / "cleaned_trades.json"),
                "exceptions-report-file": str(out / "exceptions_report.json"),
                "summary-workbook-file": str(workbook) if workbook else None,
            },
            "validation-config": {"price-discrepancy-threshold": threshold},
        }

    return _write
