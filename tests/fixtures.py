"""Builders for records and CSV inputs.

Production code only ever builds records from CSV rows via the mappers in
reporting.extract. Tests construct them directly so transformer and sink
behaviour can be checked without going through a file.
"""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from pathlib import Path
from typing import Sequence

from tradeclean.model import (
    FillRecord,
    Sector,
    SymbolReference,
    TradeRecord,
    TradeStatus,
)

UTC = dt.timezone.utc
TRADE_TIME = dt.datetime(2024, 1, 15, 10, 0, 0, tzinfo=UTC)
FILL_TIME = dt.datetime(2024, 1, 15, 11, 0, 0, tzinfo=UTC)

SYMBOL_HEADER = "symbol,company_name,is_active,sector"
FILL_HEADER = "external_ref_id,our_trade_id,symbol,counterparty_id,timestamp,price,quantity"
TRADE_HEADER = "trade_id,symbol,buyer_id,seller_id,timestamp,price,quantity,trade_status"


def make_symbol(symbol: str = "AAPL", *, active: bool = True) -> SymbolReference:
    return SymbolReference(
        symbol=symbol,
        company_name=f"{symbol} Inc.",
        sector=Sector.TECHNOLOGY,
        is_active=active,
    )


def make_trade(
    trade_id: str = "T1",
    symbol: str = "AAPL",
    quantity: int = 100,
    price: str = "150.00",
    *,
    timestamp: dt.datetime = TRADE_TIME,
    status: TradeStatus = TradeStatus.EXECUTED,
) -> TradeRecord:
    return TradeRecord(
        trade_id=trade_id,
        timestamp=timestamp,
        symbol=symbol,
        quantity=quantity,
        price=Decimal(price),
        buyer_id="BUY1",
        seller_id="SEL1",
        status=status,
        raw_data={"trade_id": trade_id, "symbol": symbol},
    )


def make_fill(
    our_trade_id: str = "T1",
    symbol: str = "AAPL",
    quantity: int = 100,
    price: str = "150.00",
    *,
    timestamp: dt.datetime = FILL_TIME,
) -> FillRecord:
    return FillRecord(
        external_ref_id=f"EXT-{our_trade_id}",
        our_trade_id=our_trade_id,
        timestamp=timestamp,
        symbol=symbol,
        quantity=quantity,
        price=Decimal(price),
        counterparty_id="CP1",
    )


def write_csv(path: Path, header: str, rows: Sequence[str]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join([header, *rows]) + "\n", encoding="utf-8")
    return path
