from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

RawRow = dict[str, str | None]


class Sector(Enum):
    TECHNOLOGY = "Technology"
    CONSUMER_CYCLICAL = "Consumer Cyclical"
    AUTOMOTIVE = "Automotive"
    FINANCIAL_SERVICES = "Financial Services"
    INDUSTRIAL = "Industrial"

    @classmethod
    def parse(cls, display_name: str | None) -> Sector:
        """Case-insensitive match on the display name; ValueError if unknown."""
        if display_name is None or not display_name.strip():
            raise ValueError("Sector is empty")
        wanted = display_name.strip().lower()
        for sector in cls:
            if sector.value.lower() == wanted:
                return sector
        raise ValueError(f"Unknown sector: {display_name!r}")


class TradeStatus(Enum):
    EXECUTED = "EXECUTED"
    CANCELLED = "CANCELLED"

    @classmethod
    def parse(cls, value: str | None) -> TradeStatus:
        if value is None or not value.strip():
            raise ValueError("Trade status is empty")
        try:
            return cls(value.strip().upper())
        except ValueError:
            raise ValueError(f"Unknown trade status: {value!r}") from None


class ExceptionType(str, Enum):
    """Closed taxonomy of reasons a row lands in the exception report."""

    PARSE_ERROR = "PARSE_ERROR"
    DUPLICATE_TRADE_ID = "DUPLICATE_TRADE_ID"
    INVALID_SYMBOL = "INVALID_SYMBOL"
    INACTIVE_SYMBOL = "INACTIVE_SYMBOL"
    FILL_SYMBOL_MISMATCH = "FILL_SYMBOL_MISMATCH"
    FILL_TIMESTAMP_INVALID = "FILL_TIMESTAMP_INVALID"


@dataclass(frozen=True)
class SymbolReference:
    symbol: str  # upper-cased
    company_name: str
    sector: Sector
    is_active: bool


@dataclass(frozen=True)
class FillRecord:
    external_ref_id: str
    our_trade_id: str
    timestamp: dt.datetime
    symbol: str
    quantity: int
    price: Decimal
    counterparty_id: str


@dataclass(frozen=True)
class TradeRecord:
    trade_id: str
    timestamp: dt.datetime
    symbol: str
    quantity: int
    price: Decimal
    buyer_id: str
    seller_id: str
    status: TradeStatus
    # original column values, kept for the exception report
    raw_data: RawRow = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class CleanedTradeRecord:
    trade_id: str
    timestamp_utc: dt.datetime
    symbol: str
    quantity: int
    price: Decimal
    buyer_id: str
    seller_id: str
    counterparty_confirmed: bool
    discrepancy_flag: bool


@dataclass(frozen=True)
class ExceptionRecord:
    record_id: str
    source_file: str
    exception_type: ExceptionType
    details: str
    raw_data: RawRow = field(default_factory=dict, compare=False)
