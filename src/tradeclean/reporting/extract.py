"""Map raw CSV rows onto typed records.

Every mapper returns either ``Parsed(record)`` or ``Failed(exception_record)``.
All fields of a row are checked before deciding, so a single PARSE_ERROR
carries every problem found on that line.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Callable, Generic, Mapping, TypeVar, Union

from tradeclean.conv import parse_timestamp, to_bool_lenient, to_int_strict, to_price
from tradeclean.model import (
    CsvRow,
    ExceptionRecord,
    ExceptionType,
    FillRecord,
    Sector,
    SymbolReference,
    TradeRecord,
    TradeStatus,
)

T = TypeVar("T")

UNKNOWN_RECORD_ID = "UNKNOWN"

SYMBOL_COLS = ["symbol", "company_name", "is_active", "sector"]
FILL_COLS = [
    "external_ref_id",
    "our_trade_id",
    "symbol",
    "counterparty_id",
    "timestamp",
    "price",
    "quantity",
]
TRADE_COLS = [
    "trade_id",
    "symbol",
    "buyer_id",
    "seller_id",
    "timestamp",
    "price",
    "quantity",
    "trade_status",
]


@dataclass(frozen=True)
class Parsed(Generic[T]):
    value: T


@dataclass(frozen=True)
class Failed:
    exception: ExceptionRecord


RowResult = Union[Parsed[T], Failed]
RowMapper = Callable[[CsvRow, Union[str, Path]], RowResult]


@dataclass(frozen=True)
class Field(Generic[T]):
    """Outcome of parsing one column: a value or an error message."""

    value: T | None = None
    error: str | None = None

    @property
    def is_error(self) -> bool:
        return self.error is not None


def _missing(name: str) -> Field:
    return Field(error=f"Missing required field: {name}")


def _raw(row: Mapping[str, str | None], name: str) -> str | None:
    value = row.get(name)
    if value is None or not value.strip():
        return None
    return value


def required_string(row: Mapping[str, str | None], name: str) -> Field[str]:
    raw = _raw(row, name)
    return _missing(name) if raw is None else Field(raw.strip())


def required_upper(row: Mapping[str, str | None], name: str) -> Field[str]:
    raw = _raw(row, name)
    return _missing(name) if raw is None else Field(raw.strip().upper())


def required_timestamp(row: Mapping[str, str | None], name: str) -> Field[dt.datetime]:
    raw = _raw(row, name)
    if raw is None:
        return _missing(name)
    try:
        return Field(parse_timestamp(raw))
    except ValueError:
        return Field(error=f"Field {name} contains unparsable timestamp: {raw}")


def required_price(row: Mapping[str, str | None], name: str) -> Field[Decimal]:
    raw = _raw(row, name)
    if raw is None:
        return _missing(name)
    try:
        price = to_price(raw)
    except ValueError:
        return Field(error=f"Field {name} contains unparsable price: {raw}")
    if price <= 0:
        return Field(error=f"Field {name} must be positive: {raw}")
    return Field(price)


def required_integer(row: Mapping[str, str | None], name: str) -> Field[int]:
    raw = _raw(row, name)
    if raw is None:
        return _missing(name)
    try:
        value = to_int_strict(raw)
    except ValueError:
        return Field(error=f"Field {name} contains unparsable integer: {raw}")
    if value <= 0:
        return Field(error=f"Field {name} must be positive: {raw}")
    return Field(value)


def required_enum(
    row: Mapping[str, str | None],
    name: str,
    parse: Callable[[str], T],
    kind: str,
) -> Field[T]:
    raw = _raw(row, name)
    if raw is None:
        return _missing(name)
    try:
        return Field(parse(raw))
    except ValueError:
        return Field(error=f"Field {name} contains unparsable {kind}: {raw}")


def _errors(*fields: Field) -> list[str]:
    return [f.error for f in fields if f.error is not None]


def _parse_error(
    record_id: Field[str], source_file: str | Path, errors: list[str], row: CsvRow
) -> Failed:
    details = f"Row {row.line_number}: " + "; ".join(errors)
    return Failed(
        ExceptionRecord(
            record_id=UNKNOWN_RECORD_ID if record_id.is_error else record_id.value,
            source_file=str(source_file),
            exception_type=ExceptionType.PARSE_ERROR,
            details=details,
            raw_data=dict(row.data),
        )
    )


def to_symbol_reference(row: CsvRow, source_file: str | Path) -> RowResult:
    r = row.data
    symbol = required_upper(r, "symbol")
    company_name = required_string(r, "company_name")
    # presence is required; the value itself is read leniently
    is_active = required_string(r, "is_active")
    sector = required_enum(r, "sector", Sector.parse, "sector")

    errors = _errors(symbol, company_name, is_active, sector)
    if errors:
        return _parse_error(symbol, source_file, errors, row)

    return Parsed(
        SymbolReference(
            symbol=symbol.value,
            company_name=company_name.value,
            sector=sector.value,
            is_active=to_bool_lenient(is_active.value),
        )
    )


def to_fill_record(row: CsvRow, source_file: str | Path) -> RowResult:
    r = row.data
    external_ref_id = required_string(r, "external_ref_id")
    our_trade_id = required_string(r, "our_trade_id")
    symbol = required_upper(r, "symbol")
    counterparty_id = required_string(r, "counterparty_id")
    timestamp = required_timestamp(r, "timestamp")
    price = required_price(r, "price")
    quantity = required_integer(r, "quantity")

    errors = _errors(
        external_ref_id,
        our_trade_id,
        symbol,
        counterparty_id,
        timestamp,
        price,
        quantity,
    )
    if errors:
        return _parse_error(external_ref_id, source_file, errors, row)

    return Parsed(
        FillRecord(
            external_ref_id=external_ref_id.value,
            our_trade_id=our_trade_id.value,
            timestamp=timestamp.value,
            symbol=symbol.value,
            quantity=quantity.value,
            price=price.value,
            counterparty_id=counterparty_id.value,
        )
    )


def to_trade_record(row: CsvRow, source_file: str | Path) -> RowResult:
    r = row.data
    trade_id = required_string(r, "trade_id")
    symbol = required_upper(r, "symbol")
    buyer_id = required_string(r, "buyer_id")
    seller_id = required_string(r, "seller_id")
    timestamp = required_timestamp(r, "timestamp")
    price = required_price(r, "price")
    quantity = required_integer(r, "quantity")
    status = required_enum(r, "trade_status", TradeStatus.parse, "trade status")

    errors = _errors(
        trade_id, symbol, buyer_id, seller_id, timestamp, price, quantity, status
    )
    if errors:
        return _parse_error(trade_id, source_file, errors, row)

    return Parsed(
        TradeRecord(
            trade_id=trade_id.value,
            timestamp=timestamp.value,
            symbol=symbol.value,
            quantity=quantity.value,
            price=price.value,
            buyer_id=buyer_id.value,
            seller_id=seller_id.value,
            status=status.value,
            raw_data=dict(row.data),
        )
    )
