from __future__ import annotations

import datetime as dt
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Callable

INT_RE = re.compile(r"[+-]?\d+")
DECIMAL_RE = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")

US_TIMESTAMP_FMT = "%m/%d/%Y %H:%M:%S"
# seconds fraction of an ISO instant, 1 to 9 digits
ISO_FRACTION_RE = re.compile(r"(T\d{2}:\d{2}:\d{2})\.(\d{1,9})(?=\D|$)")

_MONEY_Q = Decimal("0.01")


def quantize_money(value: Decimal) -> Decimal:
    """Round to cents, half-up, regardless of the ambient decimal context."""
    return value.quantize(_MONEY_Q, rounding=ROUND_HALF_UP)


def to_dec_strict(s: str | None) -> Decimal:
    """Convert a plain base-10 numeric string to Decimal.

    Raises ValueError on missing, non-finite or malformed input. Thousands
    separators are not accepted.
    """
    if s is None:
        raise ValueError("Value is None")

    s_stripped = s.strip()
    if not s_stripped:
        raise ValueError("Value is empty string")

    # Decimal() alone would also accept "NaN", "Infinity" and "1_000"
    if not DECIMAL_RE.fullmatch(s_stripped):
        raise ValueError(f"Invalid decimal format: {s!r}")
    try:
        return Decimal(s_stripped)
    except InvalidOperation as e:
        raise ValueError(f"Invalid decimal format: {s!r}") from e


def to_price(s: str | None) -> Decimal:
    """Parse a price and scale it to two fractional digits (half-up)."""
    value = to_dec_strict(s)
    try:
        return quantize_money(value)
    except InvalidOperation as e:
        raise ValueError(f"Price exceeds decimal precision: {s!r}") from e


def to_int_strict(s: str | None) -> int:
    """Parse a whole number: optional sign followed by digits only."""
    if s is None:
        raise ValueError("Value is None")
    s_stripped = s.strip()
    if not INT_RE.fullmatch(s_stripped):
        raise ValueError(f"Invalid integer format: {s!r}")
    return int(s_stripped)


def to_bool_lenient(s: str | None) -> bool:
    """Only the literal "true" (any case) is true; everything else is false."""
    return s is not None and s.strip().lower() == "true"


def _from_epoch_seconds(raw: str) -> dt.datetime:
    seconds = to_int_strict(raw)
    try:
        return dt.datetime.fromtimestamp(seconds, tz=dt.timezone.utc)
    except (OverflowError, OSError) as e:
        raise ValueError(f"Epoch seconds out of range: {raw!r}") from e


def _from_iso_instant(raw: str) -> dt.datetime:
    s = raw.strip()
    if "T" not in s:
        raise ValueError(f"Not an ISO-8601 instant: {raw!r}")
    if s.endswith(("Z", "z")):
        s = s[:-1] + "+00:00"
    # fromisoformat on 3.10 only takes 3 or 6 digits; nanoseconds are truncated
    s = ISO_FRACTION_RE.sub(
        lambda m: f"{m.group(1)}.{m.group(2)[:6].ljust(6, '0')}", s
    )
    parsed = dt.datetime.fromisoformat(s)
    if parsed.tzinfo is None:
        raise ValueError(f"ISO-8601 instant lacks an offset: {raw!r}")
    return parsed.astimezone(dt.timezone.utc)


def _from_us_format(raw: str) -> dt.datetime:
    parsed = dt.datetime.strptime(raw.strip(), US_TIMESTAMP_FMT)
    return parsed.replace(tzinfo=dt.timezone.utc)


# First parser that succeeds wins
TIMESTAMP_PARSERS: tuple[Callable[[str], dt.datetime], ...] = (
    _from_epoch_seconds,
    _from_iso_instant,
    _from_us_format,
)


def parse_timestamp(s: str | None) -> dt.datetime:
    """Parse epoch seconds, an ISO-8601 instant or ``M/d/yyyy H:m:s`` (UTC).

    Always returns an aware datetime in UTC. Raises ValueError if no format
    matches.
    """
    if s is None or not s.strip():
        raise ValueError("Value is empty")
    for parser in TIMESTAMP_PARSERS:
        try:
            return parser(s)
        except ValueError:
            continue
    raise ValueError(f"Unrecognized timestamp: {s!r}")
