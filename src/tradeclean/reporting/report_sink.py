from __future__ import annotations

import dataclasses
import datetime as dt
import json
import logging
import textwrap
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import IO, Any, Protocol

from tradeclean.errors import SinkWriteError
from tradeclean.model import CleanedTradeRecord, ExceptionRecord

from .reconcile import ReconcileResult

logger = logging.getLogger(__name__)


class RecordSink(Protocol):
    def open(self) -> None: ...

    def write(self, record: Any) -> None: ...

    def close(self) -> None: ...


def _json_default(value: Any) -> Any:
    if isinstance(value, dt.datetime):
        # aware datetimes render with an explicit offset, e.g. +00:00
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _encode_value(value: Any, indent: int) -> str:
    if isinstance(value, Decimal):
        # exact number text, scale kept (150.00 stays 150.00)
        return format(value, "f")
    text = json.dumps(value, default=_json_default, indent=indent)
    return text.replace("\n", "\n" + " " * indent)


def record_to_json(record: Any, indent: int = 2) -> str:
    """Serialize a record dataclass using its (snake_case) field names.

    Decimal fields are written as JSON numbers carrying their exact digits,
    which ``json`` alone would only do via a lossy float conversion.
    """
    pad = " " * indent
    members = [
        f"{pad}{json.dumps(f.name)}: {_encode_value(getattr(record, f.name), indent)}"
        for f in dataclasses.fields(record)
    ]
    if not members:
        return "{}"
    return "{\n" + ",\n".join(members) + "\n}"


@dataclass
class JsonArraySink:
    """Write records one by one as elements of a top-level JSON array."""

    out_path: Path
    indent: int = 2
    count: int = field(default=0, init=False)
    _fp: IO[str] | None = field(default=None, init=False, repr=False)

    @property
    def is_open(self) -> bool:
        return self._fp is not None

    def open(self) -> None:
        out_path = Path(self.out_path)
        try:
            out_path.parent.mkdir(parents=True, exist_ok=True)
            self._fp = open(out_path, "w", encoding="utf-8")
            self._fp.write("[")
        except OSError as e:
            self._fp = None
            raise SinkWriteError(f"Failed to open output file: {out_path}") from e
        logger.info("Opened output file: %s", out_path)

    def write(self, record: Any) -> None:
        if self._fp is None:
            raise SinkWriteError(f"Output file is not open: {self.out_path}")
        element = textwrap.indent(record_to_json(record, self.indent), " " * self.indent)
        try:
            self._fp.write(("," if self.count else "") + "\n" + element)
        except OSError as e:
            raise SinkWriteError(f"Failed writing to {self.out_path}") from e
        self.count += 1

    def close(self) -> None:
        """Write the array terminator and release the file. Safe to repeat."""
        if self._fp is None:
            return
        fp, self._fp = self._fp, None
        try:
            fp.write("\n]\n" if self.count else "]\n")
            fp.flush()
        except OSError as e:
            raise SinkWriteError(f"Failed to finalize {self.out_path}") from e
        finally:
            fp.close()
        logger.debug("Closed %s after %d record(s)", self.out_path, self.count)


class SinkRouter:
    """Own the cleaned-trades and exceptions channels for one run.

    Use as a context manager. Both channels are always finalized on exit, even
    when the other one failed to open or to close, so neither file is left as
    an unterminated array.
    """

    def __init__(self, cleaned_path: str | Path, exceptions_path: str | Path) -> None:
        self.cleaned: RecordSink = JsonArraySink(Path(cleaned_path))
        self.exceptions: RecordSink = JsonArraySink(Path(exceptions_path))

    def open(self) -> None:
        try:
            self.cleaned.open()
            self.exceptions.open()
        except SinkWriteError:
            self._finalize_quietly()
            raise

    def emit_clean(self, record: CleanedTradeRecord) -> None:
        self.cleaned.write(record)

    def emit_exception(self, record: ExceptionRecord) -> None:
        self.exceptions.write(record)

    def route(self, result: ReconcileResult) -> None:
        if isinstance(result, CleanedTradeRecord):
            self.emit_clean(result)
        elif isinstance(result, ExceptionRecord):
            self.emit_exception(result)
        else:
            raise TypeError(f"Cannot route {type(result).__name__}")

    def close(self) -> None:
        first_error: SinkWriteError | None = None
        for sink in (self.cleaned, self.exceptions):
            try:
                sink.close()
            except SinkWriteError as e:
                logger.error("%s", e)
                if first_error is None:
                    first_error = e
        if first_error is not None:
            raise first_error

    def _finalize_quietly(self) -> None:
        for sink in (self.cleaned, self.exceptions):
            try:
                sink.close()
            except SinkWriteError:
                logger.exception("Failed to finalize output while aborting")

    def __enter__(self) -> SinkRouter:
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.close()
        else:
            # keep the original failure as the one that propagates
            self._finalize_quietly()
