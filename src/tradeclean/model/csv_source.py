from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Iterator, Sequence

from tradeclean.errors import CsvSourceError

from .records import RawRow

logger = logging.getLogger(__name__)

HEADER_LINE_NO = 1


@dataclass(frozen=True)
class CsvRow:
    """One data line: its 1-based line number in the file and its column map."""

    line_number: int
    data: RawRow


def split_line(line: str, delimiter: str = ",") -> list[str]:
    """Split a line into trimmed tokens.

    A double quote toggles quoted mode and is dropped from the output; the
    delimiter is kept verbatim while quoted. There is no escape syntax for a
    literal quote.
    """
    tokens: list[str] = []
    current: list[str] = []
    in_quotes = False
    for ch in line:
        if ch == '"':
            in_quotes = not in_quotes
        elif ch == delimiter and not in_quotes:
            tokens.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
    tokens.append("".join(current).strip())
    return tokens


def map_row_to_header(values: Sequence[str], header: Sequence[str]) -> RawRow:
    """Zip tokens onto the header; missing or empty values become None."""
    row: RawRow = {}
    for i, name in enumerate(header):
        value = values[i] if i < len(values) else None
        row[name] = value if value else None
    return row


class CsvRowStream:
    """Lazy, single-pass iterator over the data rows of an opened CSV file.

    Owns the file handle: it is closed when the rows run out, when ``close()``
    is called, or when a ``with`` block around the stream exits.
    """

    def __init__(
        self, path: Path, fp: IO[str], header: Sequence[str], delimiter: str
    ) -> None:
        self.path = path
        self.header = tuple(header)
        self._fp = fp
        self._delimiter = delimiter
        self._rows = self._iter_rows()

    def _iter_rows(self) -> Iterator[CsvRow]:
        line_no = HEADER_LINE_NO
        try:
            for line_no, line in enumerate(self._fp, start=HEADER_LINE_NO + 1):
                text = line.rstrip("\r\n")
                if not text.strip():
                    logger.debug("Skipping blank line %d in %s", line_no, self.path.name)
                    continue
                logger.debug("Processing row %d: %s", line_no, text)
                values = split_line(text, self._delimiter)
                yield CsvRow(line_no, map_row_to_header(values, self.header))
        except UnicodeDecodeError as e:
            raise CsvSourceError(
                f"Malformed text in CSV file {self.path} after line {line_no}"
            ) from e
        except OSError as e:
            raise CsvSourceError(f"Failed to read CSV file: {self.path}") from e
        finally:
            self._close_file()

    def _close_file(self) -> None:
        if not self._fp.closed:
            logger.debug("Closing CSV file: %s", self.path)
            self._fp.close()

    def __iter__(self) -> CsvRowStream:
        return self

    def __next__(self) -> CsvRow:
        return next(self._rows)

    def close(self) -> None:
        self._rows.close()
        self._close_file()

    def __enter__(self) -> CsvRowStream:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def read_rows(
    path: str | Path, *, encoding: str = "utf-8", delimiter: str = ","
) -> CsvRowStream:
    """Open ``path``, consume its header line and return a lazy row stream.

    Raises CsvSourceError right away (before any row is produced) when the
    file cannot be opened or holds no header line. Text that does not decode
    with ``encoding`` also raises CsvSourceError, from here or from iteration
    depending on where the bad bytes sit.
    """
    path = Path(path)
    logger.info("Opening CSV file: %s", path)
    try:
        fp = open(path, "r", encoding=encoding, newline="")
    except OSError as e:
        raise CsvSourceError(f"Failed to open CSV file: {path}") from e

    try:
        header_line = fp.readline()
    except UnicodeDecodeError as e:
        fp.close()
        raise CsvSourceError(f"Malformed text in CSV file: {path}") from e
    except OSError as e:
        fp.close()
        raise CsvSourceError(f"Failed to read CSV file: {path}") from e

    if not header_line:
        fp.close()
        raise CsvSourceError(f"Empty CSV file: {path}")

    # Strip BOM on the first header cell if present
    header = split_line(header_line.rstrip("\r\n").lstrip("\ufeff"), delimiter)
    logger.debug("Headers for %s: %s", path.name, header)
    return CsvRowStream(path, fp, header, delimiter)
