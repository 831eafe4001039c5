"""CSV text → grid of string cells.

Parsing follows RFC 4180 quoting via the stdlib :mod:`csv` module: fields are
comma separated, double quotes delimit a field, a doubled quote inside a
quoted field is a literal quote, and commas/newlines inside quotes are field
content. On top of that:

- every ``\\r`` is discarded before parsing (CRLF and stray CR alike, including
  inside quoted fields);
- a ``"`` in the middle of an unquoted field is a literal character and does
  not open a quoted section;
- wholly blank lines (a row that is a single empty field) are dropped;
- a trailing unterminated quoted field at end of input is still emitted;
- a byte-order mark on the very first cell is stripped;
- fields are not capped at :mod:`csv`'s default 128 KiB.
"""

from __future__ import annotations

import csv
from io import StringIO
from typing import TypeAlias

from .errors import CsvSyntaxError

Grid: TypeAlias = list[list[str]]

_BOM = "\ufeff"
# Largest value csv.field_size_limit accepts on every platform (C long).
_FIELD_LIMIT = 2**31 - 1


def _is_blank_row(row: list[str]) -> bool:
    return not row or (len(row) == 1 and row[0] == "")


def parse_csv(text: str) -> Grid:
    """Tokenize ``text`` into rows of cells.

    Rows keep their own length; the grid is not padded to the header width.
    Raises :class:`~loyalty_receipts.errors.CsvSyntaxError` if the reader
    rejects the text.
    """

    cleaned = text.replace("\r", "")
    grid: Grid = []
    previous_limit = csv.field_size_limit(_FIELD_LIMIT)
    try:
        with StringIO(cleaned, newline="") as f:
            # strict=False: an unterminated quote at EOF yields the partial field.
            reader = csv.reader(f, strict=False)
            try:
                for row in reader:
                    if _is_blank_row(row):
                        continue
                    grid.append(row)
            except csv.Error as exc:
                raise CsvSyntaxError(line=reader.line_num, reason=str(exc)) from exc
    finally:
        csv.field_size_limit(previous_limit)
    if grid and grid[0] and grid[0][0].startswith(_BOM):
        grid[0][0] = grid[0][0][len(_BOM) :]
    return grid


__all__ = ["Grid", "parse_csv"]
