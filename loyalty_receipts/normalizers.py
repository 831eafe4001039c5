"""Grid rows → :class:`~loyalty_receipts.models.NormalizedLine` records.

Field rules
-----------
- ``date``: trimmed, ``/`` replaced by ``-``, cut to 10 characters when
  longer. Other shapes (``2024-1-5``) pass through as-is.
- ``time``: ``HH:MM:SS``. Colon forms are split and each part zero-padded
  (``13:5`` → ``13:05:00``); digit runs of length 6/4/2 are read as
  ``HHMMSS``/``HHMM``/``HH``. Anything else rejects the whole load.
- ``amount``/``qty``: thousands commas removed, parsed as a :class:`~decimal.Decimal`;
  unparseable or non-finite values become ``0``. ``qty`` is ``1`` when the
  chain's quantity column is not in the file.
- facets: trimmed cell value, or ``""`` when the column is not exported.

Loading is all-or-nothing. A missing required column or a single
un-normalizable time raises a :class:`~loyalty_receipts.errors.LoadError`
subclass and no dataset is produced.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterator, Mapping, Sequence
from decimal import Decimal, InvalidOperation

from .errors import EmptyInputError, RowFormatError, SchemaError
from .logging_setup import get_logger
from .models import Dataset, NormalizedLine
from .profiles import REGISTRY, ChainProfile, ProfileRegistry
from .receipt_id import make_receipt_id
from .tokenizer import parse_csv

_logger = get_logger("loyalty_receipts.normalizers")

_HEX_RE = re.compile(r"0[xX][0-9a-fA-F]+")
_ZERO = Decimal(0)
_ONE = Decimal(1)
_NON_DIGITS = re.compile(r"\D", re.ASCII)

# ---------------------------------------------------------------------------
# Scalar helpers
# ---------------------------------------------------------------------------


def normalize_date(value: str | None) -> str:
    if not value:
        return ""
    s = value.strip().replace("/", "-")
    return s[:10] if len(s) >= 10 else s


def _pad2(part: str) -> str:
    return part.rjust(2, "0")[:2]


def normalize_time(value: str | None) -> str:
    """Return ``HH:MM:SS`` or ``""`` when the value has no supported shape."""

    if not value:
        return ""
    s = value.strip()
    if ":" in s:
        parts = [p.strip() for p in s.split(":")]
        parts = [p for p in parts if p]
        hh = _pad2(parts[0]) if len(parts) > 0 else "00"
        mm = _pad2(parts[1]) if len(parts) > 1 else "00"
        ss = _pad2(parts[2]) if len(parts) > 2 else "00"
        return f"{hh}:{mm}:{ss}"

    digits = _NON_DIGITS.sub("", s)
    if len(digits) == 6:
        return f"{digits[0:2]}:{digits[2:4]}:{digits[4:6]}"
    if len(digits) == 4:
        return f"{digits[0:2]}:{digits[2:4]}:00"
    if len(digits) == 2:
        return f"{digits}:00:00"
    return ""


def parse_number(value: str | None) -> Decimal:
    """Lenient numeric parse: never raises, returns ``Decimal(0)`` on garbage.

    Accepts ASCII decimal literals (sign, fraction, exponent) and ``0x`` hex.
    """

    if value is None:
        return _ZERO
    s = value.replace(",", "").strip()
    if not s or not s.isascii() or "_" in s:
        return _ZERO
    if _HEX_RE.fullmatch(s):
        return Decimal(int(s, 16))
    try:
        d = Decimal(s)
    except InvalidOperation:
        return _ZERO
    # Magnitudes a double cannot hold count as non-finite.
    return d if d.is_finite() and math.isfinite(float(d)) else _ZERO


def normalize_headers(row: Sequence[str]) -> tuple[str, ...]:
    """Trim header cells; the first one may still carry a byte-order mark."""

    headers = [h.strip() for h in row]
    if headers:
        headers[0] = headers[0].lstrip("\ufeff").strip()
    return tuple(headers)


# ---------------------------------------------------------------------------
# Row normalization
# ---------------------------------------------------------------------------


def _row_to_record(headers: Sequence[str], row: Sequence[str]) -> dict[str, str]:
    # Duplicate header names: the right-most column wins.
    return {h: (row[j] if j < len(row) else "") for j, h in enumerate(headers)}


def _is_blank(row: Sequence[str]) -> bool:
    return not row or all(c.strip() == "" for c in row)


def _cell(record: Mapping[str, str], column: str, present: frozenset[str]) -> str:
    if not column or column not in present:
        return ""
    return (record.get(column) or "").strip()


def normalize_row(
    record: Mapping[str, str],
    *,
    profile: ChainProfile,
    present: frozenset[str],
    row_index: int,
) -> NormalizedLine:
    """Normalize one header-keyed record; raise ``RowFormatError`` on bad time."""

    raw_time = record.get(profile.time) or ""
    time = normalize_time(raw_time)
    if not time:
        raise RowFormatError(column=profile.time, row_index=row_index, value=raw_time)

    member_id = (record.get(profile.member) or "").strip()
    store = (record.get(profile.store_name) or "").strip()
    date = normalize_date(record.get(profile.date))
    has_qty = bool(profile.qty) and profile.qty in present
    qty = parse_number(record.get(profile.qty)) if has_qty else _ONE

    return NormalizedLine(
        member_id=member_id,
        date=date,
        time=time,
        store=store,
        item=(record.get(profile.item) or "").strip(),
        amount=parse_number(record.get(profile.amount)),
        qty=qty,
        maker=_cell(record, profile.maker, present),
        line=_cell(record, profile.line, present),
        corner=_cell(record, profile.corner, present),
        cat_l=_cell(record, profile.cat_l, present),
        cat_m=_cell(record, profile.cat_m, present),
        cat_s=_cell(record, profile.cat_s, present),
        jan=_cell(record, profile.jan, present),
        dt_key=f"{date} {time}",
        receipt_id=make_receipt_id(member_id, store, date, time),
        row_index=row_index,
    )


def normalize_rows(
    headers: Sequence[str],
    rows: Sequence[Sequence[str]],
    profile: ChainProfile,
) -> Iterator[NormalizedLine]:
    """Yield normalized lines for data rows, skipping all-blank rows."""

    present = frozenset(headers)
    for row_index, row in enumerate(rows):
        if _is_blank(row):
            continue
        yield normalize_row(
            _row_to_record(headers, row),
            profile=profile,
            present=present,
            row_index=row_index,
        )


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def load_dataset(
    text: str,
    *,
    registry: ProfileRegistry = REGISTRY,
    profile_key: str | None = None,
) -> Dataset:
    """Tokenize, resolve the chain profile and normalize every row.

    ``profile_key`` forces a registered profile instead of detecting it from
    the header row.

    Raises
    ------
    EmptyInputError
        Fewer than two rows after tokenizing.
    SchemaError
        Required columns of the selected profile are missing (all listed).
    RowFormatError
        The first data row whose time cannot be normalized.
    """

    grid = parse_csv(text)
    if len(grid) < 2:
        raise EmptyInputError(len(grid))

    headers = normalize_headers(grid[0])
    profile = registry.get(profile_key) if profile_key else registry.resolve(headers)

    missing = profile.missing_required(headers)
    if missing:
        raise SchemaError(missing, profile_key=profile.key)

    lines = tuple(normalize_rows(headers, grid[1:], profile))
    members = {ln.member_id for ln in lines if ln.member_id}
    _logger.info(
        "load_dataset:done profile=%s rows=%d lines=%d members=%d",
        profile.key,
        len(grid) - 1,
        len(lines),
        len(members),
    )
    return Dataset(profile=profile, headers=headers, lines=lines)


__all__ = [
    "normalize_date",
    "normalize_time",
    "parse_number",
    "normalize_headers",
    "normalize_row",
    "normalize_rows",
    "load_dataset",
]
