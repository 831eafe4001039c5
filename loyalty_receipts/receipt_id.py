"""Pseudo receipt identifiers.

The exports have no receipt-number column, so a receipt is identified by the
composite key (member, store, date, time). The id is a 32-bit polynomial
rolling hash of that key (multiplier 31, wrapping at 2**32, computed over
UTF-16 code units) with the date and time digits appended:

    R<hex hash>_<YYYYMMDD>_<HHMMSS>

The result depends only on the four inputs. The appended digits narrow any
hash collision to lines sharing the same date and time; remaining collisions
can be listed with :func:`find_receipt_id_collisions`.
"""

from __future__ import annotations

import re
import struct
from collections.abc import Iterable

from .models import NormalizedLine

_MASK_32 = 0xFFFFFFFF
_NON_DIGITS = re.compile(r"\D", re.ASCII)


def _utf16_units(s: str) -> tuple[int, ...]:
    data = s.encode("utf-16-le")
    return struct.unpack(f"<{len(data) // 2}H", data)


def rolling_hash32(s: str) -> int:
    h = 0
    for unit in _utf16_units(s):
        h = (h * 31 + unit) & _MASK_32
    return h


def make_receipt_id(member_id: str, store: str, date: str, time: str) -> str:
    base = f"{member_id}|{store}|{date} {time}"
    h = rolling_hash32(base)
    return f"R{h:x}_{_NON_DIGITS.sub('', date)}_{_NON_DIGITS.sub('', time)}"


def find_receipt_id_collisions(
    lines: Iterable[NormalizedLine],
) -> dict[str, list[tuple[str, str, str, str]]]:
    """Return ids shared by more than one (member, store, date, time) key.

    Keys are listed in first-seen order. An empty mapping means every id maps
    to exactly one composite key.
    """

    keys_by_id: dict[str, list[tuple[str, str, str, str]]] = {}
    for ln in lines:
        keys = keys_by_id.setdefault(ln.receipt_id, [])
        if ln.receipt_key not in keys:
            keys.append(ln.receipt_key)
    return {rid: keys for rid, keys in keys_by_id.items() if len(keys) > 1}


__all__ = ["make_receipt_id", "rolling_hash32", "find_receipt_id_collisions"]
