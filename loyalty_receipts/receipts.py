"""Group filtered lines into receipts with per-item rollups."""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from .logging_setup import get_logger
from .models import Item, NormalizedLine, Receipt

_logger = get_logger("loyalty_receipts.receipts")

# Label for lines whose item name is blank.
UNKNOWN_ITEM_LABEL = "（不明商品）"


def rollup_items(lines: Iterable[NormalizedLine]) -> tuple[Item, ...]:
    """Sum amount and quantity per item name, in first-seen order."""

    totals: dict[str, list[Decimal]] = {}
    for ln in lines:
        acc = totals.setdefault(ln.item or UNKNOWN_ITEM_LABEL, [Decimal(0), Decimal(0)])
        acc[0] += ln.amount
        acc[1] += ln.qty
    return tuple(Item(name=name, amount=amt, qty=qty) for name, (amt, qty) in totals.items())


def build_receipts(lines: Iterable[NormalizedLine]) -> list[Receipt]:
    """Group lines by pseudo receipt id.

    Groups appear in order of their first line; lines keep their order within
    a group. Receipt header fields (date, time, store) come from the first
    line. A group whose lines disagree on (member, store, date, time) means
    two keys hashed to the same id; it is kept as one receipt and logged.
    """

    groups: dict[str, list[NormalizedLine]] = {}
    for ln in lines:
        groups.setdefault(ln.receipt_id, []).append(ln)

    receipts: list[Receipt] = []
    for receipt_id, group in groups.items():
        first = group[0]
        if any(ln.receipt_key != first.receipt_key for ln in group):
            _logger.warning(
                "build_receipts:receipt_id_collision receipt_id=%s keys=%d",
                receipt_id,
                len({ln.receipt_key for ln in group}),
            )
        sales = sum((ln.amount for ln in group), Decimal(0))
        qty = sum((ln.qty for ln in group), Decimal(0))
        receipts.append(
            Receipt(
                receipt_id=receipt_id,
                date=first.date,
                time=first.time,
                dt_key=first.dt_key,
                store=first.store,
                lines=tuple(group),
                sales=sales,
                qty=qty,
                items=rollup_items(group),
            )
        )
    return receipts


__all__ = ["UNKNOWN_ITEM_LABEL", "rollup_items", "build_receipts"]
