"""Dataset-wide member ranking.

Unlike the receipt view, the ranking runs over every member. With an empty
product query every line counts ("global ranking"); otherwise only the lines
whose JAN/item match the query contribute, without pulling in co-purchased
items from the same receipt.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from decimal import Decimal

from .filtering import matches_product
from .logging_setup import get_logger
from .models import MemberRankingRow, NormalizedLine, RankingMetric, RankingQuery

_logger = get_logger("loyalty_receipts.ranking")


@dataclass(slots=True)
class _MemberTotals:
    sales: Decimal = Decimal(0)
    qty: Decimal = Decimal(0)
    receipt_ids: set[str] = field(default_factory=set)
    stores: set[str] = field(default_factory=set)
    last_dt: str = ""

    def add(self, ln: NormalizedLine) -> None:
        self.sales += ln.amount
        self.qty += ln.qty
        self.receipt_ids.add(ln.receipt_id)
        self.stores.add(ln.store)
        if ln.dt_key > self.last_dt:
            self.last_dt = ln.dt_key


# Every chain is descending on all of its keys.
_SORT_KEYS: dict[RankingMetric, Callable[[MemberRankingRow], tuple]] = {
    RankingMetric.SALES_DESC: lambda r: (r.sales, r.last_dt, r.receipts),
    RankingMetric.QTY_DESC: lambda r: (r.qty, r.sales, r.last_dt),
    RankingMetric.RCPT_DESC: lambda r: (r.receipts, r.sales, r.last_dt),
    RankingMetric.LAST_DESC: lambda r: (r.last_dt, r.sales, r.receipts),
}


def aggregate_members(
    lines: Iterable[NormalizedLine], *, jan: str = "", item: str = ""
) -> list[MemberRankingRow]:
    """Per-member totals over qualifying lines, in first-seen member order."""

    product_query = bool(jan or item)
    totals: dict[str, _MemberTotals] = {}
    for ln in lines:
        if product_query and not matches_product(ln, jan, item):
            continue
        if not ln.member_id:
            continue
        totals.setdefault(ln.member_id, _MemberTotals()).add(ln)

    return [
        MemberRankingRow(
            member_id=member_id,
            sales=t.sales,
            qty=t.qty,
            receipts=len(t.receipt_ids),
            stores=len(t.stores),
            last_dt=t.last_dt,
        )
        for member_id, t in totals.items()
    ]


def _truncate(rows: list[MemberRankingRow], limit: int | float | None) -> list[MemberRankingRow]:
    if limit is None or not math.isfinite(limit) or limit <= 0:
        return rows
    return rows[: int(limit)]


def rank_members(
    lines: Iterable[NormalizedLine], query: RankingQuery | None = None
) -> list[MemberRankingRow]:
    """Rank members by ``query.metric`` and apply ``query.limit``."""

    query = query or RankingQuery()
    rows = aggregate_members(lines, jan=query.jan, item=query.item)
    rows.sort(key=_SORT_KEYS[query.metric], reverse=True)
    ranked = _truncate(rows, query.limit)
    _logger.debug(
        "rank_members:done metric=%s members=%d returned=%d global=%s",
        query.metric.value,
        len(rows),
        len(ranked),
        not query.has_product_query,
    )
    return ranked


__all__ = ["aggregate_members", "rank_members"]
