"""Member directory, facet option lists and member-level summaries."""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from .models import Dataset, MemberSummary, Receipt
from .profiles import FILTER_FACETS, available_facets


def list_members(dataset: Dataset, search: str = "", limit: int | None = None) -> list[str]:
    """Sorted distinct member ids, optionally narrowed by a substring search."""

    members = sorted({ln.member_id for ln in dataset.lines if ln.member_id})
    search = search.strip()
    if search:
        members = [m for m in members if search in m]
    if limit is not None and limit > 0:
        members = members[:limit]
    return members


def _uniq_sorted(values: Iterable[str]) -> list[str]:
    return sorted({v for v in values if v})


def facet_options(dataset: Dataset, member_id: str) -> dict[str, list[str]]:
    """Values a member's lines offer for each exact-match filter.

    Keys are ``"store"`` followed by the filterable facets the loaded file
    actually carries, in a stable order. An empty member yields ``{}``.
    """

    if not member_id:
        return {}
    lines = [ln for ln in dataset.lines if ln.member_id == member_id]
    options: dict[str, list[str]] = {"store": _uniq_sorted(ln.store for ln in lines)}
    for facet in available_facets(dataset.profile, dataset.headers):
        if facet not in FILTER_FACETS:
            continue
        options[facet] = _uniq_sorted(getattr(ln, facet) for ln in lines)
    return options


def summarize_receipts(receipts: Iterable[Receipt]) -> MemberSummary:
    receipts = list(receipts)
    n = len(receipts)
    sales = sum((r.sales for r in receipts), Decimal(0))
    qty = sum((r.qty for r in receipts), Decimal(0))
    return MemberSummary(
        receipts=n,
        sales=sales,
        qty=qty,
        avg_ticket=sales / n if n else Decimal(0),
        days=len({r.date for r in receipts}),
        stores=len({r.store for r in receipts}),
    )


__all__ = ["list_members", "facet_options", "summarize_receipts"]
