"""Member-scoped line filtering.

Two stages run ahead of receipt aggregation:

Stage A (facets)
    Keep the member's lines whose facet fields equal every non-empty facet
    filter (date, store, maker, line, corner, cat_l, cat_m, cat_s).

Stage B (product), only when ``jan`` or ``item`` is non-empty
    A line matches when its JAN contains the ``jan`` query and its item name
    contains the ``item`` query (an empty query always matches).

    - ``detail_only``: keep the stage-A lines that match.
    - ``receipt_all``: keep every stage-A line whose receipt contains at least
      one matching stage-A line, so co-purchased items stay visible.
"""

from __future__ import annotations

from collections.abc import Iterable

from .models import FilterSet, Lines, NormalizedLine, ProductScope


def matches_product(line: NormalizedLine, jan: str = "", item: str = "") -> bool:
    if jan and jan not in line.jan:
        return False
    if item and item not in line.item:
        return False
    return True


def facet_filter(
    lines: Iterable[NormalizedLine], member_id: str, filters: FilterSet
) -> list[NormalizedLine]:
    constraints = filters.facet_constraints()
    return [
        ln
        for ln in lines
        if ln.member_id == member_id
        and all(getattr(ln, attr) == value for attr, value in constraints.items())
    ]


def filter_lines(
    lines: Lines,
    member_id: str,
    filters: FilterSet | None = None,
) -> list[NormalizedLine]:
    """Apply both filter stages; the result keeps dataset order.

    An empty ``member_id`` selects nothing.
    """

    if not member_id:
        return []
    filters = filters or FilterSet()
    base = facet_filter(lines, member_id, filters)
    if not filters.has_product_query:
        return base

    if filters.scope is ProductScope.RECEIPT_ALL:
        hit_ids = {
            ln.receipt_id for ln in base if matches_product(ln, filters.jan, filters.item)
        }
        return [ln for ln in base if ln.receipt_id in hit_ids]
    return [ln for ln in base if matches_product(ln, filters.jan, filters.item)]


__all__ = ["matches_product", "facet_filter", "filter_lines"]
