"""Pipeline entry points for ``loyalty_receipts``.

The functions here chain the individual stages for callers that do not need
them separately:

- :func:`load_dataset`: CSV text → :class:`~loyalty_receipts.models.Dataset`
- :func:`member_receipts`: filter → aggregate → sort for one member
- :func:`member_view`: :func:`member_receipts` plus the member summary
- :func:`member_ranking`: dataset-wide member ranking

Each call recomputes from the dataset; nothing is cached between calls, so a
changed filter never sees stale receipts.
"""

from __future__ import annotations

from dataclasses import replace

from .filtering import filter_lines
from .models import (
    Dataset,
    FilterSet,
    ItemSort,
    MemberRankingRow,
    MemberView,
    RankingQuery,
    Receipt,
    ReceiptSort,
)
from .normalizers import load_dataset
from .ranking import rank_members
from .receipts import build_receipts
from .sorting import DEFAULT_RECEIPT_SORT, sort_items, sort_receipts
from .summary import summarize_receipts


def member_receipts(
    dataset: Dataset,
    member_id: str,
    filters: FilterSet | None = None,
    *,
    receipt_sort: ReceiptSort | str = DEFAULT_RECEIPT_SORT,
    item_sort: ItemSort | str | None = None,
) -> list[Receipt]:
    """Receipts of ``member_id`` under ``filters``, ordered by ``receipt_sort``.

    Items keep their first-seen order unless ``item_sort`` is given.
    """

    lines = filter_lines(dataset.lines, member_id, filters)
    receipts = sort_receipts(build_receipts(lines), receipt_sort)
    if item_sort is None:
        return receipts
    return [replace(r, items=tuple(sort_items(r.items, item_sort))) for r in receipts]


def member_view(
    dataset: Dataset,
    member_id: str,
    filters: FilterSet | None = None,
    *,
    receipt_sort: ReceiptSort | str = DEFAULT_RECEIPT_SORT,
    item_sort: ItemSort | str | None = None,
) -> MemberView:
    filters = filters or FilterSet()
    receipts = member_receipts(
        dataset, member_id, filters, receipt_sort=receipt_sort, item_sort=item_sort
    )
    return MemberView(
        member_id=member_id,
        filters=filters,
        receipts=tuple(receipts),
        summary=summarize_receipts(receipts),
    )


def member_ranking(dataset: Dataset, query: RankingQuery | None = None) -> list[MemberRankingRow]:
    return rank_members(dataset.lines, query)


__all__ = ["load_dataset", "member_receipts", "member_view", "member_ranking"]
