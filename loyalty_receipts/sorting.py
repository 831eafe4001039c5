"""Receipt and item ordering.

Receipt modes (primary key, then tie-break):

============  ===================  ============================
mode          primary              tie-break
============  ===================  ============================
dt_asc        date-time asc        store asc
dt_desc       date-time desc       store asc
sales_asc     sales asc            date-time asc
sales_desc    sales desc           date-time desc
qty_asc       quantity asc         date-time asc
qty_desc      quantity desc        date-time desc
============  ===================  ============================

Item modes sort on one key only; Python's sort is stable so ties keep the
first-seen order of the rollup.
"""

from __future__ import annotations

from collections.abc import Iterable

from .models import Item, ItemSort, Receipt, ReceiptSort

DEFAULT_RECEIPT_SORT = ReceiptSort.DT_DESC
DEFAULT_ITEM_SORT = ItemSort.AMT_DESC


def sort_receipts(
    receipts: Iterable[Receipt], mode: ReceiptSort | str = DEFAULT_RECEIPT_SORT
) -> list[Receipt]:
    mode = ReceiptSort(mode)
    out = list(receipts)
    if mode is ReceiptSort.DT_ASC:
        out.sort(key=lambda r: (r.dt_key, r.store))
    elif mode is ReceiptSort.DT_DESC:
        # Mixed directions: order by the tie-break first, then stably by primary.
        out.sort(key=lambda r: r.store)
        out.sort(key=lambda r: r.dt_key, reverse=True)
    elif mode is ReceiptSort.SALES_ASC:
        out.sort(key=lambda r: (r.sales, r.dt_key))
    elif mode is ReceiptSort.SALES_DESC:
        out.sort(key=lambda r: (r.sales, r.dt_key), reverse=True)
    elif mode is ReceiptSort.QTY_ASC:
        out.sort(key=lambda r: (r.qty, r.dt_key))
    elif mode is ReceiptSort.QTY_DESC:
        out.sort(key=lambda r: (r.qty, r.dt_key), reverse=True)
    return out


def sort_items(items: Iterable[Item], mode: ItemSort | str = DEFAULT_ITEM_SORT) -> list[Item]:
    mode = ItemSort(mode)
    out = list(items)
    if mode is ItemSort.AMT_ASC:
        out.sort(key=lambda x: x.amount)
    elif mode is ItemSort.AMT_DESC:
        out.sort(key=lambda x: x.amount, reverse=True)
    elif mode is ItemSort.QTY_ASC:
        out.sort(key=lambda x: x.qty)
    elif mode is ItemSort.QTY_DESC:
        out.sort(key=lambda x: x.qty, reverse=True)
    elif mode is ItemSort.NAME_ASC:
        out.sort(key=lambda x: x.name)
    return out


__all__ = ["DEFAULT_RECEIPT_SORT", "DEFAULT_ITEM_SORT", "sort_receipts", "sort_items"]
