"""Data models for ``loyalty_receipts``.

Records produced by the pipeline are frozen ``dataclass`` instances: they are
created once (per load, or per filter pass for derived views) and never
mutated. Request parameters coming from a caller (filters, ranking queries)
are pydantic models so that unknown fields and unknown modes are rejected at
the boundary rather than silently ignored.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import TypeAlias

from pydantic import BaseModel, ConfigDict, field_validator

from .profiles import ChainProfile

# ---------------------------------------------------------------------------
# Loaded records
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class NormalizedLine:
    """One transaction line after normalization against a chain profile.

    ``date`` is ``YYYY-MM-DD``-shaped (other shapes pass through unchanged),
    ``time`` is always ``HH:MM:SS``; ``amount`` and ``qty`` are ``Decimal``.
    Facet fields are ``""`` when the chain does not export them or the cell
    is blank. ``row_index`` is the 0-based position among the data rows of
    the grid (header excluded).
    """

    member_id: str
    date: str
    time: str
    store: str
    item: str
    amount: Decimal
    qty: Decimal
    maker: str
    line: str
    corner: str
    cat_l: str
    cat_m: str
    cat_s: str
    jan: str
    dt_key: str
    receipt_id: str
    row_index: int

    @property
    def receipt_key(self) -> tuple[str, str, str, str]:
        """Composite key the pseudo receipt id is derived from."""
        return (self.member_id, self.store, self.date, self.time)


Lines: TypeAlias = Sequence[NormalizedLine]


@dataclass(frozen=True, slots=True)
class Dataset:
    """A loaded CSV: the selected profile, its headers and normalized lines.

    This is the only state the pipeline keeps. Every query takes it as an
    argument; a new load produces a new ``Dataset``.
    """

    profile: ChainProfile
    headers: tuple[str, ...]
    lines: tuple[NormalizedLine, ...]

    def has_column(self, name: str) -> bool:
        return bool(name) and name in self.headers

    def __len__(self) -> int:
        return len(self.lines)


# ---------------------------------------------------------------------------
# Derived views
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Item:
    """Lines of one receipt sharing an item name, summed."""

    name: str
    amount: Decimal
    qty: Decimal


@dataclass(frozen=True, slots=True)
class Receipt:
    """A reconstructed receipt: lines sharing member, store, date and time."""

    receipt_id: str
    date: str
    time: str
    dt_key: str
    store: str
    lines: tuple[NormalizedLine, ...]
    sales: Decimal
    qty: Decimal
    items: tuple[Item, ...]

    @property
    def member_id(self) -> str:
        return self.lines[0].member_id if self.lines else ""


@dataclass(frozen=True, slots=True)
class MemberRankingRow:
    member_id: str
    sales: Decimal
    qty: Decimal
    receipts: int
    stores: int
    last_dt: str


@dataclass(frozen=True, slots=True)
class MemberSummary:
    """Headline figures over a member's (filtered) receipts."""

    receipts: int
    sales: Decimal
    qty: Decimal
    avg_ticket: Decimal
    days: int
    stores: int


@dataclass(frozen=True, slots=True)
class MemberView:
    """One member's receipts under a filter set, with their summary."""

    member_id: str
    filters: FilterSet
    receipts: tuple[Receipt, ...]
    summary: MemberSummary


# ---------------------------------------------------------------------------
# Modes
# ---------------------------------------------------------------------------


class ProductScope(str, Enum):
    DETAIL_ONLY = "detail_only"
    RECEIPT_ALL = "receipt_all"


class ReceiptSort(str, Enum):
    DT_ASC = "dt_asc"
    DT_DESC = "dt_desc"
    SALES_ASC = "sales_asc"
    SALES_DESC = "sales_desc"
    QTY_ASC = "qty_asc"
    QTY_DESC = "qty_desc"


class ItemSort(str, Enum):
    AMT_ASC = "amt_asc"
    AMT_DESC = "amt_desc"
    QTY_ASC = "qty_asc"
    QTY_DESC = "qty_desc"
    NAME_ASC = "name_asc"


class RankingMetric(str, Enum):
    SALES_DESC = "sales_desc"
    QTY_DESC = "qty_desc"
    RCPT_DESC = "rcpt_desc"
    LAST_DESC = "last_desc"


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class FilterSet(BaseModel):
    """Facet and product filters applied to one member's lines.

    Empty strings mean "no constraint". Facet values match exactly; ``jan``
    and ``item`` are substring queries that engage the product stage.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, str_strip_whitespace=True)

    date: str = ""
    store: str = ""
    maker: str = ""
    line: str = ""
    corner: str = ""
    cat_l: str = ""
    cat_m: str = ""
    cat_s: str = ""
    jan: str = ""
    item: str = ""
    scope: ProductScope = ProductScope.DETAIL_ONLY

    @property
    def has_product_query(self) -> bool:
        return bool(self.jan or self.item)

    def facet_constraints(self) -> dict[str, str]:
        """Non-empty exact-match facet filters keyed by line attribute."""
        values = {
            "date": self.date,
            "store": self.store,
            "maker": self.maker,
            "line": self.line,
            "corner": self.corner,
            "cat_l": self.cat_l,
            "cat_m": self.cat_m,
            "cat_s": self.cat_s,
        }
        return {k: v for k, v in values.items() if v}


class RankingQuery(BaseModel):
    """Parameters of a dataset-wide member ranking.

    ``limit`` truncates the result when it is a positive finite number; any
    other value (``None``, zero, negative, infinity) returns every member.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, str_strip_whitespace=True)

    jan: str = ""
    item: str = ""
    metric: RankingMetric = RankingMetric.SALES_DESC
    limit: int | float | None = None

    @field_validator("limit")
    @classmethod
    def _nan_is_unlimited(cls, v: int | float | None) -> int | float | None:
        if isinstance(v, float) and v != v:
            return None
        return v

    @property
    def has_product_query(self) -> bool:
        return bool(self.jan or self.item)

    def to_filter_set(self, *, scope: ProductScope = ProductScope.DETAIL_ONLY) -> FilterSet:
        """Carry the ranking's product query over to a member's receipt view."""
        return FilterSet(jan=self.jan, item=self.item, scope=scope)


__all__ = [
    "NormalizedLine",
    "Lines",
    "Dataset",
    "Item",
    "Receipt",
    "MemberRankingRow",
    "MemberSummary",
    "MemberView",
    "ProductScope",
    "ReceiptSort",
    "ItemSort",
    "RankingMetric",
    "FilterSet",
    "RankingQuery",
]
