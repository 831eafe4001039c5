"""Chain profiles: which literal CSV column carries each logical field.

Two retail chains export the same kind of loyalty transaction log with
different headers. A :class:`ChainProfile` records one chain's column names as
data; the :class:`ProfileRegistry` picks the profile for a header row.

Logical fields
--------------
Required: ``member``, ``date``, ``time``, ``store_name``, ``item``, ``amount``.
Optional: ``qty`` and the facets ``maker``, ``line``, ``corner``, ``cat_l``,
``cat_m``, ``cat_s``, ``jan``. An empty column name means the chain does not
export the field at all.

Resolution cascade (first match wins)
-------------------------------------
1. strong signals, in ``strong_order``: the chain's member column is present
   together with its amount or quantity column;
2. weak signals, in registry order: the chain's member column alone;
3. the default profile.

Ambiguity never raises: a header row matching nothing selects the default.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from .logging_setup import get_logger

_logger = get_logger("loyalty_receipts.profiles")

REQUIRED_FIELDS: tuple[str, ...] = ("member", "date", "time", "store_name", "item", "amount")
OPTIONAL_FIELDS: tuple[str, ...] = (
    "qty",
    "maker",
    "corner",
    "line",
    "cat_l",
    "cat_m",
    "cat_s",
    "jan",
)

# Facets carried on every normalized line; all but ``jan`` are exact-match filters.
FACETS: tuple[str, ...] = ("maker", "line", "corner", "cat_l", "cat_m", "cat_s", "jan")
FILTER_FACETS: tuple[str, ...] = ("maker", "line", "corner", "cat_l", "cat_m", "cat_s")

DEFAULT_FACET_LABELS: Mapping[str, str] = {
    "store": "店舗",
    "maker": "メーカー",
    "line": "ライン",
    "corner": "コーナー",
    "cat_l": "大分類",
    "cat_m": "中分類",
    "cat_s": "小分類",
    "jan": "JANコード",
}


@dataclass(frozen=True, slots=True)
class ChainProfile:
    """Column layout of one chain's export."""

    key: str
    name: str
    member: str
    date: str
    time: str
    store_name: str
    item: str
    amount: str
    qty: str = ""
    maker: str = ""
    line: str = ""
    corner: str = ""
    cat_l: str = ""
    cat_m: str = ""
    cat_s: str = ""
    jan: str = ""
    notices: tuple[str, ...] = ()
    labels: Mapping[str, str] = field(default_factory=dict)

    def column(self, logical: str) -> str:
        """Literal column name for a logical field (``""`` when not exported)."""
        if logical not in REQUIRED_FIELDS and logical not in OPTIONAL_FIELDS:
            raise KeyError(f"unknown logical field: {logical!r}")
        return getattr(self, logical)

    @property
    def required_columns(self) -> tuple[str, ...]:
        return tuple(c for c in (self.column(f) for f in REQUIRED_FIELDS) if c)

    @property
    def optional_columns(self) -> tuple[str, ...]:
        return tuple(c for c in (self.column(f) for f in OPTIONAL_FIELDS) if c)

    def missing_required(self, headers: Iterable[str]) -> list[str]:
        present = set(headers)
        return [c for c in self.required_columns if c not in present]

    def label(self, facet: str) -> str:
        return self.labels.get(facet) or DEFAULT_FACET_LABELS.get(facet, facet)

    def _has_strong_signal(self, present: set[str]) -> bool:
        if self.member not in present:
            return False
        return any(c and c in present for c in (self.amount, self.qty))


TOMODS = ChainProfile(
    key="TOMODS",
    name="トモズ",
    member="会員番号/匿名会員番号",
    date="買上日",
    time="買上時間",
    store_name="店舗名",
    item="商品名",
    amount="買上金額（会員）",
    qty="買上点数（会員）",
    maker="メーカー/取引先",
    cat_l="大分類",
    cat_m="中分類",
    cat_s="小分類",
    jan="JANコード",
    notices=(
        "トモズ形式：列名は全角カッコ（例：買上金額（会員））が多いです。",
        "レシートID列は不要（会員×店舗×買上日×買上時間で擬似生成）。",
    ),
    labels={"maker": "メーカー/取引先"},
)

# SUMMIT headers mix a full-width opening and a half-width closing parenthesis.
SUMMIT = ChainProfile(
    key="SUMMIT",
    name="サミット",
    member="匿名会員番号",
    date="買上日",
    time="買上時間",
    store_name="店舗名",
    item="商品名",
    amount="買上金額（会員)",
    qty="買上点数（会員)",
    corner="コーナー名",
    line="ライン名",
    cat_l="部門名",
    cat_m="カテゴリ名",
    jan="JANコード",
    notices=(
        "サミット形式：列名は半角カッコ（例：買上金額（会員)）が混ざることがあります。",
        "レシートID列は不要（会員×店舗×買上日×買上時間で擬似生成）。",
    ),
    labels={"cat_l": "部門", "cat_m": "カテゴリ", "cat_s": "（なし）"},
)


@dataclass(frozen=True, slots=True)
class ProfileRegistry:
    """Closed set of profiles plus the order the resolver consults them in.

    ``profiles`` order drives the weak (member column only) checks;
    ``strong_order`` lists profile keys for the combined member+amount/qty
    checks; ``default_key`` is used when nothing matches.
    """

    profiles: tuple[ChainProfile, ...]
    strong_order: tuple[str, ...]
    default_key: str

    def __post_init__(self) -> None:
        keys = [p.key for p in self.profiles]
        if len(set(keys)) != len(keys):
            raise ValueError(f"duplicate profile keys: {keys}")
        unknown = [k for k in (*self.strong_order, self.default_key) if k not in keys]
        if unknown:
            raise ValueError(f"registry references unknown profile keys: {unknown}")

    def get(self, key: str) -> ChainProfile:
        for p in self.profiles:
            if p.key == key:
                return p
        raise KeyError(key)

    @property
    def default(self) -> ChainProfile:
        return self.get(self.default_key)

    def resolve(self, headers: Iterable[str]) -> ChainProfile:
        """Select the profile for a header row (see module docstring)."""

        present = set(headers)
        for key in self.strong_order:
            profile = self.get(key)
            if profile._has_strong_signal(present):
                _logger.debug("resolve_profile:selected key=%s signal=strong", key)
                return profile
        for profile in self.profiles:
            if profile.member in present:
                _logger.debug("resolve_profile:selected key=%s signal=member", profile.key)
                return profile
        _logger.debug("resolve_profile:selected key=%s signal=default", self.default_key)
        return self.default


REGISTRY = ProfileRegistry(
    profiles=(TOMODS, SUMMIT),
    strong_order=("SUMMIT", "TOMODS"),
    default_key="TOMODS",
)


def resolve_profile(
    headers: Iterable[str], registry: ProfileRegistry = REGISTRY
) -> ChainProfile:
    return registry.resolve(headers)


def available_facets(profile: ChainProfile, headers: Iterable[str]) -> tuple[str, ...]:
    """Facets whose column is configured for the chain and present in the file.

    Control visibility in a UI depends on presence of the column, not on
    whether any row carries a value.
    """

    present = set(headers)
    return tuple(f for f in FACETS if profile.column(f) and profile.column(f) in present)


# ---------------------------------------------------------------------------
# Column requirement notes
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ColumnRequirements:
    """Required/optional columns of one profile, checked against headers."""

    key: str
    name: str
    required: tuple[str, ...]
    optional: tuple[str, ...]
    notices: tuple[str, ...]
    present: tuple[str, ...] = ()
    missing: tuple[str, ...] = ()


def column_requirements(
    profile: ChainProfile, headers: Sequence[str] | None = None
) -> ColumnRequirements:
    present: tuple[str, ...] = ()
    missing: tuple[str, ...] = ()
    if headers is not None:
        hs = set(headers)
        present = tuple(
            c for c in (*profile.required_columns, *profile.optional_columns) if c in hs
        )
        missing = tuple(profile.missing_required(hs))
    return ColumnRequirements(
        key=profile.key,
        name=profile.name,
        required=profile.required_columns,
        optional=profile.optional_columns,
        notices=profile.notices,
        present=present,
        missing=missing,
    )


def describe_profiles(
    active: ChainProfile | None = None,
    headers: Sequence[str] | None = None,
    registry: ProfileRegistry = REGISTRY,
) -> list[ColumnRequirements]:
    """Requirements for every registered profile, the active one first."""

    ordered = list(registry.profiles)
    if active is not None:
        ordered = [active] + [p for p in ordered if p.key != active.key]
    return [column_requirements(p, headers) for p in ordered]


__all__ = [
    "ChainProfile",
    "ProfileRegistry",
    "ColumnRequirements",
    "TOMODS",
    "SUMMIT",
    "REGISTRY",
    "FACETS",
    "FILTER_FACETS",
    "REQUIRED_FIELDS",
    "OPTIONAL_FIELDS",
    "resolve_profile",
    "available_facets",
    "column_requirements",
    "describe_profiles",
]
