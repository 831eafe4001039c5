"""Public interface for the ``loyalty_receipts`` package.

This module exposes the pipeline entry points and public models/types as the
stable import surface. There is no runtime logic here, only symbol re-exports.
"""

from .api import load_dataset, member_ranking, member_receipts, member_view
from .errors import CsvSyntaxError, EmptyInputError, LoadError, RowFormatError, SchemaError
from .models import (
    Dataset,
    FilterSet,
    Item,
    ItemSort,
    MemberRankingRow,
    MemberSummary,
    MemberView,
    NormalizedLine,
    ProductScope,
    RankingMetric,
    RankingQuery,
    Receipt,
    ReceiptSort,
)
from .profiles import REGISTRY, SUMMIT, TOMODS, ChainProfile, ProfileRegistry, resolve_profile

__all__ = [
    # API
    "load_dataset",
    "member_receipts",
    "member_view",
    "member_ranking",
    # Profiles
    "ChainProfile",
    "ProfileRegistry",
    "REGISTRY",
    "TOMODS",
    "SUMMIT",
    "resolve_profile",
    # Errors
    "LoadError",
    "CsvSyntaxError",
    "EmptyInputError",
    "SchemaError",
    "RowFormatError",
    # Models / types
    "NormalizedLine",
    "Dataset",
    "Item",
    "Receipt",
    "MemberRankingRow",
    "MemberSummary",
    "MemberView",
    "FilterSet",
    "RankingQuery",
    "ProductScope",
    "ReceiptSort",
    "ItemSort",
    "RankingMetric",
]
