"""Load-time error taxonomy.

Every failure while turning CSV text into a dataset is fatal for the whole
load. Callers catch :class:`LoadError` to report a single message; the
subclasses carry structured details for programmatic use.
"""

from __future__ import annotations

from collections.abc import Sequence


class LoadError(ValueError):
    """Base class for errors that reject a CSV load."""


class EmptyInputError(LoadError):
    """The input has fewer than a header row plus one data row."""

    def __init__(self, row_count: int) -> None:
        self.row_count = row_count
        super().__init__(
            "CSV is empty: expected a header row and at least one data row "
            f"(got {row_count} row(s))"
        )


class CsvSyntaxError(LoadError):
    """The CSV text itself cannot be tokenized."""

    def __init__(self, *, line: int, reason: str) -> None:
        self.line = line
        self.reason = reason
        super().__init__(f"Cannot parse CSV near line {line}: {reason}")


class SchemaError(LoadError):
    """Required columns of the selected chain profile are absent."""

    def __init__(self, missing: Sequence[str], *, profile_key: str) -> None:
        self.missing = tuple(missing)
        self.profile_key = profile_key
        super().__init__(
            f"Missing required columns for profile {profile_key}: {', '.join(self.missing)}"
        )


class RowFormatError(LoadError):
    """A data row carries a value that cannot be normalized."""

    def __init__(self, *, column: str, row_index: int, value: str) -> None:
        self.column = column
        self.row_index = row_index
        self.value = value
        super().__init__(
            f"Cannot interpret time value {value!r} in column {column!r} "
            f"(data row {row_index + 1}); expected forms like 13:05, 13:05:22, 1305 or 130522"
        )


__all__ = [
    "LoadError",
    "CsvSyntaxError",
    "EmptyInputError",
    "SchemaError",
    "RowFormatError",
]
