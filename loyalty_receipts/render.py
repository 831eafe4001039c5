"""Plain-text and JSON rendering of pipeline outputs for the CLI.

Numbers are rounded half-up to integers and grouped with thousands
separators; no currency symbol or locale handling is applied.
"""

from __future__ import annotations

import json
import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import fields, is_dataclass
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel

from .models import MemberRankingRow, MemberSummary, MemberView, Receipt
from .profiles import ChainProfile, ColumnRequirements


_HALF = Decimal("0.5")


def round_half_up(x: Decimal | int) -> int:
    return math.floor(x + _HALF)


def fmt_int(x: Decimal | int) -> str:
    return f"{round_half_up(x):,}"


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------


def to_jsonable(obj: Any, *, include_lines: bool = False) -> Any:
    """Recursively convert models/dataclasses/enums into JSON-ready values.

    ``Decimal`` amounts become JSON numbers: integers when integral, floats
    otherwise.

    Receipt constituent lines are omitted unless ``include_lines`` is set;
    the line count is reported instead.
    """

    if isinstance(obj, Receipt) and not include_lines:
        out = {f.name: to_jsonable(getattr(obj, f.name)) for f in fields(obj) if f.name != "lines"}
        out["line_count"] = len(obj.lines)
        return out
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    if is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: to_jsonable(getattr(obj, f.name), include_lines=include_lines)
            for f in fields(obj)
        }
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, Mapping):
        return {str(k): to_jsonable(v, include_lines=include_lines) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(v, include_lines=include_lines) for v in obj]
    if isinstance(obj, Decimal):
        return int(obj) if obj == obj.to_integral_value() else float(obj)
    return obj


def dumps(obj: Any, *, include_lines: bool = False) -> str:
    return json.dumps(to_jsonable(obj, include_lines=include_lines), ensure_ascii=False, indent=2)


# ---------------------------------------------------------------------------
# Text
# ---------------------------------------------------------------------------

RANKING_HEADER = "rank\tmember\tsales\tqty\treceipts\tlast\tstores"


def format_ranking(rows: Sequence[MemberRankingRow]) -> str:
    if not rows:
        return "(no matching members)"
    out = [RANKING_HEADER]
    for i, r in enumerate(rows, start=1):
        out.append(
            f"{i}\t{r.member_id}\t{fmt_int(r.sales)}\t{fmt_int(r.qty)}"
            f"\t{r.receipts}\t{r.last_dt}\t{r.stores}"
        )
    return "\n".join(out)


def format_summary(summary: MemberSummary) -> str:
    if summary.receipts == 0:
        return "receipts=- sales=- qty=- days=- stores=- avg=-"
    return (
        f"receipts={fmt_int(summary.receipts)} sales={fmt_int(summary.sales)}"
        f" qty={fmt_int(summary.qty)} days={fmt_int(summary.days)}"
        f" stores={fmt_int(summary.stores)} avg={fmt_int(summary.avg_ticket)}"
    )


def format_receipt(receipt: Receipt, *, index: int, total: int) -> str:
    out = [
        f"[{index}/{total}] {receipt.date} {receipt.time} | {receipt.store}"
        f" | sales={fmt_int(receipt.sales)} qty={fmt_int(receipt.qty)}"
        f" items={len(receipt.items)}"
    ]
    for it in receipt.items:
        share = (it.amount / receipt.sales * 100) if receipt.sales else Decimal(0)
        out.append(f"  {it.name}\t{fmt_int(it.amount)}\t{fmt_int(it.qty)}\t{share:.1f}%")
    return "\n".join(out)


def format_member_view(view: MemberView) -> str:
    out = [f"member={view.member_id}", format_summary(view.summary)]
    if not view.receipts:
        out.append("(no receipts)")
        return "\n".join(out)
    total = len(view.receipts)
    for i, r in enumerate(view.receipts, start=1):
        out.append(format_receipt(r, index=i, total=total))
    return "\n".join(out)


def format_facet_options(options: Mapping[str, Iterable[str]], profile: ChainProfile) -> str:
    if not options:
        return "(no member selected)"
    return "\n".join(
        f"{profile.label(facet)} ({facet}): {', '.join(values) or '-'}"
        for facet, values in options.items()
    )


def format_requirements(reqs: Sequence[ColumnRequirements]) -> str:
    blocks: list[str] = []
    for req in reqs:
        lines = [f"[{req.name}] ({req.key})"]
        lines.append("  required: " + " / ".join(req.required))
        lines.append("  optional: " + " / ".join(req.optional))
        if req.missing:
            lines.append("  missing: " + " / ".join(req.missing))
        lines.extend(f"  * {n}" for n in req.notices)
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


__all__ = [
    "round_half_up",
    "fmt_int",
    "to_jsonable",
    "dumps",
    "format_ranking",
    "format_summary",
    "format_receipt",
    "format_member_view",
    "format_facet_options",
    "format_requirements",
]
