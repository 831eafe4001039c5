# ruff: noqa: I001
"""CLI for the ``loyalty_receipts`` package.

This module exposes callable command handlers (``cmd_profile``,
``cmd_ranking``, ``cmd_receipts`` ...) that return process exit codes, and a
Typer-based console interface on top of them. A local ``.env`` is loaded with
``python-dotenv`` before any command runs. Business logic lives in
``loyalty_receipts.api`` and the pipeline modules; this module only reads
files, maps options to request models and prints.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from prompt_toolkit import PromptSession
from pydantic import ValidationError
from typer.models import OptionInfo

from .api import load_dataset, member_ranking, member_view
from .errors import LoadError
from .logging_setup import configure_logging, get_logger
from .models import (
    Dataset,
    FilterSet,
    ItemSort,
    ProductScope,
    RankingMetric,
    RankingQuery,
    ReceiptSort,
)
from .normalizers import normalize_headers
from .profiles import REGISTRY, available_facets, describe_profiles
from .render import (
    dumps,
    format_facet_options,
    format_member_view,
    format_ranking,
    format_requirements,
)
from .sorting import DEFAULT_ITEM_SORT, DEFAULT_RECEIPT_SORT
from .summary import facet_options, list_members
from .term_ui import select_member
from .tokenizer import parse_csv

_logger = get_logger("loyalty_receipts.cli")

DEFAULT_ENCODING = "utf-8"
DEFAULT_RANK_LIMIT = 10
DEFAULT_MEMBER_LIST_LIMIT = 50


# ---- Small module-level helpers used by CLI commands -------------------------


def _env_positive_int(name: str, default: int) -> int:
    """Read a positive integer from ``name``; anything else yields ``default``."""

    raw = os.getenv(name)
    try:
        value = int(raw) if raw else None
    except ValueError:
        value = None
    if value is not None and value > 0:
        return value
    return default


def _resolve_rank_limit(limit: int | None) -> int:
    """Explicit ``--limit`` wins (``0`` means every member), then ``LR_RANK_LIMIT``."""

    if limit is not None:
        return limit
    return _env_positive_int("LR_RANK_LIMIT", DEFAULT_RANK_LIMIT)


def _resolve_member_limit(limit: int | None) -> int:
    if limit is not None:
        return limit
    return _env_positive_int("LR_MEMBER_LIST_LIMIT", DEFAULT_MEMBER_LIST_LIMIT)


def _resolve_encoding(encoding: str | None) -> str:
    if encoding and encoding.strip():
        return encoding.strip()
    env_val = os.getenv("LR_CSV_ENCODING")
    if env_val and env_val.strip():
        return env_val.strip()
    return DEFAULT_ENCODING


def _read_text(csv_path: str, encoding: str | None) -> str | None:
    """Read the whole file, printing a one-line error and returning ``None`` on failure."""

    enc = _resolve_encoding(encoding)
    try:
        # newline="" keeps embedded carriage returns for the tokenizer to drop
        with open(csv_path, encoding=enc, newline="") as f:
            return f.read()
    except FileNotFoundError:
        print(f"Error: File not found: {csv_path}", file=sys.stderr)
    except PermissionError:
        print(f"Error: Permission denied: {csv_path}", file=sys.stderr)
    except IsADirectoryError:
        print(f"Error: Not a file: {csv_path}", file=sys.stderr)
    except LookupError:
        print(f"Error: Unknown encoding: {enc}", file=sys.stderr)
    except UnicodeDecodeError as e:
        print(
            f"Error: Cannot decode '{csv_path}' as {enc} ({e.reason}); try --encoding cp932",
            file=sys.stderr,
        )
    return None


def _open_dataset(
    csv_path: str, *, encoding: str | None = None, chain: str | None = None
) -> Dataset | None:
    text = _read_text(csv_path, encoding)
    if text is None:
        return None
    try:
        return load_dataset(text, profile_key=chain or None)
    except KeyError:
        print(f"Error: Unknown chain profile: {chain}", file=sys.stderr)
    except LoadError as e:
        print(f"Error: {e}", file=sys.stderr)
    return None


# ---- Command handlers -----------------------------------------------------------


def cmd_profile(csv_path: str, *, encoding: str | None = None, chain: str | None = None) -> int:
    """Print the detected chain and its column requirements for ``csv_path``.

    The header row alone is inspected, so the report is available even when
    the file would fail to load. Returns ``1`` when required columns are missing.
    """

    text = _read_text(csv_path, encoding)
    if text is None:
        return 1
    try:
        grid = parse_csv(text)
    except LoadError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    if not grid:
        print(f"Error: CSV appears to have no header row: {csv_path}", file=sys.stderr)
        return 1

    headers = normalize_headers(grid[0])
    try:
        profile = REGISTRY.get(chain) if chain else REGISTRY.resolve(headers)
    except KeyError:
        print(f"Error: Unknown chain profile: {chain}", file=sys.stderr)
        return 1

    reqs = describe_profiles(profile, headers)
    facets = available_facets(profile, headers)
    print(f"profile: {profile.name} ({profile.key})")
    print("facets: " + (", ".join(f"{profile.label(f)} ({f})" for f in facets) or "-"))
    print()
    print(format_requirements(reqs))
    return 1 if reqs[0].missing else 0


def cmd_members(
    csv_path: str,
    *,
    search: str = "",
    limit: int | None = None,
    encoding: str | None = None,
    chain: str | None = None,
) -> int:
    dataset = _open_dataset(csv_path, encoding=encoding, chain=chain)
    if dataset is None:
        return 1
    for member_id in list_members(dataset, search=search, limit=_resolve_member_limit(limit)):
        print(member_id)
    return 0


def cmd_facets(
    csv_path: str,
    *,
    member: str,
    encoding: str | None = None,
    chain: str | None = None,
) -> int:
    dataset = _open_dataset(csv_path, encoding=encoding, chain=chain)
    if dataset is None:
        return 1
    print(format_facet_options(facet_options(dataset, member), dataset.profile))
    return 0


def cmd_ranking(
    csv_path: str,
    *,
    jan: str = "",
    item: str = "",
    metric: RankingMetric = RankingMetric.SALES_DESC,
    limit: int | None = None,
    as_json: bool = False,
    encoding: str | None = None,
    chain: str | None = None,
) -> int:
    """Rank every member of the file; a JAN/item query restricts counted lines."""

    dataset = _open_dataset(csv_path, encoding=encoding, chain=chain)
    if dataset is None:
        return 1
    try:
        query = RankingQuery(jan=jan, item=item, metric=metric, limit=_resolve_rank_limit(limit))
    except ValidationError as e:
        print(f"Error: invalid ranking query: {e}", file=sys.stderr)
        return 1

    rows = member_ranking(dataset, query)
    print(dumps(rows) if as_json else format_ranking(rows))
    return 0


def cmd_receipts(
    csv_path: str,
    *,
    member: str,
    filters: dict[str, str] | None = None,
    scope: ProductScope = ProductScope.DETAIL_ONLY,
    receipt_sort: ReceiptSort = DEFAULT_RECEIPT_SORT,
    item_sort: ItemSort = DEFAULT_ITEM_SORT,
    as_json: bool = False,
    encoding: str | None = None,
    chain: str | None = None,
) -> int:
    """Print one member's receipts, with items, under the given filters.

    ``filters`` maps :class:`~loyalty_receipts.models.FilterSet` field names
    (``date``, ``store``, ``maker`` ... ``jan``, ``item``) to values.
    """

    dataset = _open_dataset(csv_path, encoding=encoding, chain=chain)
    if dataset is None:
        return 1
    try:
        filter_set = FilterSet(**(filters or {}), scope=scope)
    except ValidationError as e:
        print(f"Error: invalid filters: {e}", file=sys.stderr)
        return 1

    view = member_view(
        dataset, member, filter_set, receipt_sort=receipt_sort, item_sort=item_sort
    )
    print(dumps(view) if as_json else format_member_view(view))
    return 0


def cmd_browse(
    csv_path: str,
    *,
    jan: str = "",
    item: str = "",
    scope: ProductScope = ProductScope.DETAIL_ONLY,
    encoding: str | None = None,
    chain: str | None = None,
    session: PromptSession | None = None,
) -> int:
    """Pick members interactively and print their receipts until canceled.

    With a JAN/item query the product ranking is printed first, the picker
    offers only the ranked members and each member view opens under the same
    product query.
    """

    dataset = _open_dataset(csv_path, encoding=encoding, chain=chain)
    if dataset is None:
        return 1

    query = RankingQuery(jan=jan, item=item, limit=_resolve_rank_limit(None))
    if query.has_product_query:
        rows = member_ranking(dataset, query)
        print(format_ranking(rows))
        members = [r.member_id for r in rows]
    else:
        members = list_members(dataset)
    filter_set = query.to_filter_set(scope=scope)

    last = members[0] if members else ""
    while True:
        try:
            chosen = select_member(members, default=last, session=session)
        except (EOFError, KeyboardInterrupt):
            break
        if chosen is None:
            break
        _logger.debug("browse:selected member=%s", chosen)
        view = member_view(dataset, chosen, filter_set, item_sort=DEFAULT_ITEM_SORT)
        print(format_member_view(view))
        last = chosen
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Rebuild receipts from loyalty-program transaction CSVs and rank members. "
        "Loads settings from a local .env before running."
    ),
)


# Module-level option objects to satisfy ruff B008 (no calls in parameter
# defaults).
CSV_PATH_OPTION: OptionInfo = typer.Option(
    ...,  # required
    "--csv-path",
    help="Path to a loyalty transaction CSV export",
    dir_okay=False,
    file_okay=True,
    exists=False,  # allow non-existent here; the handler will report nice errors
    readable=True,
)
ENCODING_OPTION: OptionInfo = typer.Option(
    None, "--encoding", help="Input encoding (falls back to LR_CSV_ENCODING, then utf-8)."
)
CHAIN_OPTION: OptionInfo = typer.Option(
    None, "--chain", help="Force a chain profile (TOMODS, SUMMIT) instead of detecting it."
)
JSON_OPTION: OptionInfo = typer.Option(False, "--json", help="Print JSON instead of text.")


def _exit(code: int) -> None:
    raise typer.Exit(code)


@app.command("profile")
def profile_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    encoding: str | None = ENCODING_OPTION,
    chain: str | None = CHAIN_OPTION,
) -> None:
    """Show the detected chain profile and which columns it needs."""

    _exit(cmd_profile(str(csv_path), encoding=encoding, chain=chain))


@app.command("members")
def members_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    search: str = typer.Option("", help="Only member ids containing this text."),
    limit: int | None = typer.Option(
        None, help="Maximum ids to list (falls back to LR_MEMBER_LIST_LIMIT, then 50)."
    ),
    encoding: str | None = ENCODING_OPTION,
    chain: str | None = CHAIN_OPTION,
) -> None:
    """List member ids."""

    _exit(cmd_members(str(csv_path), search=search, limit=limit, encoding=encoding, chain=chain))


@app.command("facets")
def facets_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    member: str = typer.Option(..., help="Member id."),
    encoding: str | None = ENCODING_OPTION,
    chain: str | None = CHAIN_OPTION,
) -> None:
    """Show the filter values a member's purchases offer."""

    _exit(cmd_facets(str(csv_path), member=member, encoding=encoding, chain=chain))


@app.command("ranking")
def ranking_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    jan: str = typer.Option("", help="JAN code substring; restricts counted lines."),
    item: str = typer.Option("", help="Item name substring; restricts counted lines."),
    metric: RankingMetric = typer.Option(RankingMetric.SALES_DESC, help="Ranking order."),
    limit: int | None = typer.Option(
        None, help="Rows to show; 0 shows every member (falls back to LR_RANK_LIMIT, then 10)."
    ),
    as_json: bool = JSON_OPTION,
    encoding: str | None = ENCODING_OPTION,
    chain: str | None = CHAIN_OPTION,
) -> None:
    """Rank members by sales, quantity, receipt count or last visit."""

    _exit(
        cmd_ranking(
            str(csv_path),
            jan=jan,
            item=item,
            metric=metric,
            limit=limit,
            as_json=as_json,
            encoding=encoding,
            chain=chain,
        )
    )


@app.command("receipts")
def receipts_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    member: str = typer.Option(..., help="Member id."),
    date: str = typer.Option("", help="Exact date (YYYY-MM-DD)."),
    store: str = typer.Option("", help="Exact store name."),
    maker: str = typer.Option("", help="Exact maker / supplier."),
    line: str = typer.Option("", help="Exact line."),
    corner: str = typer.Option("", help="Exact corner."),
    cat_l: str = typer.Option("", "--cat-l", help="Exact large category."),
    cat_m: str = typer.Option("", "--cat-m", help="Exact middle category."),
    cat_s: str = typer.Option("", "--cat-s", help="Exact small category."),
    jan: str = typer.Option("", help="JAN code substring."),
    item: str = typer.Option("", help="Item name substring."),
    scope: ProductScope = typer.Option(
        ProductScope.DETAIL_ONLY,
        help="detail_only keeps matching lines; receipt_all keeps whole matching receipts.",
    ),
    sort: ReceiptSort = typer.Option(DEFAULT_RECEIPT_SORT, help="Receipt order."),
    item_sort: ItemSort = typer.Option(DEFAULT_ITEM_SORT, help="Item order within a receipt."),
    as_json: bool = JSON_OPTION,
    encoding: str | None = ENCODING_OPTION,
    chain: str | None = CHAIN_OPTION,
) -> None:
    """Show one member's receipts with their items."""

    filters = {
        "date": date,
        "store": store,
        "maker": maker,
        "line": line,
        "corner": corner,
        "cat_l": cat_l,
        "cat_m": cat_m,
        "cat_s": cat_s,
        "jan": jan,
        "item": item,
    }
    _exit(
        cmd_receipts(
            str(csv_path),
            member=member,
            filters=filters,
            scope=scope,
            receipt_sort=sort,
            item_sort=item_sort,
            as_json=as_json,
            encoding=encoding,
            chain=chain,
        )
    )


@app.command("browse")
def browse_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    jan: str = typer.Option("", help="Start from the ranking for this JAN code substring."),
    item: str = typer.Option("", help="Start from the ranking for this item name substring."),
    scope: ProductScope = typer.Option(ProductScope.DETAIL_ONLY, help="Product filter scope."),
    encoding: str | None = ENCODING_OPTION,
    chain: str | None = CHAIN_OPTION,
) -> None:
    """Pick members interactively and view their receipts (Esc to quit)."""

    _exit(
        cmd_browse(
            str(csv_path), jan=jan, item=item, scope=scope, encoding=encoding, chain=chain
        )
    )


@app.callback(invoke_without_command=True)
def _root(ctx: typer.Context) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

    # Central logging setup so child loggers inherit configuration
    configure_logging()

    if ctx.invoked_subcommand is None:
        typer.echo("No subcommand provided. Use --help to see available commands.")
        raise typer.Exit(1)


if __name__ == "__main__":  # pragma: no cover
    # Running as a module: `python -m loyalty_receipts.cli`
    app()
