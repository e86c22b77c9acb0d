# ruff: noqa: I001
"""CLI for the ``spend_insights`` package.

Exposes callable command handlers (``cmd_import``, ``cmd_dashboard``, ...)
and a Typer-based console interface over them. Settings are read from the
environment after loading a local ``.env`` with ``python-dotenv``; business
logic lives in ``spend_insights.builder``, ``spend_insights.aggregations`` and
``spend_insights.storage``.

Handlers print results to stdout, print ``Error: ...`` to stderr on expected
failures, and return a process exit code.
"""

from __future__ import annotations

import csv
import sys
from dataclasses import replace
from decimal import Decimal
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from typer.models import OptionInfo

from db.client import session_scope

from .aggregations import (
    DATE_RANGE_PRESETS,
    SORT_FIELDS,
    all_records,
    category_totals,
    filter_by_date_range,
    monthly_spending,
    relative_date_range,
    search_records,
    spending_summary,
    top_merchants,
)
from .builder import create_document
from .config import Settings, load_settings
from .export import export_csv
from .logging_setup import configure_logging, get_logger
from .models import Record
from .storage import (
    add_document,
    clear_documents,
    load_documents,
    remove_document,
    save_documents,
)

logger = get_logger("spend_insights.cli")


# ---- Small module-level helpers used by CLI commands -------------------------


def _money(d: Decimal) -> str:
    return f"${d:,.2f}"


def _to_decimal(v: float | None) -> Decimal | None:
    return Decimal(str(v)) if v is not None else None


def _load_records(database_url: str, date_range: str) -> list[Record]:
    with session_scope(database_url=database_url) as session:
        documents = load_documents(session)
    bounds = relative_date_range(date_range)
    return filter_by_date_range(all_records(documents), bounds.start, bounds.end)


def _print_records(records: list[Record]) -> None:
    for r in records:
        where = ", ".join(p for p in (r.city, r.state) if p)
        typer.echo(
            f"{r.date.isoformat()}  {_money(r.amount):>12}  {r.category:<14}  {r.description}"
            + (f"  ({where})" if where else "")
        )


# ---- Command handlers --------------------------------------------------------


def cmd_import(csv_path: str, *, settings: Settings) -> int:
    """Import one statement file and append it to the stored document set."""

    path = Path(csv_path)
    try:
        text = path.read_text(encoding="utf-8-sig")
    except FileNotFoundError:
        print(f"Error: File not found: {csv_path}", file=sys.stderr)
        return 1
    except PermissionError:
        print(f"Error: Permission denied: {csv_path}", file=sys.stderr)
        return 1
    except UnicodeDecodeError as e:
        print(f"Error: '{csv_path}' is not UTF-8 text: {e}", file=sys.stderr)
        return 1

    try:
        document = create_document(path.name, text, invalid_dates=settings.invalid_dates)
    except csv.Error as e:
        print(f"Error: Failed to parse CSV: {e}", file=sys.stderr)
        return 1

    try:
        with session_scope(database_url=settings.database_url) as session:
            documents = load_documents(session)
            save_documents(session, add_document(documents, document))
    except Exception as e:
        logger.debug("import:persist_failed path=%s", csv_path, exc_info=True)
        print(f"Error: persistence failed: {e}", file=sys.stderr)
        return 1

    logger.info(
        "import:done filename=%s document_id=%s records=%d",
        document.filename,
        document.id,
        len(document.records),
    )
    typer.echo(
        f"Imported {document.filename}: {len(document.records)} transactions, "
        f"{_money(document.total)} (id {document.id})"
    )
    return 0


def cmd_files(*, settings: Settings) -> int:
    with session_scope(database_url=settings.database_url) as session:
        documents = load_documents(session)
    if not documents:
        typer.echo("No statements imported yet.")
        return 0
    for doc in sorted(documents, key=lambda d: d.uploaded_at, reverse=True):
        typer.echo(
            f"{doc.id}  {doc.filename}  {doc.uploaded_at:%Y-%m-%d %H:%M}  "
            f"{len(doc.records)} transactions  {_money(doc.total)}"
        )
    return 0


def cmd_delete(document_id: str, *, settings: Settings) -> int:
    with session_scope(database_url=settings.database_url) as session:
        documents = load_documents(session)
        remaining = remove_document(documents, document_id)
        if len(remaining) == len(documents):
            print(f"Error: No statement with id {document_id}", file=sys.stderr)
            return 1
        save_documents(session, remaining)
    typer.echo(f"Deleted statement {document_id}")
    return 0


def cmd_clear(*, settings: Settings) -> int:
    with session_scope(database_url=settings.database_url) as session:
        existed = clear_documents(session)
    typer.echo("Cleared all statements." if existed else "Nothing to clear.")
    return 0


def cmd_dashboard(date_range: str, top: int, *, settings: Settings) -> int:
    records = _load_records(settings.database_url, date_range)
    if not records:
        typer.echo("No transactions yet. Import a statement file to get started.")
        return 0

    summary = spending_summary(records)
    typer.echo(f"Total spent:      {_money(summary.total)}")
    typer.echo(f"Transactions:     {summary.count}")
    typer.echo(f"Average:          {_money(summary.average)}")
    if summary.top_category is not None:
        typer.echo(f"Top category:     {summary.top_category.category}")

    typer.echo("\nBy category")
    for ct in category_totals(records):
        share = ct.total / summary.total * 100
        typer.echo(f"  {ct.category:<14} {_money(ct.total):>12}  {ct.count:>4}  {share:5.1f}%")

    typer.echo("\nBy month")
    for mt in monthly_spending(records):
        typer.echo(f"  {mt.month}  {_money(mt.total):>12}")

    typer.echo(f"\nTop {top} merchants")
    for m in top_merchants(records, top):
        typer.echo(f"  {m.name or '(unnamed)':<30} {_money(m.total):>12}  {m.count:>4}")
    return 0


def cmd_transactions(
    *,
    settings: Settings,
    date_range: str = "all",
    search: str | None = None,
    category: str | None = None,
    min_amount: Decimal | None = None,
    max_amount: Decimal | None = None,
    sort_by: str = "date",
    ascending: bool = False,
) -> int:
    records = search_records(
        _load_records(settings.database_url, date_range),
        text=search,
        category=category,
        min_amount=min_amount,
        max_amount=max_amount,
        sort_by=sort_by,  # type: ignore[arg-type]
        descending=not ascending,
    )
    _print_records(records)
    typer.echo(f"{len(records)} transactions")
    return 0


def cmd_export(
    output: str | None,
    *,
    settings: Settings,
    date_range: str = "all",
    search: str | None = None,
    category: str | None = None,
) -> int:
    records = search_records(
        _load_records(settings.database_url, date_range), text=search, category=category
    )
    text = export_csv(records)
    if output is None:
        typer.echo(text)
        return 0
    try:
        Path(output).write_text(text + "\n", encoding="utf-8")
    except OSError as e:
        print(f"Error: could not write '{output}': {e}", file=sys.stderr)
        return 1
    typer.echo(f"Exported {len(records)} transactions to {output}")
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Import card/bank statement CSVs and summarize spending by category, "
        "month and merchant. Loads settings from a local .env when present."
    ),
)

# Module-level option objects to satisfy ruff B008 (no calls in parameter
# defaults).
RANGE_OPTION: OptionInfo = typer.Option(
    "all", "--range", help="Date range preset: " + ", ".join(DATE_RANGE_PRESETS)
)
SEARCH_OPTION: OptionInfo = typer.Option(
    None, "--search", help="Case-insensitive text in description/category/city/state."
)
CATEGORY_OPTION: OptionInfo = typer.Option(None, "--category", help="Exact canonical category.")
TOP_OPTION: OptionInfo = typer.Option(None, "--top", help="Number of merchants to show.")
MIN_OPTION: OptionInfo = typer.Option(None, "--min", help="Minimum amount (inclusive).")
MAX_OPTION: OptionInfo = typer.Option(None, "--max", help="Maximum amount (inclusive).")
SORT_OPTION: OptionInfo = typer.Option(
    "date", "--sort", help="Sort field: " + ", ".join(SORT_FIELDS)
)
ASC_OPTION: OptionInfo = typer.Option(False, "--asc", help="Sort ascending.")
OUTPUT_OPTION: OptionInfo = typer.Option(None, "--output", "-o", help="Write to this file.")
DATABASE_URL_OPTION: OptionInfo = typer.Option(
    None, "--database-url", help="Override SPEND_INSIGHTS_DATABASE_URL / DATABASE_URL."
)


def _settings(ctx: typer.Context) -> Settings:
    settings = ctx.obj
    assert isinstance(settings, Settings)  # set by the root callback
    return settings


def _check_range(date_range: str) -> None:
    if date_range not in DATE_RANGE_PRESETS:
        raise typer.BadParameter(
            f"expected one of {', '.join(DATE_RANGE_PRESETS)}", param_hint="--range"
        )


@app.command("import")
def import_cmd(
    ctx: typer.Context,
    csv_path: Annotated[Path, typer.Argument(dir_okay=False, help="Statement CSV to import.")],
) -> None:
    """Import a statement CSV."""

    raise typer.Exit(cmd_import(str(csv_path), settings=_settings(ctx)))


@app.command("files")
def files_cmd(ctx: typer.Context) -> None:
    """List imported statements, newest first."""

    raise typer.Exit(cmd_files(settings=_settings(ctx)))


@app.command("delete")
def delete_cmd(ctx: typer.Context, document_id: str) -> None:
    """Delete one imported statement and its transactions."""

    raise typer.Exit(cmd_delete(document_id, settings=_settings(ctx)))


@app.command("clear")
def clear_cmd(ctx: typer.Context) -> None:
    """Delete every imported statement."""

    raise typer.Exit(cmd_clear(settings=_settings(ctx)))


@app.command("dashboard")
def dashboard_cmd(
    ctx: typer.Context,
    date_range: str = RANGE_OPTION,
    top: int | None = TOP_OPTION,
) -> None:
    """Show totals by category, month and merchant."""

    _check_range(date_range)
    settings = _settings(ctx)
    n = top if top is not None else settings.top_merchants
    raise typer.Exit(cmd_dashboard(date_range, n, settings=settings))


@app.command("transactions")
def transactions_cmd(
    ctx: typer.Context,
    date_range: str = RANGE_OPTION,
    search: str | None = SEARCH_OPTION,
    category: str | None = CATEGORY_OPTION,
    min_amount: float | None = MIN_OPTION,
    max_amount: float | None = MAX_OPTION,
    sort: str = SORT_OPTION,
    ascending: bool = ASC_OPTION,
) -> None:
    """List transactions with optional filters."""

    _check_range(date_range)
    if sort not in SORT_FIELDS:
        raise typer.BadParameter(f"expected one of {', '.join(SORT_FIELDS)}", param_hint="--sort")
    raise typer.Exit(
        cmd_transactions(
            settings=_settings(ctx),
            date_range=date_range,
            search=search,
            category=category,
            min_amount=_to_decimal(min_amount),
            max_amount=_to_decimal(max_amount),
            sort_by=sort,
            ascending=ascending,
        )
    )


@app.command("export")
def export_cmd(
    ctx: typer.Context,
    output: Path | None = OUTPUT_OPTION,
    date_range: str = RANGE_OPTION,
    search: str | None = SEARCH_OPTION,
    category: str | None = CATEGORY_OPTION,
) -> None:
    """Export transactions as CSV."""

    _check_range(date_range)
    raise typer.Exit(
        cmd_export(
            str(output) if output is not None else None,
            settings=_settings(ctx),
            date_range=date_range,
            search=search,
            category=category,
        )
    )


@app.callback()
def _root(
    ctx: typer.Context,
    database_url: str | None = DATABASE_URL_OPTION,
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding
    already-set variables), configures logging, and resolves settings for the
    subcommand.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    settings = load_settings()
    configure_logging(settings.log_level)
    if database_url:
        settings = replace(settings, database_url=database_url)
    ctx.obj = settings


def main() -> None:  # pragma: no cover - console script entry
    app()


if __name__ == "__main__":  # pragma: no cover
    # Running as a module: `python -m spend_insights.cli`
    main()
