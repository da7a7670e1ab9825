# ruff: noqa: I001
"""CLI for the ``finance_tracker`` package.

A Typer console interface over :mod:`finance_tracker.api`. Environment
variables (notably ``DATABASE_URL``) are loaded from a local ``.env`` using
``python-dotenv`` before any command runs. Each command opens one
:func:`db.client.session_scope`, so a command either commits as a whole or
rolls back.

Output is rendered with ``rich``; amounts use the acting user's currency.
Errors are written to stderr as ``Error: ...`` with exit status 1.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from decimal import Decimal
from pathlib import Path
from typing import Annotated, Any, TypeVar

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from typer.models import OptionInfo

from db.client import create_schema, session_scope
from . import api
from .categories import Category, format_category_name
from .currency import DEFAULT_CURRENCY, format_currency, format_percentage, is_supported_currency
from .errors import FinanceTrackerError
from .logging_setup import LEVEL_ENV_VAR, configure_logging, get_logger
from .models import BUDGET_CATEGORY_FIELDS, Budget, MonthlySummary
from .months import current_month_key
from .persistence import SqlAlchemyStore

_logger = get_logger("finance_tracker.cli")

console = Console()
err_console = Console(stderr=True)

T = TypeVar("T")

_ON_OFF = {"on": True, "true": True, "yes": True, "off": False, "false": False, "no": False}


app = typer.Typer(
    name="finance-tracker",
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Import bank CSV exports and report monthly spending and budgets. "
        "Loads DATABASE_URL from a local .env before running."
    ),
)


# Module-level option objects to satisfy ruff B008 (no calls in parameter
# defaults).
CSV_PATH_OPTION: OptionInfo = typer.Option(
    ...,  # required
    "--csv-path",
    help="Path to a bank or card CSV export (header row first)",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the command reports missing files itself
)

DatabaseUrl = Annotated[
    str | None,
    typer.Option("--database-url", help="Override DATABASE_URL (falls back to env var)."),
]
UserId = Annotated[
    int,
    typer.Option(
        "--user-id",
        envvar="FINANCE_TRACKER_USER_ID",
        help="Acting user id (falls back to FINANCE_TRACKER_USER_ID, then 1).",
    ),
]
Month = Annotated[
    str | None,
    typer.Argument(help="Month key YYYY-MM (defaults to the current month)."),
]


# ---- Small module-level helpers used by the commands -------------------------


def _fail(message: str) -> typer.Exit:
    err_console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)
    return typer.Exit(1)


@contextmanager
def _store(database_url: str | None) -> Iterator[SqlAlchemyStore]:
    """Yield a store over a fresh session; map failures to ``Error:`` exits."""

    try:
        with session_scope(database_url=database_url) as session:
            yield SqlAlchemyStore(session)
    except FinanceTrackerError as e:
        raise _fail(e.message) from e
    except typer.Exit:
        raise
    except Exception as e:
        _logger.exception("cli:store_failed")
        raise _fail(f"database operation failed: {e}") from e


def _call(fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    try:
        return fn(*args, **kwargs)
    except FinanceTrackerError as e:
        for item in e.errors:
            path = ".".join(str(p) for p in item.get("path", ())) or "body"
            err_console.print(f"  {path}: {escape(str(item.get('message', '')))}", highlight=False)
        raise _fail(e.message) from e


def _currency(store: SqlAlchemyStore, user_id: int) -> str:
    user = store.get_user(user_id)
    return user.currency if user is not None else DEFAULT_CURRENCY


def _money(amount: Decimal | None, code: str) -> str:
    return format_currency(amount, code) if amount is not None else "-"


def _summary_table(summary: MonthlySummary, code: str) -> Table:
    table = Table(title=f"Summary {summary.month}")
    table.add_column("Category")
    table.add_column("Amount", justify="right")
    for category, amount in summary.categories.items():
        table.add_row(format_category_name(category), _money(amount, code))
    table.add_section()
    table.add_row("Total", _money(summary.total_spent, code))
    return table


def _budget_table(budget: Budget, code: str) -> Table:
    table = Table(title=f"Budget {budget.month_year}")
    table.add_column("Category")
    table.add_column("Budget", justify="right")
    table.add_row("Total", _money(budget.total_budget, code))
    for category in BUDGET_CATEGORY_FIELDS:
        value = budget.category_budget(category)
        if value is not None:
            table.add_row(format_category_name(category), _money(value, code))
    if budget.savings_goal is not None:
        table.add_row("Savings goal", _money(budget.savings_goal, code))
    return table


def _parse_category_budgets(entries: list[str]) -> dict[str, str]:
    """``["housing=1200", ...]`` → ``{"housing_budget": "1200", ...}``."""

    out: dict[str, str] = {}
    for entry in entries:
        key, sep, value = entry.partition("=")
        if not sep:
            raise _fail(f"expected CATEGORY=AMOUNT, got {entry!r}")
        try:
            category = Category(key.strip().lower())
        except ValueError:
            raise _fail(f"unknown category: {key.strip()!r}") from None
        field = BUDGET_CATEGORY_FIELDS.get(category)
        if field is None:
            raise _fail(f"category {category} does not take a budget")
        out[field] = value.strip()
    return out


# ---- Commands ----------------------------------------------------------------


@app.command("init-db")
def init_db_cmd(
    *,
    database_url: DatabaseUrl = None,
    username: Annotated[
        str | None, typer.Option(help="Also create this user when it does not exist.")
    ] = None,
) -> None:
    """Create the finance tables (development databases; use Alembic otherwise)."""

    try:
        create_schema(database_url=database_url)
    except Exception as e:
        raise _fail(f"failed to create schema: {e}") from e
    console.print("Database schema is ready")
    if username:
        with _store(database_url) as store:
            user = store.get_user_by_username(username) or store.create_user(username)
        console.print(f"User {user.username} has id {user.id}")


@app.command("create-user")
def create_user_cmd(
    username: Annotated[str, typer.Argument(help="Unique username")],
    *,
    currency: Annotated[str, typer.Option(help="ISO currency code")] = DEFAULT_CURRENCY,
    database_url: DatabaseUrl = None,
) -> None:
    """Create a user with default settings."""

    if not is_supported_currency(currency):
        raise _fail(f"unsupported currency: {currency}")
    with _store(database_url) as store:
        if store.get_user_by_username(username) is not None:
            raise _fail(f"user already exists: {username}")
        user = store.create_user(username, currency=currency.strip().upper())
    console.print(f"Created user {user.username} with id {user.id}")


@app.command("import-csv")
def import_csv_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    *,
    database_url: DatabaseUrl = None,
    user_id: UserId = 1,
) -> None:
    """Import a CSV export; invalid rows are reported and skipped."""

    try:
        text = csv_path.read_text(encoding="utf-8-sig")
    except FileNotFoundError:
        raise _fail(f"File not found: {csv_path}") from None
    except PermissionError:
        raise _fail(f"Permission denied: {csv_path}") from None
    except (OSError, UnicodeDecodeError) as e:
        raise _fail(f"Unexpected failure reading '{csv_path}': {e}") from e

    with _store(database_url) as store:
        if store.get_user(user_id) is None:
            raise _fail("User not found")
        result = _call(api.import_csv_text, store, user_id, text)

    for message in result.errors:
        err_console.print(f"[yellow]{escape(message)}[/yellow]", highlight=False)
    console.print(result.message)


@app.command("transactions")
def transactions_cmd(
    month: Month = None,
    *,
    database_url: DatabaseUrl = None,
    user_id: UserId = 1,
) -> None:
    """List transactions for a month."""

    key = month or current_month_key()
    with _store(database_url) as store:
        rows = _call(api.list_transactions_for_month, store, user_id, key)
        code = _currency(store, user_id)
    table = Table(title=f"Transactions {key}")
    for col in ("Id", "Date", "Description", "Category"):
        table.add_column(col)
    table.add_column("Amount", justify="right")
    for t in rows:
        table.add_row(
            str(t.id),
            t.date.date().isoformat(),
            escape(t.description),
            format_category_name(t.category),
            _money(t.amount, code),
        )
    console.print(table)


@app.command("summary")
def summary_cmd(
    month: Month = None,
    *,
    database_url: DatabaseUrl = None,
    user_id: UserId = 1,
) -> None:
    """Monthly total, per-category sums and change versus the prior month."""

    with _store(database_url) as store:
        summary = _call(api.get_monthly_summary, store, user_id, month or current_month_key())
        code = _currency(store, user_id)
    console.print(_summary_table(summary, code))
    console.print(f"Compared to previous month: {format_percentage(summary.compared_to_previous)}")


@app.command("breakdown")
def breakdown_cmd(
    month: Month = None,
    *,
    database_url: DatabaseUrl = None,
    user_id: UserId = 1,
) -> None:
    """Category breakdown for a month, largest first."""

    key = month or current_month_key()
    with _store(database_url) as store:
        items = _call(api.get_category_breakdown, store, user_id, key)
        code = _currency(store, user_id)
    table = Table(title=f"Breakdown {key}")
    table.add_column("Category")
    table.add_column("Amount", justify="right")
    table.add_column("Share", justify="right")
    for item in items:
        table.add_row(
            f"[{item.color}]{format_category_name(item.category)}[/]",
            _money(item.amount, code),
            format_percentage(item.percentage),
        )
    console.print(table)


@app.command("comparison")
def comparison_cmd(
    *,
    months: Annotated[str, typer.Option(help="Number of months, current first.")] = str(
        api.DEFAULT_COMPARISON_MONTHS
    ),
    database_url: DatabaseUrl = None,
    user_id: UserId = 1,
) -> None:
    """Totals for the last N months."""

    with _store(database_url) as store:
        summaries = _call(api.get_monthly_comparison, store, user_id, months)
        code = _currency(store, user_id)
    table = Table(title="Monthly comparison")
    table.add_column("Month")
    table.add_column("Total", justify="right")
    table.add_column("Change", justify="right")
    for s in summaries:
        table.add_row(s.month, _money(s.total_spent, code), format_percentage(s.compared_to_previous))
    console.print(table)


@app.command("budget-status")
def budget_status_cmd(
    month: Month = None,
    *,
    database_url: DatabaseUrl = None,
    user_id: UserId = 1,
) -> None:
    """Spending against the month's budget."""

    with _store(database_url) as store:
        status = _call(api.get_budget_status, store, user_id, month or current_month_key())
        code = _currency(store, user_id)
    table = Table(title=f"Budget status {status.month}")
    table.add_column("Category")
    table.add_column("Spent", justify="right")
    table.add_column("Budget", justify="right")
    for c in status.categories:
        style = "red" if c.over_budget else ""
        table.add_row(
            format_category_name(c.category),
            _money(c.spent, code),
            _money(c.budgeted, code),
            style=style,
        )
    console.print(table)
    console.print(
        f"Total spent {_money(status.total_spent, code)} of "
        f"{_money(status.total_budget, code)}; remaining {_money(status.remaining, code)}"
    )
    if status.over_budget:
        console.print("[red]Over budget[/red]")


@app.command("recommend")
def recommend_cmd(
    *,
    income: Annotated[float, typer.Option(help="Monthly income")],
    currency: Annotated[str, typer.Option(help="ISO currency code")] = DEFAULT_CURRENCY,
) -> None:
    """Suggested category budgets for a monthly income."""

    recs = _call(api.budget_recommendation, {"income": income})
    table = Table(title="Recommended budget")
    table.add_column("Category")
    table.add_column("Share", justify="right")
    table.add_column("Amount", justify="right")
    for r in recs:
        table.add_row(format_category_name(r.category), f"{r.percentage}%", _money(r.amount, currency))
    console.print(table)


@app.command("budget-show")
def budget_show_cmd(
    month: Month = None,
    *,
    database_url: DatabaseUrl = None,
    user_id: UserId = 1,
) -> None:
    """Show the budget for a month."""

    with _store(database_url) as store:
        budget = _call(api.get_budget, store, user_id, month or current_month_key())
        code = _currency(store, user_id)
    console.print(_budget_table(budget, code))


@app.command("budget-set")
def budget_set_cmd(
    month: Month = None,
    *,
    total: Annotated[str, typer.Option(help="Total monthly budget")],
    category_budget: Annotated[
        list[str] | None,
        typer.Option(
            "--category-budget",
            "-c",
            help="Per-category budget as CATEGORY=AMOUNT (repeatable)",
        ),
    ] = None,
    savings_goal: Annotated[str | None, typer.Option(help="Savings goal")] = None,
    database_url: DatabaseUrl = None,
    user_id: UserId = 1,
) -> None:
    """Create or update the budget for a month."""

    payload: dict[str, Any] = {
        "month_year": month or current_month_key(),
        "total_budget": total,
        **_parse_category_budgets(category_budget or []),
    }
    if savings_goal is not None:
        payload["savings_goal"] = savings_goal
    with _store(database_url) as store:
        if store.get_user(user_id) is None:
            raise _fail("User not found")
        result = _call(api.save_budget, store, user_id, payload)
        code = _currency(store, user_id)
    verb = "Created" if result.created else "Updated"
    console.print(f"{verb} budget for {result.budget.month_year}")
    console.print(_budget_table(result.budget, code))


@app.command("settings-show")
def settings_show_cmd(
    *,
    database_url: DatabaseUrl = None,
    user_id: UserId = 1,
) -> None:
    """Show the user's settings."""

    with _store(database_url) as store:
        settings = _call(api.get_user_settings, store, user_id)
    table = Table(title=f"Settings for {settings.username}")
    table.add_column("Setting")
    table.add_column("Value")
    table.add_row("Currency", settings.currency)
    table.add_row("Budget warnings", "on" if settings.enable_budget_warnings else "off")
    table.add_row("Payment integrations", ", ".join(settings.payment_integrations) or "-")
    console.print(table)


@app.command("settings-set")
def settings_set_cmd(
    *,
    currency: Annotated[str | None, typer.Option(help="ISO currency code")] = None,
    budget_warnings: Annotated[
        str | None,
        typer.Option("--budget-warnings", help="Turn budget warnings on or off."),
    ] = None,
    integration: Annotated[
        list[str] | None,
        typer.Option("--integration", help="Payment integration id (repeatable; replaces the set)"),
    ] = None,
    clear_integrations: Annotated[
        bool, typer.Option(help="Remove all payment integrations")
    ] = False,
    database_url: DatabaseUrl = None,
    user_id: UserId = 1,
) -> None:
    """Update settings; options not given keep their stored values."""

    payload: dict[str, Any] = {}
    if currency is not None:
        payload["currency"] = currency
    if budget_warnings is not None:
        flag = _ON_OFF.get(budget_warnings.strip().lower())
        if flag is None:
            raise _fail(f"--budget-warnings expects on or off, got {budget_warnings!r}")
        payload["enableBudgetWarnings"] = flag
    if clear_integrations:
        payload["paymentIntegrations"] = []
    elif integration:
        payload["paymentIntegrations"] = list(integration)
    with _store(database_url) as store:
        settings = _call(api.update_user_settings, store, user_id, payload)
    console.print(f"Updated settings for {settings.username}")


@app.callback(invoke_without_command=True)
def _root(
    ctx: typer.Context,
    *,
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        help=f"Log level name or number (falls back to {LEVEL_ENV_VAR}, then WARNING).",
    ),
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

    # After .env so FINANCE_TRACKER_LOG_LEVEL can come from the file.
    configure_logging(log_level)

    if ctx.invoked_subcommand is None:
        typer.echo("No subcommand provided. Use --help to see available commands.")
        raise typer.Exit(1)


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
