"""Typer-based CLI entry point."""

from __future__ import annotations

import functools
import logging
import random
from datetime import timedelta
from pathlib import Path
from typing import List, Optional

import typer
from rich import print
from rich.console import Console
from rich.table import Table

from orderdesk.application.services.paged_query_engine import PagedQueryEngine
from orderdesk.application.use_cases.bulk_actions import (
    ApplyBulkActionUseCase,
    BulkActionKind,
    BulkActionRequest,
    BulkActionResponse,
)
from orderdesk.di import Container, DeskPreferences, bootstrap
from orderdesk.domain.models import (
    AllInTabSelection,
    ExplicitSelection,
    Order,
    OrderStatus,
    Tab,
    TargetDescriptor,
    utc_now,
)
from orderdesk.domain.repositories import IOrderRepository
from orderdesk.errors import (
    ConfirmationRequiredError,
    OrderDeskError,
    PartialBulkFailure,
    TransportError,
    ValidationError,
)

app = typer.Typer(help="Admin order desk: browse tabs and run bulk actions on orders")
console = Console()

_state: dict = {"db": None, "settings": None, "container": None}

_LANGUAGES = ("en", "de", "fr", "es", "ja")
_VOICES = ("aria", "guy", "jenny", "davis")


def _handle_errors(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (ValidationError, PartialBulkFailure, TransportError) as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(1) from exc
        except OrderDeskError as exc:
            typer.echo(f"Unexpected error: {exc}", err=True)
            raise typer.Exit(1) from exc

    return wrapper


def _container() -> Container:
    container = _state["container"]
    if container is None:
        db_path = _state["db"]
        settings = None
        if _state["settings"] is not None or db_path is None:
            from orderdesk.settings import SettingsManager

            settings = SettingsManager(_state["settings"])
            settings.load()
            if db_path is None:
                db_path = settings.database_path()
        db_path.parent.mkdir(parents=True, exist_ok=True)
        container = bootstrap(Container(), db_path, settings=settings)
        _state["container"] = container
    return container


def _preferences() -> DeskPreferences:
    return _container().resolve(DeskPreferences)


def _target(ids: List[str], all_in: Optional[Tab], exclude: List[str]) -> TargetDescriptor:
    if all_in is not None:
        if ids:
            raise ValidationError("Pass either order ids or --all-in, not both")
        return TargetDescriptor.of(AllInTabSelection(tab=Tab(all_in), excluded=frozenset(exclude)))
    if exclude:
        raise ValidationError("--exclude only applies together with --all-in")
    return TargetDescriptor.of(ExplicitSelection(frozenset(ids)))


def _run(kind: BulkActionKind, target: Optional[TargetDescriptor] = None, **options) -> BulkActionResponse:
    use_case = _container().resolve(ApplyBulkActionUseCase)
    response = use_case.execute(BulkActionRequest(kind=kind, target=target, **options))
    if not response.success:
        if isinstance(response.exception, OrderDeskError):
            raise response.exception
        raise PartialBulkFailure(response.error or "Bulk action failed")
    return response


def _report(response: BulkActionResponse, verb: str) -> None:
    print(f"[green]{verb} {response.affected_count} order(s)")


@app.callback()
def main(
    db: Optional[Path] = typer.Option(None, "--db", help="SQLite database file (defaults to the settings file)"),
    settings: Optional[Path] = typer.Option(None, "--settings", help="Settings JSON file (defaults to the per-user config directory)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)
    _state["db"] = db
    _state["settings"] = settings
    _state["container"] = None


@app.command()
@_handle_errors
def seed(
    count: int = typer.Option(120, min=0, help="Number of orders to create"),
    trashed: int = typer.Option(0, min=0, help="How many of them start in the trash"),
    seed_value: Optional[int] = typer.Option(None, "--seed", help="Random seed for reproducible data"),
) -> None:
    """Insert generated orders for local testing."""

    rng = random.Random(seed_value)
    now = utc_now()
    statuses = list(OrderStatus)
    orders = []
    for index in range(count):
        created = now - timedelta(minutes=index * 7 + rng.randint(0, 6) + 2)
        deleted_at = created + timedelta(minutes=1) if index < trashed else None
        orders.append(
            Order.create(
                created_at=created,
                status=rng.choice(statuses),
                is_read=rng.random() < 0.5,
                deleted_at=deleted_at,
                name=f"Customer {index + 1}",
                email=f"customer{index + 1}@example.com",
                script=f"Video request #{index + 1}",
                language=rng.choice(_LANGUAGES),
                voice=rng.choice(_VOICES),
            )
        )
    repo = _container().resolve(IOrderRepository)
    inserted = repo.insert_many(orders)
    print(f"[green]Seeded {inserted} orders")


@app.command("list")
@_handle_errors
def list_orders(
    tab: Optional[Tab] = typer.Option(None, help="Tab to list (defaults to list.default_tab)"),
    page: int = typer.Option(1, min=1),
    page_size: Optional[int] = typer.Option(None, min=1, help="Rows per page (defaults to list.page_size)"),
) -> None:
    """Show one page of a tab."""

    preferences = _preferences()
    window = _container().resolve(PagedQueryEngine).load(
        tab or preferences.default_tab,
        page,
        page_size or preferences.page_size,
    )
    table = Table(title=f"{window.tab.value} - page {window.page}/{window.total_pages} ({window.total_in_tab} orders)")
    for column in ("id", "created", "status", "read", "name", "email"):
        table.add_column(column)
    for order in window.rows:
        table.add_row(
            order.id,
            order.created_at.strftime("%Y-%m-%d %H:%M"),
            order.status.value,
            "yes" if order.is_read else "no",
            order.name or "",
            order.email or "",
        )
    console.print(table)


@app.command()
@_handle_errors
def counts() -> None:
    """Show the number of orders in every tab."""

    engine = _container().resolve(PagedQueryEngine)
    table = Table(title="Orders per tab")
    table.add_column("tab")
    table.add_column("orders", justify="right")
    for tab in Tab:
        table.add_row(tab.value, str(engine.load(tab, 1, 1).total_in_tab))
    console.print(table)


@app.command()
@_handle_errors
def status(
    new_status: OrderStatus = typer.Argument(..., help="Status to set"),
    ids: List[str] = typer.Argument(None),
    all_in: Optional[Tab] = typer.Option(None, "--all-in", help="Target every order in this tab"),
    exclude: List[str] = typer.Option([], "--exclude", help="Order ids to leave out of --all-in"),
) -> None:
    """Set the status of the given orders."""

    response = _run(BulkActionKind.SET_STATUS, _target(ids or [], all_in, exclude), status=new_status)
    _report(response, f"Set {new_status.value} on")


@app.command()
@_handle_errors
def trash(
    ids: List[str] = typer.Argument(None),
    all_in: Optional[Tab] = typer.Option(None, "--all-in", help="Target every order in this tab"),
    exclude: List[str] = typer.Option([], "--exclude", help="Order ids to leave out of --all-in"),
) -> None:
    """Move orders to the trash."""

    _report(_run(BulkActionKind.MOVE_TO_TRASH, _target(ids or [], all_in, exclude)), "Trashed")


@app.command()
@_handle_errors
def restore(
    ids: List[str] = typer.Argument(None),
    all_in: Optional[Tab] = typer.Option(None, "--all-in", help="Target every order in this tab"),
    exclude: List[str] = typer.Option([], "--exclude", help="Order ids to leave out of --all-in"),
) -> None:
    """Restore orders from the trash."""

    _report(_run(BulkActionKind.RESTORE, _target(ids or [], all_in, exclude)), "Restored")


@app.command("mark-read")
@_handle_errors
def mark_read(
    ids: List[str] = typer.Argument(None),
    unread: bool = typer.Option(False, "--unread", help="Mark as unread instead"),
    all_in: Optional[Tab] = typer.Option(None, "--all-in", help="Target every order in this tab"),
    exclude: List[str] = typer.Option([], "--exclude", help="Order ids to leave out of --all-in"),
) -> None:
    """Mark orders read (or unread)."""

    kind = BulkActionKind.MARK_UNREAD if unread else BulkActionKind.MARK_READ
    response = _run(kind, _target(ids or [], all_in, exclude))
    _report(response, "Marked unread" if unread else "Marked read")


@app.command()
@_handle_errors
def delete(
    ids: List[str] = typer.Argument(None),
    confirm: Optional[str] = typer.Option(None, "--confirm", help="Type DELETE to confirm"),
    all_in: Optional[Tab] = typer.Option(None, "--all-in", help="Target every order in this tab"),
    exclude: List[str] = typer.Option([], "--exclude", help="Order ids to leave out of --all-in"),
) -> None:
    """Delete orders permanently."""

    response = _run(BulkActionKind.DELETE_PERMANENTLY, _target(ids or [], all_in, exclude), confirmation=confirm)
    _report(response, "Deleted")


@app.command("empty-trash")
@_handle_errors
def empty_trash(
    older_than_days: Optional[int] = typer.Option(
        None,
        "--older-than-days",
        min=0,
        help="Only purge orders trashed more than N days ago; without it the whole trash is purged",
    ),
    expired: bool = typer.Option(
        False,
        "--expired",
        help="Only purge orders trashed longer than the retention period (trash.retention_days)",
    ),
    confirm: Optional[str] = typer.Option(None, "--confirm", help="Type DELETE to confirm"),
) -> None:
    """Permanently delete orders in the trash."""

    try:
        response = _run(
            BulkActionKind.EMPTY_TRASH,
            confirmation=confirm,
            older_than_days=older_than_days,
            expired_only=expired,
        )
    except ConfirmationRequiredError as exc:
        typer.echo(f"Error: {exc} (pass --confirm DELETE)", err=True)
        raise typer.Exit(1) from exc
    _report(response, "Purged")


if __name__ == "__main__":
    app()
