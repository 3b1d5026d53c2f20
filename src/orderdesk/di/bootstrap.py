"""Wire the order desk services into a :class:`Container`."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from orderdesk.application.services.bulk_mutation_executor import BulkMutationExecutor
from orderdesk.application.services.dispatch import Debouncer, Dispatcher
from orderdesk.application.services.paged_query_engine import PagedQueryEngine
from orderdesk.application.services.undo_manager import UndoManager
from orderdesk.application.use_cases.bulk_actions import ApplyBulkActionUseCase
from orderdesk.application.use_cases.open_order import OpenOrderUseCase
from orderdesk.application.use_cases.undo_action import UndoLastActionUseCase
from orderdesk.config import (
    DEFAULT_PAGE_SIZE,
    RECONCILE_DEBOUNCE_MS,
    TRASH_RETENTION_DAYS,
    UNDO_WINDOW_SEC,
)
from orderdesk.domain.models import Tab
from orderdesk.domain.repositories import IOrderRepository
from orderdesk.errors.handler import ErrorHandler
from orderdesk.events.bus import EventBus
from orderdesk.infrastructure.db.pool import ConnectionPool
from orderdesk.infrastructure.realtime import OrderChangeFeed, Poster
from orderdesk.infrastructure.repositories.sqlite_order_repository import SQLiteOrderRepository

from .container import Container

if TYPE_CHECKING:  # pragma: no cover
    from orderdesk.settings.manager import SettingsManager


@dataclass(frozen=True)
class DeskPreferences:
    """User-tunable values the services are built with."""

    page_size: int = DEFAULT_PAGE_SIZE
    default_tab: Tab = Tab.ALL
    debounce_ms: int = RECONCILE_DEBOUNCE_MS
    undo_window_sec: float = UNDO_WINDOW_SEC
    retention_days: int = TRASH_RETENTION_DAYS

    @classmethod
    def from_settings(cls, settings: "SettingsManager") -> DeskPreferences:
        return cls(
            page_size=settings.page_size(),
            default_tab=Tab(settings.default_tab()),
            debounce_ms=settings.debounce_ms(),
            undo_window_sec=settings.undo_window_seconds(),
            retention_days=settings.retention_days(),
        )


def bootstrap(
    container: Container,
    db_path: Path,
    undo_window_sec: Optional[float] = None,
    post: Optional[Poster] = None,
    settings: Optional["SettingsManager"] = None,
) -> Container:
    """Register all application services in the DI container.

    ``settings`` supplies the page size, default tab, debounce interval, undo
    window and trash retention; without it the ``orderdesk.config`` defaults
    apply.  An explicit ``undo_window_sec`` overrides both.  ``post`` decides
    which thread realtime callbacks run on; the GUI passes
    :meth:`QtChangeRelay.post`, headless callers leave it unset.
    """
    preferences = DeskPreferences.from_settings(settings) if settings is not None else DeskPreferences()
    if undo_window_sec is not None:
        preferences = replace(preferences, undo_window_sec=undo_window_sec)
    container.register_instance(DeskPreferences, preferences)
    if settings is not None:
        from orderdesk.settings.manager import SettingsManager

        container.register_instance(SettingsManager, settings)

    container.register_singleton(EventBus, EventBus)
    container.register_factory(ConnectionPool, lambda: ConnectionPool(Path(db_path)), singleton=True)
    container.register_factory(
        IOrderRepository,
        lambda: SQLiteOrderRepository(container.resolve(ConnectionPool), container.resolve(EventBus)),
        singleton=True,
    )
    container.register_factory(
        OrderChangeFeed,
        lambda: OrderChangeFeed(container.resolve(EventBus), post=post),
        singleton=True,
    )
    container.register_factory(
        ErrorHandler,
        lambda: ErrorHandler(logging.getLogger("orderdesk"), container.resolve(EventBus)),
        singleton=True,
    )
    container.register_factory(
        PagedQueryEngine,
        lambda: PagedQueryEngine(container.resolve(IOrderRepository)),
        singleton=True,
    )
    container.register_factory(
        BulkMutationExecutor,
        lambda: BulkMutationExecutor(container.resolve(IOrderRepository)),
        singleton=True,
    )
    container.register_factory(
        UndoManager,
        lambda: UndoManager(container.resolve(BulkMutationExecutor), window_sec=preferences.undo_window_sec),
        singleton=True,
    )
    container.register_factory(
        ApplyBulkActionUseCase,
        lambda: ApplyBulkActionUseCase(
            container.resolve(BulkMutationExecutor),
            container.resolve(UndoManager),
            event_bus=container.resolve(EventBus),
            retention_days=preferences.retention_days,
        ),
    )
    container.register_factory(
        UndoLastActionUseCase,
        lambda: UndoLastActionUseCase(container.resolve(UndoManager)),
    )
    container.register_factory(
        OpenOrderUseCase,
        lambda: OpenOrderUseCase(
            container.resolve(IOrderRepository),
            container.resolve(BulkMutationExecutor),
        ),
    )
    return container


def create_order_list_view_model(
    container: Container,
    dispatcher: Optional[Dispatcher] = None,
    debouncer: Optional[Debouncer] = None,
    tab: Tab | str | None = None,
    page_size: Optional[int] = None,
):
    """Build an :class:`OrderListViewModel` from a bootstrapped container.

    ``tab`` and ``page_size`` default to the registered :class:`DeskPreferences`.
    """
    from orderdesk.gui.viewmodels.order_list_viewmodel import OrderListViewModel

    preferences = container.resolve(DeskPreferences)
    return OrderListViewModel(
        engine=container.resolve(PagedQueryEngine),
        bulk_actions=container.resolve(ApplyBulkActionUseCase),
        undo_action=container.resolve(UndoLastActionUseCase),
        open_order=container.resolve(OpenOrderUseCase),
        undo_manager=container.resolve(UndoManager),
        change_feed=container.resolve(OrderChangeFeed),
        dispatcher=dispatcher,
        debouncer=debouncer,
        error_handler=container.resolve(ErrorHandler),
        tab=preferences.default_tab if tab is None else tab,
        page_size=preferences.page_size if page_size is None else page_size,
    )


def shutdown(container: Container) -> None:
    if container.is_registered(ConnectionPool):
        container.resolve(ConnectionPool).close_all()
