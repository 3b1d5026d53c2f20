"""Pure Python OrderListViewModel (MVVM), no Qt dependency.

Owns the state behind the admin order list: the active tab and page, the
last successfully loaded :class:`PageWindow`, the selection, the undo
affordance and the preview pane.  All backend work goes through a
:class:`Dispatcher`; results come back as callbacks and are applied only
if they still belong to the latest load.
"""

from __future__ import annotations

import logging
from functools import partial
from typing import Any, Iterable, Optional

from orderdesk.application.services.dispatch import (
    Debouncer,
    Dispatcher,
    ImmediateDispatcher,
    ManualDebouncer,
)
from orderdesk.application.services.paged_query_engine import LoadGenerations, PagedQueryEngine
from orderdesk.application.services.undo_manager import UndoManager
from orderdesk.application.use_cases.bulk_actions import (
    ApplyBulkActionUseCase,
    BulkActionKind,
    BulkActionRequest,
    BulkActionResponse,
    require_confirmation,
)
from orderdesk.application.use_cases.open_order import (
    OpenOrderRequest,
    OpenOrderResponse,
    OpenOrderUseCase,
)
from orderdesk.application.use_cases.undo_action import UndoLastActionUseCase, UndoRequest
from orderdesk.config import DEFAULT_PAGE_SIZE
from orderdesk.domain.models import (
    ExplicitSelection,
    Order,
    OrderStatus,
    PageWindow,
    Tab,
    TargetDescriptor,
)
from orderdesk.errors import (
    ApplicationError,
    ConfirmationRequiredError,
    StaleResponse,
    ValidationError,
)
from orderdesk.errors.handler import ErrorHandler
from orderdesk.gui.viewmodels.base import BaseViewModel
from orderdesk.gui.viewmodels.realtime_reconciler import RealtimeReconciler
from orderdesk.gui.viewmodels.selection_model import SelectionModel
from orderdesk.gui.viewmodels.signal import ObservableProperty, Signal


class OrderListViewModel(BaseViewModel):
    """Order list ViewModel, pure Python.

    Read-only contract for views: ``rows``, ``total_in_tab``, ``page``,
    ``total_pages``, ``selection_count``, :meth:`is_selected`,
    ``pending_action``, ``last_error`` and ``undo_available`` (all
    :class:`ObservableProperty` except :meth:`is_selected`).
    """

    def __init__(
        self,
        engine: PagedQueryEngine,
        bulk_actions: ApplyBulkActionUseCase,
        undo_action: UndoLastActionUseCase,
        open_order: OpenOrderUseCase,
        undo_manager: UndoManager,
        change_feed: Any = None,
        dispatcher: Optional[Dispatcher] = None,
        debouncer: Optional[Debouncer] = None,
        error_handler: Optional[ErrorHandler] = None,
        tab: Tab | str = Tab.ALL,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        super().__init__()
        self._engine = engine
        self._bulk_actions = bulk_actions
        self._undo_action = undo_action
        self._open_order = open_order
        self._undo_manager = undo_manager
        self._change_feed = change_feed
        self._dispatcher = dispatcher or ImmediateDispatcher()
        self._debouncer = debouncer or ManualDebouncer()
        self._debouncer.bind(self.reload)
        self._error_handler = error_handler
        self._logger = logging.getLogger(__name__)

        # Requested context; the window below is the last one that loaded
        self._tab = Tab(tab)
        self._page = 1
        self._page_size = int(page_size)
        self._window = PageWindow.empty(self._tab, 1, self._page_size)
        self._generations = LoadGenerations()
        self._pending = 0
        self._preview: Optional[Order] = None

        self._selection = SelectionModel()
        self._selection.changed.connect(self._on_selection_changed)
        self._reconciler = RealtimeReconciler(self, self._debouncer)

        # Observable properties
        self.tab = ObservableProperty(self._tab)
        self.page_size = ObservableProperty(self._page_size)
        self.rows = ObservableProperty(())
        self.total_in_tab = ObservableProperty(0)
        self.page = ObservableProperty(1)
        self.total_pages = ObservableProperty(1)
        self.selection_count = ObservableProperty(0)
        self.all_in_tab_selected = ObservableProperty(False)
        self.loading = ObservableProperty(False)
        self.pending_action = ObservableProperty(False)
        self.last_error = ObservableProperty(None)
        self.undo_available = ObservableProperty(False)
        self.preview_order = ObservableProperty(None)

        # Signals
        self.window_changed = Signal()  # emits (PageWindow)
        self.action_completed = Signal()  # emits (BulkActionResponse)
        self.error_occurred = Signal()  # emits (message)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self) -> None:
        """Subscribe to the change stream and load the first page."""
        if self._change_feed is not None and not self._reconciler.attached:
            self._reconciler.attach(self._change_feed)
            self.add_teardown(self._reconciler.detach)
        self.reload()

    # ------------------------------------------------------------------
    # ReconcileHost
    # ------------------------------------------------------------------
    @property
    def window(self) -> PageWindow:
        return self._window

    @property
    def selection_model(self) -> SelectionModel:
        return self._selection

    @property
    def preview(self) -> Optional[Order]:
        return self._preview

    def apply_window(self, window: PageWindow) -> None:
        self._window = window
        self.rows.value = window.rows
        self.total_in_tab.value = window.total_in_tab
        self.page.value = window.page
        self.total_pages.value = window.total_pages
        self._selection.set_total_in_tab(window.total_in_tab)
        self._refresh_selection_state()
        self.window_changed.emit(window)

    def set_preview(self, order: Optional[Order]) -> None:
        self._preview = order
        self.preview_order.value = order

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------
    def reload(self) -> None:
        """Load ``(tab, page, page_size)``; supersedes any load still in flight."""
        ticket = self._generations.begin()
        tab, page, page_size = self._tab, self._page, self._page_size
        self.loading.value = True
        self._dispatcher.submit(
            lambda: self._engine.load(tab, page, page_size),
            partial(self._on_loaded, ticket),
            partial(self._on_load_failed, ticket),
        )

    def set_tab(self, tab: Tab | str) -> None:
        tab = Tab(tab)
        if tab == self._tab:
            return
        self._tab = tab
        self._page = 1
        self.tab.value = tab
        self._change_context()

    def set_page(self, page: int) -> None:
        page = max(1, min(int(page), self._window.total_pages))
        if page == self._page:
            return
        self._page = page
        self._change_context()

    def next_page(self) -> None:
        self.set_page(self._page + 1)

    def previous_page(self) -> None:
        self.set_page(self._page - 1)

    def set_page_size(self, page_size: int) -> None:
        page_size = int(page_size)
        if page_size < 1:
            self._fail(ValidationError(f"page_size must be >= 1, got {page_size}"))
            return
        if page_size == self._page_size:
            return
        self._page_size = page_size
        self._page = 1
        self.page_size.value = page_size
        self._change_context()

    def _change_context(self) -> None:
        self._generations.invalidate()
        self._selection.reset()
        self.reload()

    def _on_loaded(self, ticket: int, window: PageWindow) -> None:
        try:
            self._generations.ensure_current(ticket)
        except StaleResponse as exc:
            self._logger.debug("Dropping load result: %s", exc)
            return
        self.loading.value = False
        if window.page > window.total_pages:
            # Rows were removed under us; move to the last page that exists
            self._logger.info("Page %d past the end of %s, clamping to %d", window.page, window.tab.value, window.total_pages)
            self._page = window.total_pages
            self.reload()
            return
        self.apply_window(window)
        self.undo_available.value = self._undo_manager.available

    def _on_load_failed(self, ticket: int, exc: Exception) -> None:
        if not self._generations.is_current(ticket):
            self._logger.debug("Dropping failed stale load #%d: %s", ticket, exc)
            return
        self.loading.value = False
        self._fail(exc)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------
    def is_selected(self, order_id: str) -> bool:
        return self._selection.is_selected(order_id)

    def toggle(self, order_id: str) -> bool:
        if not self._context_loaded():
            return False
        self._selection.toggle(order_id)
        return True

    def toggle_visible(self) -> bool:
        if not self._context_loaded():
            return False
        self._selection.toggle_visible(self._window.visible_ids)
        return True

    def select_all_in_tab(self) -> bool:
        if not self._context_loaded():
            return False
        return self._selection.select_all_in_tab(self._window.tab, self._window.total_in_tab)

    def reset_selection(self) -> None:
        self._selection.reset()

    def _context_loaded(self) -> bool:
        """True once the displayed window belongs to the requested tab, page and page size.

        Selection gestures are refused while a tab, page or page-size switch
        is still loading.
        """
        window = self._window
        if (window.tab, window.page, window.page_size) == (self._tab, self._page, self._page_size):
            return True
        self._logger.debug("Ignoring selection gesture while %s page %d is loading", self._tab.value, self._page)
        return False

    def _on_selection_changed(self, _selection) -> None:
        self._refresh_selection_state()

    def _refresh_selection_state(self) -> None:
        self.selection_count.value = self._selection.selected_count()
        self.all_in_tab_selected.value = self._selection.is_all_in_tab

    # ------------------------------------------------------------------
    # Bulk actions
    # ------------------------------------------------------------------
    def set_status(self, status: OrderStatus | str, order_ids: Optional[Iterable[str]] = None) -> bool:
        try:
            status = OrderStatus(status)
        except ValueError:
            self._fail(ValidationError(f"Unknown status: {status!r}"))
            return False
        return self._run(BulkActionKind.SET_STATUS, order_ids, status=status)

    def move_to_trash(self, order_ids: Optional[Iterable[str]] = None) -> bool:
        return self._run(BulkActionKind.MOVE_TO_TRASH, order_ids)

    def restore(self, order_ids: Optional[Iterable[str]] = None) -> bool:
        return self._run(BulkActionKind.RESTORE, order_ids)

    def mark_read(self, order_ids: Optional[Iterable[str]] = None) -> bool:
        return self._run(BulkActionKind.MARK_READ, order_ids)

    def mark_unread(self, order_ids: Optional[Iterable[str]] = None) -> bool:
        return self._run(BulkActionKind.MARK_UNREAD, order_ids)

    def delete_permanently(self, confirmation: Optional[str], order_ids: Optional[Iterable[str]] = None) -> bool:
        return self._run(BulkActionKind.DELETE_PERMANENTLY, order_ids, confirmation=confirmation)

    def empty_trash(self, confirmation: Optional[str], older_than_days: Optional[int] = None) -> bool:
        return self._run(
            BulkActionKind.EMPTY_TRASH,
            None,
            confirmation=confirmation,
            older_than_days=older_than_days,
        )

    def empty_expired_trash(self, confirmation: Optional[str]) -> bool:
        """Purge orders that have sat in the trash longer than the retention period."""
        return self._run(BulkActionKind.EMPTY_TRASH, None, confirmation=confirmation, expired_only=True)

    def _run(self, kind: BulkActionKind, order_ids: Optional[Iterable[str]], **options: Any) -> bool:
        """Dispatch one bulk action; return False when it was rejected up front.

        With ``order_ids`` the action targets exactly those orders (detail
        view) and leaves the list selection alone; otherwise it targets the
        current selection.
        """
        if kind.is_hard_delete:
            try:
                require_confirmation(options.get("confirmation"))
            except ConfirmationRequiredError as exc:
                self._logger.info("Hard delete not confirmed: %s", exc)
                return False

        uses_selection = order_ids is None
        target: Optional[TargetDescriptor] = None
        if kind is not BulkActionKind.EMPTY_TRASH:
            selection = self._selection.snapshot() if uses_selection else ExplicitSelection(frozenset(order_ids))
            if selection.is_empty:
                self._fail(ValidationError("Nothing selected"))
                return False
            target = TargetDescriptor.of(selection)

        request = BulkActionRequest(kind=kind, target=target, **options)
        self._undo_manager.discard()
        self.undo_available.value = False
        self._begin_action()
        self._dispatcher.submit(
            lambda: self._bulk_actions.execute(request),
            partial(self._on_action_done, uses_selection),
            self._on_action_crashed,
        )
        return True

    def _on_action_done(self, uses_selection: bool, response: BulkActionResponse) -> None:
        self._end_action()
        if not response.success:
            # Selection is kept so the operator can retry without reselecting
            self._fail(response.exception or ApplicationError(response.error or "Bulk action failed"))
            return
        self.last_error.value = None
        if uses_selection or response.kind is BulkActionKind.EMPTY_TRASH:
            self._selection.reset()
        self.undo_available.value = response.undo is not None
        self.action_completed.emit(response)
        self.reload()

    def _on_action_crashed(self, exc: Exception) -> None:
        self._end_action()
        self._fail(exc)

    # ------------------------------------------------------------------
    # Undo
    # ------------------------------------------------------------------
    def undo(self) -> bool:
        snapshot = self._undo_manager.current
        if snapshot is None:
            self.undo_available.value = False
            return False
        self._begin_action()
        self._dispatcher.submit(
            lambda: self._undo_action.execute(UndoRequest(snapshot=snapshot)),
            self._on_undo_done,
            self._on_action_crashed,
        )
        return True

    def dismiss_undo(self) -> None:
        self._undo_manager.discard()
        self.undo_available.value = False

    def refresh_undo_state(self) -> None:
        """Re-read the undo slot; hides the affordance once its window has passed."""
        self.undo_available.value = self._undo_manager.available

    def _on_undo_done(self, response: BulkActionResponse) -> None:
        self._end_action()
        self.undo_available.value = self._undo_manager.available
        if not response.success:
            self._fail(response.exception or ApplicationError(response.error or "Undo failed"))
            return
        self.last_error.value = None
        self.action_completed.emit(response)
        self.reload()

    # ------------------------------------------------------------------
    # Preview
    # ------------------------------------------------------------------
    def open_preview(self, order_id: str) -> None:
        self._dispatcher.submit(
            lambda: self._open_order.execute(OpenOrderRequest(order_id=order_id)),
            self._on_preview_loaded,
            self._fail,
        )

    def close_preview(self) -> None:
        self.set_preview(None)

    def _on_preview_loaded(self, response: OpenOrderResponse) -> None:
        if not response.success:
            self.set_preview(None)
            self._fail(ApplicationError(response.error or "Order not found"))
            return
        self.set_preview(response.order)

    # ------------------------------------------------------------------
    # Internal utilities
    # ------------------------------------------------------------------
    def _begin_action(self) -> None:
        self._pending += 1
        self.pending_action.value = True

    def _end_action(self) -> None:
        self._pending = max(0, self._pending - 1)
        self.pending_action.value = self._pending > 0

    def _fail(self, exc: Exception) -> None:
        if self._error_handler is not None:
            message = self._error_handler.handle(exc, context={"tab": self._tab.value, "page": self._page})
        else:
            message = str(exc) or exc.__class__.__name__
            self._logger.error("%s: %s", exc.__class__.__name__, message)
        self.last_error.value = message
        self.error_occurred.emit(message)
