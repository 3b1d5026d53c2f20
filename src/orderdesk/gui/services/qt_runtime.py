"""Qt implementations of the dispatch and debounce seams.

``QtDispatcher`` runs backend calls on a ``QThreadPool`` and delivers the
results back on the thread that owns the dispatcher (the GUI thread), so
view models never see callbacks from a worker thread.  ``QtDebouncer`` is
a restartable single-shot ``QTimer``.  ``QtChangeRelay`` moves realtime
notifications published on worker threads onto the GUI thread.
"""

from __future__ import annotations

import itertools
import logging
from typing import Any, Callable, Dict, Optional, Tuple

from PySide6.QtCore import QObject, QRunnable, QThreadPool, QTimer, Signal, Slot

from orderdesk.application.services.dispatch import ErrorCallback, SuccessCallback
from orderdesk.config import RECONCILE_DEBOUNCE_MS

_logger = logging.getLogger(__name__)


class _CallSignals(QObject):
    succeeded = Signal(int, object)
    failed = Signal(int, object)


class _CallWorker(QRunnable):
    def __init__(self, call_id: int, fn: Callable[[], Any], signals: _CallSignals) -> None:
        super().__init__()
        self._call_id = call_id
        self._fn = fn
        self.signals = signals

    def run(self) -> None:
        try:
            result = self._fn()
        except Exception as exc:
            _logger.debug("Background call #%d raised %s", self._call_id, exc)
            self.signals.failed.emit(self._call_id, exc)
            return
        self.signals.succeeded.emit(self._call_id, result)


class QtDispatcher(QObject):
    """Run calls on a thread pool and resume on the dispatcher's thread."""

    def __init__(self, thread_pool: Optional[QThreadPool] = None, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._pool = thread_pool or QThreadPool.globalInstance()
        self._signals = _CallSignals(self)
        self._signals.succeeded.connect(self._on_succeeded)
        self._signals.failed.connect(self._on_failed)
        self._callbacks: Dict[int, Tuple[SuccessCallback, ErrorCallback]] = {}
        self._ids = itertools.count(1)

    def submit(
        self,
        fn: Callable[[], Any],
        on_success: SuccessCallback,
        on_error: ErrorCallback,
    ) -> None:
        call_id = next(self._ids)
        self._callbacks[call_id] = (on_success, on_error)
        self._pool.start(_CallWorker(call_id, fn, self._signals))

    def is_busy(self) -> bool:
        return bool(self._callbacks)

    def wait_for_done(self, msecs: int = -1) -> bool:
        return self._pool.waitForDone(msecs)

    @Slot(int, object)
    def _on_succeeded(self, call_id: int, result: object) -> None:
        callbacks = self._callbacks.pop(call_id, None)
        if callbacks is not None:
            callbacks[0](result)

    @Slot(int, object)
    def _on_failed(self, call_id: int, exc: object) -> None:
        callbacks = self._callbacks.pop(call_id, None)
        if callbacks is not None:
            callbacks[1](exc)


class QtDebouncer(QObject):
    """Fire the bound callback once the trigger stream has been quiet for ``interval_ms``."""

    def __init__(
        self,
        interval_ms: int = RECONCILE_DEBOUNCE_MS,
        callback: Optional[Callable[[], None]] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._callback = callback
        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(max(0, int(interval_ms)))
        self._timer.timeout.connect(self._fire)

    def bind(self, callback: Callable[[], None]) -> None:
        self._callback = callback

    def trigger(self) -> None:
        # start() on an active timer restarts the quiet period
        self._timer.start()

    def cancel(self) -> None:
        self._timer.stop()

    @property
    def pending(self) -> bool:
        return self._timer.isActive()

    @property
    def interval_ms(self) -> int:
        return self._timer.interval()

    @Slot()
    def _fire(self) -> None:
        if self._callback is not None:
            self._callback()


class QtChangeRelay(QObject):
    """``post`` callable for :class:`~orderdesk.infrastructure.realtime.OrderChangeFeed`.

    Callables posted from any thread run on the relay's thread, in the
    order they were posted.
    """

    _invoke = Signal(object)

    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._invoke.connect(self._run)

    def post(self, fn: Callable[[], None]) -> None:
        self._invoke.emit(fn)

    @Slot(object)
    def _run(self, fn: Callable[[], None]) -> None:
        fn()


def start_undo_expiry_timer(view_model, interval_ms: int = 500, parent: Optional[QObject] = None) -> QTimer:
    """Poll the view model's undo slot so the affordance disappears when it expires."""
    timer = QTimer(parent)
    timer.setInterval(interval_ms)
    timer.timeout.connect(view_model.refresh_undo_state)
    timer.start()
    return timer


def create_qt_order_list_view_model(container, tab=None, parent: Optional[QObject] = None):
    """Build the list view model on Qt dispatch with the configured debounce interval.

    ``container`` must have gone through :func:`orderdesk.di.bootstrap`.
    """
    from orderdesk.di.bootstrap import DeskPreferences, create_order_list_view_model

    preferences = container.resolve(DeskPreferences)
    return create_order_list_view_model(
        container,
        dispatcher=QtDispatcher(parent=parent),
        debouncer=QtDebouncer(interval_ms=preferences.debounce_ms, parent=parent),
        tab=tab,
    )
