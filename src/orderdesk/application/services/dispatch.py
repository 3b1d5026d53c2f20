"""Execution seams for backend calls and delayed reloads.

View models never call the backend directly: they hand a callable to a
:class:`Dispatcher` and get the outcome back through callbacks on the UI
thread.  Reloads after realtime bursts go through a :class:`Debouncer`.
The Qt implementations live in :mod:`orderdesk.gui.services.qt_runtime`;
the ones here serve headless use (CLI, tests).
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Protocol

_logger = logging.getLogger(__name__)

SuccessCallback = Callable[[Any], None]
ErrorCallback = Callable[[Exception], None]


class Dispatcher(Protocol):
    def submit(
        self,
        fn: Callable[[], Any],
        on_success: SuccessCallback,
        on_error: ErrorCallback,
    ) -> None: ...


class ImmediateDispatcher:
    """Run the call inline and invoke the matching callback before returning."""

    def submit(
        self,
        fn: Callable[[], Any],
        on_success: SuccessCallback,
        on_error: ErrorCallback,
    ) -> None:
        try:
            result = fn()
        except Exception as exc:
            on_error(exc)
            return
        on_success(result)


class Debouncer(Protocol):
    def bind(self, callback: Callable[[], None]) -> None: ...

    def trigger(self) -> None: ...

    def cancel(self) -> None: ...

    @property
    def pending(self) -> bool: ...


class ManualDebouncer:
    """Debouncer whose quiet period ends when :meth:`flush` is called.

    Any number of triggers before a flush result in a single callback.
    """

    def __init__(self, callback: Optional[Callable[[], None]] = None) -> None:
        self._callback = callback
        self._pending = False
        self.trigger_count = 0

    def bind(self, callback: Callable[[], None]) -> None:
        self._callback = callback

    def trigger(self) -> None:
        self.trigger_count += 1
        self._pending = True

    def cancel(self) -> None:
        self._pending = False

    @property
    def pending(self) -> bool:
        return self._pending

    def flush(self) -> bool:
        """Fire the callback if a trigger is outstanding; return whether it fired."""
        if not self._pending:
            return False
        self._pending = False
        if self._callback is not None:
            self._callback()
        return True
