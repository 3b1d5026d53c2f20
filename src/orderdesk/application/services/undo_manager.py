"""Single-slot undo for reversible bulk actions."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from orderdesk.config import UNDO_WINDOW_SEC
from orderdesk.domain.models import OrderPatch, TargetDescriptor
from orderdesk.errors import ValidationError

from .bulk_mutation_executor import BulkMutationExecutor, BulkMutationResult

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class UndoSnapshot:
    descriptor: TargetDescriptor
    inverse_patch: OrderPatch
    expires_at: float
    label: str = ""

    def expired(self, now: float) -> bool:
        return now >= self.expires_at


class UndoManager:
    """Hold at most one undo snapshot and apply it on request.

    Capturing replaces whatever was held before.  A snapshot is dropped
    after one successful commit or once its window has elapsed; a failed
    commit keeps it so the operator can retry while the window lasts.
    """

    def __init__(
        self,
        executor: BulkMutationExecutor,
        window_sec: float = UNDO_WINDOW_SEC,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._executor = executor
        self._window_sec = window_sec
        self._clock = clock
        self._snapshot: Optional[UndoSnapshot] = None
        self._lock = threading.Lock()

    @property
    def window_sec(self) -> float:
        return self._window_sec

    def capture(self, descriptor: TargetDescriptor, inverse_patch: OrderPatch, label: str = "") -> UndoSnapshot:
        snapshot = UndoSnapshot(
            descriptor=descriptor,
            inverse_patch=inverse_patch,
            expires_at=self._clock() + self._window_sec,
            label=label,
        )
        with self._lock:
            if self._snapshot is not None:
                LOGGER.debug("Discarding unused undo snapshot %r", self._snapshot.label)
            self._snapshot = snapshot
        return snapshot

    @property
    def current(self) -> Optional[UndoSnapshot]:
        with self._lock:
            if self._snapshot is not None and self._snapshot.expired(self._clock()):
                self._snapshot = None
            return self._snapshot

    @property
    def available(self) -> bool:
        return self.current is not None

    def seconds_left(self) -> float:
        snapshot = self.current
        if snapshot is None:
            return 0.0
        return max(0.0, snapshot.expires_at - self._clock())

    def discard(self) -> None:
        with self._lock:
            self._snapshot = None

    def commit(self, snapshot: Optional[UndoSnapshot] = None) -> BulkMutationResult:
        """Re-apply the inverse patch to the captured target set."""
        current = self.current
        if current is None:
            raise ValidationError("Nothing to undo")
        if snapshot is not None and snapshot is not current:
            raise ValidationError("Undo snapshot is no longer current")
        result = self._executor.apply(current.descriptor, current.inverse_patch)
        with self._lock:
            if self._snapshot is current:
                self._snapshot = None
        LOGGER.info("Undid %r on %d orders", current.label, result.affected_count)
        return result
