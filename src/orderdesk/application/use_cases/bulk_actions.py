import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, FrozenSet, Optional

from .base import UseCase, UseCaseRequest, UseCaseResponse
from orderdesk.application.services.bulk_mutation_executor import BulkMutationExecutor
from orderdesk.application.services.undo_manager import UndoManager, UndoSnapshot
from orderdesk.config import HARD_DELETE_CONFIRMATION, TRASH_RETENTION_DAYS
from orderdesk.domain.models import (
    AllInTabSelection,
    OrderPatch,
    OrderStatus,
    Predicate,
    Tab,
    TargetDescriptor,
    utc_now,
)
from orderdesk.errors import (
    ConfirmationRequiredError,
    OrderDeskError,
    PartialBulkFailure,
    TransportError,
    ValidationError,
)
from orderdesk.events.bus import EventBus
from orderdesk.events.order_events import BulkMutationCommittedEvent


class BulkActionKind(str, Enum):
    SET_STATUS = "set_status"
    MOVE_TO_TRASH = "move_to_trash"
    RESTORE = "restore"
    MARK_READ = "mark_read"
    MARK_UNREAD = "mark_unread"
    DELETE_PERMANENTLY = "delete_permanently"
    EMPTY_TRASH = "empty_trash"

    @property
    def is_hard_delete(self) -> bool:
        return self in (BulkActionKind.DELETE_PERMANENTLY, BulkActionKind.EMPTY_TRASH)


def require_confirmation(token: Optional[str]) -> None:
    """Gate for hard deletes: the operator must type the literal exactly."""
    if token != HARD_DELETE_CONFIRMATION:
        raise ConfirmationRequiredError(
            f"Type {HARD_DELETE_CONFIRMATION} to delete permanently"
        )


def empty_trash_target(older_than_days: Optional[int] = None, now: Optional[datetime] = None) -> TargetDescriptor:
    target = TargetDescriptor.of(AllInTabSelection(tab=Tab.TRASH))
    if older_than_days is None:
        return target
    if older_than_days < 0:
        raise ValidationError("older_than_days must not be negative")
    cutoff = (now or utc_now()) - timedelta(days=older_than_days)
    return target.narrowed(Predicate().deleted_before(cutoff))


@dataclass(frozen=True)
class BulkActionRequest(UseCaseRequest):
    kind: BulkActionKind = BulkActionKind.MARK_READ
    target: Optional[TargetDescriptor] = None
    status: Optional[OrderStatus] = None
    confirmation: Optional[str] = None
    older_than_days: Optional[int] = None
    expired_only: bool = False


@dataclass(frozen=True)
class BulkActionResponse(UseCaseResponse):
    kind: Optional[BulkActionKind] = None
    affected_ids: FrozenSet[str] = field(default_factory=frozenset)
    descriptor: Optional[TargetDescriptor] = None
    undo: Optional[UndoSnapshot] = None
    exception: Optional[Exception] = field(default=None, compare=False, repr=False)

    @property
    def affected_count(self) -> int:
        return len(self.affected_ids)


def failure(error: OrderDeskError, kind: Optional[BulkActionKind] = None) -> BulkActionResponse:
    return BulkActionResponse(
        success=False,
        error=str(error),
        error_kind=type(error).__name__,
        retryable=isinstance(error, TransportError),
        kind=kind,
        exception=error,
    )


class ApplyBulkActionUseCase(UseCase):
    """Run one bulk action end to end.

    Starting an action discards any pending undo.  Reversible actions that
    touched at least one order leave a fresh undo snapshot behind.
    """

    def __init__(
        self,
        executor: BulkMutationExecutor,
        undo: UndoManager,
        event_bus: Optional[EventBus] = None,
        clock: Callable[[], datetime] = utc_now,
        retention_days: int = TRASH_RETENTION_DAYS,
    ):
        self._executor = executor
        self._undo = undo
        self._events = event_bus
        self._clock = clock
        self._retention_days = retention_days
        self._logger = logging.getLogger(__name__)

    def execute(self, request: BulkActionRequest) -> BulkActionResponse:
        kind = request.kind
        inverse = None
        self._undo.discard()
        try:
            if kind.is_hard_delete:
                require_confirmation(request.confirmation)
            if kind is BulkActionKind.EMPTY_TRASH:
                result = self._executor.delete(empty_trash_target(self._purge_age(request), self._clock()))
            elif request.target is None:
                raise ValidationError("Nothing selected")
            elif kind is BulkActionKind.DELETE_PERMANENTLY:
                result = self._executor.delete(request.target)
            else:
                patch, inverse = self._patches(request)
                result = self._executor.apply(request.target, patch)
        except (ValidationError, TransportError, PartialBulkFailure) as exc:
            self._logger.warning("Bulk action %s failed: %s", kind.value, exc)
            return failure(exc, kind)

        undo = None
        if inverse is not None and result.affected_ids:
            undo = self._undo.capture(result.descriptor, inverse, label=kind.value)

        if self._events is not None:
            self._events.publish(BulkMutationCommittedEvent(
                action=kind.value,
                affected_ids=result.affected_ids,
                undoable=undo is not None,
                source="bulk_action",
            ))
        self._logger.info("Bulk action %s affected %d orders", kind.value, result.affected_count)
        return BulkActionResponse(
            success=True,
            kind=kind,
            affected_ids=result.affected_ids,
            descriptor=result.descriptor,
            undo=undo,
        )

    def _purge_age(self, request: BulkActionRequest) -> Optional[int]:
        """Days a trashed order must have waited; ``expired_only`` falls back to the retention period."""
        if request.older_than_days is None and request.expired_only:
            return self._retention_days
        return request.older_than_days

    def _patches(self, request: BulkActionRequest):
        """Return ``(patch, inverse)``; ``inverse`` is None when no undo exists."""
        kind = request.kind
        if kind is BulkActionKind.SET_STATUS:
            if request.status is None:
                raise ValidationError("A target status is required")
            return OrderPatch.set_status(request.status), None
        if kind is BulkActionKind.MOVE_TO_TRASH:
            return OrderPatch.soft_delete(self._clock()), OrderPatch.restore()
        if kind is BulkActionKind.RESTORE:
            # Re-trashing stamps a new deletion time; the old one is not kept
            return OrderPatch.restore(), OrderPatch.soft_delete(self._clock())
        if kind is BulkActionKind.MARK_READ:
            return OrderPatch.mark_read(True), OrderPatch.mark_read(False)
        if kind is BulkActionKind.MARK_UNREAD:
            return OrderPatch.mark_read(False), OrderPatch.mark_read(True)
        raise ValidationError(f"Unsupported bulk action: {kind.value}")
