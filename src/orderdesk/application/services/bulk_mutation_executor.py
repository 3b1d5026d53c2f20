"""Filter-scoped bulk mutations.

A selection is never expanded into ids on the client: ``Explicit(ids)``
becomes ``id IN ids`` and ``AllInTab(tab, excluded)`` becomes the tab
predicate plus ``id NOT IN excluded``.  Each call is one statement against
the backend, so the whole matched set is the unit of success or failure.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import FrozenSet, Union

from orderdesk.domain.models import OrderPatch, OrderStatus, TargetDescriptor
from orderdesk.domain.models.selection import Selection
from orderdesk.domain.models.tabs import Predicate
from orderdesk.domain.repositories import IOrderRepository
from orderdesk.errors import ValidationError

LOGGER = logging.getLogger(__name__)

Target = Union[Selection, TargetDescriptor]


@dataclass(frozen=True)
class BulkMutationResult:
    """Outcome of a committed bulk call.

    ``descriptor`` is the original descriptor pinned to ``affected_ids``.
    """

    descriptor: TargetDescriptor
    affected_ids: FrozenSet[str] = field(default_factory=frozenset)
    success: bool = True

    @property
    def affected_count(self) -> int:
        return len(self.affected_ids)


def as_descriptor(target: Target) -> TargetDescriptor:
    if isinstance(target, TargetDescriptor):
        return target
    return TargetDescriptor.of(target)


def validate_patch(patch: OrderPatch) -> None:
    fields = patch.fields()
    if not fields:
        raise ValidationError("Patch does not change anything")
    if "status" in fields:
        try:
            OrderStatus(fields["status"])
        except ValueError:
            raise ValidationError(f"Unknown status: {fields['status']!r}") from None
    if "is_read" in fields and not isinstance(fields["is_read"], bool):
        raise ValidationError("is_read must be a boolean")
    if "deleted_at" in fields and fields["deleted_at"] is not None and not isinstance(fields["deleted_at"], datetime):
        raise ValidationError("deleted_at must be a datetime or None")


class BulkMutationExecutor:
    def __init__(self, repository: IOrderRepository) -> None:
        self._repository = repository

    def translate(self, target: Target) -> Predicate:
        """Translate a selection or descriptor into the shared filter form."""
        descriptor = as_descriptor(target)
        if descriptor.is_pinned:
            if not descriptor.pinned_ids:
                raise ValidationError("Nothing to apply: the captured target is empty")
        elif descriptor.selection.is_empty:
            raise ValidationError("Nothing selected")
        return descriptor.to_predicate()

    def apply(self, target: Target, patch: OrderPatch) -> BulkMutationResult:
        """Patch every order implied by *target* in a single backend call.

        Validation happens before anything is sent.  Backend failures
        (``TransportError``, ``PartialBulkFailure``) propagate unchanged.
        """
        validate_patch(patch)
        descriptor = as_descriptor(target)
        predicate = self.translate(descriptor)
        updated = self._repository.bulk_patch(predicate, patch)
        affected = frozenset(order.id for order in updated)
        LOGGER.info("Bulk patch %s applied to %d orders", sorted(patch.fields()), len(affected))
        return BulkMutationResult(descriptor=descriptor.pin(affected), affected_ids=affected)

    def delete(self, target: Target) -> BulkMutationResult:
        """Hard-delete every order implied by *target*.

        The typed confirmation is checked by the caller before this is
        invoked; it is not re-verified here.
        """
        descriptor = as_descriptor(target)
        predicate = self.translate(descriptor)
        deleted = frozenset(self._repository.bulk_delete(predicate))
        LOGGER.warning("Permanently deleted %d orders", len(deleted))
        return BulkMutationResult(descriptor=descriptor.pin(deleted), affected_ids=deleted)
