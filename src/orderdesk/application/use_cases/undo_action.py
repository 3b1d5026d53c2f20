import logging
from dataclasses import dataclass
from typing import Optional

from .base import UseCase, UseCaseRequest
from .bulk_actions import BulkActionResponse, failure
from orderdesk.application.services.undo_manager import UndoManager, UndoSnapshot
from orderdesk.errors import PartialBulkFailure, TransportError, ValidationError


@dataclass(frozen=True)
class UndoRequest(UseCaseRequest):
    # None means "whatever the undo slot currently holds"
    snapshot: Optional[UndoSnapshot] = None


class UndoLastActionUseCase(UseCase):
    def __init__(self, undo: UndoManager):
        self._undo = undo
        self._logger = logging.getLogger(__name__)

    def execute(self, request: UndoRequest) -> BulkActionResponse:
        try:
            result = self._undo.commit(request.snapshot)
        except (ValidationError, TransportError, PartialBulkFailure) as exc:
            self._logger.warning("Undo failed: %s", exc)
            return failure(exc)
        return BulkActionResponse(
            success=True,
            affected_ids=result.affected_ids,
            descriptor=result.descriptor,
        )
