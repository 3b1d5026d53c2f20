from .base import UseCase, UseCaseRequest, UseCaseResponse
from .bulk_actions import (
    ApplyBulkActionUseCase,
    BulkActionKind,
    BulkActionRequest,
    BulkActionResponse,
    empty_trash_target,
    require_confirmation,
)
from .open_order import OpenOrderRequest, OpenOrderResponse, OpenOrderUseCase
from .undo_action import UndoLastActionUseCase, UndoRequest

__all__ = [
    "ApplyBulkActionUseCase",
    "BulkActionKind",
    "BulkActionRequest",
    "BulkActionResponse",
    "OpenOrderRequest",
    "OpenOrderResponse",
    "OpenOrderUseCase",
    "UndoLastActionUseCase",
    "UndoRequest",
    "UseCase",
    "UseCaseRequest",
    "UseCaseResponse",
    "empty_trash_target",
    "require_confirmation",
]
