import logging
from dataclasses import dataclass
from typing import Optional

from .base import UseCase, UseCaseRequest, UseCaseResponse
from orderdesk.application.services.bulk_mutation_executor import BulkMutationExecutor
from orderdesk.domain.models import ExplicitSelection, Order, OrderPatch
from orderdesk.domain.repositories import IOrderRepository
from orderdesk.errors import OrderNotFoundError


@dataclass(frozen=True)
class OpenOrderRequest(UseCaseRequest):
    order_id: str = ""


@dataclass(frozen=True)
class OpenOrderResponse(UseCaseResponse):
    order: Optional[Order] = None


class OpenOrderUseCase(UseCase):
    """Load one order for the preview pane and mark it read on first open."""

    def __init__(self, repository: IOrderRepository, executor: BulkMutationExecutor):
        self._repository = repository
        self._executor = executor
        self._logger = logging.getLogger(__name__)

    def execute(self, request: OpenOrderRequest) -> OpenOrderResponse:
        order = self._repository.get(request.order_id)
        if order is None:
            error = OrderNotFoundError(f"Order {request.order_id} not found")
            return OpenOrderResponse(success=False, error=str(error), error_kind=type(error).__name__)

        if not order.is_read:
            patch = OrderPatch.mark_read(True)
            self._executor.apply(ExplicitSelection(frozenset({order.id})), patch)
            order = patch.apply_to(order)
            self._logger.info("Marked order %s read on open", order.id)
        return OpenOrderResponse(success=True, order=order)
