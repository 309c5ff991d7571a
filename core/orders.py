"""Payment order service."""
from typing import Any, Dict, List, Optional, Tuple

import structlog

from core.exceptions import OrderValidationError, ResourceNotFoundError
from core.idempotency import IdempotencyGate
from core.models import PaymentOrder
from core.simulator import CompletionSimulator
from core.store import ResourceStore

logger = structlog.get_logger(__name__)


class OrderService:
    """
    Accepts payment orders and simulates their processing.

    Orders are deduplicated twice: by idempotency key through the gate, and by
    ``orderId`` itself, which is the store key.
    """

    def __init__(
        self,
        store: ResourceStore[PaymentOrder],
        simulator: CompletionSimulator,
        gate: IdempotencyGate,
    ):
        self.store = store
        self.simulator = simulator
        self.gate = gate

    @staticmethod
    def _validate(order: PaymentOrder) -> None:
        if not order.order_id:
            raise OrderValidationError("orderId is required")

    def _require(self, order_id: str) -> PaymentOrder:
        order = self.store.get(order_id)
        if order is None:
            raise ResourceNotFoundError(PaymentOrder.kind, order_id)
        return order

    def create_order(
        self, order: PaymentOrder, idempotency_key: Optional[str] = None
    ) -> Tuple[PaymentOrder, bool]:
        """
        Accept an order for asynchronous processing.

        Args:
            order: Incoming order
            idempotency_key: Header-supplied key; falls back to ``order.idempotency_key``

        Returns:
            Tuple of (order, was_existing)

        Raises:
            OrderValidationError: If ``orderId`` is missing
        """
        self._validate(order)
        if idempotency_key:
            order.idempotency_key = idempotency_key

        with self.store.lock:
            existing, seen = self.gate.check(order.idempotency_key)
            if seen:
                return existing, True

            existing = self.store.get(order.order_id)
            if existing is not None:
                logger.info("order_duplicate_order_id", order_id=order.order_id, job_id=existing.job_id)
                return existing, True

            created, was_existing = self.gate.create(order, order.idempotency_key)

        logger.info(
            "order_accepted",
            order_id=created.order_id,
            job_id=created.job_id,
            amount=created.amount,
            currency=created.currency,
        )
        return created, was_existing

    def list_orders(self) -> List[PaymentOrder]:
        return self.store.values()

    def get_order(self, order_id: str) -> PaymentOrder:
        return self._require(order_id)

    def get_status(self, order_id: str) -> Dict[str, Any]:
        order = self._require(order_id)
        return {
            "orderId": order.order_id,
            "jobId": order.job_id or "",
            "status": order.status_value,
            "processedAt": order.processed_at,
            "paymentResult": order.payment_result(),
        }

    def clear(self) -> None:
        self.store.clear()
