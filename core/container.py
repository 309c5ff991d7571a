"""
Service container.

Builds the explicitly owned process state (stores, simulators, gates, the
backpressure counter) from settings. The API attaches one container to the
application instead of relying on module globals.
"""
from dataclasses import dataclass
from typing import Optional

import structlog

from config import Settings
from core.backpressure import ConcurrencyCounter
from core.devices import DeviceService
from core.idempotency import IdempotencyGate
from core.models import Device, PaymentOrder
from core.orders import OrderService
from core.payments import PaymentGateway
from core.policy import OutcomePolicy, device_policy, order_policy
from core.simulator import CompletionSimulator
from core.store import ResourceStore

logger = structlog.get_logger(__name__)


@dataclass
class ServiceContainer:
    """All services sharing one process lifetime."""

    devices: DeviceService
    orders: OrderService
    payments: PaymentGateway

    @property
    def simulators(self) -> tuple[CompletionSimulator, CompletionSimulator]:
        return self.devices.simulator, self.orders.simulator

    async def shutdown(self) -> None:
        """Cancel pending simulated work and release backpressure slots."""
        for simulator in self.simulators:
            await simulator.shutdown()
        self.payments.counter.close()
        logger.info("service_container_shutdown")


def build_container(
    settings: Settings,
    device_outcomes: Optional[OutcomePolicy] = None,
    order_outcomes: Optional[OutcomePolicy] = None,
) -> ServiceContainer:
    """
    Wire services from settings.

    Args:
        settings: Application settings
        device_outcomes: Optional policy override for devices (tests)
        order_outcomes: Optional policy override for orders (tests)

    Returns:
        ServiceContainer: Ready-to-use services
    """
    device_store: ResourceStore[Device] = ResourceStore(Device.kind)
    device_simulator = CompletionSimulator(
        device_store,
        device_outcomes
        or device_policy(
            settings.device_min_delay_seconds,
            settings.device_max_delay_seconds,
            settings.device_failure_rate,
        ),
        deletion_delay_seconds=settings.deletion_delay_seconds,
    )
    device_gate = IdempotencyGate(
        device_store, device_simulator, stale_is_miss=settings.stale_idempotency_is_miss
    )

    order_store: ResourceStore[PaymentOrder] = ResourceStore(PaymentOrder.kind)
    order_simulator = CompletionSimulator(
        order_store,
        order_outcomes
        or order_policy(
            settings.order_min_delay_seconds,
            settings.order_max_delay_seconds,
            settings.order_failure_rate,
        ),
        deletion_delay_seconds=settings.deletion_delay_seconds,
    )
    order_gate = IdempotencyGate(
        order_store, order_simulator, stale_is_miss=settings.stale_idempotency_is_miss
    )

    counter = ConcurrencyCounter(
        max_concurrent=settings.max_concurrent_requests,
        release_seconds=settings.backpressure_release_seconds,
    )

    logger.info(
        "service_container_built",
        max_concurrent_requests=settings.max_concurrent_requests,
        stale_idempotency_is_miss=settings.stale_idempotency_is_miss,
    )

    return ServiceContainer(
        devices=DeviceService(device_store, device_simulator, device_gate),
        orders=OrderService(order_store, order_simulator, order_gate),
        payments=PaymentGateway(counter, settings.rate_limit_retry_after_seconds),
    )
