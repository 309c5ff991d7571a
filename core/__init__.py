"""Core simulation logic: store, idempotency, async completion, backpressure."""
from .backpressure import ConcurrencyCounter
from .container import ServiceContainer, build_container
from .devices import DeviceService
from .idempotency import IdempotencyGate
from .orders import OrderService
from .payments import PaymentGateway
from .simulator import CompletionSimulator
from .store import ResourceStore

__all__ = [
    "CompletionSimulator",
    "ConcurrencyCounter",
    "DeviceService",
    "IdempotencyGate",
    "OrderService",
    "PaymentGateway",
    "ResourceStore",
    "ServiceContainer",
    "build_container",
]
