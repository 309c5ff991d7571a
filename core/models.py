"""
Domain records for simulated asynchronous resources.

Two record kinds share one lifecycle: created in an in-flight state, flipped
to a terminal state by the completion simulator, re-entered into PROCESSING
by user updates.
"""
import random
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProcessingStatus(str, Enum):
    """Device processing status."""

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


class OrderStatus(str, Enum):
    """Payment order status."""

    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


TERMINAL_STATUSES = frozenset({"COMPLETED", "FAILED"})


def generate_device_id() -> str:
    """Format: device-{unix_millis}-{1000..9999}"""
    return f"device-{int(time.time() * 1000)}-{random.randint(1000, 9999)}"


def generate_job_id(prefix: str = "job-", length: int = 12) -> str:
    return prefix + str(uuid.uuid4())[:length]


@dataclass
class Device:
    """
    Device record.

    ``updated_at`` is refreshed whenever name, data or status change.
    """

    id: Optional[str] = None
    name: Optional[str] = None
    data: Optional[Dict[str, str]] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    processing_status: ProcessingStatus = ProcessingStatus.PENDING
    idempotency_key: str = field(default_factory=lambda: str(uuid.uuid4()))

    kind = "Device"

    @property
    def resource_id(self) -> Optional[str]:
        return self.id

    def assign_id(self) -> None:
        if not self.id:
            self.id = generate_device_id()

    def set_name(self, name: str) -> None:
        self.name = name
        self.updated_at = utcnow()

    def set_data(self, data: Dict[str, str]) -> None:
        self.data = data
        self.updated_at = utcnow()

    def set_status(self, status: ProcessingStatus) -> None:
        self.processing_status = status
        self.updated_at = utcnow()

    def mark_in_flight(self) -> None:
        self.set_status(ProcessingStatus.PROCESSING)

    def mark_completed(self) -> None:
        self.set_status(ProcessingStatus.COMPLETED)

    def mark_failed(self) -> None:
        self.set_status(ProcessingStatus.FAILED)

    @property
    def status_value(self) -> str:
        return self.processing_status.value

    @property
    def is_processing_complete(self) -> bool:
        return self.processing_status.value in TERMINAL_STATUSES


@dataclass
class PaymentOrder:
    """
    Payment order record, keyed by the caller-supplied ``order_id``.

    ``transaction_id`` is fixed when the simulator completes the order so
    repeated status reads report the same value.
    """

    order_id: Optional[str] = None
    job_id: Optional[str] = None
    customer_email: Optional[str] = None
    amount: float = 0.0
    currency: Optional[str] = None
    payment_method: Optional[str] = None
    status: OrderStatus = OrderStatus.PENDING
    metadata: Optional[Dict[str, str]] = None
    timestamp: Optional[datetime] = None
    processed_at: Optional[datetime] = None
    idempotency_key: Optional[str] = None
    transaction_id: Optional[str] = None

    kind = "Order"

    @property
    def resource_id(self) -> Optional[str]:
        return self.order_id

    def assign_id(self) -> None:
        # Orders are keyed by the caller's orderId; only the job id is generated.
        if not self.job_id:
            self.job_id = generate_job_id()
        if self.timestamp is None:
            self.timestamp = utcnow()

    def set_status(self, status: OrderStatus) -> None:
        self.status = status

    def mark_in_flight(self) -> None:
        self.set_status(OrderStatus.ACCEPTED)

    def mark_completed(self) -> None:
        self.set_status(OrderStatus.COMPLETED)
        self.processed_at = utcnow()
        self.transaction_id = generate_job_id(prefix="txn-")

    def mark_failed(self) -> None:
        self.set_status(OrderStatus.FAILED)

    @property
    def status_value(self) -> str:
        return self.status.value

    @property
    def is_processing_complete(self) -> bool:
        return self.status.value in TERMINAL_STATUSES

    def payment_result(self) -> Dict[str, str]:
        if self.status == OrderStatus.COMPLETED:
            return {"status": "SUCCESS", "transactionId": self.transaction_id or ""}
        if self.status == OrderStatus.FAILED:
            return {"status": "FAILED"}
        return {"status": "PENDING"}
