"""
Pydantic schemas for API request/response models.

Device payloads use snake_case field names; payment order payloads use
camelCase on the wire.
"""
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from core.models import Device, PaymentOrder


class DeviceRequest(BaseModel):
    """Request schema for creating or fully updating a device."""

    id: Optional[str] = Field(default=None, description="Device ID (generated if omitted)")
    name: Optional[str] = Field(default=None, description="Device name")
    data: Optional[Dict[str, str]] = Field(default=None, description="Free-form device attributes")
    idempotency_key: Optional[str] = Field(
        default=None, description="Idempotency key (the Idempotency-Key header takes precedence)"
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "thermostat-kitchen",
                    "data": {"firmware": "1.4.2", "location": "kitchen"},
                    "idempotency_key": "k1",
                }
            ]
        }
    }

    def to_record(self) -> Device:
        device = Device(id=self.id, name=self.name, data=self.data)
        if self.idempotency_key:
            device.idempotency_key = self.idempotency_key
        return device


class DeviceResponse(BaseModel):
    """Response schema for a device."""

    id: Optional[str] = Field(default=None, description="Device ID")
    name: Optional[str] = Field(default=None, description="Device name")
    data: Optional[Dict[str, str]] = Field(default=None, description="Device attributes")
    created_at: datetime = Field(..., description="Creation timestamp (ISO 8601)")
    updated_at: datetime = Field(..., description="Last update timestamp (ISO 8601)")
    processing_status: str = Field(..., description="PENDING, PROCESSING, COMPLETED, FAILED")
    idempotency_key: str = Field(..., description="Idempotency key")

    @classmethod
    def from_record(cls, device: Device) -> "DeviceResponse":
        return cls(
            id=device.id,
            name=device.name,
            data=device.data,
            created_at=device.created_at,
            updated_at=device.updated_at,
            processing_status=device.status_value,
            idempotency_key=device.idempotency_key,
        )


class DeviceStatusResponse(BaseModel):
    """Status snapshot of a device."""

    id: str
    status: str
    isComplete: bool
    lastUpdated: datetime


class OrderRequest(BaseModel):
    """Request schema for creating a payment order."""

    order_id: Optional[str] = Field(default=None, alias="orderId", description="Order ID (required)")
    customer_email: Optional[str] = Field(default=None, alias="customerEmail")
    amount: float = Field(default=0.0, description="Payment amount")
    currency: Optional[str] = Field(default=None, description="Currency code")
    payment_method: Optional[str] = Field(default=None, alias="paymentMethod")
    metadata: Optional[Dict[str, str]] = Field(default=None)
    timestamp: Optional[datetime] = Field(default=None, description="Client timestamp")
    idempotency_key: Optional[str] = Field(default=None, alias="idempotencyKey")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "orderId": "order-1a2b3c4d",
                    "customerEmail": "john.doe@example.com",
                    "amount": 150.75,
                    "currency": "USD",
                    "paymentMethod": "CREDIT_CARD",
                }
            ]
        },
    )

    def to_record(self) -> PaymentOrder:
        return PaymentOrder(
            order_id=self.order_id,
            customer_email=self.customer_email,
            amount=self.amount,
            currency=self.currency,
            payment_method=self.payment_method,
            metadata=self.metadata,
            timestamp=self.timestamp,
            idempotency_key=self.idempotency_key,
        )


class OrderResponse(BaseModel):
    """Response schema for a payment order."""

    order_id: str = Field(..., alias="orderId")
    job_id: Optional[str] = Field(default=None, alias="jobId")
    customer_email: Optional[str] = Field(default=None, alias="customerEmail")
    amount: float
    currency: Optional[str] = None
    payment_method: Optional[str] = Field(default=None, alias="paymentMethod")
    status: str
    metadata: Optional[Dict[str, str]] = None
    timestamp: Optional[datetime] = None
    processed_at: Optional[datetime] = Field(default=None, alias="processedAt")
    idempotency_key: Optional[str] = Field(default=None, alias="idempotencyKey")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_record(cls, order: PaymentOrder) -> "OrderResponse":
        return cls(
            order_id=order.order_id,
            job_id=order.job_id,
            customer_email=order.customer_email,
            amount=order.amount,
            currency=order.currency,
            payment_method=order.payment_method,
            status=order.status_value,
            metadata=order.metadata,
            timestamp=order.timestamp,
            processed_at=order.processed_at,
            idempotency_key=order.idempotency_key,
        )


class OrderStatusResponse(BaseModel):
    """Status snapshot of a payment order."""

    orderId: str
    jobId: str
    status: str
    processedAt: Optional[datetime] = None
    paymentResult: Dict[str, str]


class PaymentAcceptedResponse(BaseModel):
    """Response schema for an accepted v1 payment."""

    orderId: str
    jobId: str
    status: str
    message: str
    timestamp: datetime


class PaymentMetricsResponse(BaseModel):
    """Backpressure counter snapshot."""

    currentRequests: int
    maxConcurrentRequests: int


class MessageResponse(BaseModel):
    """Plain message body, also used for errors."""

    message: str


class RateLimitResponse(MessageResponse):
    """Body of a 429 response."""

    retryAfter: int
    currentRequests: int


class HealthCheckResponse(BaseModel):
    """Response schema for health checks."""

    status: str = Field(..., description="Overall health status (healthy/unhealthy)")
    checks: Optional[Dict[str, Any]] = Field(default=None, description="Individual service checks")
    message: Optional[str] = Field(default=None, description="Status message")
