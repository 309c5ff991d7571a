"""
API routes for devices, payment orders and the backpressure-gated payments API.
"""
from typing import Any, Dict, List, Optional

import structlog
from fastapi import APIRouter, Body, Depends, Header, HTTPException, Request, Response, status
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from core.container import ServiceContainer
from monitoring.health import HealthCheck

from .schemas import (
    DeviceRequest,
    DeviceResponse,
    DeviceStatusResponse,
    HealthCheckResponse,
    MessageResponse,
    OrderRequest,
    OrderResponse,
    OrderStatusResponse,
    PaymentAcceptedResponse,
    PaymentMetricsResponse,
    RateLimitResponse,
)

logger = structlog.get_logger(__name__)

REPLAY_HEADER = "Idempotent-Replayed"

# Create routers
device_router = APIRouter(prefix="/devices", tags=["devices"])
order_router = APIRouter(prefix="/orders", tags=["orders"])
payment_router = APIRouter(prefix="/api/v1/payments", tags=["payments"])
monitoring_router = APIRouter(tags=["monitoring"])

NOT_FOUND = {404: {"model": MessageResponse}}


def get_container(request: Request) -> ServiceContainer:
    """Service container attached to the running application."""
    return request.app.state.container


def get_health_check(container: ServiceContainer = Depends(get_container)) -> HealthCheck:
    return HealthCheck(container)


# ---------------------------------------------------------------------------
# Devices
# ---------------------------------------------------------------------------


@device_router.get("", response_model=List[DeviceResponse], summary="List devices")
async def list_devices(container: ServiceContainer = Depends(get_container)) -> List[DeviceResponse]:
    return [DeviceResponse.from_record(d) for d in container.devices.list_devices()]


@device_router.post(
    "",
    response_model=DeviceResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Create a device",
    description="Create a device asynchronously. Repeating a request with the same "
    "idempotency key returns the device the first request created.",
)
async def create_device(
    request: DeviceRequest,
    response: Response,
    idempotency_key: Optional[str] = Header(default=None, alias="Idempotency-Key"),
    container: ServiceContainer = Depends(get_container),
) -> DeviceResponse:
    device, was_existing = container.devices.create_device(request.to_record(), idempotency_key)
    if was_existing:
        response.headers[REPLAY_HEADER] = "true"
    return DeviceResponse.from_record(device)


# Registered before "/{device_id}" so "_test" is never read as a device id.
@device_router.delete(
    "/_test/cleanup",
    response_model=MessageResponse,
    summary="Clear all devices (test only)",
)
async def cleanup_devices(container: ServiceContainer = Depends(get_container)) -> Dict[str, str]:
    container.devices.clear()
    return {"message": "All devices cleared"}


@device_router.get(
    "/{device_id}", response_model=DeviceResponse, responses=NOT_FOUND, summary="Get a device"
)
async def get_device(
    device_id: str, container: ServiceContainer = Depends(get_container)
) -> DeviceResponse:
    return DeviceResponse.from_record(container.devices.get_device(device_id))


@device_router.put(
    "/{device_id}",
    response_model=DeviceResponse,
    status_code=status.HTTP_202_ACCEPTED,
    responses=NOT_FOUND,
    summary="Update a device",
)
async def update_device(
    device_id: str,
    request: DeviceRequest,
    container: ServiceContainer = Depends(get_container),
) -> DeviceResponse:
    device = container.devices.update_device(device_id, name=request.name, data=request.data)
    return DeviceResponse.from_record(device)


@device_router.patch(
    "/{device_id}",
    response_model=DeviceResponse,
    status_code=status.HTTP_202_ACCEPTED,
    responses=NOT_FOUND,
    summary="Partially update a device",
    description="Only `name` and `data` are applied; other keys are ignored.",
)
async def patch_device(
    device_id: str,
    updates: Dict[str, Any] = Body(...),
    container: ServiceContainer = Depends(get_container),
) -> DeviceResponse:
    device = container.devices.patch_device(device_id, updates)
    return DeviceResponse.from_record(device)


@device_router.delete(
    "/{device_id}",
    response_model=MessageResponse,
    responses=NOT_FOUND,
    summary="Delete a device",
    description="Deletion is simulated and takes effect after a fixed delay.",
)
async def delete_device(
    device_id: str, container: ServiceContainer = Depends(get_container)
) -> Dict[str, str]:
    container.devices.delete_device(device_id)
    return {"message": f"Device deletion initiated for id = {device_id}"}


@device_router.get(
    "/{device_id}/status",
    response_model=DeviceStatusResponse,
    responses=NOT_FOUND,
    summary="Get device processing status",
)
async def get_device_status(
    device_id: str, container: ServiceContainer = Depends(get_container)
) -> Dict[str, Any]:
    return container.devices.get_status(device_id)


# ---------------------------------------------------------------------------
# Payment orders
# ---------------------------------------------------------------------------


@order_router.get("", response_model=List[OrderResponse], summary="List orders")
async def list_orders(container: ServiceContainer = Depends(get_container)) -> List[OrderResponse]:
    return [OrderResponse.from_record(o) for o in container.orders.list_orders()]


@order_router.post(
    "",
    response_model=OrderResponse,
    status_code=status.HTTP_202_ACCEPTED,
    responses={400: {"model": MessageResponse}},
    summary="Create a payment order",
    description="Accept an order for asynchronous processing. Duplicate orderIds and "
    "repeated idempotency keys return the existing order.",
)
async def create_order(
    request: OrderRequest,
    response: Response,
    idempotency_key: Optional[str] = Header(default=None, alias="Idempotency-Key"),
    container: ServiceContainer = Depends(get_container),
) -> OrderResponse:
    order, was_existing = container.orders.create_order(request.to_record(), idempotency_key)
    if was_existing:
        response.headers[REPLAY_HEADER] = "true"
    return OrderResponse.from_record(order)


@order_router.delete(
    "/_test/cleanup",
    response_model=MessageResponse,
    summary="Clear all orders (test only)",
)
async def cleanup_orders(container: ServiceContainer = Depends(get_container)) -> Dict[str, str]:
    container.orders.clear()
    return {"message": "All orders cleared"}


@order_router.get(
    "/{order_id}", response_model=OrderResponse, responses=NOT_FOUND, summary="Get an order"
)
async def get_order(
    order_id: str, container: ServiceContainer = Depends(get_container)
) -> OrderResponse:
    return OrderResponse.from_record(container.orders.get_order(order_id))


@order_router.get(
    "/{order_id}/status",
    response_model=OrderStatusResponse,
    responses=NOT_FOUND,
    summary="Get order processing status",
)
async def get_order_status(
    order_id: str, container: ServiceContainer = Depends(get_container)
) -> Dict[str, Any]:
    return container.orders.get_status(order_id)


# ---------------------------------------------------------------------------
# Payments v1 (backpressure)
# ---------------------------------------------------------------------------


@payment_router.get(
    "/_metrics",
    response_model=PaymentMetricsResponse,
    summary="Backpressure counters",
)
async def payment_metrics(container: ServiceContainer = Depends(get_container)) -> Dict[str, Any]:
    return container.payments.snapshot()


@payment_router.post(
    "/{order_id}",
    response_model=PaymentAcceptedResponse,
    status_code=status.HTTP_202_ACCEPTED,
    responses={429: {"model": RateLimitResponse}},
    summary="Submit a payment",
    description="Rejected with 429 while more than the configured number of requests "
    "are in flight. Any request body is ignored.",
)
async def process_payment(
    order_id: str,
    container: ServiceContainer = Depends(get_container),
) -> Dict[str, Any]:
    return container.payments.accept(order_id)


# ---------------------------------------------------------------------------
# Monitoring
# ---------------------------------------------------------------------------


@monitoring_router.get(
    "/health",
    response_model=HealthCheckResponse,
    summary="Health check",
    description="Check overall system health",
)
async def health(health_check: HealthCheck = Depends(get_health_check)) -> Dict[str, Any]:
    """Health check endpoint for monitoring."""
    return await health_check.check_all()


@monitoring_router.get(
    "/health/live",
    response_model=HealthCheckResponse,
    summary="Liveness probe",
)
async def liveness(health_check: HealthCheck = Depends(get_health_check)) -> Dict[str, Any]:
    """Liveness probe endpoint."""
    return await health_check.liveness()


@monitoring_router.get(
    "/health/ready",
    response_model=HealthCheckResponse,
    summary="Readiness probe",
)
async def readiness(health_check: HealthCheck = Depends(get_health_check)) -> Dict[str, Any]:
    """Readiness probe endpoint."""
    result = await health_check.readiness()
    if result["status"] != "healthy":
        logger.warning("readiness_check_failed", checks=result["checks"])
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=result)
    return result


@monitoring_router.get(
    "/metrics",
    summary="Prometheus metrics",
    include_in_schema=False,
)
async def prometheus_metrics() -> Response:
    """Expose Prometheus metrics."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
