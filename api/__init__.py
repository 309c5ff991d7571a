"""FastAPI application and routes."""
from .main import app, create_app
from .schemas import (
    DeviceRequest,
    DeviceResponse,
    DeviceStatusResponse,
    OrderRequest,
    OrderResponse,
    OrderStatusResponse,
)

__all__ = [
    "app",
    "create_app",
    "DeviceRequest",
    "DeviceResponse",
    "DeviceStatusResponse",
    "OrderRequest",
    "OrderResponse",
    "OrderStatusResponse",
]
