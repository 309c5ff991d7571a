"""
Exception classes for the simulated resource service.

Every exception carries the HTTP status it maps to and a message that is
safe to return to the caller as ``{"message": ...}``.
"""
from typing import Any, Dict


class SimulationError(Exception):
    """Base exception for all service errors."""

    http_status: int = 500

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for API responses."""
        return {"message": self.message, **self.extra}


class ResourceNotFoundError(SimulationError):
    """Raised when a resource id is absent from the store."""

    http_status = 404

    def __init__(self, kind: str, resource_id: str):
        super().__init__(f"{kind} not found: {resource_id}")
        self.kind = kind
        self.resource_id = resource_id


class OrderValidationError(SimulationError):
    """Raised when a payment order is missing a required field."""

    http_status = 400


class RateLimitExceededError(SimulationError):
    """
    Raised when the backpressure ceiling is exceeded.

    Carries ``retryAfter`` and ``currentRequests`` so clients can back off.
    """

    http_status = 429

    def __init__(self, current_requests: int, retry_after: int):
        super().__init__(
            "Rate limit exceeded. Please try again later.",
            retryAfter=retry_after,
            currentRequests=current_requests,
        )
        self.current_requests = current_requests
        self.retry_after = retry_after
