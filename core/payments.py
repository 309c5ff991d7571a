"""Backpressure-gated payment acceptance (v1 API)."""
from typing import Any, Dict

import structlog

from core.backpressure import ConcurrencyCounter
from core.exceptions import RateLimitExceededError
from core.models import generate_job_id, utcnow

logger = structlog.get_logger(__name__)


class PaymentGateway:
    """
    Accepts payments while the concurrency counter is under its ceiling.

    Nothing is stored; an accepted payment only gets a job id back.
    """

    def __init__(self, counter: ConcurrencyCounter, retry_after_seconds: int = 5):
        self.counter = counter
        self.retry_after_seconds = retry_after_seconds

    def accept(self, order_id: str) -> Dict[str, Any]:
        """
        Raises:
            RateLimitExceededError: If the ceiling is exceeded
        """
        accepted, current = self.counter.admit()
        if not accepted:
            raise RateLimitExceededError(current, self.retry_after_seconds)

        job_id = generate_job_id(prefix="job-v1-", length=8)
        logger.info("payment_accepted", order_id=order_id, job_id=job_id, current_requests=current)
        return {
            "orderId": order_id,
            "jobId": job_id,
            "status": "ACCEPTED",
            "message": "Payment processing initiated",
            "timestamp": utcnow(),
        }

    def snapshot(self) -> Dict[str, Any]:
        return self.counter.snapshot()
