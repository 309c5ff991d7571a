"""
Backpressure tests for the concurrency counter and payment gateway.
"""
import asyncio

import pytest

from core.backpressure import ConcurrencyCounter
from core.exceptions import RateLimitExceededError
from core.payments import PaymentGateway


class TestConcurrencyCounter:
    """Test suite for ConcurrencyCounter."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_admits_up_to_ceiling(self) -> None:
        counter = ConcurrencyCounter(max_concurrent=3, release_seconds=1.0)

        decisions = [counter.admit() for _ in range(5)]

        assert [accepted for accepted, _ in decisions] == [True, True, True, False, False]
        assert [current for _, current in decisions] == [1, 2, 3, 4, 5]
        counter.close()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_rejected_requests_still_hold_a_slot_until_release(self) -> None:
        counter = ConcurrencyCounter(max_concurrent=1, release_seconds=0.1)
        counter.admit()
        counter.admit()

        assert counter.current == 2

        await asyncio.sleep(0.25)
        assert counter.current == 0

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_capacity_returns_after_release(self) -> None:
        counter = ConcurrencyCounter(max_concurrent=1, release_seconds=0.05)
        assert counter.admit()[0] is True
        assert counter.admit()[0] is False

        await asyncio.sleep(0.2)

        assert counter.admit()[0] is True
        counter.close()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_close_releases_outstanding_slots(self) -> None:
        counter = ConcurrencyCounter(max_concurrent=8, release_seconds=10.0)
        for _ in range(4):
            counter.admit()

        counter.close()

        assert counter.current == 0

    @pytest.mark.unit
    def test_snapshot_uses_wire_names(self) -> None:
        counter = ConcurrencyCounter(max_concurrent=8)
        assert counter.snapshot() == {"currentRequests": 0, "maxConcurrentRequests": 8}


class TestPaymentGateway:
    """Test suite for PaymentGateway."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_accept_response(self) -> None:
        gateway = PaymentGateway(ConcurrencyCounter(max_concurrent=8, release_seconds=0.01))

        result = gateway.accept("order-42")

        assert result["orderId"] == "order-42"
        assert result["status"] == "ACCEPTED"
        assert result["message"] == "Payment processing initiated"
        assert result["jobId"].startswith("job-v1-")
        assert len(result["jobId"]) == len("job-v1-") + 8
        gateway.counter.close()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_over_ceiling_raises_rate_limit(self) -> None:
        gateway = PaymentGateway(
            ConcurrencyCounter(max_concurrent=1, release_seconds=1.0), retry_after_seconds=5
        )
        gateway.accept("order-1")

        with pytest.raises(RateLimitExceededError) as exc_info:
            gateway.accept("order-2")

        assert exc_info.value.http_status == 429
        assert exc_info.value.to_dict() == {
            "message": "Rate limit exceeded. Please try again later.",
            "retryAfter": 5,
            "currentRequests": 2,
        }
        gateway.counter.close()
