"""
Pytest configuration and fixtures.
"""
from typing import Any, AsyncGenerator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from api.main import create_app
from config import Settings
from core.container import ServiceContainer, build_container
from core.policy import FixedOutcomePolicy

COMPLETION_DELAY = 0.05


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings with short, deterministic timings."""
    return Settings(
        app_name="async-patterns-lab-test",
        app_env="test",
        log_level="DEBUG",
        debug=True,
        deletion_delay_seconds=0.1,
        max_concurrent_requests=8,
        backpressure_release_seconds=0.5,
    )


@pytest.fixture
def device_outcomes() -> FixedOutcomePolicy:
    return FixedOutcomePolicy(delay=COMPLETION_DELAY)


@pytest.fixture
def order_outcomes() -> FixedOutcomePolicy:
    return FixedOutcomePolicy(delay=COMPLETION_DELAY)


@pytest_asyncio.fixture
async def container(
    test_settings: Settings,
    device_outcomes: FixedOutcomePolicy,
    order_outcomes: FixedOutcomePolicy,
) -> AsyncGenerator[ServiceContainer, Any]:
    """Services with deterministic outcome policies."""
    services = build_container(
        test_settings,
        device_outcomes=device_outcomes,
        order_outcomes=order_outcomes,
    )
    yield services
    await services.shutdown()


@pytest.fixture
def app(test_settings: Settings, container: ServiceContainer) -> FastAPI:
    return create_app(settings=test_settings, container=container)


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, Any]:
    """Create test HTTP client."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def sample_device_data() -> dict[str, Any]:
    """Sample device request data."""
    return {
        "name": "thermostat-kitchen",
        "data": {"firmware": "1.4.2", "location": "kitchen"},
    }


@pytest.fixture
def sample_order_data() -> dict[str, Any]:
    """Sample payment order request data."""
    return {
        "orderId": "order-1a2b3c4d",
        "customerEmail": "john.doe@example.com",
        "amount": 150.75,
        "currency": "USD",
        "paymentMethod": "CREDIT_CARD",
        "metadata": {"source": "test"},
    }
