"""
Health checks for readiness/liveness probes.

Checks:
- Resource stores are reachable
- Completion simulators are accepting work
"""
from typing import Any, Dict

import structlog

logger = structlog.get_logger(__name__)


class HealthCheckError(Exception):
    """Raised when health check fails."""

    pass


class HealthCheck:
    """
    Health check service for the in-process dependencies.

    Args:
        container: Service container exposing ``devices``, ``orders`` and
            ``payments``
    """

    def __init__(self, container: Any) -> None:
        self.container = container

    def check_stores(self) -> Dict[str, Any]:
        """
        Check the in-memory stores.

        Raises:
            HealthCheckError: If a store cannot be read
        """
        try:
            return {
                "status": "healthy",
                "service": "stores",
                "devices": len(self.container.devices.store),
                "orders": len(self.container.orders.store),
            }
        except Exception as e:
            logger.error("store_health_check_failed", error=str(e))
            raise HealthCheckError(f"Store health check failed: {str(e)}")

    def check_simulators(self) -> Dict[str, Any]:
        """
        Check that simulators have not been shut down.

        Raises:
            HealthCheckError: If any simulator is closed
        """
        pending = {}
        for simulator in self.container.simulators:
            if simulator.is_closed:
                raise HealthCheckError(f"Simulator for {simulator.kind} is shut down")
            pending[simulator.kind] = simulator.pending

        return {
            "status": "healthy",
            "service": "simulators",
            "pending": pending,
        }

    async def check_all(self) -> Dict[str, Any]:
        """Run all health checks."""
        checks = {}
        all_healthy = True

        for name, check in (("stores", self.check_stores), ("simulators", self.check_simulators)):
            try:
                checks[name] = check()
            except HealthCheckError as e:
                checks[name] = {
                    "status": "unhealthy",
                    "service": name,
                    "error": str(e),
                }
                all_healthy = False

        checks["backpressure"] = {
            "status": "healthy",
            "service": "backpressure",
            **self.container.payments.snapshot(),
        }

        return {
            "status": "healthy" if all_healthy else "unhealthy",
            "checks": checks,
        }

    async def liveness(self) -> Dict[str, Any]:
        """
        Liveness probe.

        Does not check dependencies.
        """
        return {
            "status": "alive",
            "message": "Application is running",
        }

    async def readiness(self) -> Dict[str, Any]:
        """Readiness probe: all checks must pass."""
        return await self.check_all()
