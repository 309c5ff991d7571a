"""
Naive concurrency counter used to emulate backpressure.

Every request increments the counter; if the new value exceeds the ceiling
the request is rejected. Each increment is released by a detached timer a
fixed short time later, whether the request was admitted or not. There is no
queueing and no time-based replenishment beyond that release.
"""
import asyncio
import threading
from typing import Any, Dict, Set

import structlog

from monitoring.metrics import metrics

logger = structlog.get_logger(__name__)


class ConcurrencyCounter:
    """
    Fixed-ceiling request counter.

    Example:
        >>> counter = ConcurrencyCounter(max_concurrent=8, release_seconds=0.1)
        >>> accepted, current = counter.admit()
    """

    def __init__(self, max_concurrent: int = 8, release_seconds: float = 0.1):
        self.max_concurrent = max_concurrent
        self.release_seconds = release_seconds
        self._current = 0
        self._lock = threading.Lock()
        self._timers: Set[asyncio.TimerHandle] = set()

    @property
    def current(self) -> int:
        with self._lock:
            return self._current

    def admit(self) -> tuple[bool, int]:
        """
        Count one incoming request and decide whether to accept it.

        Returns:
            Tuple of (accepted, post-increment counter value)
        """
        with self._lock:
            self._current += 1
            current = self._current

        self._schedule_release()

        accepted = current <= self.max_concurrent
        metrics.record_backpressure_decision("accepted" if accepted else "rejected", current)
        if not accepted:
            logger.warning(
                "backpressure_rejected",
                current_requests=current,
                max_concurrent_requests=self.max_concurrent,
            )
        return accepted, current

    def _schedule_release(self) -> None:
        loop = asyncio.get_running_loop()
        handle: asyncio.TimerHandle

        def release() -> None:
            self._timers.discard(handle)
            self._release()

        handle = loop.call_later(self.release_seconds, release)
        self._timers.add(handle)

    def _release(self) -> None:
        with self._lock:
            self._current -= 1
            current = self._current
        metrics.set_backpressure_in_flight(current)

    def close(self) -> None:
        """Release every outstanding slot immediately."""
        for handle in list(self._timers):
            handle.cancel()
            self._release()
        self._timers.clear()

    def snapshot(self) -> Dict[str, Any]:
        return {
            "currentRequests": self.current,
            "maxConcurrentRequests": self.max_concurrent,
        }
