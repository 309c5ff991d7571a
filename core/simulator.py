"""
Simulated asynchronous processing.

After a resource is created or updated, the simulator schedules a background
task that sleeps for a policy-chosen delay and then flips the resource to a
terminal status. Deletion is simulated the same way: the record is removed
after a fixed delay.

Tasks are fire-and-forget for the caller but tracked here, so shutdown can
cancel and drain them instead of leaking work past the application lifespan.
"""
import asyncio
from typing import Any, Optional, Set

import structlog

from core.policy import OutcomePolicy
from core.store import ResourceStore
from monitoring.metrics import metrics

logger = structlog.get_logger(__name__)


class CompletionSimulator:
    """
    Schedules simulated completions and deletions for one resource kind.

    Records must provide ``mark_completed()``, ``mark_failed()`` and
    ``status_value``.
    """

    def __init__(
        self,
        store: ResourceStore[Any],
        policy: OutcomePolicy,
        deletion_delay_seconds: float = 2.0,
    ):
        self.store = store
        self.policy = policy
        self.deletion_delay_seconds = deletion_delay_seconds
        self._tasks: Set["asyncio.Task[None]"] = set()
        self._closed = False

    @property
    def kind(self) -> str:
        return self.store.kind

    @property
    def pending(self) -> int:
        """Number of outstanding background units of work."""
        return len(self._tasks)

    @property
    def is_closed(self) -> bool:
        return self._closed

    def _spawn(self, coro: Any, name: str) -> Optional["asyncio.Task[None]"]:
        if self._closed:
            coro.close()
            logger.warning("simulation_rejected_after_shutdown", kind=self.kind, task=name)
            return None

        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        metrics.set_pending_simulations(self.kind, len(self._tasks))
        task.add_done_callback(self._forget)
        return task

    def _forget(self, task: "asyncio.Task[None]") -> None:
        self._tasks.discard(task)
        metrics.set_pending_simulations(self.kind, len(self._tasks))

    def schedule(self, resource_id: str) -> Optional["asyncio.Task[None]"]:
        """Schedule a simulated completion for ``resource_id``."""
        delay = self.policy.draw_delay()
        logger.debug(
            "completion_scheduled",
            kind=self.kind,
            resource_id=resource_id,
            delay_seconds=delay,
        )
        return self._spawn(self._complete(resource_id, delay), f"complete:{resource_id}")

    async def _complete(self, resource_id: str, delay: float) -> None:
        try:
            await asyncio.sleep(delay)
        except asyncio.CancelledError:
            record = self.store.get(resource_id)
            if record is not None:
                record.mark_failed()
            metrics.record_completion(self.kind, "cancelled", delay)
            logger.error("completion_interrupted", kind=self.kind, resource_id=resource_id)
            raise

        record = self.store.get(resource_id)
        if record is None:
            metrics.record_completion(self.kind, "skipped", delay)
            logger.info("completion_skipped_missing", kind=self.kind, resource_id=resource_id)
            return

        if self.policy.should_fail():
            record.mark_failed()
            metrics.record_completion(self.kind, "failed", delay)
            logger.warning("completion_failed", kind=self.kind, resource_id=resource_id)
        else:
            record.mark_completed()
            metrics.record_completion(self.kind, "completed", delay)
            logger.info("completion_succeeded", kind=self.kind, resource_id=resource_id)

    def schedule_deletion(self, resource_id: str) -> Optional["asyncio.Task[None]"]:
        """Remove ``resource_id`` after the fixed deletion delay."""
        return self._spawn(self._delete(resource_id), f"delete:{resource_id}")

    async def _delete(self, resource_id: str) -> None:
        await asyncio.sleep(self.deletion_delay_seconds)
        if self.store.remove(resource_id) is not None:
            metrics.record_deletion(self.kind)
            logger.info("resource_deleted", kind=self.kind, resource_id=resource_id)

    async def shutdown(self) -> None:
        """
        Cancel every pending task and wait for them to finish.

        Pending completions mark their resources FAILED on the way out.
        """
        self._closed = True
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("simulator_shutdown", kind=self.kind, cancelled=len(tasks))
