"""
Idempotency gate for resource creation.

Repeated create requests carrying the same idempotency key resolve to the
resource the first request produced. The key → id mapping lives in the
resource store; check-then-create runs under the store lock so two
concurrent requests with one key cannot both create.
"""
from typing import Any, Optional, Tuple

import structlog

from core.exceptions import ResourceNotFoundError
from core.simulator import CompletionSimulator
from core.store import ResourceStore
from monitoring.metrics import metrics

logger = structlog.get_logger(__name__)


class IdempotencyGate:
    """
    Create-or-return front door for one resource kind.

    A mapping whose resource has since been removed is stale. With
    ``stale_is_miss`` (the default) the stale mapping is dropped and a new
    resource is created; otherwise the lookup raises ResourceNotFoundError
    for the vanished resource.
    """

    def __init__(
        self,
        store: ResourceStore[Any],
        simulator: CompletionSimulator,
        stale_is_miss: bool = True,
    ):
        self.store = store
        self.simulator = simulator
        self.stale_is_miss = stale_is_miss

    def check(self, idempotency_key: Optional[str]) -> Tuple[Optional[Any], bool]:
        """
        Look up an idempotency key.

        Returns:
            Tuple of (existing record or None, whether the key was seen)
        """
        if not idempotency_key:
            return None, False

        with self.store.lock:
            existing_id = self.store.lookup_key(idempotency_key)
            if existing_id is None:
                logger.debug("idempotency_miss", kind=self.store.kind, idempotency_key=idempotency_key)
                return None, False

            record = self.store.get(existing_id)
            if record is None and not self.stale_is_miss:
                raise ResourceNotFoundError(self.store.kind, existing_id)
            if record is None:
                self.store.unbind_key(idempotency_key)
                logger.info(
                    "idempotency_stale_mapping_dropped",
                    kind=self.store.kind,
                    idempotency_key=idempotency_key,
                    resource_id=existing_id,
                )
                return None, False

        metrics.record_idempotency_replay(self.store.kind)
        logger.info(
            "idempotency_hit",
            kind=self.store.kind,
            idempotency_key=idempotency_key,
            resource_id=existing_id,
        )
        return record, True

    def create(self, record: Any, idempotency_key: Optional[str]) -> Tuple[Optional[Any], bool]:
        """
        Create ``record`` unless ``idempotency_key`` was already used.

        Args:
            record: New record; must provide ``assign_id()``, ``mark_in_flight()``
                and ``resource_id``
            idempotency_key: Caller's key, may be None

        Returns:
            Tuple of (stored record, was_existing)
        """
        with self.store.lock:
            existing, seen = self.check(idempotency_key)
            if seen:
                return existing, True

            record.assign_id()
            record.mark_in_flight()
            resource_id = record.resource_id

            self.store.put(resource_id, record)
            if idempotency_key:
                self.store.bind_key(idempotency_key, resource_id)

        metrics.record_resource_created(self.store.kind)
        logger.info(
            "resource_created",
            kind=self.store.kind,
            resource_id=resource_id,
            idempotency_key=idempotency_key,
        )

        self.simulator.schedule(resource_id)
        return record, False
