"""
In-memory resource store.

Holds resource records by id and the idempotency key → resource id mapping.
Both maps are guarded by one lock so request handlers and background
completions can read and write concurrently without external locking.
Nothing survives a process restart.
"""
import threading
from typing import Dict, Generic, List, Optional, TypeVar

import structlog

logger = structlog.get_logger(__name__)

R = TypeVar("R")


class ResourceStore(Generic[R]):
    """Thread-safe mapping of resource id → record plus idempotency cache."""

    def __init__(self, kind: str):
        self.kind = kind
        self._resources: Dict[str, R] = {}
        self._idempotency: Dict[str, str] = {}
        self._lock = threading.RLock()

    def get(self, resource_id: str) -> Optional[R]:
        with self._lock:
            return self._resources.get(resource_id)

    def put(self, resource_id: str, record: R) -> None:
        # Last writer wins on id collision.
        with self._lock:
            self._resources[resource_id] = record

    def remove(self, resource_id: str) -> Optional[R]:
        with self._lock:
            return self._resources.pop(resource_id, None)

    def exists(self, resource_id: str) -> bool:
        with self._lock:
            return resource_id in self._resources

    def values(self) -> List[R]:
        """Snapshot of all records."""
        with self._lock:
            return list(self._resources.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._resources)

    def lookup_key(self, idempotency_key: str) -> Optional[str]:
        with self._lock:
            return self._idempotency.get(idempotency_key)

    def bind_key(self, idempotency_key: str, resource_id: str) -> None:
        with self._lock:
            self._idempotency[idempotency_key] = resource_id

    def unbind_key(self, idempotency_key: str) -> None:
        with self._lock:
            self._idempotency.pop(idempotency_key, None)

    @property
    def lock(self) -> threading.RLock:
        """Lock shared with the idempotency gate for check-then-create."""
        return self._lock

    def clear(self) -> None:
        with self._lock:
            resources = len(self._resources)
            self._resources.clear()
            self._idempotency.clear()
        logger.info("store_cleared", kind=self.kind, resources_removed=resources)
