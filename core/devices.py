"""
Device service: asynchronous create/update/delete with idempotency support.

Every mutation returns immediately with the record in PROCESSING and leaves
the simulator to move it to COMPLETED or FAILED.
"""
from typing import Any, Dict, List, Mapping, Optional, Tuple

import structlog

from core.exceptions import ResourceNotFoundError
from core.idempotency import IdempotencyGate
from core.models import Device
from core.simulator import CompletionSimulator
from core.store import ResourceStore

logger = structlog.get_logger(__name__)


class DeviceService:
    """Orchestrates device lifecycle on top of store, gate and simulator."""

    def __init__(
        self,
        store: ResourceStore[Device],
        simulator: CompletionSimulator,
        gate: IdempotencyGate,
    ):
        self.store = store
        self.simulator = simulator
        self.gate = gate

    def _require(self, device_id: str) -> Device:
        device = self.store.get(device_id)
        if device is None:
            raise ResourceNotFoundError(Device.kind, device_id)
        return device

    def list_devices(self) -> List[Device]:
        return self.store.values()

    def get_device(self, device_id: str) -> Device:
        device = self._require(device_id)
        logger.debug("device_retrieved", device_id=device_id, status=device.status_value)
        return device

    def create_device(
        self, device: Device, idempotency_key: Optional[str] = None
    ) -> Tuple[Device, bool]:
        """
        Create a device or return the one already created for the key.

        Args:
            device: New device record
            idempotency_key: Header-supplied key; falls back to the record's own key

        Returns:
            Tuple of (device, was_existing)
        """
        if idempotency_key:
            device.idempotency_key = idempotency_key
        logger.info("device_create_requested", name=device.name, idempotency_key=device.idempotency_key)
        return self.gate.create(device, device.idempotency_key)

    def update_device(
        self,
        device_id: str,
        name: Optional[str] = None,
        data: Optional[Dict[str, str]] = None,
    ) -> Device:
        """Overwrite the supplied fields and re-trigger processing."""
        device = self._require(device_id)
        if name is not None:
            device.set_name(name)
        if data is not None:
            device.set_data(data)
        return self._reprocess(device)

    def patch_device(self, device_id: str, updates: Mapping[str, Any]) -> Device:
        """
        Apply a partial update.

        Only ``name`` and ``data`` are recognised; ``data`` is applied only
        when it is a mapping. Other keys are ignored.
        """
        device = self._require(device_id)
        for key, value in updates.items():
            if key == "name" and value is not None:
                device.set_name(str(value))
            elif key == "data" and isinstance(value, Mapping):
                device.set_data({str(k): str(v) for k, v in value.items()})
        return self._reprocess(device)

    def _reprocess(self, device: Device) -> Device:
        device.mark_in_flight()
        self.simulator.schedule(device.id)
        logger.info("device_update_started", device_id=device.id)
        return device

    def delete_device(self, device_id: str) -> bool:
        """
        Schedule removal of a device.

        The record stays readable (in PROCESSING) until the deletion delay
        elapses; there is no way to cancel a scheduled deletion.
        """
        device = self._require(device_id)
        device.mark_in_flight()
        self.simulator.schedule_deletion(device_id)
        logger.info("device_deletion_scheduled", device_id=device_id)
        return True

    def get_status(self, device_id: str) -> Dict[str, Any]:
        device = self._require(device_id)
        return {
            "id": device.id,
            "status": device.status_value,
            "isComplete": device.is_processing_complete,
            "lastUpdated": device.updated_at,
        }

    def clear(self) -> None:
        self.store.clear()
