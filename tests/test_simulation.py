"""
Unit tests for the store, idempotency gate and completion simulator.
"""
import asyncio

import pytest

from core.exceptions import ResourceNotFoundError
from core.idempotency import IdempotencyGate
from core.models import Device, OrderStatus, PaymentOrder, ProcessingStatus
from core.policy import FixedOutcomePolicy
from core.simulator import CompletionSimulator
from core.store import ResourceStore


def make_device_stack(
    delay: float = 0.05, fail: bool = False, stale_is_miss: bool = True, deletion_delay: float = 0.05
) -> tuple[ResourceStore, CompletionSimulator, IdempotencyGate]:
    store: ResourceStore[Device] = ResourceStore(Device.kind)
    simulator = CompletionSimulator(
        store, FixedOutcomePolicy(delay=delay, fail=fail), deletion_delay_seconds=deletion_delay
    )
    gate = IdempotencyGate(store, simulator, stale_is_miss=stale_is_miss)
    return store, simulator, gate


class TestIdempotencyGate:
    """Test suite for IdempotencyGate."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_create_assigns_id_and_processing(self) -> None:
        store, simulator, gate = make_device_stack()

        device, was_existing = gate.create(Device(name="X"), "k1")

        assert was_existing is False
        assert device.id.startswith("device-")
        assert device.processing_status == ProcessingStatus.PROCESSING
        assert store.get(device.id) is device
        assert store.lookup_key("k1") == device.id
        await simulator.shutdown()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_same_key_returns_same_resource(self) -> None:
        store, simulator, gate = make_device_stack()

        first, _ = gate.create(Device(name="X"), "k2")
        second, was_existing = gate.create(Device(name="Y"), "k2")

        assert was_existing is True
        assert second is first
        assert len(store) == 1
        assert simulator.pending == 1
        await simulator.shutdown()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_caller_supplied_id_kept(self) -> None:
        _, simulator, gate = make_device_stack()

        device, _ = gate.create(Device(id="my-device", name="X"), "k3")

        assert device.id == "my-device"
        await simulator.shutdown()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_stale_mapping_treated_as_miss(self) -> None:
        store, simulator, gate = make_device_stack()
        first, _ = gate.create(Device(name="X"), "k4")
        store.remove(first.id)

        second, was_existing = gate.create(Device(name="X"), "k4")

        assert was_existing is False
        assert second.id != first.id
        assert store.lookup_key("k4") == second.id
        await simulator.shutdown()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_stale_mapping_reported_when_not_miss(self) -> None:
        store, simulator, gate = make_device_stack(stale_is_miss=False)
        first, _ = gate.create(Device(name="X"), "k5")
        store.remove(first.id)

        with pytest.raises(ResourceNotFoundError, match=first.id):
            gate.create(Device(name="X"), "k5")
        await simulator.shutdown()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_order_enters_accepted_with_job_id(self) -> None:
        store: ResourceStore[PaymentOrder] = ResourceStore(PaymentOrder.kind)
        simulator = CompletionSimulator(store, FixedOutcomePolicy(delay=1.0))
        gate = IdempotencyGate(store, simulator)

        order, _ = gate.create(PaymentOrder(order_id="order-1", amount=10.0), None)

        assert order.status == OrderStatus.ACCEPTED
        assert order.job_id.startswith("job-")
        assert len(order.job_id) == len("job-") + 12
        assert order.timestamp is not None
        await simulator.shutdown()


class TestCompletionSimulator:
    """Test suite for CompletionSimulator."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_completes_after_delay(self) -> None:
        store, simulator, gate = make_device_stack(delay=0.05)
        device, _ = gate.create(Device(name="X"), None)

        await asyncio.sleep(0.2)

        assert device.processing_status == ProcessingStatus.COMPLETED
        assert device.is_processing_complete
        assert simulator.pending == 0

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_failure_outcome(self) -> None:
        _, simulator, gate = make_device_stack(delay=0.05, fail=True)
        device, _ = gate.create(Device(name="X"), None)

        await asyncio.sleep(0.2)

        assert device.processing_status == ProcessingStatus.FAILED

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_resource_is_noop(self) -> None:
        store, simulator, gate = make_device_stack(delay=0.05)
        device, _ = gate.create(Device(name="X"), None)
        store.remove(device.id)

        await asyncio.sleep(0.2)

        assert device.processing_status == ProcessingStatus.PROCESSING

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_order_completion_stamps_processed_at(self) -> None:
        store: ResourceStore[PaymentOrder] = ResourceStore(PaymentOrder.kind)
        simulator = CompletionSimulator(store, FixedOutcomePolicy(delay=0.05))
        gate = IdempotencyGate(store, simulator)
        order, _ = gate.create(PaymentOrder(order_id="order-2"), None)

        await asyncio.sleep(0.2)

        assert order.status == OrderStatus.COMPLETED
        assert order.processed_at is not None
        assert order.payment_result()["status"] == "SUCCESS"
        assert order.payment_result()["transactionId"].startswith("txn-")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_shutdown_marks_pending_failed(self) -> None:
        _, simulator, gate = make_device_stack(delay=10.0)
        device, _ = gate.create(Device(name="X"), None)
        await asyncio.sleep(0)

        await simulator.shutdown()

        assert device.processing_status == ProcessingStatus.FAILED
        assert simulator.pending == 0
        assert simulator.is_closed

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_no_scheduling_after_shutdown(self) -> None:
        _, simulator, _ = make_device_stack()
        await simulator.shutdown()

        assert simulator.schedule("device-1") is None

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_deletion_removes_after_delay(self) -> None:
        store, simulator, gate = make_device_stack(delay=10.0, deletion_delay=0.05)
        device, _ = gate.create(Device(name="X"), None)

        simulator.schedule_deletion(device.id)
        assert store.exists(device.id)

        await asyncio.sleep(0.2)
        assert not store.exists(device.id)
        await simulator.shutdown()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_terminal_status_is_stable(self) -> None:
        _, simulator, gate = make_device_stack(delay=0.05)
        device, _ = gate.create(Device(name="X"), None)
        await asyncio.sleep(0.2)
        first = device.processing_status

        await asyncio.sleep(0.2)

        assert first in (ProcessingStatus.COMPLETED, ProcessingStatus.FAILED)
        assert device.processing_status == first


@pytest.mark.unit
def test_store_clear_drops_mappings() -> None:
    store: ResourceStore[Device] = ResourceStore(Device.kind)
    store.put("d1", Device(id="d1"))
    store.bind_key("k", "d1")

    store.clear()

    assert len(store) == 0
    assert store.lookup_key("k") is None
