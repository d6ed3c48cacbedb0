"""Unit tests for the in-process change bus."""

from uuid import uuid4

from domain.entities.snapshot import ChangeOperation, StoreChange
from infrastructure.change_bus import InProcessChangeBus


class TestInProcessChangeBus:
    def test_publish_reaches_every_subscriber(self):
        bus = InProcessChangeBus()
        first: list[StoreChange] = []
        second: list[StoreChange] = []
        bus.subscribe(first.append)
        bus.subscribe(second.append)
        change = StoreChange("mesas", ChangeOperation.UPDATE)

        bus.publish(change)

        assert first == [change]
        assert second == [change]

    def test_unsubscribe(self):
        bus = InProcessChangeBus()
        received: list[StoreChange] = []
        unsubscribe = bus.subscribe(received.append)

        unsubscribe()
        unsubscribe()
        bus.publish(StoreChange("mesas", ChangeOperation.UPDATE))

        assert received == []
        assert bus.subscriber_count == 0

    def test_failing_subscriber_does_not_block_others(self):
        bus = InProcessChangeBus()
        received: list[StoreChange] = []

        def broken(change: StoreChange) -> None:
            raise RuntimeError("boom")

        bus.subscribe(broken)
        bus.subscribe(received.append)

        bus.publish(StoreChange("reservas", ChangeOperation.INSERT))

        assert len(received) == 1


class TestStoreChange:
    def test_record_id_parses_strings(self):
        reservation_id = uuid4()

        change = StoreChange("reservas", ChangeOperation.INSERT, {"id": str(reservation_id)})

        assert change.record_id == reservation_id

    def test_record_id_tolerates_garbage(self):
        assert StoreChange("reservas", ChangeOperation.INSERT, {"id": "x"}).record_id is None
        assert StoreChange("reservas", ChangeOperation.DELETE).record_id is None
