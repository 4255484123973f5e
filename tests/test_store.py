"""Tests for the TrackingStore."""

import random
import threading
from datetime import datetime, timedelta, timezone

import pytest

from sms_dispatch import DuplicateId, MessageStatus, TrackingStore
from sms_dispatch.store import GENERIC_FAILURE_DETAIL


class FrozenClock:
    """Clock that only moves when told to."""

    def __init__(self) -> None:
        self.now = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class TestCreate:
    def test_creates_queued_record(self, store: TrackingStore):
        record = store.create("t1", "+15551234567", "hi")

        assert record.id == "t1"
        assert record.recipient == "+15551234567"
        assert record.content == "hi"
        assert record.status == MessageStatus.QUEUED
        assert record.created_at == record.updated_at
        assert record.error_detail is None
        assert record.provider_message_id is None
        assert store.get("t1") == record

    def test_duplicate_id_rejected(self, store: TrackingStore):
        original = store.create("t1", "+15551234567", "hi")

        with pytest.raises(DuplicateId, match="t1"):
            store.create("t1", "+15559999999", "other")

        assert store.get("t1") == original
        assert len(store) == 1


class TestUpdate:
    def test_legal_transition_applied(self, store: TrackingStore):
        store.create("t1", "+15551234567", "hi")
        record = store.update("t1", MessageStatus.SENT, provider_message_id="SM1")

        assert record is not None
        assert record.status == MessageStatus.SENT
        assert record.provider_message_id == "SM1"
        assert record.updated_at > record.created_at

    def test_unknown_id_returns_none(self, store: TrackingStore):
        assert store.update("missing", MessageStatus.SENT) is None

    def test_accepts_plain_string_status(self, store: TrackingStore):
        store.create("t1", "+15551234567", "hi")
        record = store.update("t1", "sent")
        assert record.status == MessageStatus.SENT

    def test_failed_keeps_error_detail(self, store: TrackingStore):
        store.create("t1", "+15551234567", "hi")
        record = store.update("t1", MessageStatus.FAILED, "Invalid 'To' Phone Number")

        assert record.status == MessageStatus.FAILED
        assert record.error_detail == "Invalid 'To' Phone Number"

    def test_failed_without_detail_gets_generic_detail(self, store: TrackingStore):
        store.create("t1", "+15551234567", "hi")
        record = store.update("t1", MessageStatus.FAILED)
        assert record.error_detail == GENERIC_FAILURE_DETAIL

    def test_error_detail_dropped_for_non_failed_status(self, store: TrackingStore):
        store.create("t1", "+15551234567", "hi")
        record = store.update("t1", MessageStatus.SENT, "should not stick")
        assert record.error_detail is None

    def test_illegal_transition_is_noop(self, store: TrackingStore):
        created = store.create("t1", "+15551234567", "hi")
        result = store.update("t1", MessageStatus.DELIVERED)

        assert result == created
        assert store.get("t1").status == MessageStatus.QUEUED

    def test_repeated_update_does_not_refresh(self, store: TrackingStore):
        store.create("t1", "+15551234567", "hi")
        first = store.update("t1", MessageStatus.SENT)
        second = store.update("t1", MessageStatus.SENT)

        assert second == first
        assert second.updated_at == first.updated_at

    @pytest.mark.parametrize("terminal", [MessageStatus.DELIVERED, MessageStatus.FAILED])
    def test_terminal_records_never_move(self, store: TrackingStore, terminal: MessageStatus):
        store.create("t1", "+15551234567", "hi")
        store.update("t1", MessageStatus.SENT)
        final = store.update("t1", terminal, "Delivery failed")

        for status in MessageStatus:
            assert store.update("t1", status, "late") == final

    def test_provider_id_kept_across_transitions(self, store: TrackingStore):
        store.create("t1", "+15551234567", "hi")
        store.update("t1", MessageStatus.SENT, provider_message_id="SM1")
        record = store.update("t1", MessageStatus.DELIVERED)
        assert record.provider_message_id == "SM1"

    def test_updated_at_strictly_increases_with_frozen_clock(self):
        clock = FrozenClock()
        store = TrackingStore(clock=clock)
        created = store.create("t1", "+15551234567", "hi")
        sent = store.update("t1", MessageStatus.SENT)
        delivered = store.update("t1", MessageStatus.DELIVERED)

        assert created.updated_at < sent.updated_at < delivered.updated_at


class TestListAll:
    def test_newest_first(self):
        clock = FrozenClock()
        store = TrackingStore(clock=clock)
        offsets = [5, 1, 9, 3, 7]
        base = clock.now
        for index, offset in enumerate(offsets):
            clock.now = base + timedelta(seconds=offset)
            store.create(f"t{index}", "+15551234567", "hi")

        created = [record.created_at for record in store.list_all()]
        assert created == sorted(created, reverse=True)
        assert len(created) == len(offsets)

    def test_random_insertion_orders_stay_sorted(self):
        rng = random.Random(7)
        clock = FrozenClock()
        store = TrackingStore(clock=clock)
        base = clock.now
        for index in range(50):
            clock.now = base + timedelta(seconds=rng.randint(0, 20))
            store.create(f"t{index}", "+15551234567", "hi")

        created = [record.created_at for record in store.list_all()]
        assert created == sorted(created, reverse=True)

    def test_ties_listed_newest_insert_first(self):
        store = TrackingStore(clock=FrozenClock())
        store.create("first", "+15551234567", "hi")
        store.create("second", "+15551234567", "hi")

        assert [record.id for record in store.list_all()] == ["second", "first"]

    def test_reflects_live_state(self, store: TrackingStore):
        store.create("t1", "+15551234567", "hi")
        before = store.list_all()
        store.update("t1", MessageStatus.SENT)
        after = store.list_all()

        assert before[0].status == MessageStatus.QUEUED
        assert after[0].status == MessageStatus.SENT

    def test_empty_store(self, store: TrackingStore):
        assert store.list_all() == []


class TestConcurrentUpdates:
    def test_racing_terminal_updates_apply_once(self, store: TrackingStore):
        for index in range(20):
            store.create(f"t{index}", "+15551234567", "hi")
            store.update(f"t{index}", MessageStatus.SENT)

        barrier = threading.Barrier(2)

        def race(status: MessageStatus) -> None:
            barrier.wait()
            for index in range(20):
                store.update(f"t{index}", status, "Delivery failed")

        threads = [
            threading.Thread(target=race, args=(MessageStatus.DELIVERED,)),
            threading.Thread(target=race, args=(MessageStatus.FAILED,)),
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        for record in store.list_all():
            assert record.status in {MessageStatus.DELIVERED, MessageStatus.FAILED}
            assert (record.error_detail is not None) == (record.status == MessageStatus.FAILED)

    def test_contains(self, store: TrackingStore):
        store.create("t1", "+15551234567", "hi")
        assert "t1" in store
        assert "t2" not in store
