"""Tests for core types."""

import dataclasses

import pytest

from sms_dispatch import BulkResult, MessageStatus, TrackingStore, TransmitResult


class TestTransmitResult:
    def test_ok(self):
        result = TransmitResult.ok(provider_message_id="SM1")
        assert result.success
        assert result.provider_message_id == "SM1"
        assert result.error_detail is None

    def test_fail(self):
        result = TransmitResult.fail("quota exceeded", error_code="429")
        assert not result.success
        assert result.error_detail == "quota exceeded"
        assert result.error_code == "429"
        assert result.provider_message_id is None


class TestMessageStatus:
    def test_is_str_enum(self):
        assert MessageStatus.DELIVERED == "delivered"
        assert MessageStatus("failed") is MessageStatus.FAILED


class TestTrackingRecord:
    def test_frozen(self):
        record = TrackingStore().create("t1", "+15551234567", "hi")
        with pytest.raises(dataclasses.FrozenInstanceError):
            record.status = MessageStatus.SENT

    def test_is_terminal(self):
        store = TrackingStore()
        store.create("t1", "+15551234567", "hi")
        assert not store.get("t1").is_terminal
        store.update("t1", MessageStatus.FAILED, "boom")
        assert store.get("t1").is_terminal


class TestBulkResult:
    def test_defaults(self):
        result = BulkResult(success=False)
        assert result.tracking_ids == []
        assert result.failed_count == 0
