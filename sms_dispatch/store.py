"""In-memory tracking store for outbound messages.

One store is constructed per process and handed to the dispatcher, the
poller and the bulk coordinator. Nothing is persisted; records live until
the process exits.
"""

from __future__ import annotations

import dataclasses
import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable

from .exceptions import DuplicateId
from .status import can_transition
from .types import MessageStatus, TrackingRecord

logger = logging.getLogger(__name__)

GENERIC_FAILURE_DETAIL = "Failed to send message"

_TICK = timedelta(microseconds=1)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TrackingStore:
    """Thread-safe registry of :class:`TrackingRecord` keyed by tracking id.

    Every check-and-apply runs under a single lock, so a dispatcher update
    racing a poller update on the same id can never both apply: the loser
    sees the winner's status and its transition is dropped as illegal.
    """

    def __init__(self, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._records: dict[str, TrackingRecord] = {}
        self._lock = threading.Lock()

    def create(self, tracking_id: str, recipient: str, content: str) -> TrackingRecord:
        """Register a new ``queued`` record.

        Raises:
            DuplicateId: if ``tracking_id`` is already tracked.
        """
        with self._lock:
            if tracking_id in self._records:
                raise DuplicateId(tracking_id)
            now = self._clock()
            record = TrackingRecord(
                id=tracking_id,
                recipient=recipient,
                content=content,
                status=MessageStatus.QUEUED,
                created_at=now,
                updated_at=now,
            )
            self._records[tracking_id] = record
            return record

    def update(
        self,
        tracking_id: str,
        status: MessageStatus,
        error_detail: str | None = None,
        *,
        provider_message_id: str | None = None,
    ) -> TrackingRecord | None:
        """Apply a status transition.

        Returns the resulting record, or ``None`` if the id is unknown.
        Illegal transitions (including anything out of a terminal status)
        leave the record untouched and return it as-is.
        """
        status = MessageStatus(status)
        with self._lock:
            current = self._records.get(tracking_id)
            if current is None:
                return None
            if not can_transition(current.status, status):
                logger.debug(
                    "Ignoring transition %s -> %s for %s",
                    current.status.value,
                    status.value,
                    tracking_id,
                )
                return current

            if status is MessageStatus.FAILED:
                error_detail = error_detail or GENERIC_FAILURE_DETAIL
            else:
                error_detail = None

            updated = dataclasses.replace(
                current,
                status=status,
                updated_at=self._next_stamp(current.updated_at),
                error_detail=error_detail,
                provider_message_id=provider_message_id or current.provider_message_id,
            )
            self._records[tracking_id] = updated
            return updated

    def get(self, tracking_id: str) -> TrackingRecord | None:
        with self._lock:
            return self._records.get(tracking_id)

    def list_all(self) -> list[TrackingRecord]:
        """Snapshot of every record, newest ``created_at`` first."""
        with self._lock:
            # Later insertions win ties on equal timestamps.
            snapshot = list(reversed(self._records.values()))
        return sorted(snapshot, key=lambda record: record.created_at, reverse=True)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, tracking_id: object) -> bool:
        with self._lock:
            return tracking_id in self._records

    def _next_stamp(self, previous: datetime) -> datetime:
        now = self._clock()
        if now <= previous:
            now = previous + _TICK
        return now
