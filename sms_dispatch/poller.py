"""Delivery-status polling.

After a send is accepted, the dispatcher hands the tracking id to a
:class:`StatusPoller`, which later advances the record to ``delivered`` or
``failed``. Where the answer comes from is a pluggable resolver: either a
weighted-random simulation or a live lookup against the provider.

Polls are fire-and-forget. A poll that never runs leaves the record in
``sent``; nothing is retried.
"""

from __future__ import annotations

import logging
import random
import threading
import time
from typing import TYPE_CHECKING, Any, Callable, Protocol

from .types import MessageStatus, StatusReport, TrackingRecord

if TYPE_CHECKING:
    from .providers.base import SMSProvider
    from .store import TrackingStore

logger = logging.getLogger(__name__)

DEFAULT_INITIAL_DELAY_SECONDS = 5.0
DEFAULT_MIN_DELAY_SECONDS = 2.0
DEFAULT_MAX_DELAY_SECONDS = 5.0

Scheduler = Callable[[float, Callable[[], None]], Any]


def timer_scheduler(delay: float, callback: Callable[[], None]) -> threading.Timer:
    """Run ``callback`` on a daemon timer thread after ``delay`` seconds."""
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


def random_delay(
    low: float = DEFAULT_MIN_DELAY_SECONDS,
    high: float = DEFAULT_MAX_DELAY_SECONDS,
    *,
    rng: random.Random | None = None,
) -> Callable[[], float]:
    """Build a delay function drawing uniformly from ``[low, high]`` seconds."""
    source = rng or random.Random()
    return lambda: source.uniform(low, high)


class StatusResolver(Protocol):
    """Decides what a tracked message's status should become next."""

    def resolve(self, record: TrackingRecord) -> StatusReport | None:
        """Return the next status, or None when there is nothing new."""
        ...


class SimulatedOutcome:
    """Weighted-random stand-in for provider delivery reports.

    ``sent`` becomes ``delivered`` with probability ``delivery_rate``,
    otherwise ``failed``. A record still ``queued`` becomes ``sent`` with
    probability ``send_rate``, otherwise ``failed``.
    """

    def __init__(
        self,
        *,
        delivery_rate: float = 0.9,
        send_rate: float = 0.95,
        rng: random.Random | None = None,
    ) -> None:
        self.delivery_rate = delivery_rate
        self.send_rate = send_rate
        self._rng = rng or random.Random()

    def resolve(self, record: TrackingRecord) -> StatusReport | None:
        if record.status is MessageStatus.SENT:
            if self._rng.random() < self.delivery_rate:  # noqa: S311
                return StatusReport(status=MessageStatus.DELIVERED)
            return StatusReport(status=MessageStatus.FAILED, error_detail="Delivery failed")
        if record.status is MessageStatus.QUEUED:
            if self._rng.random() < self.send_rate:  # noqa: S311
                return StatusReport(status=MessageStatus.SENT)
            return StatusReport(status=MessageStatus.FAILED, error_detail="Failed to send message")
        return None


class ProviderStatusResolver:
    """Asks the live provider for the message's delivery status."""

    def __init__(self, provider: SMSProvider) -> None:
        self.provider = provider

    def resolve(self, record: TrackingRecord) -> StatusReport | None:
        if not record.provider_message_id:
            return None
        return self.provider.fetch_status(record.provider_message_id)


class StatusPoller:
    """Advances tracking records after the send call has returned.

    Usage::

        poller = StatusPoller(store, SimulatedOutcome())
        poller.schedule(tracking_id)  # returns immediately

    Tests swap in zero delays and an immediate scheduler::

        poller = StatusPoller(
            store,
            SimulatedOutcome(delivery_rate=1.0),
            delay=lambda: 0.0,
            sleep=lambda _: None,
            scheduler=lambda _delay, callback: callback(),
        )
    """

    def __init__(
        self,
        store: TrackingStore,
        resolver: StatusResolver,
        *,
        delay: Callable[[], float] | None = None,
        sleep: Callable[[float], None] = time.sleep,
        scheduler: Scheduler = timer_scheduler,
        initial_delay: float = DEFAULT_INITIAL_DELAY_SECONDS,
    ) -> None:
        self.store = store
        self.resolver = resolver
        self._delay = delay or random_delay()
        self._sleep = sleep
        self._scheduler = scheduler
        self._initial_delay = initial_delay

    def schedule(self, tracking_id: str) -> Any:
        """Queue a best-effort poll for ``tracking_id`` and return at once.

        The timer covers both the initial delay and the randomized carrier
        latency, so the scheduled run resolves without sleeping again.
        """
        wait = self._initial_delay + self._delay()
        return self._scheduler(wait, lambda: self._run(tracking_id))

    def poll(self, tracking_id: str) -> TrackingRecord | None:
        """Wait a randomized carrier latency, then apply the resolver's outcome.

        Returns the resulting record, or None for an unknown id. Records
        already in a terminal status are returned untouched.
        """
        record = self.store.get(tracking_id)
        if record is None or record.is_terminal:
            return record

        self._sleep(self._delay())
        return self._advance(tracking_id)

    def _advance(self, tracking_id: str) -> TrackingRecord | None:
        record = self.store.get(tracking_id)
        if record is None or record.is_terminal:
            return record

        report = self.resolver.resolve(record)
        if report is None or report.status == record.status:
            return record

        updated = self.store.update(tracking_id, report.status, report.error_detail)
        if updated is not None:
            logger.info("Message %s is now %s", tracking_id, updated.status.value)
        return updated

    def _run(self, tracking_id: str) -> None:
        try:
            self._advance(tracking_id)
        except Exception:
            logger.exception("Status poll failed for %s", tracking_id)
