"""Process-wide wiring of store, provider, poller, dispatcher and bulk sender.

The provider is chosen once here from the simulation flag, and the poll
resolver follows the provider in use. Toggling the flag later means
building a new service; records already tracked by the old store are
unaffected.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable

from .bulk import BulkCoordinator
from .dispatcher import Dispatcher
from .poller import (
    ProviderStatusResolver,
    Scheduler,
    SimulatedOutcome,
    StatusPoller,
    StatusResolver,
    random_delay,
    timer_scheduler,
)
from .providers.base import SMSProvider
from .providers.messagebird import MessageBirdSMSProvider
from .providers.simulated import SimulatedProvider
from .providers.twilio import TwilioSMSProvider
from .settings import SMSSettings
from .store import TrackingStore
from .types import BulkResult, ConnectionResult, SendResult, TrackingRecord

logger = logging.getLogger(__name__)


def build_provider(settings: SMSSettings) -> SMSProvider:
    """Pick the provider the settings ask for."""
    if settings.simulation_mode:
        logger.info("SMS simulation mode enabled: no real messages will be sent")
        return SimulatedProvider()
    config = settings.provider_config()
    if settings.provider == "messagebird":
        return MessageBirdSMSProvider(config)
    return TwilioSMSProvider(config)


def build_resolver(settings: SMSSettings, provider: SMSProvider) -> StatusResolver:
    """Pick the poll resolver matching the provider actually in use."""
    if isinstance(provider, SimulatedProvider):
        return SimulatedOutcome(delivery_rate=settings.delivery_rate)
    return ProviderStatusResolver(provider)


@dataclass
class SMSService:
    """Everything a dashboard needs to send and track messages."""

    store: TrackingStore
    provider: SMSProvider
    poller: StatusPoller
    dispatcher: Dispatcher
    bulk: BulkCoordinator

    def send(self, recipient: str, content: str) -> SendResult:
        return self.dispatcher.send(recipient, content)

    def send_bulk(self, recipients: Iterable[str], content: str) -> BulkResult:
        return self.bulk.send_bulk(recipients, content)

    def test_connection(self) -> ConnectionResult:
        return self.dispatcher.test_connection()

    def get_message(self, tracking_id: str) -> TrackingRecord | None:
        return self.store.get(tracking_id)

    def list_messages(self) -> list[TrackingRecord]:
        return self.store.list_all()

    def close(self) -> None:
        """Close the provider's HTTP client, if it holds one."""
        close = getattr(self.provider, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> SMSService:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


def build_service(
    settings: SMSSettings | None = None,
    *,
    store: TrackingStore | None = None,
    provider: SMSProvider | None = None,
    scheduler: Scheduler = timer_scheduler,
) -> SMSService:
    """Wire an :class:`SMSService` from settings.

    ``store`` and ``provider`` override what the settings would build.
    ``scheduler`` decides how status polls are deferred.
    """
    settings = settings if settings is not None else SMSSettings()
    store = store if store is not None else TrackingStore()
    provider = provider if provider is not None else build_provider(settings)
    poller = StatusPoller(
        store,
        build_resolver(settings, provider),
        delay=random_delay(settings.poll_min_delay, settings.poll_max_delay),
        scheduler=scheduler,
        initial_delay=settings.poll_initial_delay,
    )
    dispatcher = Dispatcher(store, provider, poller, sender_name=settings.sender_name)
    bulk = BulkCoordinator(dispatcher, max_concurrency=settings.bulk_max_concurrency)
    return SMSService(store=store, provider=provider, poller=poller, dispatcher=dispatcher, bulk=bulk)
