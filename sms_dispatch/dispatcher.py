"""Dispatcher — the main entry point for sending a message.

The dispatcher wraps a provider with local tracking: every accepted call
gets a tracking record before the provider is contacted, the record is
moved to ``sent`` or ``failed`` from the provider's answer, and accepted
messages are handed to the status poller for delivery confirmation.
"""

from __future__ import annotations

import asyncio
import logging
import secrets
import string
import time
from typing import TYPE_CHECKING, Callable

from .exceptions import AdapterUnavailable, InvalidInput
from .types import ConnectionResult, MessageStatus, SendResult, TransmitResult

if TYPE_CHECKING:
    from .poller import StatusPoller
    from .providers.base import SMSProvider
    from .store import TrackingStore

logger = logging.getLogger(__name__)

TRANSPORT_FAILURE_DETAIL = "Unknown error occurred"

_ID_ALPHABET = string.ascii_lowercase + string.digits


def new_tracking_id() -> str:
    """Generate a process-unique tracking id: ``temp_<ms>_<random>``."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(10))
    return f"temp_{time.time_ns() // 1_000_000}_{suffix}"


class Dispatcher:
    """Sends single messages through a provider with local status tracking.

    Usage::

        store = TrackingStore()
        provider = SimulatedProvider()
        dispatcher = Dispatcher(store, provider, StatusPoller(store, SimulatedOutcome()))
        result = dispatcher.send("+15551234567", "hi")
        if result.success:
            print(store.get(result.tracking_id).status)  # MessageStatus.SENT
    """

    def __init__(
        self,
        store: TrackingStore,
        provider: SMSProvider | None,
        poller: StatusPoller | None = None,
        *,
        sender_name: str | None = None,
        id_factory: Callable[[], str] = new_tracking_id,
    ) -> None:
        self.store = store
        self.provider = provider
        self.poller = poller
        self.sender_name = sender_name
        self._id_factory = id_factory

    def send(self, recipient: str, content: str) -> SendResult:
        """Send one message and return as soon as the provider has answered.

        Raises:
            InvalidInput: recipient or content is empty.
            AdapterUnavailable: no configured provider.

        Both are raised before any tracking record exists. Provider failures
        are never raised; they come back with ``success=False``.
        """
        validate_message(recipient, content)
        provider = self.require_provider()

        tracking_id = self._id_factory()
        self.store.create(tracking_id, recipient, content)

        result = self._transmit(provider, tracking_id, recipient, content)

        if not result.success:
            record = self.store.update(tracking_id, MessageStatus.FAILED, result.error_detail)
            return SendResult(
                success=False,
                tracking_id=tracking_id,
                error_detail=record.error_detail if record else result.error_detail,
            )

        self.store.update(
            tracking_id,
            MessageStatus.SENT,
            provider_message_id=result.provider_message_id,
        )
        if self.poller is not None:
            try:
                self.poller.schedule(tracking_id)
            except Exception:
                # The message is already accepted; it just stays in ``sent``.
                logger.exception("Could not schedule status poll for %s", tracking_id)

        return SendResult(
            success=True,
            tracking_id=tracking_id,
            provider_message_id=result.provider_message_id,
        )

    async def send_async(self, recipient: str, content: str) -> SendResult:
        """Send a message asynchronously (runs sync send in a thread)."""
        return await asyncio.to_thread(self.send, recipient, content)

    def test_connection(self) -> ConnectionResult:
        """Check the configured provider's credentials."""
        if self.provider is None:
            return ConnectionResult(success=False, error_detail="No SMS provider configured")
        return self.provider.test_connection()

    def require_provider(self) -> SMSProvider:
        """Return the provider, or raise AdapterUnavailable."""
        if self.provider is None:
            raise AdapterUnavailable("No SMS provider configured")
        if not self.provider.is_configured():
            raise AdapterUnavailable("SMS service not configured. Please set your API credentials.")
        return self.provider

    def compose_body(self, content: str) -> str:
        """Return the body actually transmitted for ``content``."""
        if not self.sender_name:
            return content
        return f"Message from {self.sender_name}:\n\n{content}"

    def _transmit(
        self,
        provider: SMSProvider,
        tracking_id: str,
        recipient: str,
        content: str,
    ) -> TransmitResult:
        try:
            return provider.transmit(recipient, self.compose_body(content))
        except Exception:
            logger.exception("Transport failure sending %s to %s", tracking_id, recipient)
            return TransmitResult.fail(TRANSPORT_FAILURE_DETAIL)


def validate_message(recipient: str, content: str) -> None:
    """Reject empty or whitespace-only recipient/content."""
    if not recipient or not recipient.strip():
        raise InvalidInput("Recipient is required")
    if not content or not content.strip():
        raise InvalidInput("Message content is required")
