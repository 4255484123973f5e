"""Base protocol for SMS providers."""

from __future__ import annotations

from typing import Protocol

from sms_dispatch.types import ConnectionResult, StatusReport, TransmitResult


class SMSProvider(Protocol):
    """Interface that all SMS providers must implement.

    Ordinary provider-side failures (invalid number, outage, bad credentials)
    come back as ``TransmitResult(success=False)``. Only unexpected transport
    errors may raise out of :meth:`transmit`.
    """

    def is_configured(self) -> bool:
        """Report whether the credentials this provider needs are present."""
        ...

    def transmit(self, recipient: str, content: str) -> TransmitResult:
        """Send an SMS and return the normalized result."""
        ...

    def fetch_status(self, provider_message_id: str) -> StatusReport | None:
        """Fetch current delivery status for a previously sent message.

        Returns None if the provider has no answer for the message.
        """
        ...

    def test_connection(self) -> ConnectionResult:
        """Validate credentials without sending a message. Never raises."""
        ...
