"""Twilio SMS provider."""

from __future__ import annotations

import logging
from typing import Any

from twilio.base.exceptions import TwilioRestException  # type: ignore[import-untyped]
from twilio.http.http_client import TwilioHttpClient  # type: ignore[import-untyped]
from twilio.rest import Client  # type: ignore[import-untyped]

from sms_dispatch.types import (
    ConnectionResult,
    MessageStatus,
    ProviderConfig,
    StatusReport,
    TransmitResult,
)

logger = logging.getLogger(__name__)

MAX_SMS_CHARS = 1600
DEFAULT_TIMEOUT_SECONDS = 10.0

_FAILED_STATUSES = {"failed", "undelivered", "canceled"}


class TwilioSMSProvider:
    """Sends SMS messages via the Twilio REST API.

    The REST client is only built when the account SID, auth token and
    from-number are all present, so an unconfigured provider can still
    answer :meth:`test_connection` without any network call.
    """

    def __init__(self, config: ProviderConfig) -> None:
        self._config = config
        self._client: Any = None
        if self.is_configured():
            http_client = TwilioHttpClient(timeout=DEFAULT_TIMEOUT_SECONDS)
            self._client = Client(
                config.account_identifier,
                config.secret_token,
                http_client=http_client,
            )

    def is_configured(self) -> bool:
        return self._config.is_complete()

    def transmit(self, recipient: str, content: str) -> TransmitResult:
        """Send an SMS synchronously.

        Twilio API errors become failed results. Transport errors propagate.
        """
        if self._client is None:
            return TransmitResult.fail("Twilio credentials are not configured")

        body = content.strip()
        if not body:
            return TransmitResult.fail("No message body provided")
        if len(body) > MAX_SMS_CHARS:
            body = body[:MAX_SMS_CHARS]

        params: dict[str, Any] = {
            "to": recipient,
            "from_": self._config.sender_identity,
            "body": body,
        }
        if self._config.status_callback:
            params["status_callback"] = self._config.status_callback

        try:
            msg = self._client.messages.create(**params)
        except TwilioRestException as exc:
            logger.error("Twilio SMS API error: code=%s msg=%s", exc.code, exc.msg)
            return TransmitResult.fail(
                str(exc.msg or "Failed to send SMS"),
                error_code=str(exc.code) if exc.code else None,
            )

        status = (getattr(msg, "status", None) or "").lower()
        error_code = getattr(msg, "error_code", None)
        if status in _FAILED_STATUSES:
            detail = getattr(msg, "error_message", None) or "Failed to send SMS"
            logger.error("Twilio rejected SMS to %s: status=%s %s", recipient, status, detail)
            return TransmitResult.fail(detail, error_code=str(error_code) if error_code else None)

        sid = getattr(msg, "sid", None)
        logger.info("Twilio SMS accepted: sid=%s status=%s", sid, status or "unknown")
        return TransmitResult.ok(provider_message_id=sid)

    def fetch_status(self, provider_message_id: str) -> StatusReport | None:
        """Poll Twilio for current SMS delivery status."""
        if self._client is None:
            return None
        try:
            msg = self._client.messages(provider_message_id).fetch()
        except TwilioRestException as exc:
            logger.error("Failed to fetch SMS status for %s: %s", provider_message_id, exc)
            return None

        status = _map_twilio_status(getattr(msg, "status", None))
        error_detail = None
        if status is MessageStatus.FAILED:
            error_detail = getattr(msg, "error_message", None) or "Delivery failed"
        return StatusReport(status=status, error_detail=error_detail)

    def test_connection(self) -> ConnectionResult:
        """Fetch the account resource to validate the SID and auth token."""
        if self._client is None:
            return ConnectionResult(
                success=False,
                error_detail="SMS service not configured. Please set your API credentials.",
            )
        try:
            self._client.api.v2010.accounts(self._config.account_identifier).fetch()
        except TwilioRestException as exc:
            logger.error("Twilio connection test failed: code=%s msg=%s", exc.code, exc.msg)
            return ConnectionResult(
                success=False,
                error_detail=str(exc.msg or f"API returned error: {exc.status}"),
            )
        except Exception as exc:
            logger.exception("Unexpected error testing Twilio connection")
            return ConnectionResult(success=False, error_detail=str(exc))
        return ConnectionResult(success=True)


def _map_twilio_status(twilio_status: str | None) -> MessageStatus:
    """Map a Twilio message status string to our MessageStatus enum."""
    mapping: dict[str, MessageStatus] = {
        "accepted": MessageStatus.QUEUED,
        "scheduled": MessageStatus.QUEUED,
        "queued": MessageStatus.QUEUED,
        "sending": MessageStatus.QUEUED,
        "sent": MessageStatus.SENT,
        "delivered": MessageStatus.DELIVERED,
        "read": MessageStatus.DELIVERED,
        "received": MessageStatus.DELIVERED,
        "failed": MessageStatus.FAILED,
        "undelivered": MessageStatus.FAILED,
        "canceled": MessageStatus.FAILED,
    }
    if not twilio_status:
        return MessageStatus.QUEUED

    normalized_status = twilio_status.lower()
    if normalized_status in mapping:
        return mapping[normalized_status]

    logger.warning("Unknown Twilio message status received: %s", twilio_status)
    return MessageStatus.SENT
