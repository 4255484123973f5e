"""MessageBird SMS provider."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from sms_dispatch.types import (
    ConnectionResult,
    MessageStatus,
    ProviderConfig,
    StatusReport,
    TransmitResult,
)

logger = logging.getLogger(__name__)

MESSAGEBIRD_API_BASE = "https://rest.messagebird.com"
DEFAULT_TIMEOUT_SECONDS = 10.0

_RECIPIENT_STATUS_MAP: dict[str, MessageStatus] = {
    "scheduled": MessageStatus.QUEUED,
    "sent": MessageStatus.SENT,
    "buffered": MessageStatus.SENT,
    "delivered": MessageStatus.DELIVERED,
    "expired": MessageStatus.FAILED,
    "delivery_failed": MessageStatus.FAILED,
}


class MessageBirdSMSProvider:
    """Sends SMS messages via the MessageBird REST API.

    Only the access key (``secret_token``) and originator
    (``sender_identity``) are used; ``account_identifier`` is ignored.
    """

    def __init__(self, config: ProviderConfig, *, base_url: str = MESSAGEBIRD_API_BASE) -> None:
        self._config = config
        self._base_url = base_url.rstrip("/")
        self._client = httpx.Client(timeout=DEFAULT_TIMEOUT_SECONDS)

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def __enter__(self) -> MessageBirdSMSProvider:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def is_configured(self) -> bool:
        return self._config.is_complete("secret_token", "sender_identity")

    def transmit(self, recipient: str, content: str) -> TransmitResult:
        """Send an SMS via ``POST /messages``.

        Non-2xx responses become failed results. Transport errors and
        unparseable bodies propagate.
        """
        if not self.is_configured():
            return TransmitResult.fail("MessageBird API key not configured")

        payload = {
            "recipients": [recipient],
            "originator": self._config.sender_identity,
            "body": content,
        }
        response = self._client.post(
            f"{self._base_url}/messages",
            json=payload,
            headers=self._headers(),
        )
        if response.is_success:
            message_id = response.json().get("id")
            logger.info("MessageBird SMS accepted: id=%s", message_id)
            return TransmitResult.ok(provider_message_id=message_id)

        detail, code = _first_error(_safe_json(response))
        logger.error(
            "MessageBird send failed. Status: %s, code=%s msg=%s",
            response.status_code,
            code,
            detail,
        )
        return TransmitResult.fail(
            detail or "Failed to send SMS",
            error_code=code or str(response.status_code),
        )

    def fetch_status(self, provider_message_id: str) -> StatusReport | None:
        """Look up the recipient status of a sent message."""
        if not self.is_configured():
            return None
        try:
            response = self._client.get(
                f"{self._base_url}/messages/{provider_message_id}",
                headers=self._headers(),
            )
            if not response.is_success:
                logger.error(
                    "Failed to fetch SMS status for %s: HTTP %s",
                    provider_message_id,
                    response.status_code,
                )
                return None
            items = response.json().get("recipients", {}).get("items") or []
        except Exception as exc:
            logger.error("Failed to fetch SMS status for %s: %s", provider_message_id, exc)
            return None

        if not items:
            return None
        raw_status = str(items[0].get("status") or "").lower()
        status = _RECIPIENT_STATUS_MAP.get(raw_status)
        if status is None:
            logger.warning("Unknown MessageBird recipient status received: %s", raw_status)
            return None
        error_detail = "Delivery failed" if status is MessageStatus.FAILED else None
        return StatusReport(status=status, error_detail=error_detail)

    def test_connection(self) -> ConnectionResult:
        """Look up the account balance to validate the access key."""
        if not self._config.is_complete("secret_token"):
            return ConnectionResult(success=False, error_detail="MessageBird API key not configured")
        try:
            response = self._client.get(f"{self._base_url}/balance", headers=self._headers())
            if response.is_success:
                return ConnectionResult(success=True)
            detail, _ = _first_error(_safe_json(response))
            return ConnectionResult(
                success=False,
                error_detail=detail
                or f"API returned error: {response.status_code} {response.reason_phrase}",
            )
        except Exception as exc:
            logger.exception("Unexpected error testing MessageBird connection")
            return ConnectionResult(success=False, error_detail=str(exc))

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"AccessKey {self._config.secret_token}"}


def _first_error(data: dict[str, Any]) -> tuple[str | None, str | None]:
    """Pull ``(description, code)`` from a MessageBird error envelope."""
    errors = data.get("errors") or []
    if not errors:
        return None, None
    first = errors[0]
    code = first.get("code")
    return first.get("description"), str(code) if code is not None else None


def _safe_json(response: httpx.Response) -> dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
