"""Core types for the SMS dispatch library."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class MessageStatus(str, Enum):
    """Lifecycle status of a tracked outbound message."""

    QUEUED = "queued"
    SENT = "sent"
    DELIVERED = "delivered"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """True for statuses no further transition may leave."""
        return self in {MessageStatus.DELIVERED, MessageStatus.FAILED}


@dataclass(frozen=True, slots=True)
class TrackingRecord:
    """Local record of one outbound message, keyed by a locally generated id.

    Records are immutable; the tracking store replaces a record wholesale
    whenever a transition is applied.
    """

    id: str
    recipient: str
    content: str
    status: MessageStatus
    created_at: datetime
    updated_at: datetime
    error_detail: str | None = None
    provider_message_id: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


# ── Provider-facing results ───────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class TransmitResult:
    """Normalized response of a single provider transmission."""

    success: bool
    provider_message_id: str | None = None
    error_detail: str | None = None
    error_code: str | None = None

    @classmethod
    def ok(cls, provider_message_id: str | None = None) -> TransmitResult:
        return cls(success=True, provider_message_id=provider_message_id)

    @classmethod
    def fail(
        cls,
        error_detail: str,
        *,
        error_code: str | None = None,
    ) -> TransmitResult:
        return cls(success=False, error_detail=error_detail, error_code=error_code)


@dataclass(frozen=True, slots=True)
class ConnectionResult:
    """Outcome of a credential check."""

    success: bool
    error_detail: str | None = None


@dataclass(frozen=True, slots=True)
class StatusReport:
    """A provider's (or the simulator's) answer about a message's status."""

    status: MessageStatus
    error_detail: str | None = None


# ── Caller-facing results ─────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class SendResult:
    """Result of a single send, as returned to UI/API callers."""

    success: bool
    tracking_id: str | None = None
    provider_message_id: str | None = None
    error_detail: str | None = None


@dataclass(frozen=True, slots=True)
class BulkResult:
    """Aggregate result of sending one body to many recipients."""

    success: bool
    tracking_ids: list[str] = field(default_factory=list)
    failed_count: int = 0
    error_detail: str | None = None


# ── Provider configuration ────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class ProviderConfig:
    """Credentials and sender identity for a live SMS provider.

    ``account_identifier`` is the Twilio Account SID; MessageBird ignores it.
    ``secret_token`` is the Twilio auth token or MessageBird access key.
    ``sender_identity`` is the from-number or alphanumeric originator.
    """

    account_identifier: str = ""
    secret_token: str = ""
    sender_identity: str = ""
    status_callback: str | None = None

    def is_complete(self, *fields: str) -> bool:
        """Check that the named credential fields are non-empty."""
        names = fields or ("account_identifier", "secret_token", "sender_identity")
        return all(str(getattr(self, name) or "").strip() for name in names)
