"""Exceptions raised for caller-contract violations.

Provider-side failures are never raised; they come back as results with
``success=False`` and an ``error_detail``.
"""


class SMSDispatchError(Exception):
    """Base class for sms_dispatch errors."""


class InvalidInput(SMSDispatchError, ValueError):
    """Recipient or message body is empty."""


class AdapterUnavailable(SMSDispatchError):
    """No provider is configured, or its credentials are missing."""


class DuplicateId(SMSDispatchError, KeyError):
    """A tracking id was reused. Indicates broken id generation."""

    def __init__(self, tracking_id: str) -> None:
        super().__init__(tracking_id)
        self.tracking_id = tracking_id

    def __str__(self) -> str:
        return f"Tracking id already exists: {self.tracking_id}"
