"""Simulated SMS provider.

Never touches the network. Records every transmission and returns
synthetic provider ids, so the whole dashboard can be demoed without
real credentials or SMS spend.
"""

from __future__ import annotations

import logging
import random
import uuid
from dataclasses import dataclass
from typing import Iterable

from sms_dispatch.types import ConnectionResult, MessageStatus, StatusReport, TransmitResult

logger = logging.getLogger(__name__)


@dataclass
class SimulatedSend:
    """Record of a message transmitted through the SimulatedProvider."""

    recipient: str
    content: str
    result: TransmitResult


class SimulatedProvider:
    """Provider that fakes every transmission locally.

    Usage::

        provider = SimulatedProvider()
        result = provider.transmit("+15551234567", "hi")
        assert result.success
        assert provider.sent[0].content == "hi"

    Failures can be injected for specific recipients, or at random::

        provider = SimulatedProvider(fail_recipients={"+15550000000"})
        provider = SimulatedProvider(failure_rate=0.5)
    """

    def __init__(
        self,
        *,
        fail_recipients: Iterable[str] = (),
        failure_rate: float = 0.0,
        rng: random.Random | None = None,
    ) -> None:
        self.fail_recipients = set(fail_recipients)
        self.failure_rate = failure_rate
        self._rng = rng or random.Random()
        self.sent: list[SimulatedSend] = []

    def is_configured(self) -> bool:
        return True

    def transmit(self, recipient: str, content: str) -> TransmitResult:
        if recipient in self.fail_recipients:
            result = TransmitResult.fail("Simulated failure", error_code="simulated")
        elif self.failure_rate > 0 and self._rng.random() < self.failure_rate:  # noqa: S311
            result = TransmitResult.fail("Simulated failure", error_code="simulated")
        else:
            result = TransmitResult.ok(provider_message_id=f"SM{uuid.uuid4().hex[:24]}")

        logger.info(
            "Simulated SMS to %s (%d chars): %s",
            recipient,
            len(content),
            result.provider_message_id or result.error_detail,
        )
        self.sent.append(SimulatedSend(recipient=recipient, content=content, result=result))
        return result

    def fetch_status(self, provider_message_id: str) -> StatusReport | None:
        for record in self.sent:
            if record.result.provider_message_id == provider_message_id:
                return StatusReport(status=MessageStatus.SENT)
        return None

    def test_connection(self) -> ConnectionResult:
        return ConnectionResult(success=True)

    def reset(self) -> None:
        """Clear all recorded transmissions."""
        self.sent.clear()
