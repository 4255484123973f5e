"""Bulk sending: one body, many recipients."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from concurrent.futures import ThreadPoolExecutor
from functools import reduce
from typing import TYPE_CHECKING, Iterable

from .dispatcher import validate_message
from .exceptions import InvalidInput
from .types import BulkResult, SendResult

if TYPE_CHECKING:
    from .dispatcher import Dispatcher

logger = logging.getLogger(__name__)

NO_RECIPIENTS_DETAIL = "no recipients"


class BulkCoordinator:
    """Drives single sends for many recipients and folds the outcomes.

    Sends run one at a time by default to stay under provider rate limits.
    ``max_concurrency`` above 1 sends through a bounded thread pool instead;
    either way each recipient is independent and results are folded in
    recipient order.
    """

    def __init__(self, dispatcher: Dispatcher, *, max_concurrency: int = 1) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.dispatcher = dispatcher
        self.max_concurrency = max_concurrency

    def send_bulk(self, recipients: Iterable[str], content: str) -> BulkResult:
        """Send ``content`` to every recipient.

        ``success`` is True when at least one recipient was accepted. An
        empty recipient list is reported as a failed result without any
        send being attempted.

        Raises:
            InvalidInput: content is empty.
            AdapterUnavailable: no configured provider.
        """
        recipients = list(recipients)
        if not recipients:
            return BulkResult(success=False, error_detail=NO_RECIPIENTS_DETAIL)

        if not content or not content.strip():
            raise InvalidInput("Message content is required")
        self.dispatcher.require_provider()

        outcomes = self._send_all(recipients, content)
        result = reduce(_fold, outcomes, BulkResult(success=False))

        logger.info(
            "Bulk send finished: %d accepted, %d failed",
            len(result.tracking_ids),
            result.failed_count,
        )
        return result

    async def send_bulk_async(self, recipients: Iterable[str], content: str) -> BulkResult:
        """Bulk send asynchronously (runs sync send_bulk in a thread)."""
        return await asyncio.to_thread(self.send_bulk, recipients, content)

    def _send_all(self, recipients: list[str], content: str) -> list[SendResult]:
        if self.max_concurrency == 1:
            return [self._send_one(recipient, content) for recipient in recipients]
        with ThreadPoolExecutor(max_workers=self.max_concurrency) as pool:
            return list(pool.map(lambda recipient: self._send_one(recipient, content), recipients))

    def _send_one(self, recipient: str, content: str) -> SendResult:
        try:
            validate_message(recipient, content)
            return self.dispatcher.send(recipient, content)
        except InvalidInput as exc:
            logger.warning("Skipping recipient %r: %s", recipient, exc)
            return SendResult(success=False, error_detail=str(exc))


def _fold(acc: BulkResult, outcome: SendResult) -> BulkResult:
    if outcome.success and outcome.tracking_id:
        return dataclasses.replace(
            acc,
            success=True,
            tracking_ids=[*acc.tracking_ids, outcome.tracking_id],
        )
    return dataclasses.replace(acc, failed_count=acc.failed_count + 1)
