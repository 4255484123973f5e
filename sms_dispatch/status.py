"""Message status state machine.

Models the pipeline "accepted locally → accepted by the provider →
confirmed on the handset", with failure possible at either hand-off.
Progress is monotonic: nothing leaves ``delivered`` or ``failed``.
"""

from __future__ import annotations

from .types import MessageStatus

_TRANSITIONS: dict[MessageStatus, frozenset[MessageStatus]] = {
    MessageStatus.QUEUED: frozenset({MessageStatus.SENT, MessageStatus.FAILED}),
    MessageStatus.SENT: frozenset({MessageStatus.DELIVERED, MessageStatus.FAILED}),
    MessageStatus.DELIVERED: frozenset(),
    MessageStatus.FAILED: frozenset(),
}


def next_statuses(current: MessageStatus) -> frozenset[MessageStatus]:
    """Return the statuses reachable in one step from ``current``."""
    return _TRANSITIONS[MessageStatus(current)]


def can_transition(current: MessageStatus, target: MessageStatus) -> bool:
    """Check whether ``current → target`` is a legal transition."""
    return MessageStatus(target) in next_statuses(current)
