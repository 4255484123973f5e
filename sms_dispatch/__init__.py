"""
sms-dispatch — Outbound SMS dispatch and delivery-status tracking.

Backs the SMS account dashboard. Owns everything from "I have a recipient
and a message body" to "here's the tracking record and what happened to
it." The consuming app retains everything around it (who may send, credit
deduction, message history views).

Quick start — simulation mode (no network, no credentials)::

    from sms_dispatch import SMSSettings, build_service

    service = build_service(SMSSettings(simulation_mode=True))
    result = service.send("+15551234567", "hi")
    if result.success:
        print(service.get_message(result.tracking_id).status)  # sent

Quick start — Twilio::

    from sms_dispatch import SMSSettings, build_service

    service = build_service(SMSSettings(
        simulation_mode=False,
        provider="twilio",
        account_identifier="AC...",
        secret_token="...",
        sender_identity="+14155238886",
    ))
    if not service.test_connection().success:
        ...

Bulk::

    result = service.send_bulk(["+15551230001", "+15551230002"], "promo")
    print(result.tracking_ids, result.failed_count)

Wiring by hand (e.g. in tests)::

    from sms_dispatch import Dispatcher, SimulatedOutcome, SimulatedProvider, StatusPoller, TrackingStore

    store = TrackingStore()
    poller = StatusPoller(store, SimulatedOutcome(), delay=lambda: 0.0, sleep=lambda _: None,
                          scheduler=lambda _delay, callback: callback())
    dispatcher = Dispatcher(store, SimulatedProvider(), poller)

Module overview
---------------
- ``types``       — TrackingRecord, MessageStatus, result objects, ProviderConfig
- ``status``      — Legal status transitions
- ``store``       — TrackingStore (thread-safe, in-memory)
- ``providers/``  — SimulatedProvider, TwilioSMSProvider, MessageBirdSMSProvider
- ``dispatcher``  — Dispatcher: single sends with tracking
- ``poller``      — StatusPoller and its resolvers
- ``bulk``        — BulkCoordinator
- ``settings``    — SMSSettings (environment configuration)
- ``service``     — SMSService facade and builders

What this library does NOT own (stays in the consuming app):
- Credit balances and deduction on successful sends
- Users, packages, transactions and their persistence
- Message history presentation
"""

from .bulk import BulkCoordinator
from .dispatcher import Dispatcher, new_tracking_id
from .exceptions import AdapterUnavailable, DuplicateId, InvalidInput, SMSDispatchError
from .poller import ProviderStatusResolver, SimulatedOutcome, StatusPoller, StatusResolver
from .providers import MessageBirdSMSProvider, SimulatedProvider, SMSProvider, TwilioSMSProvider
from .service import SMSService, build_provider, build_service
from .settings import SMSSettings
from .status import can_transition, next_statuses
from .store import TrackingStore
from .types import (
    BulkResult,
    ConnectionResult,
    MessageStatus,
    ProviderConfig,
    SendResult,
    StatusReport,
    TrackingRecord,
    TransmitResult,
)

__all__ = [
    # Service
    "SMSService",
    "SMSSettings",
    "build_provider",
    "build_service",
    # Core
    "BulkCoordinator",
    "Dispatcher",
    "StatusPoller",
    "TrackingStore",
    "new_tracking_id",
    # Poll resolvers
    "ProviderStatusResolver",
    "SimulatedOutcome",
    "StatusResolver",
    # Providers
    "SMSProvider",
    "MessageBirdSMSProvider",
    "SimulatedProvider",
    "TwilioSMSProvider",
    # State machine
    "can_transition",
    "next_statuses",
    # Types
    "BulkResult",
    "ConnectionResult",
    "MessageStatus",
    "ProviderConfig",
    "SendResult",
    "StatusReport",
    "TrackingRecord",
    "TransmitResult",
    # Errors
    "AdapterUnavailable",
    "DuplicateId",
    "InvalidInput",
    "SMSDispatchError",
]
