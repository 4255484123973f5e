"""Shared test fixtures for the sms_dispatch library."""

import pytest

from sms_dispatch import (
    Dispatcher,
    ProviderConfig,
    SimulatedOutcome,
    SimulatedProvider,
    StatusPoller,
    TrackingStore,
)


@pytest.fixture
def twilio_config() -> ProviderConfig:
    return ProviderConfig(
        account_identifier="ACtest123",
        secret_token="test_token_456",
        sender_identity="+14155238886",
        status_callback="https://example.com/webhook/sms-status",
    )


@pytest.fixture
def messagebird_config() -> ProviderConfig:
    return ProviderConfig(secret_token="live_mb_key", sender_identity="Farzam")


@pytest.fixture
def store() -> TrackingStore:
    return TrackingStore()


@pytest.fixture
def simulated_provider() -> SimulatedProvider:
    return SimulatedProvider()


@pytest.fixture
def deferred_polls() -> list:
    """Scheduled poll callbacks, collected so a test can fire them later."""
    return []


@pytest.fixture
def deferred_poller(store: TrackingStore, deferred_polls: list) -> StatusPoller:
    return StatusPoller(
        store,
        SimulatedOutcome(delivery_rate=1.0),
        delay=lambda: 0.0,
        sleep=lambda _: None,
        scheduler=lambda _delay, callback: deferred_polls.append(callback),
    )


@pytest.fixture
def dispatcher(store: TrackingStore, simulated_provider: SimulatedProvider, deferred_poller: StatusPoller) -> Dispatcher:
    return Dispatcher(store, simulated_provider, deferred_poller)
