"""Environment-driven configuration for the SMS service.

Reads ``SMS_*`` variables (and an optional ``.env`` file)::

    SMS_SIMULATION_MODE=false
    SMS_PROVIDER=twilio
    SMS_ACCOUNT_IDENTIFIER=AC...
    SMS_SECRET_TOKEN=...
    SMS_SENDER_IDENTITY=+14155238886
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .types import ProviderConfig


class SMSSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SMS_",
        env_file=".env",
        extra="ignore",
        validate_assignment=True,
    )

    simulation_mode: bool = True  # Set to False to send real SMS
    provider: Literal["twilio", "messagebird"] = "twilio"

    account_identifier: str = ""
    secret_token: str = ""
    sender_identity: str = ""
    status_callback: str | None = None

    # Prepended to every transmitted body as "Message from <name>:"
    sender_name: str | None = None

    poll_initial_delay: float = Field(default=5.0, ge=0)
    poll_min_delay: float = Field(default=2.0, ge=0)
    poll_max_delay: float = Field(default=5.0, ge=0)
    delivery_rate: float = Field(default=0.9, ge=0, le=1)

    bulk_max_concurrency: int = Field(default=1, ge=1)

    @model_validator(mode="after")
    def check_poll_window(self) -> SMSSettings:
        if self.poll_min_delay > self.poll_max_delay:
            raise ValueError("poll_min_delay must not exceed poll_max_delay")
        return self

    def provider_config(self) -> ProviderConfig:
        return ProviderConfig(
            account_identifier=self.account_identifier,
            secret_token=self.secret_token,
            sender_identity=self.sender_identity,
            status_callback=self.status_callback,
        )
