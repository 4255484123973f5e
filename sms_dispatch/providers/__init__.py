"""SMS providers."""

from .base import SMSProvider
from .messagebird import MessageBirdSMSProvider
from .simulated import SimulatedProvider
from .twilio import TwilioSMSProvider

__all__ = ["MessageBirdSMSProvider", "SMSProvider", "SimulatedProvider", "TwilioSMSProvider"]
