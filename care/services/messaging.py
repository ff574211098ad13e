"""
Outbound messaging gateway used for medication reminders.

Gateways are plain objects with a ``send(phone, body)`` method and are
constructed explicitly by the caller (see :func:`build_gateway`) and
passed into the reminder sweep, so no process-wide client state exists.
"""
from __future__ import annotations

import logging
from typing import Optional, Protocol

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from twilio.rest import Client

logger = logging.getLogger(__name__)


class MessageGateway(Protocol):
    def send(self, phone: str, body: str) -> Optional[str]: ...


class WhatsAppGateway:
    """Send WhatsApp messages through the Twilio REST API.

    Patient phone numbers are stored without the international prefix;
    ``country_code`` is prepended on every dispatch.  Errors raised by
    the Twilio client propagate to the caller.
    """

    def __init__(self, account_sid: str, auth_token: str, from_number: str,
                 country_code: str = '+2', client: Optional[Client] = None):
        self.from_number = from_number
        self.country_code = country_code
        self.client = client or Client(account_sid, auth_token)

    def address(self, phone: str) -> str:
        return f"whatsapp:{self.country_code}{phone}"

    def send(self, phone: str, body: str) -> str:
        msg = self.client.messages.create(
            from_=f"whatsapp:{self.from_number}",
            body=body,
            to=self.address(phone),
        )
        logger.info("Message sent to %s (sid=%s)", phone, msg.sid)
        return msg.sid


class LoggingGateway:
    """Development gateway: writes the message to the log instead of sending it."""

    def send(self, phone: str, body: str) -> None:
        logger.info("[messaging disabled] to=%s body=%s", phone, body)
        return None


def build_gateway() -> MessageGateway:
    if not settings.MESSAGING_ENABLE:
        return LoggingGateway()
    if not (settings.TWILIO_ACCOUNT_SID and settings.TWILIO_AUTH_TOKEN and settings.TWILIO_FROM_NUMBER):
        raise ImproperlyConfigured('TWILIO_ACCOUNT_SID/TWILIO_AUTH_TOKEN/TWILIO_FROM_NUMBER must be set when MESSAGING_ENABLE=1')
    return WhatsAppGateway(
        settings.TWILIO_ACCOUNT_SID,
        settings.TWILIO_AUTH_TOKEN,
        settings.TWILIO_FROM_NUMBER,
        country_code=settings.MESSAGING_COUNTRY_CODE,
    )
