"""
WhatsApp transport over Twilio.

Outgoing messages go through the Twilio REST client (run in a worker thread);
incoming messages arrive as form-encoded webhooks with From/Body/MessageSid.

Credentials come from the environment:
    TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN, TWILIO_PHONE_NUMBER
"""

import asyncio
import logging
import os
import re
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from twilio.base.exceptions import TwilioRestException
from twilio.rest import Client
from twilio.twiml.messaging_response import MessagingResponse

logger = logging.getLogger(__name__)

E164_PATTERN = re.compile(r"^\+[1-9]\d{1,14}$")
WHATSAPP_PREFIX = "whatsapp:"


class TransportNotConfiguredError(RuntimeError):
    """Raised when Twilio credentials or the sender number are missing."""


@dataclass
class SendResult:
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"success": self.success, "messageId": self.message_id, "error": self.error}


@dataclass
class IncomingMessage:
    from_number: str
    body: str
    message_id: Optional[str] = None


def is_e164(number: str) -> bool:
    return bool(E164_PATTERN.match(number or ""))


def normalize_number(number: str, default_country_code: str = "+34") -> str:
    """
    Bring a phone number to E.164.

    Strips the whatsapp: prefix, spaces, dashes and parentheses; "00" becomes
    "+"; numbers without a country code get default_country_code.
    """
    number = (number or "").strip()
    if number.startswith(WHATSAPP_PREFIX):
        number = number[len(WHATSAPP_PREFIX):]
    number = re.sub(r"[\s\-()]", "", number)
    if number.startswith("00"):
        number = "+" + number[2:]
    if number and not number.startswith("+"):
        number = default_country_code + number
    return number


def as_whatsapp_address(number: str) -> str:
    return number if number.startswith(WHATSAPP_PREFIX) else f"{WHATSAPP_PREFIX}{number}"


def parse_incoming_webhook(form: Mapping[str, Any]) -> IncomingMessage:
    """
    Read a Twilio WhatsApp webhook payload.

    Raises:
        ValueError: If From or Body is missing
    """
    sender = form.get("From")
    body = form.get("Body")
    if not sender or body is None:
        raise ValueError("Webhook payload must include From and Body")

    return IncomingMessage(
        from_number=normalize_number(str(sender)),
        body=str(body).strip(),
        message_id=form.get("MessageSid"),
    )


def empty_twiml() -> str:
    """Acknowledgement with no inline reply."""
    return str(MessagingResponse())


class WhatsAppTransport:
    """Sends WhatsApp messages through Twilio."""

    def __init__(self, account_sid: Optional[str] = None, auth_token: Optional[str] = None,
                 from_number: Optional[str] = None, client: Optional[Any] = None):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self._client = client

    @classmethod
    def from_env(cls) -> 'WhatsAppTransport':
        return cls(
            account_sid=os.environ.get("TWILIO_ACCOUNT_SID"),
            auth_token=os.environ.get("TWILIO_AUTH_TOKEN"),
            from_number=os.environ.get("TWILIO_PHONE_NUMBER"),
        )

    @property
    def configured(self) -> bool:
        return bool(self.from_number) and (self._client is not None or bool(self.account_sid and self.auth_token))

    def status(self) -> Dict[str, Any]:
        """Configuration status for the settings page."""
        if self._client is None and not (self.account_sid and self.auth_token):
            return {"configured": False, "phoneConfigured": False, "error": "Missing Twilio credentials (SID or token)"}
        if not self.from_number:
            return {"configured": True, "phoneConfigured": False, "error": "Missing WhatsApp sender number"}
        return {"configured": True, "phoneConfigured": True, "phoneNumber": self.from_number}

    def _get_client(self):
        if self._client is None:
            self._client = Client(self.account_sid, self.auth_token)
        return self._client

    async def send_message(self, to: str, body: str) -> SendResult:
        """
        Send a WhatsApp message.

        Args:
            to: Destination number in E.164 format (whatsapp: prefix optional)
            body: Message text

        Returns:
            SendResult; Twilio API errors are reported, not raised

        Raises:
            TransportNotConfiguredError: If credentials or sender are missing
        """
        if not self.configured:
            raise TransportNotConfiguredError("Twilio is not configured for WhatsApp")

        client = self._get_client()
        try:
            message = await asyncio.to_thread(
                client.messages.create,
                body=body,
                from_=as_whatsapp_address(self.from_number),
                to=as_whatsapp_address(to),
            )
        except TwilioRestException as e:
            logger.error("WhatsApp send to %s failed: %s", to, e.msg)
            return SendResult(success=False, error=str(e.msg))

        logger.info("WhatsApp message %s sent to %s", message.sid, to)
        return SendResult(success=True, message_id=message.sid)
