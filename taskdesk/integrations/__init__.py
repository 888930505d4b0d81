"""
External integrations for taskdesk
- whatsapp: Twilio-backed WhatsApp transport and webhook parsing
"""

from .whatsapp import (
    IncomingMessage,
    SendResult,
    TransportNotConfiguredError,
    WhatsAppTransport,
    parse_incoming_webhook,
)

__all__ = [
    'IncomingMessage',
    'SendResult',
    'TransportNotConfiguredError',
    'WhatsAppTransport',
    'parse_incoming_webhook',
]
