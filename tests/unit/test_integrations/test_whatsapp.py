"""
Unit tests for the Twilio WhatsApp transport and webhook helpers.
"""

from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from twilio.base.exceptions import TwilioRestException

import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent))

from taskdesk.integrations.whatsapp import (
    SendResult,
    TransportNotConfiguredError,
    WhatsAppTransport,
    empty_twiml,
    is_e164,
    normalize_number,
    parse_incoming_webhook,
)


class TestNumbers:

    @pytest.mark.parametrize("raw, expected", [
        ("whatsapp:+34600111222", "+34600111222"),
        ("+34 600-111-222", "+34600111222"),
        ("0034600111222", "+34600111222"),
        ("600 111 222", "+34600111222"),
        ("(415) 555 0100", "+344155550100"),
        ("", ""),
    ])
    def test_normalize_number(self, raw, expected):
        assert normalize_number(raw) == expected

    def test_custom_country_code(self):
        assert normalize_number("4155550100", default_country_code="+1") == "+14155550100"

    @pytest.mark.parametrize("number, valid", [
        ("+34600111222", True),
        ("+14155550100", True),
        ("34600111222", False),
        ("+0123", False),
        ("+34 600", False),
        ("", False),
        (None, False),
    ])
    def test_is_e164(self, number, valid):
        assert is_e164(number) is valid


class TestWebhook:

    def test_parse(self):
        message = parse_incoming_webhook({
            "From": "whatsapp:+34600111222", "Body": "  create a task  ", "MessageSid": "SM9",
        })
        assert message.from_number == "+34600111222"
        assert message.body == "create a task"
        assert message.message_id == "SM9"

    @pytest.mark.parametrize("form", [{"Body": "hi"}, {"From": "whatsapp:+34600111222"}, {}])
    def test_missing_fields(self, form):
        with pytest.raises(ValueError):
            parse_incoming_webhook(form)

    def test_empty_twiml(self):
        xml = empty_twiml()
        assert xml.startswith("<?xml")
        assert "<Response" in xml
        assert "<Message" not in xml


class TestTransport:

    @pytest.fixture
    def twilio_client(self):
        client = MagicMock()
        client.messages.create.return_value = SimpleNamespace(sid="SM123")
        return client

    @pytest.fixture
    def transport(self, twilio_client):
        return WhatsAppTransport(from_number="+14155238886", client=twilio_client)

    @pytest.mark.asyncio
    async def test_send(self, transport, twilio_client):
        result = await transport.send_message("+34600111222", "hola")

        assert result == SendResult(success=True, message_id="SM123")
        twilio_client.messages.create.assert_called_once_with(
            body="hola", from_="whatsapp:+14155238886", to="whatsapp:+34600111222",
        )

    @pytest.mark.asyncio
    async def test_prefixed_destination_kept(self, transport, twilio_client):
        await transport.send_message("whatsapp:+34600111222", "hola")
        assert twilio_client.messages.create.call_args.kwargs["to"] == "whatsapp:+34600111222"

    @pytest.mark.asyncio
    async def test_twilio_error_reported(self, transport, twilio_client):
        twilio_client.messages.create.side_effect = TwilioRestException(
            400, "https://api.twilio.com/Messages", msg="Invalid 'To' number",
        )

        result = await transport.send_message("+34600111222", "hola")

        assert not result.success
        assert result.error == "Invalid 'To' number"
        assert result.to_dict() == {"success": False, "messageId": None, "error": "Invalid 'To' number"}

    @pytest.mark.asyncio
    async def test_not_configured_raises(self):
        transport = WhatsAppTransport()

        with pytest.raises(TransportNotConfiguredError):
            await transport.send_message("+34600111222", "hola")

    def test_from_env(self):
        env = {"TWILIO_ACCOUNT_SID": "AC1", "TWILIO_AUTH_TOKEN": "tok", "TWILIO_PHONE_NUMBER": "+14155238886"}
        with patch.dict("os.environ", env, clear=True):
            transport = WhatsAppTransport.from_env()

        assert transport.configured
        assert transport.status() == {"configured": True, "phoneConfigured": True, "phoneNumber": "+14155238886"}

    def test_status_without_credentials(self):
        with patch.dict("os.environ", {}, clear=True):
            transport = WhatsAppTransport.from_env()

        assert not transport.configured
        assert transport.status()["configured"] is False

    def test_status_without_sender(self):
        transport = WhatsAppTransport(account_sid="AC1", auth_token="tok")

        status = transport.status()

        assert status["configured"] is True
        assert status["phoneConfigured"] is False
        assert not transport.configured
