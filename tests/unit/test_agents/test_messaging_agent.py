"""
Unit tests for the MessagingAgent.
Contact resolution, the research-and-send shortcut and delivery bookkeeping.
"""

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent))

from taskdesk.agents.base_agent import AgentRequest
from taskdesk.agents.context import MessagingContext
from taskdesk.agents.messaging_agent import MessagingAgent, canned_summary
from taskdesk.core.storage import MemoryStorage
from taskdesk.integrations.whatsapp import SendResult, TransportNotConfiguredError
from taskdesk.llm.client import FunctionCall, FunctionCallResult


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def mock_llm():
    llm = MagicMock()
    llm.complete_with_tools = AsyncMock(return_value=FunctionCallResult())
    return llm


@pytest.fixture
def transport():
    transport = MagicMock()
    transport.send_message = AsyncMock(return_value=SendResult(success=True, message_id="SM123"))
    return transport


@pytest.fixture
def agent(storage, mock_llm, transport):
    return MessagingAgent(storage, mock_llm, transport=transport)


async def add_contacts(storage):
    ana = await storage.create_whatsapp_contact({"name": "Ana García", "phone_number": "+34600111222"})
    luis = await storage.create_whatsapp_contact({"name": "Luis", "phone_number": "+34600333444"})
    return ana, luis


def request(text):
    return AgentRequest(user_input=text, context=MessagingContext())


class TestResolveContact:

    @pytest.mark.asyncio
    async def test_exact_name_case_insensitive(self, agent, storage):
        ana, _ = await add_contacts(storage)
        assert (await agent.resolve_contact("ana garcía")).id == ana.id

    @pytest.mark.asyncio
    async def test_partial_name(self, agent, storage):
        ana, _ = await add_contacts(storage)
        assert (await agent.resolve_contact("Ana")).id == ana.id

    @pytest.mark.asyncio
    async def test_phone_number_without_country_code(self, agent, storage):
        _, luis = await add_contacts(storage)
        assert (await agent.resolve_contact("600 333 444")).id == luis.id

    @pytest.mark.asyncio
    async def test_unknown(self, agent, storage):
        await add_contacts(storage)
        assert await agent.resolve_contact("Pedro") is None


class TestResearchAndSend:

    @pytest.mark.asyncio
    async def test_shortcut_skips_llm(self, agent, storage, mock_llm, transport):
        ana, _ = await add_contacts(storage)

        response = await agent.process(request("Find out the weather in Madrid and send it to Ana"))

        assert response.action == "send_message"
        mock_llm.complete_with_tools.assert_not_called()
        to, body = transport.send_message.call_args.args
        assert to == "+34600111222"
        assert "Weather update" in body

        messages = await storage.get_whatsapp_messages(ana.id)
        assert [(m.direction, m.status) for m in messages] == [("outgoing", "sent")]

    @pytest.mark.asyncio
    async def test_spanish_phrasing(self, agent, storage, transport):
        await add_contacts(storage)

        response = await agent.process(request("Averigua el clima en Sevilla y envíaselo a Luis"))

        assert response.action == "send_message"
        assert response.data["to"] == "+34600333444"

    @pytest.mark.asyncio
    async def test_unknown_contact_lists_directory(self, agent, storage, transport):
        await add_contacts(storage)

        response = await agent.process(request("Look up the news and send it to Pedro"))

        assert response.action == "error"
        assert "Pedro" in response.response
        assert len(response.data["contacts"]) == 2
        transport.send_message.assert_not_called()

    def test_canned_summary(self):
        assert "Weather update" in canned_summary("the weather in Madrid")
        assert "Quick note about the budget" in canned_summary("the budget")


class TestSendMessageTool:

    @pytest.mark.asyncio
    async def test_send_via_tool(self, agent, storage, mock_llm, transport):
        await add_contacts(storage)
        mock_llm.complete_with_tools.return_value = FunctionCallResult(function_call=FunctionCall(
            name="send_message", arguments=json.dumps({"contact": "Luis", "message": "See you at 5"}),
        ))

        response = await agent.process(request("tell Luis I'll see him at 5"))

        assert response.action == "send_message"
        assert response.data["messageId"] == "SM123"
        assert response.data["body"] == "See you at 5"

    @pytest.mark.asyncio
    async def test_failed_send_is_stored_and_reported(self, agent, storage, mock_llm, transport):
        ana, _ = await add_contacts(storage)
        transport.send_message.return_value = SendResult(success=False, error="invalid number")
        mock_llm.complete_with_tools.return_value = FunctionCallResult(function_call=FunctionCall(
            name="send_message", arguments=json.dumps({"contact": "Ana", "message": "hello"}),
        ))

        response = await agent.process(request("say hello to Ana"))

        assert response.action == "error"
        assert "invalid number" in response.response
        messages = await storage.get_whatsapp_messages(ana.id)
        assert messages[0].status == "failed"

    @pytest.mark.asyncio
    async def test_not_configured(self, storage, mock_llm):
        transport = MagicMock()
        transport.send_message = AsyncMock(side_effect=TransportNotConfiguredError("missing credentials"))
        agent = MessagingAgent(storage, mock_llm, transport=transport)
        await add_contacts(storage)
        mock_llm.complete_with_tools.return_value = FunctionCallResult(function_call=FunctionCall(
            name="send_message", arguments=json.dumps({"contact": "Ana", "message": "hi"}),
        ))

        response = await agent.process(request("say hi to Ana"))

        assert response.action == "error"
        assert "not configured" in response.response

    @pytest.mark.asyncio
    async def test_no_transport(self, storage, mock_llm):
        agent = MessagingAgent(storage, mock_llm)
        await add_contacts(storage)
        mock_llm.complete_with_tools.return_value = FunctionCallResult(function_call=FunctionCall(
            name="send_message", arguments=json.dumps({"contact": "Ana", "message": "hi"}),
        ))

        response = await agent.process(request("say hi to Ana"))

        assert response.action == "error"


class TestContactTools:

    @pytest.mark.asyncio
    async def test_list_contacts(self, agent, storage, mock_llm):
        await add_contacts(storage)
        mock_llm.complete_with_tools.return_value = FunctionCallResult(
            function_call=FunctionCall(name="list_contacts", arguments="{}")
        )

        response = await agent.process(request("who are my contacts?"))

        assert [c["name"] for c in response.data] == ["Ana García", "Luis"]

    @pytest.mark.asyncio
    async def test_history_limited(self, agent, storage, mock_llm):
        ana, _ = await add_contacts(storage)
        for i in range(4):
            await storage.create_whatsapp_message({"contact_id": ana.id, "direction": "incoming", "body": f"m{i}"})
        mock_llm.complete_with_tools.return_value = FunctionCallResult(function_call=FunctionCall(
            name="get_contact_history", arguments=json.dumps({"contact": "Ana", "limit": 2}),
        ))

        response = await agent.process(request("show my chat with Ana"))

        assert [m["body"] for m in response.data] == ["m2", "m3"]

    @pytest.mark.asyncio
    async def test_history_null_limit_uses_default(self, agent, storage, mock_llm):
        ana, _ = await add_contacts(storage)
        for i in range(12):
            await storage.create_whatsapp_message({"contact_id": ana.id, "direction": "incoming", "body": f"m{i}"})
        mock_llm.complete_with_tools.return_value = FunctionCallResult(function_call=FunctionCall(
            name="get_contact_history", arguments=json.dumps({"contact": "Ana", "limit": None}),
        ))

        response = await agent.process(request("show my chat with Ana"))

        assert response.action == "get_contact_history"
        assert [m["body"] for m in response.data] == [f"m{i}" for i in range(2, 12)]
