"""
Unit tests for the LLM client.
The OpenAI SDK is replaced by a mock exposing chat.completions.create.
"""

import asyncio
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent))

from taskdesk.llm.client import FunctionCallResult, LLMClient


def completion(content=None, tool_calls=None):
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def tool_call(name, arguments):
    return SimpleNamespace(function=SimpleNamespace(name=name, arguments=arguments))


@pytest.fixture
def sdk():
    sdk = MagicMock()
    sdk.chat.completions.create = AsyncMock(return_value=completion(content="{}"))
    return sdk


@pytest.fixture
def client(sdk):
    return LLMClient(model="test-model", temperature=0.1, timeout_seconds=5, client=sdk)


TOOLS = [{"name": "createTask", "description": "Create a task", "parameters": {"type": "object"}}]


class TestCompleteJson:

    @pytest.mark.asyncio
    async def test_returns_content(self, client, sdk):
        sdk.chat.completions.create.return_value = completion(content='{"agentType": "task"}')

        assert await client.complete_json("system", "user") == '{"agentType": "task"}'

        kwargs = sdk.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["temperature"] == 0.1
        assert kwargs["response_format"] == {"type": "json_object"}
        assert [m["role"] for m in kwargs["messages"]] == ["system", "user"]

    @pytest.mark.asyncio
    async def test_timeout_returns_none(self, sdk):
        async def never_answers(**kwargs):
            await asyncio.sleep(10)

        sdk.chat.completions.create = never_answers
        client = LLMClient(timeout_seconds=0.01, client=sdk)

        assert await client.complete_json("system", "user") is None

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self, client, sdk):
        sdk.chat.completions.create.side_effect = ConnectionError("offline")

        with pytest.raises(ConnectionError):
            await client.complete_json("system", "user")


class TestCompleteWithTools:

    @pytest.mark.asyncio
    async def test_declarations_wrapped_as_functions(self, client, sdk):
        await client.complete_with_tools("system", "user", TOOLS)

        kwargs = sdk.chat.completions.create.call_args.kwargs
        assert kwargs["tools"] == [{"type": "function", "function": TOOLS[0]}]
        assert kwargs["tool_choice"] == "auto"

    @pytest.mark.asyncio
    async def test_first_tool_call_returned(self, client, sdk):
        sdk.chat.completions.create.return_value = completion(tool_calls=[
            tool_call("createTask", '{"title": "x"}'),
            tool_call("deleteTask", '{"id": 1}'),
        ])

        result = await client.complete_with_tools("system", "user", TOOLS)

        assert result.function_call.name == "createTask"
        assert result.function_call.arguments == '{"title": "x"}'
        assert result.content is None

    @pytest.mark.asyncio
    async def test_missing_arguments_default_to_empty_object(self, client, sdk):
        sdk.chat.completions.create.return_value = completion(tool_calls=[tool_call("listTasks", None)])

        result = await client.complete_with_tools("system", "user", TOOLS)

        assert result.function_call.arguments == "{}"

    @pytest.mark.asyncio
    async def test_text_content(self, client, sdk):
        sdk.chat.completions.create.return_value = completion(content="plain answer")

        result = await client.complete_with_tools("system", "user", TOOLS)

        assert result.function_call is None
        assert result.content == "plain answer"

    @pytest.mark.asyncio
    async def test_timeout_returns_empty_result(self, sdk):
        async def never_answers(**kwargs):
            await asyncio.sleep(10)

        sdk.chat.completions.create = never_answers
        client = LLMClient(timeout_seconds=0.01, client=sdk)

        result = await client.complete_with_tools("system", "user", TOOLS)

        assert result == FunctionCallResult()


class TestFromConfig:

    def test_reads_llm_section(self):
        config = MagicMock()
        config.get.side_effect = lambda key, section="settings", default=None: {
            "model": "gpt-4o-mini", "temperature": 0.0, "timeout_seconds": 12,
        }.get(key, default)

        with patch.dict("os.environ", {"OPENAI_API_KEY": "sk-test"}):
            client = LLMClient.from_config(config)

        assert client.model == "gpt-4o-mini"
        assert client.temperature == 0.0
        assert client.timeout_seconds == 12
