"""
Unit tests for the shared dispatch loop and the task helpers.
"""

import json
from datetime import datetime
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent))

from taskdesk.agents.base_agent import (
    AgentRequest,
    AgentResponse,
    EMPTY_REPLY_CONFIDENCE,
    EXCEPTION_CONFIDENCE,
    INVALID_ARGUMENTS_CONFIDENCE,
    RAW_TEXT_CONFIDENCE,
    UNKNOWN_TOOL_CONFIDENCE,
    clamp_confidence,
)
from taskdesk.agents.context import TaskContext
from taskdesk.agents.priority import map_priority, normalize_status, priority_rank
from taskdesk.agents.task_agent import TaskAgent
from taskdesk.agents.task_ops import distribute_dates, parse_date
from taskdesk.core.storage import MemoryStorage
from taskdesk.llm.client import FunctionCall, FunctionCallResult


@pytest.fixture
def mock_llm():
    llm = MagicMock()
    llm.complete_with_tools = AsyncMock(return_value=FunctionCallResult())
    return llm


@pytest.fixture
def agent(mock_llm):
    return TaskAgent(MemoryStorage(), mock_llm)


def request(text="hi"):
    return AgentRequest(user_input=text, context=TaskContext())


class TestDispatchLoop:
    """Degraded paths of SpecializedAgent.process."""

    @pytest.mark.asyncio
    async def test_unknown_tool(self, agent, mock_llm):
        mock_llm.complete_with_tools.return_value = FunctionCallResult(
            function_call=FunctionCall(name="launchRocket", arguments="{}")
        )

        response = await agent.process(request())

        assert response.action == "respond"
        assert response.confidence == UNKNOWN_TOOL_CONFIDENCE

    @pytest.mark.asyncio
    async def test_invalid_arguments(self, agent, mock_llm):
        mock_llm.complete_with_tools.return_value = FunctionCallResult(
            function_call=FunctionCall(name="createTask", arguments='{"title": ')
        )

        response = await agent.process(request())

        assert response.action == "respond"
        assert response.confidence == INVALID_ARGUMENTS_CONFIDENCE

    @pytest.mark.asyncio
    async def test_missing_required_argument(self, agent, mock_llm):
        mock_llm.complete_with_tools.return_value = FunctionCallResult(
            function_call=FunctionCall(name="updateTask", arguments=json.dumps({"title": "no id"}))
        )

        response = await agent.process(request())

        assert response.confidence == INVALID_ARGUMENTS_CONFIDENCE

    @pytest.mark.asyncio
    async def test_empty_reply(self, agent, mock_llm):
        response = await agent.process(request())

        assert response.action == "respond"
        assert response.confidence == EMPTY_REPLY_CONFIDENCE
        assert not response.failed

    @pytest.mark.asyncio
    async def test_structured_text_reply(self, agent, mock_llm):
        mock_llm.complete_with_tools.return_value = FunctionCallResult(
            content=json.dumps({"action": "respond", "response": "Sure thing", "confidence": 0.85})
        )

        response = await agent.process(request())

        assert response.response == "Sure thing"
        assert response.confidence == pytest.approx(0.85)

    @pytest.mark.asyncio
    async def test_raw_text_reply(self, agent, mock_llm):
        mock_llm.complete_with_tools.return_value = FunctionCallResult(content="Just some words")

        response = await agent.process(request())

        assert response.response == "Just some words"
        assert response.confidence == RAW_TEXT_CONFIDENCE

    @pytest.mark.asyncio
    async def test_transport_error_becomes_error_response(self, agent, mock_llm):
        mock_llm.complete_with_tools.side_effect = ConnectionError("network down")

        response = await agent.process(request())

        assert response.action == "error"
        assert response.confidence == EXCEPTION_CONFIDENCE
        assert response.failed


class TestAgentResponse:

    def test_factories(self):
        assert AgentResponse.ok("createTask", "done").confidence == 0.9
        assert AgentResponse.error("nope").action == "error"
        assert AgentResponse.respond("hi").action == "respond"

    @pytest.mark.parametrize("value, expected", [
        (1.7, 1.0), (-0.2, 0.0), ("0.4", 0.4), ("high", 0.5), (None, 0.5),
    ])
    def test_clamp_confidence(self, value, expected):
        assert clamp_confidence(value) == pytest.approx(expected)


class TestPriorityAndStatus:

    @pytest.mark.parametrize("value, expected", [
        ("alta", "high"), ("Urgent", "high"), ("muy alta", "high"),
        ("media", "medium"), ("baja", "low"), ("lowest", "low"),
        (None, "medium"), ("whenever", "medium"),
    ])
    def test_map_priority(self, value, expected):
        assert map_priority(value) == expected

    def test_map_priority_custom_default(self):
        assert map_priority("", default="low") == "low"

    @pytest.mark.parametrize("value, expected", [
        ("done", "completed"), ("en_progreso", "in-progress"), ("Pendiente", "pending"),
        ("review", "review"), ("archived", "archived"),
    ])
    def test_normalize_status(self, value, expected):
        assert normalize_status(value) == expected

    def test_priority_rank(self):
        assert priority_rank("high") > priority_rank("medium") > priority_rank("low") > priority_rank(None)


class TestTaskOps:

    def test_parse_date(self):
        assert parse_date("2025-03-27") == datetime(2025, 3, 27)
        assert parse_date("2025-03-27T10:00:00+02:00").tzinfo is None
        assert parse_date("") is None
        assert parse_date("definitely not a date") is None

    def test_distribute_dates_even(self):
        dates = distribute_dates(datetime(2025, 1, 1), datetime(2025, 1, 11), 3)
        assert [d.day for d in dates] == [1, 6, 11]

    def test_distribute_dates_rounds_half_up(self):
        # 3 days over 2 gaps: 1.5 rounds up to 2
        dates = distribute_dates(datetime(2025, 1, 1), datetime(2025, 1, 4), 3)
        assert [d.day for d in dates] == [1, 3, 4]

    def test_distribute_single_and_empty(self):
        start = datetime(2025, 1, 1)
        assert distribute_dates(start, datetime(2025, 1, 9), 1) == [start]
        assert distribute_dates(start, datetime(2025, 1, 9), 0) == []
