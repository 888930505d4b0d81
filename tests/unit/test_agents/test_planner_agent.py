"""
Unit tests for the PlannerAgent.
Covers even scheduling, range validation, deadline windows and
priority ordering.
"""

import json
from datetime import datetime, timedelta
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent))

from taskdesk.agents.base_agent import AgentRequest
from taskdesk.agents.context import PlannerContext
from taskdesk.agents.planner_agent import PlannerAgent
from taskdesk.core.storage import MemoryStorage
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
def planner(storage, mock_llm):
    return PlannerAgent(storage, mock_llm)


def tool_call(llm, name, **arguments):
    llm.complete_with_tools.return_value = FunctionCallResult(
        function_call=FunctionCall(name=name, arguments=json.dumps(arguments))
    )


def request(text="plan it"):
    return AgentRequest(user_input=text, context=PlannerContext())


async def create_tasks(storage, *titles, **fields):
    return [await storage.create_task({"title": title, **fields}) for title in titles]


class TestScheduleTasks:
    """Tests for spreading tasks over a date range."""

    @pytest.mark.asyncio
    async def test_even_distribution(self, planner, mock_llm, storage):
        """Three tasks over ten days land on day 0, 5 and 10."""
        t1, t2, t3 = await create_tasks(storage, "One", "Two", "Three")
        tool_call(mock_llm, "scheduleTasks", taskIds=[t1.id, t2.id, t3.id],
                  startDate="2025-01-01", endDate="2025-01-11", distributeEvenly=True)

        response = await planner.process(request())

        assert response.action == "scheduleTasks"
        deadlines = [t["deadline"][:10] for t in response.data["scheduledTasks"]]
        assert deadlines == ["2025-01-01", "2025-01-06", "2025-01-11"]
        assert response.data["failedIds"] == []

    @pytest.mark.asyncio
    async def test_insufficient_range_rejected(self, planner, mock_llm, storage):
        """Five tasks need four days; a one-day range is an error, nothing is written."""
        tasks = await create_tasks(storage, "A", "B", "C", "D", "E")
        tool_call(mock_llm, "scheduleTasks", taskIds=[t.id for t in tasks],
                  startDate="2025-01-01", endDate="2025-01-02", distributeEvenly=True)

        response = await planner.process(request())

        assert response.action == "error"
        assert "widen the date range" in response.response
        assert all(t.deadline is None for t in await storage.get_tasks())

    @pytest.mark.asyncio
    async def test_reversed_range_rejected(self, planner, mock_llm, storage):
        (task,) = await create_tasks(storage, "Only")
        tool_call(mock_llm, "scheduleTasks", taskIds=[task.id],
                  startDate="2025-02-01", endDate="2025-01-01")

        response = await planner.process(request())

        assert response.action == "error"

    @pytest.mark.asyncio
    async def test_unknown_ids_reported(self, planner, mock_llm, storage):
        t1, t2 = await create_tasks(storage, "Known 1", "Known 2")
        tool_call(mock_llm, "scheduleTasks", taskIds=[t1.id, 77, t2.id],
                  startDate="2025-01-01", endDate="2025-01-05")

        response = await planner.process(request())

        assert response.action == "scheduleTasks"
        assert response.data["failedIds"] == [77]
        assert len(response.data["scheduledTasks"]) == 2

    @pytest.mark.asyncio
    async def test_unknown_trailing_id_keeps_its_slot(self, planner, mock_llm, storage):
        """A missing last id still counts, so the found tasks take day 0 and day 5."""
        t1, t2 = await create_tasks(storage, "One", "Two")
        tool_call(mock_llm, "scheduleTasks", taskIds=[t1.id, t2.id, 999],
                  startDate="2025-01-01", endDate="2025-01-11", distributeEvenly=True)

        response = await planner.process(request())

        assert response.action == "scheduleTasks"
        deadlines = [t["deadline"][:10] for t in response.data["scheduledTasks"]]
        assert deadlines == ["2025-01-01", "2025-01-06"]
        assert response.data["failedIds"] == [999]

    @pytest.mark.asyncio
    async def test_unknown_middle_id_keeps_its_slot(self, planner, mock_llm, storage):
        t1, t3 = await create_tasks(storage, "First", "Last")
        tool_call(mock_llm, "scheduleTasks", taskIds=[t1.id, 999, t3.id],
                  startDate="2025-01-01", endDate="2025-01-11", distributeEvenly=True)

        response = await planner.process(request())

        stored = {t.title: t.deadline.date().isoformat() for t in await storage.get_tasks()}
        assert stored == {"First": "2025-01-01", "Last": "2025-01-11"}
        assert response.data["failedIds"] == [999]

    @pytest.mark.asyncio
    async def test_priority_order_when_not_even(self, planner, mock_llm, storage):
        low = await storage.create_task({"title": "Low", "priority": "low"})
        high = await storage.create_task({"title": "High", "priority": "high"})
        tool_call(mock_llm, "scheduleTasks", taskIds=[low.id, high.id],
                  startDate="2025-01-01", endDate="2025-01-03", distributeEvenly=False)

        response = await planner.process(request())

        titles = [t["title"] for t in response.data["scheduledTasks"]]
        assert titles == ["High", "Low"]


class TestDeadlines:
    """Tests for deadline lookups and updates."""

    @pytest.mark.asyncio
    async def test_upcoming_deadlines_window_and_order(self, planner, mock_llm, storage):
        now = datetime.now()
        await storage.create_task({"title": "Later", "deadline": now + timedelta(days=5)})
        await storage.create_task({"title": "Soon", "deadline": now + timedelta(days=1)})
        await storage.create_task({"title": "Too far", "deadline": now + timedelta(days=30)})
        await storage.create_task({"title": "Past", "deadline": now - timedelta(days=1)})
        tool_call(mock_llm, "getUpcomingDeadlines", daysAhead=7)

        response = await planner.process(request())

        assert [t["title"] for t in response.data] == ["Soon", "Later"]

    @pytest.mark.asyncio
    async def test_upcoming_deadlines_repeatable(self, planner, mock_llm, storage):
        """Two reads with no writes in between return the same ordered list."""
        now = datetime.now()
        for days in (3, 1, 2):
            await storage.create_task({"title": f"In {days}", "deadline": now + timedelta(days=days)})
        tool_call(mock_llm, "getUpcomingDeadlines", daysAhead=7)

        first = await planner.process(request())
        second = await planner.process(request())

        assert first.data == second.data

    @pytest.mark.asyncio
    async def test_set_deadline(self, planner, mock_llm, storage):
        (task,) = await create_tasks(storage, "Report")
        tool_call(mock_llm, "setDeadlines", id=task.id, deadline="2025-06-30")

        response = await planner.process(request())

        assert response.action == "setDeadlines"
        assert response.data["deadline"].startswith("2025-06-30")

    @pytest.mark.asyncio
    async def test_set_deadline_missing_task(self, planner, mock_llm):
        tool_call(mock_llm, "setDeadlines", id=5, deadline="2025-06-30")

        response = await planner.process(request())

        assert response.action == "error"
        assert "5" in response.response

    @pytest.mark.asyncio
    async def test_tasks_by_date(self, planner, mock_llm, storage):
        await storage.create_task({"title": "On the day", "deadline": datetime(2025, 4, 2, 15, 0)})
        await storage.create_task({"title": "Next day", "deadline": datetime(2025, 4, 3)})
        tool_call(mock_llm, "getTasksByDate", date="2025-04-02")

        response = await planner.process(request())

        assert [t["title"] for t in response.data] == ["On the day"]


class TestPrioritizedTasks:

    @pytest.mark.asyncio
    async def test_order_and_completed_excluded(self, planner, mock_llm, storage):
        await storage.create_task({"title": "Medium undated", "priority": "medium"})
        await storage.create_task({"title": "High late", "priority": "high", "deadline": datetime(2025, 5, 1)})
        await storage.create_task({"title": "High early", "priority": "high", "deadline": datetime(2025, 4, 1)})
        await storage.create_task({"title": "Done", "priority": "high", "status": "completed"})
        tool_call(mock_llm, "getPrioritizedTasks")

        response = await planner.process(request())

        assert [t["title"] for t in response.data] == ["High early", "High late", "Medium undated"]
