"""
Unit tests for conversation state, reference resolution and context building.
"""

from datetime import datetime, timedelta
from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent))

from taskdesk.agents.context import (
    AgentContext,
    AnalyticsContext,
    CategoryContext,
    ContextBuilder,
    MarketingContext,
    MessagingContext,
    PlannerContext,
    ProjectContext,
    TaskContext,
)
from taskdesk.agents.conversation import ConversationState, ReferenceResolver
from taskdesk.core.storage import MemoryStorage


class TestConversationState:

    def test_remember_task_only_for_task_shaping_actions(self):
        state = ConversationState()
        state.remember_task("listTasks", {"id": 5})
        assert state.last_task_id is None

        state.remember_task("createTask", {"id": 5})
        assert state.last_task_id == 5

        state.remember_task("setDeadlines", {"id": 6})
        assert state.last_task_id == 6

    def test_remember_task_ignores_non_dict_data(self):
        state = ConversationState()
        state.remember_task("createTask", [{"id": 1}])
        assert state.last_task_id is None

    def test_recent_history_window(self):
        state = ConversationState()
        for i in range(8):
            state.record(f"msg {i}", "task", "respond", "ok")

        recent = state.recent_history(5)

        assert [item.user_input for item in recent] == [f"msg {i}" for i in range(3, 8)]
        assert len(state.history) == 8

    def test_last_agent_type_skips_errors(self):
        state = ConversationState()
        state.record("a", "planner", "respond", "ok")
        state.record("b", "error", None, "failed")
        state.record("c", "orchestrator", None, "clarify")

        assert state.last_agent_type() == "planner"

    def test_history_item_to_dict(self):
        state = ConversationState()
        item = state.record("hi", "task", "respond", "hello")
        payload = item.to_dict()
        assert payload["userInput"] == "hi"
        assert payload["agentType"] == "task"
        assert datetime.fromisoformat(payload["timestamp"])


class TestReferenceResolver:

    @pytest.fixture
    def resolver(self):
        return ReferenceResolver()

    @pytest.mark.parametrize("text", [
        "what date did you set for it?",
        "¿Para cuándo es?",
        "qué fecha le pusiste",
        "what's the deadline",
    ])
    def test_date_questions_go_to_planner(self, resolver, text):
        match = resolver.check(text, ConversationState())
        assert match is not None
        assert match.kind == "date"
        assert match.agent_type == "planner"

    def test_explanation_needs_history(self, resolver):
        state = ConversationState()
        assert resolver.check("explain what you did", state) is None

        state.record("plan it", "planner", "scheduleTasks", "done")
        match = resolver.check("explain what you did", state)
        assert match.kind == "explanation"
        assert match.agent_type == "planner"

    def test_confirmation_goes_to_task(self, resolver):
        match = resolver.check("¿Ya está?", ConversationState())
        assert match.kind == "confirmation"
        assert match.agent_type == "task"

    def test_unrelated_text(self, resolver):
        assert resolver.check("create a task to buy milk", ConversationState()) is None

    def test_word_boundaries(self, resolver):
        # "plazo" must not match inside "emplazo"
        assert resolver.check("emplazo la reunión", ConversationState()) is None


class TestContextBuilder:

    @pytest.fixture
    def storage(self):
        return MemoryStorage()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("agent_type, expected", [
        ("task", TaskContext),
        ("category", CategoryContext),
        ("analytics", AnalyticsContext),
        ("planner", PlannerContext),
        ("marketing", MarketingContext),
        ("project", ProjectContext),
        ("messaging", MessagingContext),
        ("unknown", AgentContext),
    ])
    async def test_variant_per_agent_type(self, storage, agent_type, expected):
        context = await ContextBuilder(storage).build(agent_type, ConversationState())
        assert type(context) is expected

    @pytest.mark.asyncio
    async def test_planner_upcoming_only_future(self, storage):
        now = datetime.now()
        await storage.create_task({"title": "Past", "deadline": now - timedelta(days=2)})
        await storage.create_task({"title": "Far", "deadline": now + timedelta(days=9)})
        await storage.create_task({"title": "Near", "deadline": now + timedelta(days=1)})

        context = await ContextBuilder(storage).build("planner", ConversationState())

        assert [t.title for t in context.upcoming_deadlines] == ["Near", "Far"]
        assert len(context.tasks) == 3

    @pytest.mark.asyncio
    async def test_marketing_and_project_filters(self, storage):
        await storage.create_task({"title": "SEO audit", "description": "marketing site"})
        await storage.create_task({"title": "Website project kickoff"})
        await storage.create_task({"title": "Buy milk"})

        marketing = await ContextBuilder(storage).build("marketing", ConversationState())
        project = await ContextBuilder(storage).build("project", ConversationState())

        assert [t.title for t in marketing.marketing_tasks] == ["SEO audit"]
        assert [t.title for t in project.project_tasks] == ["Website project kickoff"]

    @pytest.mark.asyncio
    async def test_category_counts(self, storage):
        await storage.create_task({"title": "A", "category_id": 2})
        await storage.create_task({"title": "B", "category_id": 2})

        context = await ContextBuilder(storage).build("category", ConversationState())

        counts = {row["categoryId"]: row["taskCount"] for row in context.tasks_by_category}
        assert counts[2] == 2
        assert counts[1] == 0

    @pytest.mark.asyncio
    async def test_history_window_and_last_task(self, storage):
        task = await storage.create_task({"title": "Referenced"})
        state = ConversationState()
        for i in range(7):
            state.record(f"turn {i}", "task", "respond", "ok")
        state.remember_task("createTask", {"id": task.id})

        context = await ContextBuilder(storage, history_window=5).build("task", state, last_task=task)
        payload = context.to_dict()

        assert len(payload["conversationHistory"]) == 5
        assert payload["lastTaskId"] == task.id
        assert payload["lastTask"]["title"] == "Referenced"
        assert "recentTasks" in payload
        assert "categories" in payload

    @pytest.mark.asyncio
    async def test_last_task_omitted_when_absent(self, storage):
        context = await ContextBuilder(storage).build("task", ConversationState())
        assert "lastTask" not in context.to_dict()
