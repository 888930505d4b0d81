"""
Context snapshots handed to agents.

One dataclass per agent type, so each agent sees exactly the fields built
for it. ContextBuilder awaits every fetch before returning a snapshot.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar, Dict, List, Optional

from ..core.models import Category, Task, TaskStats, WhatsappContact

MARKETING_KEYWORDS = ("marketing", "digital", "campaign", "campaña", "promotion", "promoción", "seo", "social")
PROJECT_KEYWORDS = ("project", "proyecto", "phase", "fase", "milestone", "hito")


def _tasks(tasks: List[Task]) -> List[Dict[str, Any]]:
    return [task.to_dict() for task in tasks]


def _categories(categories: List[Category]) -> List[Dict[str, Any]]:
    return [category.to_dict() for category in categories]


@dataclass
class AgentContext:
    """Fields shared by every snapshot."""
    agent_type: ClassVar[str] = "base"

    conversation_history: List[Dict[str, Any]] = field(default_factory=list)
    last_task_id: Optional[int] = None
    last_task: Optional[Task] = None

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serializable payload for the LLM prompt."""
        payload: Dict[str, Any] = {
            "conversationHistory": self.conversation_history,
            "lastTaskId": self.last_task_id,
        }
        if self.last_task is not None:
            payload["lastTask"] = self.last_task.to_dict()
        payload.update(self.specific_dict())
        return payload

    def specific_dict(self) -> Dict[str, Any]:
        return {}


@dataclass
class TaskContext(AgentContext):
    agent_type: ClassVar[str] = "task"

    recent_tasks: List[Task] = field(default_factory=list)
    categories: List[Category] = field(default_factory=list)

    def specific_dict(self) -> Dict[str, Any]:
        return {"recentTasks": _tasks(self.recent_tasks), "categories": _categories(self.categories)}


@dataclass
class CategoryContext(AgentContext):
    agent_type: ClassVar[str] = "category"

    categories: List[Category] = field(default_factory=list)
    tasks_by_category: List[Dict[str, int]] = field(default_factory=list)

    def specific_dict(self) -> Dict[str, Any]:
        return {"categories": _categories(self.categories), "tasksByCategory": self.tasks_by_category}


@dataclass
class AnalyticsContext(AgentContext):
    agent_type: ClassVar[str] = "analytics"

    task_stats: TaskStats = field(default_factory=TaskStats)
    categories: List[Category] = field(default_factory=list)
    recent_tasks: List[Task] = field(default_factory=list)

    def specific_dict(self) -> Dict[str, Any]:
        return {
            "taskStats": self.task_stats.to_dict(),
            "categories": _categories(self.categories),
            "recentTasks": _tasks(self.recent_tasks),
        }


@dataclass
class PlannerContext(AgentContext):
    agent_type: ClassVar[str] = "planner"

    tasks: List[Task] = field(default_factory=list)
    upcoming_deadlines: List[Task] = field(default_factory=list)

    def specific_dict(self) -> Dict[str, Any]:
        return {"tasks": _tasks(self.tasks), "upcomingDeadlines": _tasks(self.upcoming_deadlines)}


@dataclass
class MarketingContext(AgentContext):
    agent_type: ClassVar[str] = "marketing"

    tasks: List[Task] = field(default_factory=list)
    categories: List[Category] = field(default_factory=list)
    marketing_tasks: List[Task] = field(default_factory=list)

    def specific_dict(self) -> Dict[str, Any]:
        return {
            "tasks": _tasks(self.tasks),
            "categories": _categories(self.categories),
            "marketingTasks": _tasks(self.marketing_tasks),
        }


@dataclass
class ProjectContext(AgentContext):
    agent_type: ClassVar[str] = "project"

    tasks: List[Task] = field(default_factory=list)
    categories: List[Category] = field(default_factory=list)
    project_tasks: List[Task] = field(default_factory=list)

    def specific_dict(self) -> Dict[str, Any]:
        return {
            "tasks": _tasks(self.tasks),
            "categories": _categories(self.categories),
            "projectTasks": _tasks(self.project_tasks),
        }


@dataclass
class MessagingContext(AgentContext):
    agent_type: ClassVar[str] = "messaging"

    contacts: List[WhatsappContact] = field(default_factory=list)

    def specific_dict(self) -> Dict[str, Any]:
        return {"contacts": [contact.to_dict() for contact in self.contacts]}


class ContextBuilder:
    """Assembles the snapshot for a given agent type from storage and session state."""

    def __init__(self, storage, history_window: int = 5):
        self.storage = storage
        self.history_window = history_window

    async def build(self, agent_type: str, state, last_task: Optional[Task] = None) -> AgentContext:
        """
        Build the context for one agent.

        Args:
            agent_type: Registered agent name
            state: ConversationState of the current session
            last_task: Task to inject when resolving a reference

        Returns:
            The AgentContext variant for agent_type (base variant if unknown)
        """
        base = {
            "conversation_history": [item.to_dict() for item in state.recent_history(self.history_window)],
            "last_task_id": state.last_task_id,
            "last_task": last_task,
        }

        builders = {
            "task": self._task,
            "category": self._category,
            "analytics": self._analytics,
            "planner": self._planner,
            "marketing": self._marketing,
            "project": self._project,
            "messaging": self._messaging,
        }
        builder = builders.get(agent_type)
        if builder is None:
            return AgentContext(**base)
        return await builder(base)

    async def _task(self, base: Dict[str, Any]) -> TaskContext:
        return TaskContext(
            recent_tasks=await self.storage.get_tasks(),
            categories=await self.storage.get_categories(),
            **base,
        )

    async def _category(self, base: Dict[str, Any]) -> CategoryContext:
        categories = await self.storage.get_categories()
        counts = []
        for category in categories:
            tasks = await self.storage.get_tasks_by_category(category.id)
            counts.append({"categoryId": category.id, "taskCount": len(tasks)})
        return CategoryContext(categories=categories, tasks_by_category=counts, **base)

    async def _analytics(self, base: Dict[str, Any]) -> AnalyticsContext:
        return AnalyticsContext(
            task_stats=await self.storage.get_task_stats(),
            categories=await self.storage.get_categories(),
            recent_tasks=await self.storage.get_tasks(),
            **base,
        )

    async def _planner(self, base: Dict[str, Any]) -> PlannerContext:
        tasks = await self.storage.get_tasks()
        now = datetime.now()
        upcoming = sorted(
            (t for t in tasks if t.deadline is not None and t.deadline > now),
            key=lambda t: t.deadline,
        )
        return PlannerContext(tasks=tasks, upcoming_deadlines=upcoming, **base)

    async def _marketing(self, base: Dict[str, Any]) -> MarketingContext:
        tasks = await self.storage.get_tasks()
        return MarketingContext(
            tasks=tasks,
            categories=await self.storage.get_categories(),
            marketing_tasks=[t for t in tasks if t.mentions(MARKETING_KEYWORDS)],
            **base,
        )

    async def _project(self, base: Dict[str, Any]) -> ProjectContext:
        tasks = await self.storage.get_tasks()
        return ProjectContext(
            tasks=tasks,
            categories=await self.storage.get_categories(),
            project_tasks=[t for t in tasks if t.mentions(PROJECT_KEYWORDS)],
            **base,
        )

    async def _messaging(self, base: Dict[str, Any]) -> MessagingContext:
        return MessagingContext(contacts=await self.storage.get_whatsapp_contacts(), **base)
