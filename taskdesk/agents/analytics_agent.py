"""
Analytics Agent for taskdesk
Task statistics, trend summaries and per-category reports.
"""

from collections import Counter
from datetime import datetime
from typing import Any, Dict, List, Tuple, Type

from pydantic import BaseModel

from ..core.models import TaskPriority, TaskStatus
from .base_agent import AgentResponse, SpecializedAgent, ToolHandler
from .context import AgentContext
from .tools.analytics_tools import ANALYTICS_TOOLS, ReportArgs
from .tools.common import NoArgs


def completion_rate(completed: int, total: int) -> float:
    """Percentage of completed tasks, rounded to one decimal."""
    return round(100.0 * completed / total, 1) if total else 0.0


class AnalyticsAgent(SpecializedAgent):
    """Specialized agent for reporting on tasks."""

    system_prompt = """You are an agent specialized in analyzing task data.
You report statistics (tasks by status), trends (priorities, overdue work, completion rate) and
per-category reports. Keep summaries short and lead with the most useful number.

When you reply without a function, answer with a JSON object:
{"action": "respond", "response": "<message>", "confidence": <0..1>}"""

    def __init__(self, storage, llm, config=None):
        super().__init__(storage, llm, config, "analytics")

    def get_functions(self) -> List[Dict[str, Any]]:
        return ANALYTICS_TOOLS

    def get_handlers(self) -> Dict[str, Tuple[Type[BaseModel], ToolHandler]]:
        return {
            "getTaskStats": (NoArgs, self._task_stats),
            "analyzeTrends": (NoArgs, self._analyze_trends),
            "generateReport": (ReportArgs, self._generate_report),
        }

    async def _task_stats(self, args: NoArgs, context: AgentContext) -> AgentResponse:
        stats = await self.storage.get_task_stats()
        message = (
            f"You have {stats.total} task(s): {stats.pending} pending, {stats.in_progress} in progress, "
            f"{stats.review} in review and {stats.completed} completed."
        )
        return AgentResponse.ok("getTaskStats", message, data=stats.to_dict())

    async def _analyze_trends(self, args: NoArgs, context: AgentContext) -> AgentResponse:
        tasks = await self.storage.get_tasks()
        now = datetime.now()
        by_status = Counter(t.status for t in tasks)
        by_priority = Counter(t.priority or "none" for t in tasks)
        overdue = [t for t in tasks if t.is_overdue(now)]
        rate = completion_rate(by_status.get(TaskStatus.COMPLETED, 0), len(tasks))

        data = {
            "total": len(tasks),
            "byStatus": dict(by_status),
            "byPriority": dict(by_priority),
            "overdue": len(overdue),
            "overdueTaskIds": [t.id for t in overdue],
            "completionRate": rate,
        }
        message = (
            f"Completion rate is {rate}% across {len(tasks)} task(s). "
            f"{by_priority.get(TaskPriority.HIGH, 0)} are high priority and {len(overdue)} are overdue."
        )
        return AgentResponse.ok("analyzeTrends", message, data=data)

    async def _generate_report(self, args: ReportArgs, context: AgentContext) -> AgentResponse:
        categories = await self.storage.get_categories()
        if args.categoryId is not None:
            categories = [c for c in categories if c.id == args.categoryId]
            if not categories:
                return AgentResponse.error(
                    f"I couldn't find a category with ID {args.categoryId}.", data={"id": args.categoryId}
                )

        rows = []
        lines = []
        for category in categories:
            tasks = await self.storage.get_tasks_by_category(category.id)
            completed = sum(1 for t in tasks if t.status == TaskStatus.COMPLETED)
            rate = completion_rate(completed, len(tasks))
            rows.append({
                "categoryId": category.id,
                "name": category.name,
                "total": len(tasks),
                "completed": completed,
                "completionRate": rate,
            })
            lines.append(f"- {category.name}: {completed}/{len(tasks)} completed ({rate}%)")

        return AgentResponse.ok("generateReport", "Report by category:\n\n" + "\n".join(lines), data=rows)
