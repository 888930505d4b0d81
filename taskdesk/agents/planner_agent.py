"""
Planner Agent for taskdesk
Deadlines and scheduling: upcoming deadlines, priority ordering, setting a
deadline, spreading tasks across a date range and day lookups.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List, Tuple, Type

from pydantic import BaseModel

from ..core.models import TaskStatus
from .base_agent import AgentResponse, SpecializedAgent, ToolHandler
from .context import AgentContext
from .priority import normalize_status, priority_rank
from .task_ops import distribute_dates, format_date, list_tasks, parse_date, summarize_tasks
from .tools.planner_tools import (
    PLANNER_TOOLS,
    PrioritizedTasksArgs,
    ScheduleTasksArgs,
    SetDeadlineArgs,
    TasksByDateArgs,
    UpcomingDeadlinesArgs,
)
from .tools.task_tools import ListTasksArgs


class PlannerAgent(SpecializedAgent):
    """
    Specialized agent for planning and deadlines.

    scheduleTasks spreads deadlines evenly over the range. With
    distributeEvenly=false the tasks are ordered by priority first; the
    spacing stays the same.
    """

    system_prompt = """You are an agent specialized in planning and time management.
You look up upcoming deadlines, prioritize work, set deadlines and schedule groups of tasks across
a date range.

IMPORTANT: Always convert relative dates ("next Monday", "in two weeks") to absolute dates in
YYYY-MM-DD format before calling a function.

IMPORTANT: If the context contains lastTask and the user asks about "it" or "that task", they mean
lastTask. Answer questions about its deadline from the context when no function is needed.

When you reply without a function, answer with a JSON object:
{"action": "respond", "response": "<message>", "confidence": <0..1>}"""

    def __init__(self, storage, llm, config=None):
        """Initialize the Planner Agent."""
        super().__init__(storage, llm, config, "planner")

    def get_functions(self) -> List[Dict[str, Any]]:
        return PLANNER_TOOLS

    def get_handlers(self) -> Dict[str, Tuple[Type[BaseModel], ToolHandler]]:
        return {
            "getUpcomingDeadlines": (UpcomingDeadlinesArgs, self._upcoming_deadlines),
            "getPrioritizedTasks": (PrioritizedTasksArgs, self._prioritized_tasks),
            "setDeadlines": (SetDeadlineArgs, self._set_deadline),
            "scheduleTasks": (ScheduleTasksArgs, self._schedule_tasks),
            "getTasksByDate": (TasksByDateArgs, self._tasks_by_date),
            "listTasks": (ListTasksArgs, self._list_tasks),
        }

    # =========================================================================
    # Tool Handlers
    # =========================================================================

    async def _upcoming_deadlines(self, args: UpcomingDeadlinesArgs, context: AgentContext) -> AgentResponse:
        """Tasks due in [now, now + daysAhead], soonest first."""
        now = datetime.now()
        horizon = now + timedelta(days=args.daysAhead)
        tasks = await self.storage.get_tasks()
        upcoming = sorted(
            (t for t in tasks if t.deadline is not None and now <= t.deadline <= horizon),
            key=lambda t: t.deadline,
        )
        if args.limit is not None:
            upcoming = upcoming[:args.limit]

        if not upcoming:
            message = f"You have no deadlines in the next {args.daysAhead} days."
        else:
            message = f"Deadlines in the next {args.daysAhead} days:\n\n{summarize_tasks(upcoming)}"
        return AgentResponse.ok("getUpcomingDeadlines", message, data=[t.to_dict() for t in upcoming])

    async def _prioritized_tasks(self, args: PrioritizedTasksArgs, context: AgentContext) -> AgentResponse:
        """Highest priority first; ties by earliest deadline, undated last."""
        if args.status:
            tasks = await self.storage.get_tasks_by_status(normalize_status(args.status))
        else:
            tasks = [t for t in await self.storage.get_tasks() if t.status != TaskStatus.COMPLETED]

        ordered = sorted(
            tasks,
            key=lambda t: (-priority_rank(t.priority), t.deadline is None, t.deadline or datetime.max),
        )
        if args.limit is not None:
            ordered = ordered[:args.limit]

        if not ordered:
            return AgentResponse.ok("getPrioritizedTasks", "There are no open tasks to prioritize.", data=[])
        return AgentResponse.ok(
            "getPrioritizedTasks",
            f"Here is your work in priority order:\n\n{summarize_tasks(ordered)}",
            data=[t.to_dict() for t in ordered],
        )

    async def _set_deadline(self, args: SetDeadlineArgs, context: AgentContext) -> AgentResponse:
        task = await self.storage.get_task(args.id)
        if task is None:
            return AgentResponse.error(
                f"I couldn't find a task with ID {args.id}. Please check the number and try again.",
                data={"id": args.id},
            )

        deadline = parse_date(args.deadline)
        if deadline is None:
            return AgentResponse.error(
                f"'{args.deadline}' is not a valid date. Please use the YYYY-MM-DD format."
            )

        updated = await self.storage.update_task(args.id, {"deadline": deadline})
        return AgentResponse.ok(
            "setDeadlines",
            f"I set the deadline of \"{updated.title}\" to {format_date(deadline)}.",
            data=updated.to_dict(),
        )

    async def _schedule_tasks(self, args: ScheduleTasksArgs, context: AgentContext) -> AgentResponse:
        """
        Spread the given tasks across [startDate, endDate].

        Rejects unparseable dates, reversed ranges and ranges with fewer
        days than gaps between tasks. Unknown ids are reported in failedIds.
        """
        start = parse_date(args.startDate)
        end = parse_date(args.endDate)
        if start is None or end is None:
            return AgentResponse.error(
                "The start and end dates must be valid dates in YYYY-MM-DD format."
            )
        if start > end:
            return AgentResponse.error(
                f"The start date ({format_date(start)}) must be on or before the end date ({format_date(end)})."
            )

        days_diff = (end - start).days
        needed = len(args.taskIds) - 1
        if args.distributeEvenly and days_diff < needed:
            return AgentResponse.error(
                f"{len(args.taskIds)} tasks need at least {needed} days between the start and end dates, "
                f"but the range only has {days_diff}. Please widen the date range.",
                data={"daysAvailable": days_diff, "daysNeeded": needed},
            )

        tasks = []
        slots = []
        failed_ids = []
        for position, task_id in enumerate(args.taskIds):
            task = await self.storage.get_task(task_id)
            if task is None:
                failed_ids.append(task_id)
            else:
                tasks.append(task)
                slots.append(position)

        if not tasks:
            return AgentResponse.error(
                f"None of the tasks could be found (IDs: {', '.join(str(i) for i in failed_ids)}).",
                data={"scheduledTasks": [], "failedIds": failed_ids},
            )

        if args.distributeEvenly:
            # unknown ids keep their slot so the found tasks do not shift
            dates = distribute_dates(start, end, len(args.taskIds))
            deadlines = [dates[position] for position in slots]
        else:
            tasks.sort(key=lambda t: -priority_rank(t.priority))
            deadlines = distribute_dates(start, end, len(tasks))

        scheduled = []
        for task, deadline in zip(tasks, deadlines):
            updated = await self.storage.update_task(task.id, {"deadline": deadline})
            if updated is None:
                failed_ids.append(task.id)
            else:
                scheduled.append(updated)

        lines = "\n".join(f"- \"{t.title}\": {format_date(t.deadline)}" for t in scheduled)
        message = f"I scheduled {len(scheduled)} task(s) between {format_date(start)} and {format_date(end)}:\n{lines}"
        if failed_ids:
            message += f"\nThese IDs were not found: {', '.join(str(i) for i in failed_ids)}."
        return AgentResponse.ok(
            "scheduleTasks",
            message,
            data={"scheduledTasks": [t.to_dict() for t in scheduled], "failedIds": failed_ids},
        )

    async def _tasks_by_date(self, args: TasksByDateArgs, context: AgentContext) -> AgentResponse:
        day = parse_date(args.date)
        if day is None:
            return AgentResponse.error(f"'{args.date}' is not a valid date. Please use the YYYY-MM-DD format.")

        tasks = [t for t in await self.storage.get_tasks()
                 if t.deadline is not None and t.deadline.date() == day.date()]
        if not tasks:
            message = f"Nothing is due on {format_date(day)}."
        else:
            message = f"Due on {format_date(day)}:\n\n{summarize_tasks(tasks)}"
        return AgentResponse.ok("getTasksByDate", message, data=[t.to_dict() for t in tasks])

    async def _list_tasks(self, args: ListTasksArgs, context: AgentContext) -> AgentResponse:
        tasks = await list_tasks(self.storage, args.status, args.categoryId)
        if not tasks:
            return AgentResponse.ok("listTasks", "There are no matching tasks.", data=[])
        return AgentResponse.ok(
            "listTasks",
            f"Here are the tasks I found:\n\n{summarize_tasks(tasks)}",
            data=[t.to_dict() for t in tasks],
        )
