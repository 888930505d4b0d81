"""
Task helpers shared by several agents.

- parse_date: tolerant date parsing for model-supplied values
- create_task_from_fields: the single place agents create tasks
- distribute_dates: even spacing of n dates across a range
"""

from datetime import datetime, timedelta
from typing import Any, List, Optional
import math

from dateutil import parser as date_parser

from ..core.models import Task, TaskStatus
from .priority import map_priority, normalize_status

DEFAULT_CATEGORY_ID = 1


def parse_date(value: Any) -> Optional[datetime]:
    """
    Parse a model-supplied date (normally YYYY-MM-DD).

    Returns:
        Naive datetime, or None if the value is empty or unparseable
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    try:
        parsed = date_parser.parse(str(value))
    except (ValueError, OverflowError):
        return None
    return parsed.replace(tzinfo=None)


def format_date(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d") if value else "no date"


async def create_task_from_fields(storage, fields, default_category_id: int = DEFAULT_CATEGORY_ID,
                                  default_priority: str = "medium") -> Task:
    """
    Create a task from validated tool arguments.

    Args:
        storage: Storage implementation
        fields: Object exposing title, description, priority, status,
            categoryId, deadline and assignedTo attributes
        default_category_id: Category used when none is given
        default_priority: Priority used when none is given or recognized

    Raises:
        ValueError: If a deadline was given but cannot be parsed
    """
    deadline = None
    if getattr(fields, "deadline", None):
        deadline = parse_date(fields.deadline)
        if deadline is None:
            raise ValueError(f"'{fields.deadline}' is not a valid date (expected YYYY-MM-DD)")

    return await storage.create_task({
        "title": fields.title,
        "description": getattr(fields, "description", None),
        "status": normalize_status(getattr(fields, "status", None)) or TaskStatus.PENDING,
        "priority": map_priority(getattr(fields, "priority", None), default=default_priority),
        "category_id": getattr(fields, "categoryId", None) or default_category_id,
        "deadline": deadline,
        "assigned_to": getattr(fields, "assignedTo", None),
    })


def distribute_dates(start: datetime, end: datetime, count: int) -> List[datetime]:
    """
    Spread count dates evenly over [start, end].

    Index i lands on start + round(i * days / (count - 1)) days, rounding
    halves up. A single date lands on start.
    """
    if count <= 0:
        return []
    if count == 1:
        return [start]
    days_diff = (end - start).days
    return [
        start + timedelta(days=math.floor(i * days_diff / (count - 1) + 0.5))
        for i in range(count)
    ]


async def list_tasks(storage, status: Optional[str] = None,
                     category_id: Optional[int] = None) -> List[Task]:
    """Fetch tasks by one filter; status takes precedence over category."""
    if status:
        return await storage.get_tasks_by_status(normalize_status(status))
    if category_id is not None:
        return await storage.get_tasks_by_category(category_id)
    return await storage.get_tasks()


def summarize_tasks(tasks: List[Task]) -> str:
    """One line per task for chat replies."""
    lines = []
    for task in tasks:
        line = f"- #{task.id} {task.title} [{task.status}, {task.priority or 'no priority'}]"
        if task.deadline:
            line += f" due {format_date(task.deadline)}"
        lines.append(line)
    return "\n".join(lines)
