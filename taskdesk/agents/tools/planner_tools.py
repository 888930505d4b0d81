"""Tool declarations and argument models for the planner agent."""

from typing import List, Optional

from pydantic import BaseModel, Field

from .task_tools import STATUS_ENUM


class UpcomingDeadlinesArgs(BaseModel):
    daysAhead: int = Field(default=7, ge=0)
    limit: Optional[int] = Field(default=None, ge=1)


class PrioritizedTasksArgs(BaseModel):
    status: Optional[str] = None
    limit: Optional[int] = Field(default=None, ge=1)


class SetDeadlineArgs(BaseModel):
    id: int
    deadline: str


class ScheduleTasksArgs(BaseModel):
    taskIds: List[int] = Field(min_length=1)
    startDate: str
    endDate: str
    distributeEvenly: bool = True


class TasksByDateArgs(BaseModel):
    date: str


PLANNER_TOOLS = [
    {
        "name": "getUpcomingDeadlines",
        "description": "Get tasks whose deadline falls within the next N days, soonest first",
        "parameters": {
            "type": "object",
            "properties": {
                "daysAhead": {"type": "integer", "description": "How many days ahead to look (default 7)"},
                "limit": {"type": "integer", "description": "Maximum number of tasks to return"},
            },
            "required": ["daysAhead"],
        },
    },
    {
        "name": "getPrioritizedTasks",
        "description": "Get tasks ordered by priority (high first), then by deadline",
        "parameters": {
            "type": "object",
            "properties": {
                "status": {"type": "string", "description": "Only tasks with this status", "enum": STATUS_ENUM},
                "limit": {"type": "integer", "description": "Maximum number of tasks to return"},
            },
            "required": [],
        },
    },
    {
        "name": "setDeadlines",
        "description": "Set the deadline of a task",
        "parameters": {
            "type": "object",
            "properties": {
                "id": {"type": "integer", "description": "ID of the task"},
                "deadline": {"type": "string", "description": "New deadline (YYYY-MM-DD)", "format": "date"},
            },
            "required": ["id", "deadline"],
        },
    },
    {
        "name": "scheduleTasks",
        "description": "Assign deadlines to several tasks across a date range",
        "parameters": {
            "type": "object",
            "properties": {
                "taskIds": {"type": "array", "description": "IDs of the tasks to schedule", "items": {"type": "integer"}},
                "startDate": {"type": "string", "description": "First day of the range (YYYY-MM-DD)", "format": "date"},
                "endDate": {"type": "string", "description": "Last day of the range (YYYY-MM-DD)", "format": "date"},
                "distributeEvenly": {
                    "type": "boolean",
                    "description": "Spread tasks evenly in the given order (default true); "
                                   "false orders them by priority first",
                },
            },
            "required": ["taskIds", "startDate", "endDate"],
        },
    },
    {
        "name": "getTasksByDate",
        "description": "Get the tasks due on a specific day",
        "parameters": {
            "type": "object",
            "properties": {
                "date": {"type": "string", "description": "Day to look up (YYYY-MM-DD)", "format": "date"},
            },
            "required": ["date"],
        },
    },
    {
        "name": "listTasks",
        "description": "List tasks, optionally filtered by status or by category",
        "parameters": {
            "type": "object",
            "properties": {
                "status": {"type": "string", "description": "Only tasks with this status", "enum": STATUS_ENUM},
                "categoryId": {"type": "integer", "description": "Only tasks in this category"},
            },
            "required": [],
        },
    },
]
