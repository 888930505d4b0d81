"""Tool declarations and argument models for the task agent."""

from typing import List, Optional

from pydantic import BaseModel, Field

STATUS_ENUM = ["pending", "in-progress", "review", "completed"]
PRIORITY_ENUM = ["high", "medium", "low"]

_TASK_PROPERTIES = {
    "title": {"type": "string", "description": "Task title"},
    "description": {"type": "string", "description": "Detailed description of the task"},
    "status": {"type": "string", "description": "Task status", "enum": STATUS_ENUM},
    "priority": {"type": "string", "description": "Task priority", "enum": PRIORITY_ENUM},
    "categoryId": {"type": "integer", "description": "ID of the category the task belongs to"},
    "deadline": {
        "type": "string",
        "description": "Deadline as an absolute date (YYYY-MM-DD). Convert relative expressions first.",
        "format": "date",
    },
    "assignedTo": {"type": "integer", "description": "ID of the user the task is assigned to"},
}


class TaskFields(BaseModel):
    title: str
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    categoryId: Optional[int] = None
    deadline: Optional[str] = None
    assignedTo: Optional[int] = None


class CreateTasksArgs(BaseModel):
    tasks: List[TaskFields] = Field(min_length=1)


class UpdateTaskArgs(BaseModel):
    id: int
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    categoryId: Optional[int] = None
    deadline: Optional[str] = None
    assignedTo: Optional[int] = None


class TaskIdArgs(BaseModel):
    id: int


class TaskIdsArgs(BaseModel):
    ids: List[int] = Field(min_length=1)


class ListTasksArgs(BaseModel):
    status: Optional[str] = None
    categoryId: Optional[int] = None


TASK_TOOLS = [
    {
        "name": "createTask",
        "description": "Create a new task with the given details",
        "parameters": {
            "type": "object",
            "properties": _TASK_PROPERTIES,
            "required": ["title"],
        },
    },
    {
        "name": "createTasks",
        "description": "Create several tasks at once, one object per task",
        "parameters": {
            "type": "object",
            "properties": {
                "tasks": {
                    "type": "array",
                    "description": "Tasks to create, in order",
                    "items": {
                        "type": "object",
                        "properties": _TASK_PROPERTIES,
                        "required": ["title"],
                    },
                },
            },
            "required": ["tasks"],
        },
    },
    {
        "name": "updateTask",
        "description": "Update an existing task with new values",
        "parameters": {
            "type": "object",
            "properties": {
                "id": {"type": "integer", "description": "ID of the task to update"},
                **_TASK_PROPERTIES,
            },
            "required": ["id"],
        },
    },
    {
        "name": "deleteTask",
        "description": "Delete an existing task",
        "parameters": {
            "type": "object",
            "properties": {"id": {"type": "integer", "description": "ID of the task to delete"}},
            "required": ["id"],
        },
    },
    {
        "name": "deleteTasks",
        "description": "Delete several tasks by ID (e.g. 'delete tasks 1, 2 and 3' or 'tasks 4-7')",
        "parameters": {
            "type": "object",
            "properties": {
                "ids": {
                    "type": "array",
                    "description": "IDs of the tasks to delete",
                    "items": {"type": "integer"},
                },
            },
            "required": ["ids"],
        },
    },
    {
        "name": "getTask",
        "description": "Get the details of a specific task",
        "parameters": {
            "type": "object",
            "properties": {"id": {"type": "integer", "description": "ID of the task"}},
            "required": ["id"],
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
