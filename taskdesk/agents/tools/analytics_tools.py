"""Tool declarations and argument models for the analytics agent."""

from typing import Optional

from pydantic import BaseModel


class ReportArgs(BaseModel):
    categoryId: Optional[int] = None


ANALYTICS_TOOLS = [
    {
        "name": "getTaskStats",
        "description": "Count tasks by status",
        "parameters": {"type": "object", "properties": {}, "required": []},
    },
    {
        "name": "analyzeTrends",
        "description": "Summarize tasks by status and priority, overdue work and completion rate",
        "parameters": {"type": "object", "properties": {}, "required": []},
    },
    {
        "name": "generateReport",
        "description": "Per-category breakdown of tasks, or a single category's report",
        "parameters": {
            "type": "object",
            "properties": {
                "categoryId": {"type": "integer", "description": "Restrict the report to one category"},
            },
            "required": [],
        },
    },
]
