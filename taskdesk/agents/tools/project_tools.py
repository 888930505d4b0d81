"""Tool declarations and argument models for the project agent."""

from typing import List, Optional

from pydantic import BaseModel, Field


class ProjectPhasesArgs(BaseModel):
    project: str
    phases: List[str] = Field(min_length=1)
    startDate: str
    endDate: str


class ProjectProgressArgs(BaseModel):
    keyword: Optional[str] = None


PROJECT_TOOLS = [
    {
        "name": "createProjectPhases",
        "description": "Create one task per project phase, with deadlines spread across the project dates",
        "parameters": {
            "type": "object",
            "properties": {
                "project": {"type": "string", "description": "Project name"},
                "phases": {"type": "array", "description": "Phase names in order", "items": {"type": "string"}},
                "startDate": {"type": "string", "description": "Project start (YYYY-MM-DD)", "format": "date"},
                "endDate": {"type": "string", "description": "Project end (YYYY-MM-DD)", "format": "date"},
            },
            "required": ["project", "phases", "startDate", "endDate"],
        },
    },
    {
        "name": "getProjectProgress",
        "description": "Report completion of project tasks, optionally for tasks mentioning a keyword",
        "parameters": {
            "type": "object",
            "properties": {
                "keyword": {"type": "string", "description": "Project name or keyword to filter by"},
            },
            "required": [],
        },
    },
]
