"""Tool declarations and argument models for the marketing agent."""

from typing import List, Optional

from pydantic import BaseModel, Field

from .task_tools import PRIORITY_ENUM


class CampaignTasksArgs(BaseModel):
    campaign: str
    channels: List[str] = Field(min_length=1)
    deadline: Optional[str] = None
    priority: Optional[str] = None


MARKETING_TOOLS = [
    {
        "name": "createCampaignTasks",
        "description": "Create one task per channel for a marketing campaign",
        "parameters": {
            "type": "object",
            "properties": {
                "campaign": {"type": "string", "description": "Campaign name"},
                "channels": {
                    "type": "array",
                    "description": "Channels to cover (e.g. email, SEO, Instagram)",
                    "items": {"type": "string"},
                },
                "deadline": {"type": "string", "description": "Campaign deadline (YYYY-MM-DD)", "format": "date"},
                "priority": {"type": "string", "description": "Priority for every task", "enum": PRIORITY_ENUM},
            },
            "required": ["campaign", "channels"],
        },
    },
    {
        "name": "listMarketingTasks",
        "description": "List tasks related to marketing",
        "parameters": {"type": "object", "properties": {}, "required": []},
    },
]
