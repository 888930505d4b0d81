"""
Marketing Agent for taskdesk
Turns campaigns into per-channel tasks and lists marketing work.
"""

from typing import Any, Dict, List, Tuple, Type

from pydantic import BaseModel

from .base_agent import AgentResponse, SpecializedAgent, ToolHandler
from .context import AgentContext, MARKETING_KEYWORDS
from .task_ops import create_task_from_fields, summarize_tasks
from .tools.common import NoArgs
from .tools.marketing_tools import MARKETING_TOOLS, CampaignTasksArgs
from .tools.task_tools import TaskFields


class MarketingAgent(SpecializedAgent):
    """Specialized agent for digital marketing planning."""

    system_prompt = """You are an agent specialized in digital marketing.
You plan campaigns, content, SEO, social media and email marketing, and turn campaigns into concrete
tasks (one per channel). Convert relative dates to YYYY-MM-DD.

When you reply without a function, answer with a JSON object:
{"action": "respond", "response": "<message>", "confidence": <0..1>}"""

    def __init__(self, storage, llm, config=None):
        super().__init__(storage, llm, config, "marketing")

    def get_functions(self) -> List[Dict[str, Any]]:
        return MARKETING_TOOLS

    def get_handlers(self) -> Dict[str, Tuple[Type[BaseModel], ToolHandler]]:
        return {
            "createCampaignTasks": (CampaignTasksArgs, self._campaign_tasks),
            "listMarketingTasks": (NoArgs, self._list_marketing_tasks),
        }

    async def _campaign_tasks(self, args: CampaignTasksArgs, context: AgentContext) -> AgentResponse:
        created = []
        failed = []
        for channel in args.channels:
            fields = TaskFields(
                title=f"{args.campaign}: {channel}",
                description=f"Marketing campaign \"{args.campaign}\" on {channel}",
                priority=args.priority,
                deadline=args.deadline,
            )
            try:
                created.append(await create_task_from_fields(
                    self.storage, fields,
                    self.get_config_value("default_category_id", default=1),
                    self.get_config_value("default_priority", default="medium"),
                ))
            except ValueError as e:
                failed.append({"channel": channel, "error": str(e)})

        data = {"createdTasks": [t.to_dict() for t in created], "failed": failed}
        if not created:
            return AgentResponse.error(
                f"I couldn't create tasks for the campaign \"{args.campaign}\": {failed[0]['error']}.",
                data=data,
            )
        return AgentResponse.ok(
            "createCampaignTasks",
            f"I created {len(created)} task(s) for the campaign \"{args.campaign}\":\n\n{summarize_tasks(created)}",
            data=data,
        )

    async def _list_marketing_tasks(self, args: NoArgs, context: AgentContext) -> AgentResponse:
        tasks = [t for t in await self.storage.get_tasks() if t.mentions(MARKETING_KEYWORDS)]
        if not tasks:
            return AgentResponse.ok("listMarketingTasks", "There are no marketing tasks yet.", data=[])
        return AgentResponse.ok(
            "listMarketingTasks",
            f"Marketing tasks:\n\n{summarize_tasks(tasks)}",
            data=[t.to_dict() for t in tasks],
        )
