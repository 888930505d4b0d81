"""
Project Agent for taskdesk
Breaks projects into phase tasks and reports project progress.
"""

from typing import Any, Dict, List, Tuple, Type

from pydantic import BaseModel

from ..core.models import TaskStatus
from .base_agent import AgentResponse, SpecializedAgent, ToolHandler
from .context import AgentContext, PROJECT_KEYWORDS
from .task_ops import distribute_dates, format_date, parse_date, summarize_tasks
from .tools.project_tools import PROJECT_TOOLS, ProjectPhasesArgs, ProjectProgressArgs


class ProjectAgent(SpecializedAgent):
    """
    Specialized agent for project management.

    Phase deadlines are spread over the project dates with the same even
    spacing the planner uses for scheduleTasks.
    """

    system_prompt = """You are an agent specialized in project management.
You break projects into phases, track milestones and report progress. Convert relative dates to
YYYY-MM-DD.

When you reply without a function, answer with a JSON object:
{"action": "respond", "response": "<message>", "confidence": <0..1>}"""

    def __init__(self, storage, llm, config=None):
        super().__init__(storage, llm, config, "project")

    def get_functions(self) -> List[Dict[str, Any]]:
        return PROJECT_TOOLS

    def get_handlers(self) -> Dict[str, Tuple[Type[BaseModel], ToolHandler]]:
        return {
            "createProjectPhases": (ProjectPhasesArgs, self._project_phases),
            "getProjectProgress": (ProjectProgressArgs, self._project_progress),
        }

    async def _project_phases(self, args: ProjectPhasesArgs, context: AgentContext) -> AgentResponse:
        start = parse_date(args.startDate)
        end = parse_date(args.endDate)
        if start is None or end is None:
            return AgentResponse.error("The project start and end must be valid dates in YYYY-MM-DD format.")
        if start > end:
            return AgentResponse.error(
                f"The project start ({format_date(start)}) must be on or before its end ({format_date(end)})."
            )

        created = []
        for phase, deadline in zip(args.phases, distribute_dates(start, end, len(args.phases))):
            created.append(await self.storage.create_task({
                "title": f"{args.project} - phase: {phase}",
                "description": f"Project \"{args.project}\", phase \"{phase}\"",
                "status": TaskStatus.PENDING,
                "priority": self.get_config_value("default_priority", default="medium"),
                "category_id": self.get_config_value("default_category_id", default=1),
                "deadline": deadline,
            }))

        return AgentResponse.ok(
            "createProjectPhases",
            f"I planned {len(created)} phase(s) for \"{args.project}\":\n\n{summarize_tasks(created)}",
            data={"project": args.project, "phases": [t.to_dict() for t in created]},
        )

    async def _project_progress(self, args: ProjectProgressArgs, context: AgentContext) -> AgentResponse:
        keywords = (args.keyword.lower(),) if args.keyword else PROJECT_KEYWORDS
        tasks = [t for t in await self.storage.get_tasks() if t.mentions(keywords)]
        if not tasks:
            return AgentResponse.ok("getProjectProgress", "I found no project tasks to report on.",
                                    data={"total": 0, "completed": 0, "progress": 0.0})

        completed = sum(1 for t in tasks if t.status == TaskStatus.COMPLETED)
        progress = round(100.0 * completed / len(tasks), 1)
        return AgentResponse.ok(
            "getProjectProgress",
            f"{completed} of {len(tasks)} project task(s) are completed ({progress}%).\n\n{summarize_tasks(tasks)}",
            data={
                "total": len(tasks),
                "completed": completed,
                "progress": progress,
                "tasks": [t.to_dict() for t in tasks],
            },
        )
