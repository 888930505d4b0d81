"""
Task Agent for taskdesk
Handles task operations chosen by the model: create (one or many), update,
delete (one or many), get and list.
"""

from typing import Any, Dict, List, Tuple, Type

from pydantic import BaseModel

from .base_agent import AgentResponse, SpecializedAgent, ToolHandler
from .context import AgentContext
from .priority import map_priority, normalize_status
from .task_ops import create_task_from_fields, format_date, list_tasks, parse_date, summarize_tasks
from .tools.task_tools import (
    TASK_TOOLS,
    CreateTasksArgs,
    ListTasksArgs,
    TaskFields,
    TaskIdArgs,
    TaskIdsArgs,
    UpdateTaskArgs,
)


class TaskAgent(SpecializedAgent):
    """
    Specialized agent for task management.

    Tools:
    - createTask / createTasks: new tasks, defaults for priority, status, category
    - updateTask: partial update of an existing task
    - deleteTask / deleteTasks: removal, reporting ids that were not found
    - getTask / listTasks: lookups
    """

    system_prompt = """You are an agent specialized in task management.
You create new tasks, update existing tasks, delete tasks and answer questions about tasks.

IMPORTANT: If the user describes something that sounds like a task ("I have to do the accounting",
"I need to prepare a presentation"), ALWAYS treat it as a request to CREATE a task, even if they
don't ask explicitly.

IMPORTANT: If the user mentions a date ("tomorrow", "on Friday", "March 27"), ALWAYS convert it to an
absolute date in YYYY-MM-DD format and put it in the deadline field.

IMPORTANT: To delete several tasks ("delete tasks 1, 2 and 3", "remove tasks 4-7") use deleteTasks
with every id mentioned. To create several tasks at once use createTasks with one object per task.

IMPORTANT: Never answer with JSON text when a function fits; call the function instead.
Do not answer jokes or small talk; interpret everything as an attempt to manage tasks."""

    def __init__(self, storage, llm, config=None):
        """Initialize the Task Agent."""
        super().__init__(storage, llm, config, "task")

    def get_functions(self) -> List[Dict[str, Any]]:
        return TASK_TOOLS

    def get_handlers(self) -> Dict[str, Tuple[Type[BaseModel], ToolHandler]]:
        return {
            "createTask": (TaskFields, self._create_task),
            "createTasks": (CreateTasksArgs, self._create_tasks),
            "updateTask": (UpdateTaskArgs, self._update_task),
            "deleteTask": (TaskIdArgs, self._delete_task),
            "deleteTasks": (TaskIdsArgs, self._delete_tasks),
            "getTask": (TaskIdArgs, self._get_task),
            "listTasks": (ListTasksArgs, self._list_tasks),
        }

    @property
    def default_category_id(self) -> int:
        return self.get_config_value("default_category_id", default=1)

    @property
    def default_priority(self) -> str:
        return self.get_config_value("default_priority", default="medium")

    @staticmethod
    def _not_found(task_id: int) -> AgentResponse:
        return AgentResponse.error(
            f"I couldn't find a task with ID {task_id}. Please check the number and try again.",
            data={"id": task_id},
        )

    # =========================================================================
    # Tool Handlers
    # =========================================================================

    async def _create_task(self, args: TaskFields, context: AgentContext) -> AgentResponse:
        try:
            task = await create_task_from_fields(
                self.storage, args, self.default_category_id, self.default_priority
            )
        except ValueError as e:
            return AgentResponse.error(f"I couldn't create \"{args.title}\": {e}.")

        message = f"Done! I created the task \"{task.title}\" with {task.priority} priority"
        if task.deadline:
            message += f" and deadline {format_date(task.deadline)}"
        return AgentResponse.ok("createTask", message + ".", data=task.to_dict())

    async def _create_tasks(self, args: CreateTasksArgs, context: AgentContext) -> AgentResponse:
        """Create tasks in order; one failure doesn't stop the rest."""
        created = []
        failed = []
        for index, fields in enumerate(args.tasks):
            try:
                task = await create_task_from_fields(
                    self.storage, fields, self.default_category_id, self.default_priority
                )
                created.append(task)
            except Exception as e:
                self.logger.warning(f"Failed to create task {index} ({fields.title}): {e}", exc_info=True)
                failed.append({"index": index, "title": fields.title, "error": str(e)})

        data = {"createdTasks": [t.to_dict() for t in created], "failed": failed}
        total = len(args.tasks)
        if not created:
            return AgentResponse.error(f"I couldn't create any of the {total} tasks.", data=data)

        titles = ", ".join(f"\"{t.title}\"" for t in created)
        message = f"Created {len(created)} of {total} tasks: {titles}."
        if failed:
            message += " Failed: " + ", ".join(f"\"{f['title']}\" ({f['error']})" for f in failed) + "."
        return AgentResponse.ok("createTasks", message, data=data)

    async def _update_task(self, args: UpdateTaskArgs, context: AgentContext) -> AgentResponse:
        existing = await self.storage.get_task(args.id)
        if existing is None:
            return self._not_found(args.id)

        fields: Dict[str, Any] = {}
        if args.title is not None:
            fields["title"] = args.title
        if args.description is not None:
            fields["description"] = args.description
        if args.status is not None:
            fields["status"] = normalize_status(args.status)
        if args.priority is not None:
            fields["priority"] = map_priority(args.priority, default=self.default_priority)
        if args.categoryId is not None:
            fields["category_id"] = args.categoryId
        if args.assignedTo is not None:
            fields["assigned_to"] = args.assignedTo
        if args.deadline is not None:
            deadline = parse_date(args.deadline)
            if deadline is None:
                return AgentResponse.error(
                    f"'{args.deadline}' is not a valid date. Please use the YYYY-MM-DD format."
                )
            fields["deadline"] = deadline

        updated = await self.storage.update_task(args.id, fields)
        if updated is None:
            return self._not_found(args.id)
        return AgentResponse.ok(
            "updateTask",
            f"I updated the task \"{updated.title}\" with the new details.",
            data=updated.to_dict(),
        )

    async def _delete_task(self, args: TaskIdArgs, context: AgentContext) -> AgentResponse:
        existing = await self.storage.get_task(args.id)
        if existing is None or not await self.storage.delete_task(args.id):
            return self._not_found(args.id)
        return AgentResponse.ok(
            "deleteTask",
            f"I deleted the task \"{existing.title}\".",
            data=existing.to_dict(),
        )

    async def _delete_tasks(self, args: TaskIdsArgs, context: AgentContext) -> AgentResponse:
        """Delete each id independently, reporting deleted tasks and failed ids."""
        deleted = []
        failed_ids = []
        for task_id in args.ids:
            existing = await self.storage.get_task(task_id)
            if existing is not None and await self.storage.delete_task(task_id):
                deleted.append(existing.to_dict())
            else:
                failed_ids.append(task_id)

        data = {"deletedTasks": deleted, "failedIds": failed_ids}
        if not deleted:
            ids = ", ".join(str(i) for i in failed_ids)
            return AgentResponse.error(
                f"I couldn't find the tasks with IDs: {ids}. Please check the numbers and try again.",
                data=data,
            )

        titles = ", ".join(f"\"{t['title']}\"" for t in deleted)
        message = f"I deleted {len(deleted)} task(s): {titles}."
        if failed_ids:
            message += f" These IDs were not found: {', '.join(str(i) for i in failed_ids)}."
        return AgentResponse.ok("deleteTasks", message, data=data)

    async def _get_task(self, args: TaskIdArgs, context: AgentContext) -> AgentResponse:
        task = await self.storage.get_task(args.id)
        if task is None:
            return self._not_found(args.id)
        return AgentResponse.ok("getTask", summarize_tasks([task]), data=task.to_dict())

    async def _list_tasks(self, args: ListTasksArgs, context: AgentContext) -> AgentResponse:
        tasks = await list_tasks(self.storage, args.status, args.categoryId)
        if not tasks:
            if args.status:
                message = f"There are no tasks with status '{normalize_status(args.status)}'."
            elif args.categoryId is not None:
                message = f"There are no tasks in category {args.categoryId}."
            else:
                message = "There are no tasks yet."
            return AgentResponse.ok("listTasks", message, data=[])

        return AgentResponse.ok(
            "listTasks",
            f"Here are the tasks I found:\n\n{summarize_tasks(tasks)}",
            data=[t.to_dict() for t in tasks],
        )
