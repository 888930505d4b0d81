"""
Category Agent for taskdesk
Creates, renames, recolors, deletes and lists task categories.
"""

from typing import Any, Dict, List, Tuple, Type

from pydantic import BaseModel

from .base_agent import AgentResponse, SpecializedAgent, ToolHandler
from .context import AgentContext
from .tools.category_tools import (
    CATEGORY_TOOLS,
    CategoryIdArgs,
    CreateCategoryArgs,
    UpdateCategoryArgs,
)
from .tools.common import NoArgs


class CategoryAgent(SpecializedAgent):
    """Specialized agent for category management."""

    system_prompt = """You are an agent specialized in organizing tasks into categories.
You create new categories, rename or recolor them, delete them and list them with their task counts.
Available colors: blue, green, red, purple, orange, yellow, pink, gray.

When you reply without a function, answer with a JSON object:
{"action": "respond", "response": "<message>", "confidence": <0..1>}"""

    def __init__(self, storage, llm, config=None):
        super().__init__(storage, llm, config, "category")

    def get_functions(self) -> List[Dict[str, Any]]:
        return CATEGORY_TOOLS

    def get_handlers(self) -> Dict[str, Tuple[Type[BaseModel], ToolHandler]]:
        return {
            "createCategory": (CreateCategoryArgs, self._create_category),
            "updateCategory": (UpdateCategoryArgs, self._update_category),
            "deleteCategory": (CategoryIdArgs, self._delete_category),
            "listCategories": (NoArgs, self._list_categories),
        }

    async def _create_category(self, args: CreateCategoryArgs, context: AgentContext) -> AgentResponse:
        existing = await self.storage.get_categories()
        if any(c.name.lower() == args.name.strip().lower() for c in existing):
            return AgentResponse.error(f"A category named \"{args.name}\" already exists.")

        category = await self.storage.create_category({"name": args.name.strip(), "color": args.color or "blue"})
        return AgentResponse.ok(
            "createCategory",
            f"I created the category \"{category.name}\" ({category.color}).",
            data=category.to_dict(),
        )

    async def _update_category(self, args: UpdateCategoryArgs, context: AgentContext) -> AgentResponse:
        fields = args.model_dump(exclude={"id"}, exclude_none=True)
        if not fields:
            return AgentResponse.error("Tell me the new name or color for the category.")

        if "name" in fields:
            fields["name"] = fields["name"].strip()
            existing = await self.storage.get_categories()
            if any(c.id != args.id and c.name.lower() == fields["name"].lower() for c in existing):
                return AgentResponse.error(f"A category named \"{fields['name']}\" already exists.")

        category = await self.storage.update_category(args.id, fields)
        if category is None:
            return AgentResponse.error(f"I couldn't find a category with ID {args.id}.", data={"id": args.id})
        return AgentResponse.ok(
            "updateCategory",
            f"The category is now \"{category.name}\" ({category.color}).",
            data=category.to_dict(),
        )

    async def _delete_category(self, args: CategoryIdArgs, context: AgentContext) -> AgentResponse:
        category = await self.storage.get_category(args.id)
        if category is None or not await self.storage.delete_category(args.id):
            return AgentResponse.error(f"I couldn't find a category with ID {args.id}.", data={"id": args.id})
        return AgentResponse.ok(
            "deleteCategory",
            f"I deleted the category \"{category.name}\".",
            data=category.to_dict(),
        )

    async def _list_categories(self, args: NoArgs, context: AgentContext) -> AgentResponse:
        categories = await self.storage.get_categories()
        if not categories:
            return AgentResponse.ok("listCategories", "There are no categories yet.", data=[])

        data = []
        lines = []
        for category in categories:
            count = len(await self.storage.get_tasks_by_category(category.id))
            data.append({**category.to_dict(), "taskCount": count})
            lines.append(f"- #{category.id} {category.name} ({category.color}): {count} task(s)")
        return AgentResponse.ok("listCategories", "Your categories:\n\n" + "\n".join(lines), data=data)
