"""Tool declarations and argument models for the category agent."""

from typing import Optional

from pydantic import BaseModel

COLOR_ENUM = ["blue", "green", "red", "purple", "orange", "yellow", "pink", "gray"]


class CreateCategoryArgs(BaseModel):
    name: str
    color: Optional[str] = None


class UpdateCategoryArgs(BaseModel):
    id: int
    name: Optional[str] = None
    color: Optional[str] = None


class CategoryIdArgs(BaseModel):
    id: int


CATEGORY_TOOLS = [
    {
        "name": "createCategory",
        "description": "Create a new category",
        "parameters": {
            "type": "object",
            "properties": {
                "name": {"type": "string", "description": "Category name"},
                "color": {"type": "string", "description": "Display color", "enum": COLOR_ENUM},
            },
            "required": ["name"],
        },
    },
    {
        "name": "updateCategory",
        "description": "Rename or recolor an existing category",
        "parameters": {
            "type": "object",
            "properties": {
                "id": {"type": "integer", "description": "ID of the category"},
                "name": {"type": "string", "description": "New name"},
                "color": {"type": "string", "description": "New color", "enum": COLOR_ENUM},
            },
            "required": ["id"],
        },
    },
    {
        "name": "deleteCategory",
        "description": "Delete a category",
        "parameters": {
            "type": "object",
            "properties": {"id": {"type": "integer", "description": "ID of the category"}},
            "required": ["id"],
        },
    },
    {
        "name": "listCategories",
        "description": "List all categories with their task counts",
        "parameters": {"type": "object", "properties": {}, "required": []},
    },
]
