"""
Category API endpoints.

Plain CRUD over the shared Storage. Names are unique (case-insensitive),
the same rule the category agent applies in chat.
"""

from typing import List
from fastapi import APIRouter, Depends, HTTPException

from backend.dependencies import get_storage
from backend.schemas import CategoryCreate, CategoryUpdate, CategoryResponse
from taskdesk.core.storage import Storage
from taskdesk.agents.tools.category_tools import COLOR_ENUM

router = APIRouter(prefix="/categories", tags=["categories"])


async def _ensure_unique_name(storage: Storage, name: str, exclude_id: int = None) -> None:
    for category in await storage.get_categories():
        if category.name.lower() == name.strip().lower() and category.id != exclude_id:
            raise HTTPException(status_code=400, detail=f"A category named \"{category.name}\" already exists")


def _check_color(color: str) -> None:
    if color not in COLOR_ENUM:
        raise HTTPException(status_code=400, detail=f"color must be one of {', '.join(COLOR_ENUM)}")


@router.get("/", response_model=List[CategoryResponse])
async def list_categories(storage: Storage = Depends(get_storage)):
    """List all categories."""
    return [category.to_dict() for category in await storage.get_categories()]


@router.post("/", response_model=CategoryResponse, status_code=201)
async def create_category(
    category: CategoryCreate,
    storage: Storage = Depends(get_storage),
):
    """Create a new category."""
    _check_color(category.color)
    await _ensure_unique_name(storage, category.name)
    created = await storage.create_category({"name": category.name.strip(), "color": category.color})
    return created.to_dict()


@router.patch("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: int,
    category: CategoryUpdate,
    storage: Storage = Depends(get_storage),
):
    """Rename or recolor a category."""
    fields = category.model_dump(exclude_unset=True, exclude_none=True)
    if "color" in fields:
        _check_color(fields["color"])
    if "name" in fields:
        fields["name"] = fields["name"].strip()
        await _ensure_unique_name(storage, fields["name"], exclude_id=category_id)

    updated = await storage.update_category(category_id, fields)
    if updated is None:
        raise HTTPException(status_code=404, detail=f"Category {category_id} not found")
    return updated.to_dict()


@router.delete("/{category_id}")
async def delete_category(
    category_id: int,
    storage: Storage = Depends(get_storage),
):
    """Delete a category. Its tasks keep their (now dangling) category id."""
    if not await storage.delete_category(category_id):
        raise HTTPException(status_code=404, detail=f"Category {category_id} not found")
    return {"success": True, "id": category_id}
