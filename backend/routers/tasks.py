"""
Task management API endpoints.

Direct CRUD over the shared Storage for the dashboard. Creation goes
through the same helper the agents use, so defaults (category,
priority, status aliases) match chat-created tasks.
"""

from typing import Dict, List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query

from backend.dependencies import get_config, get_storage
from backend.schemas import (
    TaskCreate,
    TaskUpdate,
    TaskResponse,
    TaskStatsResponse,
)
from taskdesk.core.config import Config
from taskdesk.core.storage import Storage
from taskdesk.agents.task_ops import create_task_from_fields, list_tasks as fetch_tasks, parse_date

router = APIRouter(prefix="/tasks", tags=["tasks"])

# API field name -> storage column
UPDATE_FIELDS: Dict[str, str] = {
    "title": "title",
    "description": "description",
    "status": "status",
    "priority": "priority",
    "categoryId": "category_id",
    "assignedTo": "assigned_to",
}


@router.get("/", response_model=List[TaskResponse])
async def list_tasks(
    status: Optional[str] = Query(None, description="Filter by status"),
    categoryId: Optional[int] = Query(None, description="Filter by category"),
    storage: Storage = Depends(get_storage),
):
    """
    List tasks with an optional filter.

    When both filters are given, status wins.
    """
    tasks = await fetch_tasks(storage, status=status, category_id=categoryId)
    return [task.to_dict() for task in tasks]


@router.get("/stats", response_model=TaskStatsResponse)
async def task_stats(storage: Storage = Depends(get_storage)):
    """Task counts by status."""
    stats = await storage.get_task_stats()
    return stats.to_dict()


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: int,
    storage: Storage = Depends(get_storage),
):
    """Get a single task by ID."""
    task = await storage.get_task(task_id)
    if task is None:
        raise HTTPException(status_code=404, detail=f"Task {task_id} not found")
    return task.to_dict()


@router.post("/", response_model=TaskResponse, status_code=201)
async def create_task(
    task: TaskCreate,
    storage: Storage = Depends(get_storage),
    config: Config = Depends(get_config),
):
    """
    Create a new task.

    The deadline accepts ISO dates and anything dateutil can parse.
    """
    try:
        created = await create_task_from_fields(
            storage,
            task,
            default_category_id=config.get("default_category_id", section="agents", default=1),
            default_priority=config.get("default_priority", section="agents", default="medium"),
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return created.to_dict()


@router.patch("/{task_id}", response_model=TaskResponse)
async def patch_task(
    task_id: int,
    task: TaskUpdate,
    storage: Storage = Depends(get_storage),
):
    """Partially update an existing task."""
    # Only include fields that were explicitly set
    update_data = task.model_dump(exclude_unset=True)
    fields = {UPDATE_FIELDS[key]: value for key, value in update_data.items() if key in UPDATE_FIELDS}

    if "deadline" in update_data:
        deadline = update_data["deadline"]
        if deadline:
            fields["deadline"] = parse_date(deadline)
            if fields["deadline"] is None:
                raise HTTPException(status_code=400, detail=f"'{deadline}' is not a valid date")
        else:
            fields["deadline"] = None

    updated = await storage.update_task(task_id, fields)
    if updated is None:
        raise HTTPException(status_code=404, detail=f"Task {task_id} not found")
    return updated.to_dict()


@router.delete("/{task_id}")
async def delete_task(
    task_id: int,
    storage: Storage = Depends(get_storage),
):
    """Delete a task."""
    if not await storage.delete_task(task_id):
        raise HTTPException(status_code=404, detail=f"Task {task_id} not found")
    return {"success": True, "id": task_id}
