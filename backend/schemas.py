"""
Pydantic schemas for API request/response validation.

These schemas provide:
- Type safety for API inputs and outputs
- Automatic validation and error messages
- OpenAPI documentation generation

Field names are camelCase to match the JSON the agents return
(Task.to_dict, Category.to_dict, ...), so the dashboard sees one shape.
"""

from typing import Any, List, Optional
from pydantic import BaseModel, Field, field_validator

from taskdesk.core.models import TaskPriority, TaskStatus


# =============================================================================
# Agent Schemas
# =============================================================================

class AgentProcessRequest(BaseModel):
    """Request body for the chat endpoint."""
    message: str = Field(..., min_length=1, description="Natural language input")
    sessionId: Optional[str] = Field(default=None, description="Conversation key; defaults to 'default'")


class AgentProcessResponse(BaseModel):
    """Normalized orchestrator result."""
    action: Optional[str] = None
    message: str
    data: Optional[Any] = None
    agentUsed: Optional[str] = None


class ErrorResponse(BaseModel):
    """Error response for API errors."""
    detail: str
    code: Optional[str] = None


# =============================================================================
# Task Schemas
# =============================================================================

class TaskCreate(BaseModel):
    """Request body for creating a task."""
    title: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = None
    status: str = TaskStatus.PENDING
    priority: str = TaskPriority.MEDIUM
    categoryId: Optional[int] = None
    deadline: Optional[str] = None  # ISO 8601 or any date dateutil understands
    assignedTo: Optional[int] = None

    @field_validator("status")
    @classmethod
    def check_status(cls, value: str) -> str:
        if value not in TaskStatus.ALL:
            raise ValueError(f"status must be one of {', '.join(TaskStatus.ALL)}")
        return value

    @field_validator("priority")
    @classmethod
    def check_priority(cls, value: str) -> str:
        if value not in TaskPriority.ALL:
            raise ValueError(f"priority must be one of {', '.join(TaskPriority.ALL)}")
        return value


class TaskUpdate(BaseModel):
    """Request body for updating a task. Only provided fields change."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=500)
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    categoryId: Optional[int] = None
    deadline: Optional[str] = None
    assignedTo: Optional[int] = None

    @field_validator("status")
    @classmethod
    def check_status(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and value not in TaskStatus.ALL:
            raise ValueError(f"status must be one of {', '.join(TaskStatus.ALL)}")
        return value

    @field_validator("priority")
    @classmethod
    def check_priority(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and value not in TaskPriority.ALL:
            raise ValueError(f"priority must be one of {', '.join(TaskPriority.ALL)}")
        return value


class TaskResponse(BaseModel):
    """Task as returned by the API."""
    id: int
    title: str
    description: Optional[str] = None
    status: str
    priority: Optional[str] = None
    categoryId: Optional[int] = None
    deadline: Optional[str] = None
    createdAt: Optional[str] = None
    assignedTo: Optional[int] = None


class TaskStatsResponse(BaseModel):
    """Task counts by status."""
    total: int
    pending: int
    inProgress: int
    review: int
    completed: int


# =============================================================================
# Category Schemas
# =============================================================================

class CategoryCreate(BaseModel):
    """Request body for creating a category."""
    name: str = Field(..., min_length=1, max_length=100)
    color: str = "blue"


class CategoryUpdate(BaseModel):
    """Request body for updating a category."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    color: Optional[str] = None


class CategoryResponse(BaseModel):
    """Category as returned by the API."""
    id: int
    name: str
    color: str


# =============================================================================
# WhatsApp Schemas
# =============================================================================

class ContactCreate(BaseModel):
    """Request body for adding a WhatsApp contact."""
    name: str = Field(..., min_length=1, max_length=200)
    phoneNumber: str = Field(..., min_length=3)


class ContactResponse(BaseModel):
    """WhatsApp contact as returned by the API."""
    id: int
    name: str
    phoneNumber: str
    active: bool = True


class SendTestRequest(BaseModel):
    """Request body for sending a test WhatsApp message."""
    to: str = Field(..., description="Destination in E.164 format, e.g. +34600111222")
    message: str = Field(default="Test message from taskdesk", min_length=1)


class SendTestResponse(BaseModel):
    """Outcome of a test send."""
    success: bool
    messageId: Optional[str] = None
    error: Optional[str] = None


class WhatsAppStatusResponse(BaseModel):
    """Transport configuration status."""
    configured: bool
    phoneConfigured: bool
    phoneNumber: Optional[str] = None
    error: Optional[str] = None


class ContactListResponse(BaseModel):
    contacts: List[ContactResponse]
    total: int
