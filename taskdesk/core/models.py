"""
Data models for taskdesk
Defines core data structures for tasks, categories and WhatsApp messaging
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Dict, Any


class TaskStatus:
    """Closed set of task statuses understood by the dashboard"""
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    REVIEW = "review"
    COMPLETED = "completed"

    ALL = (PENDING, IN_PROGRESS, REVIEW, COMPLETED)


class TaskPriority:
    """Closed set of task priorities"""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    ALL = (HIGH, MEDIUM, LOW)


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse a datetime from a database value or ISO string"""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value))
    except (ValueError, TypeError):
        return None


def format_datetime(value: Optional[datetime]) -> Optional[str]:
    """Serialize a datetime for JSON payloads"""
    return value.isoformat() if value else None


@dataclass
class Category:
    """Task category"""
    id: Optional[int] = None
    name: str = ""
    color: str = "blue"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Category':
        """Create Category from database row dictionary"""
        return cls(
            id=data.get('id'),
            name=data.get('name', ''),
            color=data.get('color') or 'blue',
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "color": self.color}


@dataclass
class Task:
    """Task data model"""
    id: Optional[int] = None
    title: str = ""
    description: Optional[str] = None
    status: str = TaskStatus.PENDING
    priority: Optional[str] = TaskPriority.MEDIUM
    category_id: Optional[int] = None
    deadline: Optional[datetime] = None
    created_at: Optional[datetime] = None
    assigned_to: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Task':
        """Create Task from database row dictionary"""
        return cls(
            id=data.get('id'),
            title=data.get('title', ''),
            description=data.get('description'),
            status=data.get('status') or TaskStatus.PENDING,
            priority=data.get('priority'),
            category_id=data.get('category_id'),
            deadline=parse_datetime(data.get('deadline')),
            created_at=parse_datetime(data.get('created_at')),
            assigned_to=data.get('assigned_to'),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the field names the dashboard and the LLM see"""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "priority": self.priority,
            "categoryId": self.category_id,
            "deadline": format_datetime(self.deadline),
            "createdAt": format_datetime(self.created_at),
            "assignedTo": self.assigned_to,
        }

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        """Check if task is past its deadline and not completed"""
        if self.deadline is None or self.status == TaskStatus.COMPLETED:
            return False
        return (now or datetime.now()) > self.deadline

    def mentions(self, keywords) -> bool:
        """Case-insensitive substring match against title or description"""
        haystack = f"{self.title} {self.description or ''}".lower()
        return any(keyword in haystack for keyword in keywords)


@dataclass
class WhatsappContact:
    """WhatsApp directory entry"""
    id: Optional[int] = None
    name: str = ""
    phone_number: str = ""
    active: bool = True
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WhatsappContact':
        return cls(
            id=data.get('id'),
            name=data.get('name', ''),
            phone_number=data.get('phone_number', ''),
            active=bool(data.get('active', True)),
            created_at=parse_datetime(data.get('created_at')),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "phoneNumber": self.phone_number,
            "active": self.active,
        }


@dataclass
class WhatsappMessage:
    """A message exchanged with a WhatsApp contact"""
    id: Optional[int] = None
    contact_id: Optional[int] = None
    direction: str = "outgoing"  # 'incoming', 'outgoing'
    body: str = ""
    status: str = "sent"
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WhatsappMessage':
        return cls(
            id=data.get('id'),
            contact_id=data.get('contact_id'),
            direction=data.get('direction', 'outgoing'),
            body=data.get('body', ''),
            status=data.get('status', 'sent'),
            created_at=parse_datetime(data.get('created_at')),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "contactId": self.contact_id,
            "direction": self.direction,
            "body": self.body,
            "status": self.status,
            "createdAt": format_datetime(self.created_at),
        }


@dataclass
class TaskStats:
    """Task counts by status"""
    total: int = 0
    pending: int = 0
    in_progress: int = 0
    review: int = 0
    completed: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "pending": self.pending,
            "inProgress": self.in_progress,
            "review": self.review,
            "completed": self.completed,
        }
