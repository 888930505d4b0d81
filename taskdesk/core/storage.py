"""
Storage layer for taskdesk

Agents only talk to the async Storage interface. Two implementations:
- MemoryStorage: process-local maps, seeded with the default categories
- DatabaseStorage: SQLite/PostgreSQL through core.database, with the blocking
  driver calls moved off the event loop
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional

from .database import DatabaseBase
from .models import (
    Category,
    Task,
    TaskStats,
    TaskStatus,
    WhatsappContact,
    WhatsappMessage,
    format_datetime,
)

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    ("Work", "blue"),
    ("Personal", "purple"),
    ("Projects", "orange"),
    ("Ideas", "green"),
]

TASK_FIELDS = ("title", "description", "status", "priority", "category_id", "deadline", "assigned_to")
CATEGORY_FIELDS = ("name", "color")


def compute_stats(tasks: List[Task]) -> TaskStats:
    """Count tasks by status."""
    return TaskStats(
        total=len(tasks),
        pending=sum(1 for t in tasks if t.status == TaskStatus.PENDING),
        in_progress=sum(1 for t in tasks if t.status == TaskStatus.IN_PROGRESS),
        review=sum(1 for t in tasks if t.status == TaskStatus.REVIEW),
        completed=sum(1 for t in tasks if t.status == TaskStatus.COMPLETED),
    )


class Storage(ABC):
    """Async persistence contract consumed by the agents."""

    # Tasks
    @abstractmethod
    async def get_tasks(self) -> List[Task]:
        pass

    @abstractmethod
    async def get_task(self, task_id: int) -> Optional[Task]:
        pass

    @abstractmethod
    async def get_tasks_by_status(self, status: str) -> List[Task]:
        pass

    @abstractmethod
    async def get_tasks_by_category(self, category_id: int) -> List[Task]:
        pass

    @abstractmethod
    async def create_task(self, fields: Dict[str, Any]) -> Task:
        pass

    @abstractmethod
    async def update_task(self, task_id: int, fields: Dict[str, Any]) -> Optional[Task]:
        pass

    @abstractmethod
    async def delete_task(self, task_id: int) -> bool:
        pass

    async def get_task_stats(self) -> TaskStats:
        return compute_stats(await self.get_tasks())

    # Categories
    @abstractmethod
    async def get_categories(self) -> List[Category]:
        pass

    @abstractmethod
    async def get_category(self, category_id: int) -> Optional[Category]:
        pass

    @abstractmethod
    async def create_category(self, fields: Dict[str, Any]) -> Category:
        pass

    @abstractmethod
    async def update_category(self, category_id: int, fields: Dict[str, Any]) -> Optional[Category]:
        pass

    @abstractmethod
    async def delete_category(self, category_id: int) -> bool:
        pass

    # WhatsApp
    @abstractmethod
    async def get_whatsapp_contacts(self) -> List[WhatsappContact]:
        pass

    @abstractmethod
    async def get_whatsapp_contact(self, contact_id: int) -> Optional[WhatsappContact]:
        pass

    @abstractmethod
    async def create_whatsapp_contact(self, fields: Dict[str, Any]) -> WhatsappContact:
        pass

    @abstractmethod
    async def get_whatsapp_messages(self, contact_id: int) -> List[WhatsappMessage]:
        pass

    @abstractmethod
    async def create_whatsapp_message(self, fields: Dict[str, Any]) -> WhatsappMessage:
        pass


class MemoryStorage(Storage):
    """In-memory storage; identities are sequential integers per entity."""

    def __init__(self, seed_categories: bool = True):
        self._tasks: Dict[int, Task] = {}
        self._categories: Dict[int, Category] = {}
        self._contacts: Dict[int, WhatsappContact] = {}
        self._messages: Dict[int, WhatsappMessage] = {}
        self._next_ids = {"task": 1, "category": 1, "contact": 1, "message": 1}

        if seed_categories:
            for name, color in DEFAULT_CATEGORIES:
                category_id = self._next_id("category")
                self._categories[category_id] = Category(id=category_id, name=name, color=color)

    def _next_id(self, kind: str) -> int:
        value = self._next_ids[kind]
        self._next_ids[kind] += 1
        return value

    async def get_tasks(self) -> List[Task]:
        return list(self._tasks.values())

    async def get_task(self, task_id: int) -> Optional[Task]:
        return self._tasks.get(task_id)

    async def get_tasks_by_status(self, status: str) -> List[Task]:
        return [t for t in self._tasks.values() if t.status == status]

    async def get_tasks_by_category(self, category_id: int) -> List[Task]:
        return [t for t in self._tasks.values() if t.category_id == category_id]

    async def create_task(self, fields: Dict[str, Any]) -> Task:
        task_id = self._next_id("task")
        values = {k: v for k, v in fields.items() if k in TASK_FIELDS}
        task = Task(id=task_id, created_at=datetime.now(), **values)
        self._tasks[task_id] = task
        return task

    async def update_task(self, task_id: int, fields: Dict[str, Any]) -> Optional[Task]:
        task = self._tasks.get(task_id)
        if task is None:
            return None
        for key, value in fields.items():
            if key in TASK_FIELDS:
                setattr(task, key, value)
        return task

    async def delete_task(self, task_id: int) -> bool:
        return self._tasks.pop(task_id, None) is not None

    async def get_categories(self) -> List[Category]:
        return list(self._categories.values())

    async def get_category(self, category_id: int) -> Optional[Category]:
        return self._categories.get(category_id)

    async def create_category(self, fields: Dict[str, Any]) -> Category:
        category_id = self._next_id("category")
        values = {k: v for k, v in fields.items() if k in CATEGORY_FIELDS}
        category = Category(id=category_id, **values)
        self._categories[category_id] = category
        return category

    async def update_category(self, category_id: int, fields: Dict[str, Any]) -> Optional[Category]:
        category = self._categories.get(category_id)
        if category is None:
            return None
        for key, value in fields.items():
            if key in CATEGORY_FIELDS:
                setattr(category, key, value)
        return category

    async def delete_category(self, category_id: int) -> bool:
        return self._categories.pop(category_id, None) is not None

    async def get_whatsapp_contacts(self) -> List[WhatsappContact]:
        return list(self._contacts.values())

    async def get_whatsapp_contact(self, contact_id: int) -> Optional[WhatsappContact]:
        return self._contacts.get(contact_id)

    async def create_whatsapp_contact(self, fields: Dict[str, Any]) -> WhatsappContact:
        contact_id = self._next_id("contact")
        contact = WhatsappContact(
            id=contact_id,
            name=fields["name"],
            phone_number=fields["phone_number"],
            active=fields.get("active", True),
            created_at=datetime.now(),
        )
        self._contacts[contact_id] = contact
        return contact

    async def get_whatsapp_messages(self, contact_id: int) -> List[WhatsappMessage]:
        messages = [m for m in self._messages.values() if m.contact_id == contact_id]
        return sorted(messages, key=lambda m: m.created_at or datetime.min)

    async def create_whatsapp_message(self, fields: Dict[str, Any]) -> WhatsappMessage:
        message_id = self._next_id("message")
        message = WhatsappMessage(
            id=message_id,
            contact_id=fields["contact_id"],
            direction=fields.get("direction", "outgoing"),
            body=fields.get("body", ""),
            status=fields.get("status", "sent"),
            created_at=datetime.now(),
        )
        self._messages[message_id] = message
        return message


class DatabaseStorage(Storage):
    """
    Relational storage backed by a SQLite or PostgreSQL database.

    Schema is created by scripts/init_db.py. Each call runs the blocking
    driver in a worker thread via asyncio.to_thread.
    """

    def __init__(self, db: DatabaseBase):
        self.db = db

    async def _query(self, query: str, params: tuple = ()) -> List[Dict[str, Any]]:
        return await asyncio.to_thread(self.db.execute, query, params)

    async def _query_one(self, query: str, params: tuple = ()) -> Optional[Dict[str, Any]]:
        return await asyncio.to_thread(self.db.execute_one, query, params)

    async def _write(self, query: str, params: tuple = ()) -> int:
        return await asyncio.to_thread(self.db.execute_write, query, params)

    @staticmethod
    def _to_column(key: str, value: Any) -> Any:
        if key == "deadline" and isinstance(value, datetime):
            return format_datetime(value)
        return value

    # -------------------------------------------------------------------------
    # Tasks
    # -------------------------------------------------------------------------

    async def get_tasks(self) -> List[Task]:
        rows = await self._query("SELECT * FROM tasks ORDER BY id")
        return [Task.from_dict(row) for row in rows]

    async def get_task(self, task_id: int) -> Optional[Task]:
        row = await self._query_one("SELECT * FROM tasks WHERE id = ?", (task_id,))
        return Task.from_dict(row) if row else None

    async def get_tasks_by_status(self, status: str) -> List[Task]:
        rows = await self._query("SELECT * FROM tasks WHERE status = ? ORDER BY id", (status,))
        return [Task.from_dict(row) for row in rows]

    async def get_tasks_by_category(self, category_id: int) -> List[Task]:
        rows = await self._query("SELECT * FROM tasks WHERE category_id = ? ORDER BY id", (category_id,))
        return [Task.from_dict(row) for row in rows]

    async def create_task(self, fields: Dict[str, Any]) -> Task:
        columns = [k for k in TASK_FIELDS if k in fields]
        placeholders = ", ".join("?" for _ in columns)
        query = f"INSERT INTO tasks ({', '.join(columns)}, created_at) VALUES ({placeholders}, ?)"
        params = tuple(self._to_column(k, fields[k]) for k in columns) + (format_datetime(datetime.now()),)
        task_id = await self._write(query, params)
        logger.debug("Inserted task %s", task_id)
        return await self.get_task(task_id)

    async def update_task(self, task_id: int, fields: Dict[str, Any]) -> Optional[Task]:
        columns = [k for k in TASK_FIELDS if k in fields]
        if columns:
            set_clause = ", ".join(f"{key} = ?" for key in columns)
            params = tuple(self._to_column(k, fields[k]) for k in columns) + (task_id,)
            updated = await self._write(f"UPDATE tasks SET {set_clause} WHERE id = ?", params)
            if updated == 0:
                return None
        return await self.get_task(task_id)

    async def delete_task(self, task_id: int) -> bool:
        return await self._write("DELETE FROM tasks WHERE id = ?", (task_id,)) > 0

    async def get_task_stats(self) -> TaskStats:
        rows = await self._query("SELECT status, COUNT(*) AS count FROM tasks GROUP BY status")
        counts = {row["status"]: row["count"] for row in rows}
        return TaskStats(
            total=sum(counts.values()),
            pending=counts.get(TaskStatus.PENDING, 0),
            in_progress=counts.get(TaskStatus.IN_PROGRESS, 0),
            review=counts.get(TaskStatus.REVIEW, 0),
            completed=counts.get(TaskStatus.COMPLETED, 0),
        )

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    async def get_categories(self) -> List[Category]:
        rows = await self._query("SELECT * FROM categories ORDER BY id")
        return [Category.from_dict(row) for row in rows]

    async def get_category(self, category_id: int) -> Optional[Category]:
        row = await self._query_one("SELECT * FROM categories WHERE id = ?", (category_id,))
        return Category.from_dict(row) if row else None

    async def create_category(self, fields: Dict[str, Any]) -> Category:
        category_id = await self._write(
            "INSERT INTO categories (name, color) VALUES (?, ?)",
            (fields["name"], fields.get("color", "blue")),
        )
        return await self.get_category(category_id)

    async def update_category(self, category_id: int, fields: Dict[str, Any]) -> Optional[Category]:
        columns = [k for k in CATEGORY_FIELDS if k in fields]
        if columns:
            set_clause = ", ".join(f"{key} = ?" for key in columns)
            params = tuple(fields[k] for k in columns) + (category_id,)
            updated = await self._write(f"UPDATE categories SET {set_clause} WHERE id = ?", params)
            if updated == 0:
                return None
        return await self.get_category(category_id)

    async def delete_category(self, category_id: int) -> bool:
        return await self._write("DELETE FROM categories WHERE id = ?", (category_id,)) > 0

    # -------------------------------------------------------------------------
    # WhatsApp
    # -------------------------------------------------------------------------

    async def get_whatsapp_contacts(self) -> List[WhatsappContact]:
        rows = await self._query("SELECT * FROM whatsapp_contacts ORDER BY name")
        return [WhatsappContact.from_dict(row) for row in rows]

    async def get_whatsapp_contact(self, contact_id: int) -> Optional[WhatsappContact]:
        row = await self._query_one("SELECT * FROM whatsapp_contacts WHERE id = ?", (contact_id,))
        return WhatsappContact.from_dict(row) if row else None

    async def create_whatsapp_contact(self, fields: Dict[str, Any]) -> WhatsappContact:
        contact_id = await self._write(
            "INSERT INTO whatsapp_contacts (name, phone_number, active, created_at) VALUES (?, ?, ?, ?)",
            (fields["name"], fields["phone_number"], fields.get("active", True),
             format_datetime(datetime.now())),
        )
        return await self.get_whatsapp_contact(contact_id)

    async def get_whatsapp_messages(self, contact_id: int) -> List[WhatsappMessage]:
        rows = await self._query(
            "SELECT * FROM whatsapp_messages WHERE contact_id = ? ORDER BY created_at, id",
            (contact_id,),
        )
        return [WhatsappMessage.from_dict(row) for row in rows]

    async def create_whatsapp_message(self, fields: Dict[str, Any]) -> WhatsappMessage:
        message_id = await self._write(
            """INSERT INTO whatsapp_messages (contact_id, direction, body, status, created_at)
               VALUES (?, ?, ?, ?, ?)""",
            (fields["contact_id"], fields.get("direction", "outgoing"), fields.get("body", ""),
             fields.get("status", "sent"), format_datetime(datetime.now())),
        )
        row = await self._query_one("SELECT * FROM whatsapp_messages WHERE id = ?", (message_id,))
        return WhatsappMessage.from_dict(row)
