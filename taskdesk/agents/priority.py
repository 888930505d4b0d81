"""
Normalization of priority and status values produced by the model.

The model may answer in Spanish or English; storage only sees the
canonical values from core.models.
"""

from typing import Optional

from ..core.models import TaskPriority, TaskStatus

PRIORITY_ALIASES = {
    "alta": TaskPriority.HIGH,
    "high": TaskPriority.HIGH,
    "urgent": TaskPriority.HIGH,
    "urgente": TaskPriority.HIGH,
    "media": TaskPriority.MEDIUM,
    "medium": TaskPriority.MEDIUM,
    "normal": TaskPriority.MEDIUM,
    "baja": TaskPriority.LOW,
    "low": TaskPriority.LOW,
}

STATUS_ALIASES = {
    "pendiente": TaskStatus.PENDING,
    "pending": TaskStatus.PENDING,
    "todo": TaskStatus.PENDING,
    "en_progreso": TaskStatus.IN_PROGRESS,
    "en progreso": TaskStatus.IN_PROGRESS,
    "in_progress": TaskStatus.IN_PROGRESS,
    "in progress": TaskStatus.IN_PROGRESS,
    "in-progress": TaskStatus.IN_PROGRESS,
    "revision": TaskStatus.REVIEW,
    "revisión": TaskStatus.REVIEW,
    "review": TaskStatus.REVIEW,
    "completada": TaskStatus.COMPLETED,
    "completado": TaskStatus.COMPLETED,
    "completed": TaskStatus.COMPLETED,
    "complete": TaskStatus.COMPLETED,
    "done": TaskStatus.COMPLETED,
}

PRIORITY_RANK = {
    TaskPriority.HIGH: 3,
    TaskPriority.MEDIUM: 2,
    TaskPriority.LOW: 1,
}


def map_priority(value: Optional[str], default: str = TaskPriority.MEDIUM) -> str:
    """
    Map a free-form priority onto high/medium/low.

    Exact aliases first, then partial matches ("muy alta", "lowest");
    anything else falls back to default.
    """
    if not value:
        return default

    normalized = str(value).strip().lower()
    if normalized in PRIORITY_ALIASES:
        return PRIORITY_ALIASES[normalized]

    if "alt" in normalized or "high" in normalized or "urg" in normalized:
        return TaskPriority.HIGH
    if "baj" in normalized or "low" in normalized:
        return TaskPriority.LOW
    if "med" in normalized or "norm" in normalized:
        return TaskPriority.MEDIUM
    return default


def normalize_status(value: Optional[str]) -> Optional[str]:
    """Map a status alias onto its canonical value; unknown values are kept verbatim."""
    if value is None:
        return None
    normalized = str(value).strip().lower()
    return STATUS_ALIASES.get(normalized, value)


def priority_rank(value: Optional[str]) -> int:
    """Sort key for priorities; unknown or missing ranks lowest."""
    return PRIORITY_RANK.get(value, 0)
