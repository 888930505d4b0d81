"""
Core modules for taskdesk
Configuration, data models, database adapters and the async storage layer
"""

from .config import Config
from .database import Database, DatabaseBase, SQLiteDatabase, PostgreSQLDatabase, get_database
from .models import (
    Task, TaskStatus, TaskPriority, Category, TaskStats,
    WhatsappContact, WhatsappMessage,
)
from .storage import Storage, MemoryStorage, DatabaseStorage

__all__ = [
    'Config',
    'Database',
    'DatabaseBase',
    'SQLiteDatabase',
    'PostgreSQLDatabase',
    'get_database',
    'Task',
    'TaskStatus',
    'TaskPriority',
    'Category',
    'TaskStats',
    'WhatsappContact',
    'WhatsappMessage',
    'Storage',
    'MemoryStorage',
    'DatabaseStorage',
]
