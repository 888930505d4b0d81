"""
Relational backends for DatabaseStorage.

SQLite is the default (data/database/taskdesk.db, created by
scripts/init_db.py). PostgreSQL is used when DATABASE_URL is set, unless
USE_SQLITE=1 forces SQLite.

Queries are written once with SQLite-style "?" placeholders; each backend
adapts them to its driver.
"""

import os
import sqlite3
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

import psycopg2
import psycopg2.extras

DEFAULT_SQLITE_PATH = Path(__file__).parent.parent.parent / "data" / "database" / "taskdesk.db"


def _is_insert(query: str) -> bool:
    return query.lstrip().upper().startswith("INSERT")


class DatabaseBase(ABC):
    """
    Shared query helpers.

    Subclasses provide a connection, a dict-producing cursor and the id of
    the last inserted row; reads and writes are implemented here once.
    """

    @abstractmethod
    def get_connection(self):
        """Context manager yielding an open DB-API connection"""

    @abstractmethod
    def _cursor(self, conn):
        """Cursor whose rows convert with dict()"""

    def _prepare(self, query: str) -> str:
        return query

    def _inserted_id(self, cursor) -> int:
        return cursor.lastrowid

    @contextmanager
    def _run(self, query: str, params: Tuple) -> Iterator[Any]:
        with self.get_connection() as conn:
            cursor = self._cursor(conn)
            try:
                cursor.execute(self._prepare(query), params)
                yield cursor
                conn.commit()
            finally:
                cursor.close()

    def execute(self, query: str, params: Tuple = ()) -> List[Dict[str, Any]]:
        """Run a SELECT and return every row as a dict"""
        with self._run(query, params) as cursor:
            return [dict(row) for row in cursor.fetchall()]

    def execute_one(self, query: str, params: Tuple = ()) -> Optional[Dict[str, Any]]:
        """Run a SELECT and return the first row, or None"""
        with self._run(query, params) as cursor:
            row = cursor.fetchone()
        return dict(row) if row else None

    def execute_write(self, query: str, params: Tuple = ()) -> int:
        """
        Run an INSERT, UPDATE or DELETE.

        Returns:
            The new row id for INSERT, otherwise the number of affected rows
        """
        with self._run(query, params) as cursor:
            return self._inserted_id(cursor) if _is_insert(query) else cursor.rowcount

    @abstractmethod
    def table_exists(self, table_name: str) -> bool:
        pass


class SQLiteDatabase(DatabaseBase):
    """SQLite file database with foreign keys enforced"""

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = Path(db_path or DEFAULT_SQLITE_PATH)

        if not self.db_path.exists():
            raise FileNotFoundError(
                f"Database not found at {self.db_path}. "
                "Run 'python scripts/init_db.py' to create it."
            )

    @contextmanager
    def get_connection(self):
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON;")
        try:
            yield conn
        finally:
            conn.close()

    def _cursor(self, conn):
        return conn.cursor()

    def table_exists(self, table_name: str) -> bool:
        return self.execute_one(
            "SELECT name FROM sqlite_master WHERE type = 'table' AND name = ?",
            (table_name,),
        ) is not None


class PostgreSQLDatabase(DatabaseBase):
    """PostgreSQL through psycopg2; INSERTs get RETURNING id appended"""

    def __init__(self, database_url: str):
        self.database_url = database_url
        # Shown in startup messages alongside SQLite's file path
        self.db_path = database_url

    @contextmanager
    def get_connection(self):
        conn = psycopg2.connect(self.database_url)
        try:
            yield conn
        finally:
            conn.close()

    def _cursor(self, conn):
        return conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor)

    def _convert_query(self, query: str) -> str:
        """Swap "?" placeholders for psycopg2's %s"""
        return query.replace("?", "%s")

    def _prepare(self, query: str) -> str:
        query = self._convert_query(query)
        if _is_insert(query) and "RETURNING" not in query.upper():
            query = query.rstrip().rstrip(";") + " RETURNING id"
        return query

    def _inserted_id(self, cursor) -> int:
        row = cursor.fetchone()
        return row["id"] if row else 0

    def table_exists(self, table_name: str) -> bool:
        return self.execute_one(
            "SELECT table_name FROM information_schema.tables "
            "WHERE table_schema = 'public' AND table_name = ?",
            (table_name,),
        ) is not None


Database = Union[SQLiteDatabase, PostgreSQLDatabase]


def get_database(db_path: Optional[Path] = None) -> Database:
    """
    Pick the backend from the environment.

    Args:
        db_path: SQLite file, ignored when PostgreSQL is selected

    Raises:
        FileNotFoundError: If SQLite is selected and the file is missing
    """
    force_sqlite = os.environ.get("USE_SQLITE", "").lower() in ("1", "true", "yes")
    database_url = os.environ.get("DATABASE_URL")

    if database_url and not force_sqlite:
        return PostgreSQLDatabase(database_url)
    return SQLiteDatabase(db_path)
