#!/usr/bin/env python3
"""
Database initialization script for taskdesk
Creates the SQLite database with the task, category and WhatsApp tables
"""

import sqlite3
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from taskdesk.core.config import Config
from taskdesk.core.storage import DEFAULT_CATEGORIES

DB_PATH = Config().get_database_path()


def init_database(db_path: Path = DB_PATH, force: bool = False) -> bool:
    """
    Initialize the database with the core schema

    Args:
        db_path: Where to create the SQLite file
        force: Overwrite an existing database without asking
    """

    # Ensure database directory exists
    db_path.parent.mkdir(parents=True, exist_ok=True)

    # Check if database already exists
    if db_path.exists():
        if not force:
            response = input(f"Database already exists at {db_path}. Overwrite? (yes/no): ")
            if response.lower() != 'yes':
                print("Aborting database initialization.")
                return False
        db_path.unlink()

    print(f"Creating database at {db_path}...")
    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()

    try:
        # Enable foreign keys
        cursor.execute("PRAGMA foreign_keys = ON;")

        # ====================================================================
        # Categories
        # ====================================================================
        cursor.execute("""
            CREATE TABLE categories (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL UNIQUE,
                color TEXT NOT NULL DEFAULT 'blue'
            );
        """)

        # ====================================================================
        # Tasks
        # ====================================================================
        cursor.execute("""
            CREATE TABLE tasks (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                title TEXT NOT NULL,
                description TEXT,
                status TEXT CHECK(status IN ('pending', 'in-progress', 'review', 'completed')) DEFAULT 'pending',
                priority TEXT CHECK(priority IN ('high', 'medium', 'low')),
                category_id INTEGER,
                deadline DATETIME,
                assigned_to INTEGER,
                created_at DATETIME DEFAULT (strftime('%Y-%m-%dT%H:%M:%f', 'now', 'localtime'))
            );
        """)

        cursor.execute("CREATE INDEX idx_tasks_status ON tasks(status);")
        cursor.execute("CREATE INDEX idx_tasks_category ON tasks(category_id);")
        cursor.execute("CREATE INDEX idx_tasks_deadline ON tasks(deadline);")

        # ====================================================================
        # WhatsApp
        # ====================================================================
        cursor.execute("""
            CREATE TABLE whatsapp_contacts (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                phone_number TEXT NOT NULL UNIQUE,
                active BOOLEAN DEFAULT 1,
                created_at DATETIME DEFAULT (strftime('%Y-%m-%dT%H:%M:%f', 'now', 'localtime'))
            );
        """)

        cursor.execute("""
            CREATE TABLE whatsapp_messages (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                contact_id INTEGER NOT NULL,
                direction TEXT CHECK(direction IN ('incoming', 'outgoing')) NOT NULL,
                body TEXT NOT NULL,
                status TEXT DEFAULT 'sent',
                created_at DATETIME DEFAULT (strftime('%Y-%m-%dT%H:%M:%f', 'now', 'localtime')),
                FOREIGN KEY (contact_id) REFERENCES whatsapp_contacts(id) ON DELETE CASCADE
            );
        """)

        cursor.execute("CREATE INDEX idx_messages_contact ON whatsapp_messages(contact_id);")

        # ====================================================================
        # Default data
        # ====================================================================
        cursor.executemany(
            "INSERT INTO categories (name, color) VALUES (?, ?)",
            DEFAULT_CATEGORIES,
        )

        conn.commit()
        print("✓ Database schema created successfully!")
        print(f"✓ Database location: {db_path}")
        print(f"✓ Default categories created: {len(DEFAULT_CATEGORIES)}")

        cursor.execute("SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'")
        tables = cursor.fetchall()
        print(f"\n✓ Tables created: {', '.join(t[0] for t in tables)}")

        return True

    except sqlite3.Error as e:
        print(f"✗ Database error: {e}")
        conn.rollback()
        return False

    finally:
        conn.close()


if __name__ == "__main__":
    print("=" * 60)
    print("taskdesk - Database Initialization")
    print("=" * 60)
    print()

    success = init_database(force="--force" in sys.argv)

    if success:
        print("\n" + "=" * 60)
        print("Database initialization complete!")
        print("=" * 60)
        sys.exit(0)
    else:
        print("\n" + "=" * 60)
        print("Database initialization failed!")
        print("=" * 60)
        sys.exit(1)
