"""
Task and note storage backend (SQLite).

Backs the task store / note store API served by board_server.py.
"""
import sqlite3
import time
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import ValidationError
from .schema import Task, validate_draft, validate_fields

DEFAULT_DB_PATH = Path.home() / ".local" / "share" / "taskboard" / "board.db"


def _connect(db_path: str) -> sqlite3.Connection:
    """Open a connection with FK enforcement and WAL mode."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    conn.execute("PRAGMA journal_mode = WAL")
    return conn


def utc_now() -> str:
    """ISO-8601 UTC timestamp."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def make_task_id() -> str:
    """Generate a sortable unique task ID (ms-precision timestamp + random hex)."""
    ts = int(time.time() * 1000)
    rand = uuid.uuid4().hex[:8]
    return f"task-{ts}-{rand}"


class BoardStore:
    """SQLite-backed store for tasks and per-owner notes."""

    def __init__(self, db_path: Optional[str] = None):
        """Initialize store and create tables if needed."""
        if db_path is None:
            db_path = str(DEFAULT_DB_PATH)
        self.db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _init_schema(self):
        """Create tables if they don't exist."""
        with _connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS tasks (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    description TEXT DEFAULT '',
                    priority TEXT DEFAULT 'Medium',
                    deadline TEXT,
                    progress INTEGER DEFAULT 0 CHECK (progress BETWEEN 0 AND 100),
                    status TEXT DEFAULT 'incomplete',
                    assigned_to TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS notes (
                    owner_id TEXT PRIMARY KEY,
                    content TEXT NOT NULL DEFAULT '',
                    updated_at TEXT NOT NULL
                )
            """)
            conn.execute("CREATE INDEX IF NOT EXISTS idx_tasks_owner ON tasks(assigned_to, created_at)")
            conn.commit()

    # ── Tasks ────────────────────────────────────────────────────────────

    def list_by_owner(self, owner_id: str) -> List[Task]:
        """All tasks assigned to owner_id, newest first."""
        with _connect(self.db_path) as conn:
            rows = conn.execute(
                "SELECT rowid, * FROM tasks WHERE assigned_to = ? ORDER BY created_at DESC, rowid DESC",
                (owner_id,)
            ).fetchall()
        return [self._row_to_task(row) for row in rows]

    def get(self, task_id: str) -> Optional[Task]:
        with _connect(self.db_path) as conn:
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,)).fetchone()
        return self._row_to_task(row) if row else None

    def create(self, data: Dict[str, Any]) -> Task:
        """
        Insert a new task. The store requires a title and an owner; everything
        else defaults.

        Raises:
            ValidationError on missing or invalid fields.
        """
        owner_id = str(data.get("assignedTo") or "").strip()
        if not owner_id:
            raise ValidationError("assignedTo is required")
        fields = validate_draft(data, require_description=False)

        now = utc_now()
        task_id = make_task_id()
        with _connect(self.db_path) as conn:
            conn.execute("""
                INSERT INTO tasks
                (id, title, description, priority, deadline, progress, status,
                 assigned_to, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                task_id,
                fields["title"],
                fields["description"],
                fields["priority"],
                fields["deadline"],
                fields["progress"],
                fields["status"],
                owner_id,
                now,
                now,
            ))
            conn.commit()
        return self.get(task_id)

    def update(self, task_id: str, data: Dict[str, Any]) -> Optional[Task]:
        """
        Apply a partial update. Returns None if the task does not exist.

        Raises:
            ValidationError on unknown fields or bad values.
        """
        fields = validate_fields(data)
        with _connect(self.db_path) as conn:
            exists = conn.execute("SELECT 1 FROM tasks WHERE id = ?", (task_id,)).fetchone()
            if not exists:
                return None
            if fields:
                # Column names come from the EDITABLE_FIELDS whitelist
                assignments = ", ".join(f"{name} = ?" for name in fields)
                conn.execute(
                    f"UPDATE tasks SET {assignments}, updated_at = ? WHERE id = ?",
                    (*fields.values(), utc_now(), task_id)
                )
                conn.commit()
        return self.get(task_id)

    def delete(self, task_id: str) -> bool:
        """Delete a task. Returns False if it was already gone."""
        with _connect(self.db_path) as conn:
            cur = conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
            conn.commit()
            return cur.rowcount > 0

    # ── Notes ────────────────────────────────────────────────────────────

    def get_note(self, owner_id: str) -> str:
        """Find-or-create: the first read creates an empty note."""
        with _connect(self.db_path) as conn:
            conn.execute(
                "INSERT OR IGNORE INTO notes (owner_id, content, updated_at) VALUES (?, '', ?)",
                (owner_id, utc_now())
            )
            conn.commit()
            row = conn.execute("SELECT content FROM notes WHERE owner_id = ?", (owner_id,)).fetchone()
        return row["content"]

    def upsert_note(self, owner_id: str, content: str) -> str:
        with _connect(self.db_path) as conn:
            conn.execute("""
                INSERT INTO notes (owner_id, content, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(owner_id) DO UPDATE SET content=excluded.content, updated_at=excluded.updated_at
            """, (owner_id, content, utc_now()))
            conn.commit()
            row = conn.execute("SELECT content FROM notes WHERE owner_id = ?", (owner_id,)).fetchone()
        return row["content"]

    def _row_to_task(self, row: sqlite3.Row) -> Task:
        """Convert a database row to a Task object."""
        data = dict(row)
        return Task.from_dict({
            "id": data["id"],
            "title": data["title"],
            "description": data.get("description") or "",
            "priority": data.get("priority"),
            "deadline": data.get("deadline"),
            "progress": data.get("progress"),
            "status": data.get("status"),
            "assignedTo": data["assigned_to"],
            "createdAt": data["created_at"],
            "updatedAt": data["updated_at"],
        })
