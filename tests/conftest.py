"""Shared fixtures and in-memory store fakes for the task board tests."""

import sys
import threading
from pathlib import Path

import pytest

# Ensure the repo root (taskboard package, board_server) is importable
sys.path.insert(0, str(Path(__file__).parent.parent))

from taskboard.errors import StoreError
from taskboard.schema import Note, Task


class FakeTaskStore:
    """
    In-memory task store with call recording.

    fail:        method names ("list", "create", "update", "delete") that raise StoreError
    list_gates:  owner_id -> threading.Event the list call waits on
    update_gates: progress value -> threading.Event the update call waits on
    """

    def __init__(self, tasks=None):
        self.tasks = {t.id: t for t in (tasks or [])}
        self.calls = []
        self.fail = set()
        self.list_gates = {}
        self.update_gates = {}
        self.next_id = None
        self._counter = 0
        self._lock = threading.Lock()

    def _record(self, *call):
        with self._lock:
            self.calls.append(call)

    def list_by_owner(self, owner_id):
        self._record("list", owner_id)
        gate = self.list_gates.get(owner_id)
        if gate is not None:
            gate.wait(timeout=5)
        if "list" in self.fail:
            raise StoreError("connection refused")
        return [t for t in self.tasks.values() if t.assigned_to == owner_id]

    def create(self, payload):
        self._record("create", dict(payload))
        if "create" in self.fail:
            raise StoreError("500 Failed to create task", status=500)
        with self._lock:
            self._counter += 1
            task_id = self.next_id or f"T{100 + self._counter}"
        task = Task.from_dict({**payload, "id": task_id})
        self.tasks[task.id] = task
        return task

    def update(self, task_id, fields):
        self._record("update", task_id, dict(fields))
        gate = self.update_gates.get(fields.get("progress"))
        if gate is not None:
            gate.wait(timeout=5)
        if "update" in self.fail:
            raise StoreError("500 Update failed", status=500)
        if task_id not in self.tasks:
            raise StoreError("404 Task not found", status=404)
        data = self.tasks[task_id].to_dict()
        data.update(fields)
        task = Task.from_dict(data)
        self.tasks[task_id] = task
        return task

    def delete(self, task_id):
        self._record("delete", task_id)
        if "delete" in self.fail:
            raise StoreError("500 Delete failed", status=500)
        self.tasks.pop(task_id, None)


class FakeNoteStore:
    """In-memory note store recording every upsert."""

    def __init__(self, notes=None):
        self.notes = dict(notes or {})
        self.gets = []
        self.upserts = []
        self.fail = set()

    def get(self, owner_id):
        self.gets.append(owner_id)
        if "get" in self.fail:
            raise StoreError("connection refused")
        content = self.notes.setdefault(owner_id, "")
        return Note(owner_id=owner_id, content=content)

    def upsert(self, owner_id, content):
        self.upserts.append((owner_id, content))
        if "upsert" in self.fail:
            raise StoreError("500 Failed to update notes", status=500)
        self.notes[owner_id] = content
        return Note(owner_id=owner_id, content=content)


def make_task(task_id, progress=0, owner="alice", **kwargs):
    """Build a Task with sensible defaults."""
    kwargs.setdefault("title", f"Task {task_id}")
    kwargs.setdefault("description", f"Description of {task_id}")
    return Task(id=task_id, progress=progress, assigned_to=owner, **kwargs)


@pytest.fixture
def sample_tasks():
    return [
        make_task("T1", progress=10),
        make_task("T2", progress=50),
        make_task("T3", progress=90),
    ]


@pytest.fixture
def task_store(sample_tasks):
    return FakeTaskStore(sample_tasks)


@pytest.fixture
def note_store():
    return FakeNoteStore({"alice": "buy milk"})
