"""
Task board schema.

A task's workflow column is never stored: it is derived from progress
(see categorizer.py). Status is a separate, explicit complete/incomplete flag.

Wire format is camelCase JSON, matching the task store API:
  {"id", "title", "description", "priority", "deadline", "progress",
   "status", "assignedTo", "createdAt", "updatedAt"}
"""
from enum import Enum
from dataclasses import dataclass
from datetime import date
from typing import Optional, Dict, Any

from .errors import ValidationError


PROGRESS_MIN = 0
PROGRESS_MAX = 100

# Fields a client may send in a patch
EDITABLE_FIELDS = ("title", "description", "priority", "deadline", "progress", "status")


class Priority(Enum):
    """Task priority as stored by the task store."""
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @classmethod
    def from_str(cls, value: str) -> "Priority":
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            return cls.MEDIUM


class TaskStatus(Enum):
    """Explicit completion flag, toggled from the task list."""
    INCOMPLETE = "incomplete"
    COMPLETE = "complete"

    @classmethod
    def from_str(cls, value: str) -> "TaskStatus":
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            return cls.INCOMPLETE

    def toggled(self) -> "TaskStatus":
        return TaskStatus.INCOMPLETE if self is TaskStatus.COMPLETE else TaskStatus.COMPLETE


class Column(Enum):
    """Workflow columns, in board order."""
    TODO = "To Do"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"

    @classmethod
    def from_str(cls, value: str) -> Optional["Column"]:
        """Accept a display name ("In Progress") or a member name ("in_progress")."""
        if isinstance(value, Column):
            return value
        if not isinstance(value, str):
            return None
        for col in cls:
            if value == col.value:
                return col
        try:
            return cls[value.strip().upper().replace(" ", "_")]
        except KeyError:
            return None


class Severity(Enum):
    """Notification severity."""
    URGENT = "urgent"      # due today
    WARNING = "warning"    # due tomorrow


@dataclass
class Task:
    """One task record, as last returned by the task store."""

    id: str
    title: str
    description: str = ""
    priority: Priority = Priority.MEDIUM
    deadline: Optional[str] = None      # YYYY-MM-DD
    progress: int = 0
    status: TaskStatus = TaskStatus.INCOMPLETE
    assigned_to: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "priority": self.priority.value,
            "deadline": self.deadline,
            "progress": self.progress,
            "status": self.status.value,
            "assignedTo": self.assigned_to,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        """Deserialize a store record. Tolerates Mongo-style `_id` and `dueDate`."""
        task_id = data.get("id") or data.get("_id")
        if not task_id:
            raise ValueError("task record has no id")

        deadline = data.get("deadline")
        if deadline is None:
            deadline = data.get("dueDate")

        try:
            progress = int(round(float(data.get("progress") or 0)))
        except (TypeError, ValueError):
            progress = 0

        return cls(
            id=str(task_id),
            title=data.get("title") or "",
            description=data.get("description") or "",
            priority=Priority.from_str(data.get("priority") or "Medium"),
            deadline=_coerce_deadline(deadline),
            progress=min(max(progress, PROGRESS_MIN), PROGRESS_MAX),
            status=TaskStatus.from_str(data.get("status") or "incomplete"),
            assigned_to=str(data.get("assignedTo") or ""),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
        )


@dataclass
class Note:
    """The single free-text note belonging to an owner."""
    owner_id: str
    content: str = ""


@dataclass(frozen=True)
class NotificationEvent:
    """Ephemeral deadline alert. Never persisted."""
    message: str
    severity: Severity
    task_id: str = ""
    deadline: Optional[str] = None
    kind: str = ""                      # "due_today" | "due_tomorrow"


# ── Validation ───────────────────────────────────────────────────────────────

def _coerce_deadline(value: Any) -> Optional[str]:
    """Lenient: keep the date part of an ISO string, drop anything unparseable."""
    if not value or not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value[:10]).isoformat()
    except ValueError:
        return None


def _validate_deadline(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str):
        raise ValidationError(f"deadline must be a YYYY-MM-DD string, got {value!r}")
    try:
        return date.fromisoformat(value.strip()[:10]).isoformat()
    except ValueError:
        raise ValidationError(f"deadline is not a calendar date: {value!r}")


def _validate_progress(value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError("progress must be an integer")
    if isinstance(value, str):
        value = value.strip()
        if not value.lstrip("-").isdigit():
            raise ValidationError(f"progress must be an integer, got {value!r}")
        value = int(value)
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(f"progress must be an integer, got {value!r}")
        value = int(value)
    if not isinstance(value, int):
        raise ValidationError(f"progress must be an integer, got {value!r}")
    if not PROGRESS_MIN <= value <= PROGRESS_MAX:
        raise ValidationError(f"progress must be within {PROGRESS_MIN}-{PROGRESS_MAX}, got {value}")
    return value


def _validate_enum(enum_cls, value: Any, field_name: str) -> str:
    if isinstance(value, enum_cls):
        return value.value
    for member in enum_cls:
        if isinstance(value, str) and value.strip().lower() == member.value.lower():
            return member.value
    allowed = ", ".join(m.value for m in enum_cls)
    raise ValidationError(f"{field_name} must be one of: {allowed}")


def validate_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate and normalize a partial set of editable fields.

    Returns a new dict with wire-format values.

    Raises:
        ValidationError on unknown fields or bad values.
    """
    unknown = set(fields) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"unknown task fields: {', '.join(sorted(unknown))}")

    clean: Dict[str, Any] = {}
    for name, value in fields.items():
        if name == "title":
            if not isinstance(value, str) or not value.strip():
                raise ValidationError("title cannot be empty")
            clean[name] = value.strip()
        elif name == "description":
            if value is not None and not isinstance(value, str):
                raise ValidationError("description must be a string")
            clean[name] = value or ""
        elif name == "priority":
            clean[name] = _validate_enum(Priority, value, "priority")
        elif name == "status":
            clean[name] = _validate_enum(TaskStatus, value, "status")
        elif name == "deadline":
            clean[name] = _validate_deadline(value)
        elif name == "progress":
            clean[name] = _validate_progress(value)
    return clean


def validate_draft(draft: Dict[str, Any], require_description: bool = True) -> Dict[str, Any]:
    """
    Validate a new-task draft and fill defaults.

    The board form requires both title and description; the store itself
    only requires a title (require_description=False).
    """
    fields = {k: v for k, v in draft.items() if k in EDITABLE_FIELDS}
    if not str(fields.get("title") or "").strip():
        raise ValidationError("title cannot be empty")
    if require_description and not str(fields.get("description") or "").strip():
        raise ValidationError("description cannot be empty")

    payload = {
        "description": "",
        "priority": Priority.MEDIUM.value,
        "deadline": None,
        "progress": 0,
        "status": TaskStatus.INCOMPLETE.value,
    }
    payload.update(validate_fields(fields))
    return payload
