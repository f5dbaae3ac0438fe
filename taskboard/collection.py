"""
In-memory task collection for one owner.

Ordered, unique ids. Only TaskSyncFacade mutates it; everyone else reads
snapshots via list(collection).
"""
import logging
from typing import Iterable, Iterator, List, Optional

from .schema import Task

logger = logging.getLogger(__name__)


class TaskCollection:
    """Ordered sequence of Task records scoped to a single owner."""

    def __init__(self, owner_id: str = "", tasks: Optional[Iterable[Task]] = None):
        self.owner_id = owner_id
        self._tasks: List[Task] = []
        if tasks:
            self.reset(owner_id, tasks)

    def reset(self, owner_id: str, tasks: Iterable[Task]) -> None:
        """Replace the contents. Duplicate ids keep the first occurrence."""
        seen = set()
        ordered = []
        for task in tasks:
            if task.id in seen:
                logger.warning(f"Duplicate task id {task.id} for owner {owner_id}, keeping first")
                continue
            seen.add(task.id)
            ordered.append(task)
        self.owner_id = owner_id
        self._tasks = ordered

    def get(self, task_id: str) -> Optional[Task]:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def prepend(self, task: Task) -> None:
        """Insert at the front, dropping any stale record with the same id."""
        self._tasks = [task] + [t for t in self._tasks if t.id != task.id]

    def replace(self, task: Task) -> bool:
        """Swap in a new representation of an existing record. False if absent."""
        for i, existing in enumerate(self._tasks):
            if existing.id == task.id:
                self._tasks[i] = task
                return True
        return False

    def remove(self, task_id: str) -> Optional[Task]:
        for i, existing in enumerate(self._tasks):
            if existing.id == task_id:
                return self._tasks.pop(i)
        return None

    def ids(self) -> List[str]:
        return [t.id for t in self._tasks]

    def snapshot(self) -> List[Task]:
        return list(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        return any(t.id == task_id for t in self._tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(list(self._tasks))

    def __len__(self) -> int:
        return len(self._tasks)
