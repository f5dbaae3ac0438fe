"""
Progress-driven column categorizer.

Thresholds (inclusive on the lower column):
  To Do        progress <= 40
  In Progress  40 < progress <= 80
  Completed    progress > 80

categorize() is pure and returns a fresh partition every call. BoardView
keeps the partition shown to the user plus an explicit override map for
cards moved by drag; a refresh recomputes from progress and drops
overrides unless sticky_drag is on.
"""
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from .errors import NotFoundError
from .schema import Column, Task

logger = logging.getLogger(__name__)

TODO_MAX = 40
IN_PROGRESS_MAX = 80

Partition = Dict[Column, List[Task]]


def column_for(progress: int) -> Column:
    """Map a progress value to its column. Ties go to the lower column."""
    if progress <= TODO_MAX:
        return Column.TODO
    if progress <= IN_PROGRESS_MAX:
        return Column.IN_PROGRESS
    return Column.COMPLETED


def empty_partition() -> Partition:
    return {col: [] for col in Column}


def categorize(tasks: Iterable[Task]) -> Partition:
    """Partition tasks into the three columns, preserving collection order."""
    partition = empty_partition()
    for task in tasks:
        partition[column_for(task.progress)].append(task)
    return partition


@dataclass(frozen=True)
class Override:
    """A drag move that the derived partition does not know about."""
    column: Column
    progress_at_drop: int


class BoardView:
    """
    The column view presented to the user.

    Derived from the collection on every refresh; drag moves are recorded in
    `overrides`, and divergence() lists cards shown outside their derived column.
    """

    def __init__(self, sticky_drag: bool = False):
        self.sticky_drag = sticky_drag
        self.columns: Partition = empty_partition()
        self.overrides: Dict[str, Override] = {}

    def refresh(self, tasks: Iterable[Task]) -> Partition:
        """Recompute columns from progress, then re-apply surviving overrides."""
        tasks = list(tasks)
        self.columns = categorize(tasks)

        if not self.sticky_drag:
            if self.overrides:
                logger.debug(f"Refresh discarded {len(self.overrides)} drag override(s)")
            self.overrides = {}
            return self.columns

        by_id = {t.id: t for t in tasks}
        kept: Dict[str, Override] = {}
        for task_id, override in self.overrides.items():
            task = by_id.get(task_id)
            if task is None or task.progress != override.progress_at_drop:
                continue
            kept[task_id] = override
            self._place(task, override.column)
        self.overrides = kept
        return self.columns

    def column_of(self, task_id: str) -> Optional[Column]:
        for col, tasks in self.columns.items():
            if any(t.id == task_id for t in tasks):
                return col
        return None

    def move(self, task_id: str, target: Column) -> Column:
        """
        Move a card to the end of another column (view only).

        Returns the source column.

        Raises:
            NotFoundError if the card is not on the board.
        """
        source = self.column_of(task_id)
        if source is None:
            raise NotFoundError(f"Task {task_id} is not on the board")
        task = next(t for t in self.columns[source] if t.id == task_id)
        self._place(task, target)

        derived = column_for(task.progress)
        if target == derived:
            self.overrides.pop(task_id, None)
        else:
            self.overrides[task_id] = Override(column=target, progress_at_drop=task.progress)
        return source

    def divergence(self) -> Dict[str, Tuple[Column, Column]]:
        """task_id -> (derived column, shown column) for every overridden card."""
        result = {}
        for col, tasks in self.columns.items():
            for task in tasks:
                derived = column_for(task.progress)
                if derived != col:
                    result[task.id] = (derived, col)
        return result

    def counts(self) -> Dict[str, int]:
        return {col.value: len(tasks) for col, tasks in self.columns.items()}

    def _place(self, task: Task, target: Column) -> None:
        for col in Column:
            self.columns[col] = [t for t in self.columns[col] if t.id != task.id]
        self.columns[target].append(task)
