"""
Drag reassignment state machine.

  Idle → Dragging(source, task) → Dropped(target) | Cancelled → Idle

Drops only touch the BoardView; nothing is written back to the task store,
so the next refresh may put the card back where its progress says it goes.
"""
import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Union

from .categorizer import BoardView
from .errors import NotFoundError
from .schema import Column

logger = logging.getLogger(__name__)


class DragState(Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    DROPPED = "dropped"
    CANCELLED = "cancelled"


# Allowed transitions
ALLOWED_NEXT = {
    DragState.IDLE: [DragState.DRAGGING],
    DragState.DRAGGING: [DragState.DROPPED, DragState.CANCELLED],
    DragState.DROPPED: [DragState.IDLE],
    DragState.CANCELLED: [DragState.IDLE],
}


@dataclass
class DragTransition:
    """One recorded state change."""
    from_state: DragState
    to_state: DragState
    task_id: Optional[str] = None
    reason: str = ""
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from_state": self.from_state.value,
            "to_state": self.to_state.value,
            "task_id": self.task_id or "",
            "reason": self.reason,
            "timestamp": self.timestamp,
        }


class DragReassignmentController:
    """Drives optimistic, view-only column moves from drag gestures."""

    def __init__(self, view: BoardView, history_size: int = 100):
        self.view = view
        self.state = DragState.IDLE
        self.task_id: Optional[str] = None
        self.source_column: Optional[Column] = None
        self.history: deque = deque(maxlen=history_size)

    @property
    def is_dragging(self) -> bool:
        return self.state == DragState.DRAGGING

    def start(self, task_id: str) -> Column:
        """
        Begin dragging a card. A drag already in progress is cancelled first.

        Returns the captured source column.

        Raises:
            NotFoundError if the card is not on the board.
        """
        source = self.view.column_of(task_id)
        if source is None:
            raise NotFoundError(f"Task {task_id} is not on the board")

        if self.is_dragging:
            self.cancel(reason=f"superseded by drag of {task_id}")

        self._transition(DragState.DRAGGING, task_id=task_id, reason=f"from {source.value}")
        self.task_id = task_id
        self.source_column = source
        return source

    def drop(self, target: Union[Column, str, None]) -> DragState:
        """
        Finish the drag over `target` (a column, a column name, or the id of a
        card in the target column).

        Returns DragState.DROPPED if the card moved, DragState.CANCELLED otherwise.
        """
        if not self.is_dragging:
            logger.debug(f"Drop ignored, no active drag (state={self.state.value})")
            return DragState.CANCELLED

        target_column = self._resolve_target(target)
        if target_column is None or target_column == self.source_column:
            reason = "no valid drop target" if target_column is None else "dropped on source column"
            self.cancel(reason=reason)
            return DragState.CANCELLED

        task_id = self.task_id
        try:
            self.view.move(task_id, target_column)
        except NotFoundError:
            # Card vanished mid-drag (deleted or reloaded away)
            self.cancel(reason="card no longer on the board")
            return DragState.CANCELLED
        self._transition(DragState.DROPPED, task_id=task_id, reason=f"to {target_column.value}")
        logger.info(f"Moved {task_id} {self.source_column.value} → {target_column.value} (view only)")
        self._reset()
        return DragState.DROPPED

    def cancel(self, reason: str = "cancelled") -> bool:
        """Abort the active drag. Returns False if nothing was being dragged."""
        if not self.is_dragging:
            return False
        self._transition(DragState.CANCELLED, task_id=self.task_id, reason=reason)
        self._reset()
        return True

    def _resolve_target(self, target: Union[Column, str, None]) -> Optional[Column]:
        if target is None:
            return None
        column = Column.from_str(target)
        if column is not None:
            return column
        # Dropped onto another card: use that card's column
        return self.view.column_of(str(target))

    def _reset(self) -> None:
        self._transition(DragState.IDLE, task_id=self.task_id)
        self.task_id = None
        self.source_column = None

    def _transition(self, new_state: DragState, task_id: Optional[str] = None, reason: str = "") -> None:
        if new_state not in ALLOWED_NEXT[self.state]:
            raise RuntimeError(f"Invalid drag transition {self.state.value} → {new_state.value}")
        self.history.append(DragTransition(self.state, new_state, task_id=task_id, reason=reason))
        self.state = new_state
