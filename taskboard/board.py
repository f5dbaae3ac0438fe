"""
TaskBoard: one owner's board session.

Wiring:
  TaskSyncFacade ──collection_changed──▶ BoardView.refresh
                                       ▶ DeadlineNotificationScheduler.scan
  DragReassignmentController ──▶ BoardView (view only)
  NotesAutosaveController (per owner, independent of the task flow)
"""
import logging
from datetime import date
from typing import Callable, Dict, List, Optional

from .categorizer import BoardView
from .client import NoteStoreClient, TaskStoreClient
from .collection import TaskCollection
from .config import BoardConfig
from .drag import DragReassignmentController
from .events import EventBus, NOTIFICATION
from .notes import NotesAutosaveController
from .notifications import DeadlineNotificationScheduler, terminal_bell
from .sync import TaskSyncFacade

logger = logging.getLogger(__name__)


class TaskBoard:
    """Composes sync, view, drag, alerts and notes for the current owner."""

    def __init__(
        self,
        task_store,
        note_store,
        config: Optional[BoardConfig] = None,
        clock: Optional[Callable[[], date]] = None,
        chime: Optional[Callable[[], None]] = terminal_bell,
    ):
        self.config = config or BoardConfig()
        self.note_store = note_store
        self.bus = EventBus()
        self.sync = TaskSyncFacade(task_store, bus=self.bus)
        self.view = BoardView(sticky_drag=self.config.sticky_drag)
        self.drag = DragReassignmentController(self.view)
        self.scheduler = DeadlineNotificationScheduler(
            bus=self.bus,
            dedupe=self.config.dedupe_notifications,
            clock=clock,
            chime=chime,
        )
        self.notes: Optional[NotesAutosaveController] = None
        self._owned_clients: List = []     # HTTP clients built by from_config
        self.sync.subscribe(self._on_collection_changed)

    @classmethod
    def from_config(cls, config: BoardConfig, **kwargs) -> "TaskBoard":
        """Build a board talking to the HTTP stores named in config."""
        tasks = TaskStoreClient(config.api_url, timeout=config.request_timeout, api_key=config.api_key)
        notes = NoteStoreClient(config.api_url, timeout=config.request_timeout, api_key=config.api_key)
        board = cls(tasks, notes, config=config, **kwargs)
        board._owned_clients = [tasks, notes]
        return board

    @property
    def owner_id(self) -> str:
        return self.sync.owner_id

    @property
    def columns(self):
        return self.view.columns

    def on_notification(self, callback: Callable) -> None:
        """callback(event=NotificationEvent) for every alert raised."""
        self.bus.subscribe(NOTIFICATION, callback)

    async def open(self, owner_id: str) -> TaskCollection:
        """
        Switch the board to owner_id: fresh notes controller, fresh alert
        session, then load the note and the task list.

        Raises:
            FetchError if the task list cannot be loaded (note still loaded).
        """
        self.drag.cancel(reason="owner switch")
        if self.notes is not None:
            self.notes.close()
        if owner_id != self.sync.owner_id:
            self.scheduler.reset()

        self.notes = NotesAutosaveController(
            self.note_store, owner_id, delay=self.config.notes_debounce_secs
        )
        await self.notes.load()
        return await self.sync.load(owner_id)

    async def close(self) -> None:
        """
        Teardown: cancel any drag and pending note write, wait for in-flight
        saves, then close the HTTP sessions this board created.
        """
        self.drag.cancel(reason="board closed")
        if self.notes is not None:
            self.notes.close()
            await self.notes.wait_idle()
        for client in self._owned_clients:
            client.close()
        self._owned_clients = []

    def stats(self) -> Dict[str, int]:
        """Card count per column as currently shown."""
        return self.view.counts()

    def _on_collection_changed(self, collection: TaskCollection) -> None:
        tasks = collection.snapshot()
        if self.drag.is_dragging and self.drag.task_id not in collection:
            self.drag.cancel(reason="dragged card removed")
        self.view.refresh(tasks)
        if tasks:
            self.scheduler.scan(tasks)
