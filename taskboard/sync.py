"""
Task sync facade: the only writer of the TaskCollection.

  load    replace the collection with the owner's remote list
  create  validate, POST, prepend the server record
  patch   validate, PUT only changed fields, replace with server record
  remove  drop locally first, then DELETE (not rolled back on failure)

Every successful operation republishes the collection on the event bus.
Store calls block, so they run in a worker thread via asyncio.to_thread;
responses that come back for an owner or load that is no longer current
are discarded, and patch responses older than the latest applied one for
the same task are ignored.
"""
import asyncio
import logging
from typing import Any, Callable, Dict, Optional

from .collection import TaskCollection
from .errors import FetchError, NotFoundError, StoreError, SyncError, ValidationError
from .events import EventBus, COLLECTION_CHANGED
from .schema import Task, validate_draft, validate_fields

logger = logging.getLogger(__name__)


class TaskSyncFacade:
    """Orchestrates remote task operations and republishes the collection."""

    def __init__(self, store, bus: Optional[EventBus] = None):
        self.store = store                # TaskStoreClient-like
        self.bus = bus or EventBus()
        self.collection = TaskCollection()
        self.error: Optional[str] = None
        self.loading = False
        self._generation = 0
        self._issued: Dict[str, int] = {}     # task_id -> last version sent
        self._applied: Dict[str, int] = {}    # task_id -> last version applied

    @property
    def owner_id(self) -> str:
        return self.collection.owner_id

    def subscribe(self, callback: Callable) -> None:
        """callback(collection=TaskCollection) on every republish."""
        self.bus.subscribe(COLLECTION_CHANGED, callback)

    def _publish(self) -> None:
        self.bus.emit(COLLECTION_CHANGED, collection=self.collection)

    # ── Load ─────────────────────────────────────────────────────────────

    async def load(self, owner_id: str) -> TaskCollection:
        """
        Replace the collection with the remote list for owner_id.

        Raises:
            FetchError on transport or parse failure; the collection is left
            empty and `error` is set.
        """
        self._generation += 1
        generation = self._generation
        if owner_id != self.collection.owner_id:
            self._issued.clear()
            self._applied.clear()
            had_tasks = len(self.collection) > 0
            self.collection.reset(owner_id, [])
            if had_tasks:
                # Previous owner's cards must not stay on screen while loading
                self._publish()
        self.loading = True

        try:
            tasks = await asyncio.to_thread(self.store.list_by_owner, owner_id)
        except StoreError as e:
            if generation != self._generation:
                logger.info(f"Ignoring failed load for {owner_id}: superseded")
                return self.collection
            self.loading = False
            self.error = "Failed to load tasks"
            self.collection.reset(owner_id, [])
            self._publish()
            raise FetchError(f"Could not load tasks for {owner_id}: {e}") from e

        if generation != self._generation or owner_id != self.collection.owner_id:
            logger.info(f"Discarding stale load response for {owner_id}")
            return self.collection

        self.loading = False
        self.error = None
        self.collection.reset(owner_id, tasks)
        logger.info(f"Loaded {len(self.collection)} task(s) for {owner_id}")
        self._publish()
        return self.collection

    # ── Create ───────────────────────────────────────────────────────────

    async def create(self, draft: Dict[str, Any]) -> Task:
        """
        Create a task for the current owner and put it first in the collection.

        Raises:
            ValidationError before any network call.
            SyncError if the store rejects or cannot be reached.
        """
        owner_id = self.collection.owner_id
        if not owner_id:
            raise ValidationError("No owner loaded; call load() first")
        payload = validate_draft(draft)
        payload["assignedTo"] = owner_id

        try:
            created = await asyncio.to_thread(self.store.create, payload)
        except StoreError as e:
            raise SyncError(f"Failed to create task: {e}") from e

        if owner_id != self.collection.owner_id:
            logger.info(f"Created {created.id} for {owner_id}, but owner changed; not adding")
            return created

        self.collection.prepend(created)
        logger.info(f"Created task {created.id}: {created.title}")
        self._publish()
        return created

    # ── Patch ────────────────────────────────────────────────────────────

    async def patch(self, task_id: str, fields: Dict[str, Any]) -> Task:
        """
        Send the changed subset of `fields` and adopt the server's record.

        Raises:
            NotFoundError if task_id is not in the collection (no network call).
            ValidationError on bad field values (no network call).
            SyncError on remote failure; the previous record stays in place.
        """
        current = self.collection.get(task_id)
        if current is None:
            raise NotFoundError(f"Task {task_id} not found")

        clean = validate_fields(fields)
        existing = current.to_dict()
        changed = {k: v for k, v in clean.items() if existing.get(k) != v}
        if not changed:
            return current

        owner_id = self.collection.owner_id
        version = self._issued.get(task_id, 0) + 1
        self._issued[task_id] = version

        try:
            updated = await asyncio.to_thread(self.store.update, task_id, changed)
        except StoreError as e:
            raise SyncError(f"Failed to update task {task_id}: {e}") from e

        if owner_id != self.collection.owner_id:
            logger.info(f"Discarding update for {task_id}: owner changed")
            return updated
        if version < self._applied.get(task_id, 0):
            logger.info(f"Discarding stale update v{version} for {task_id}")
            return self.collection.get(task_id) or updated
        if not self.collection.replace(updated):
            # Removed locally while the request was in flight
            logger.info(f"Task {task_id} no longer in collection, dropping update")
            return updated

        self._applied[task_id] = version
        self._publish()
        return updated

    async def toggle_status(self, task_id: str) -> Task:
        """Flip complete/incomplete."""
        current = self.collection.get(task_id)
        if current is None:
            raise NotFoundError(f"Task {task_id} not found")
        return await self.patch(task_id, {"status": current.status.toggled().value})

    # ── Remove ───────────────────────────────────────────────────────────

    async def remove(self, task_id: str) -> None:
        """
        Remove locally, then delete remotely. At-least-attempted: a remote
        failure raises SyncError but the local removal is kept.
        """
        removed = self.collection.remove(task_id)
        if removed is None:
            raise NotFoundError(f"Task {task_id} not found")
        self._issued.pop(task_id, None)
        self._applied.pop(task_id, None)
        self._publish()

        try:
            await asyncio.to_thread(self.store.delete, task_id)
        except StoreError as e:
            logger.warning(f"Remote delete of {task_id} failed; local removal kept")
            raise SyncError(f"Failed to delete task {task_id}: {e}") from e
