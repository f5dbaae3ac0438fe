"""
Debounced autosave for the per-owner note.

set_content() updates the local buffer at once and re-arms a single
trailing-edge timer; only the text present when the timer fires is sent.
close() and owner switches cancel the pending timer without flushing, so a
stale buffer can never be written under another owner's key.

Must be driven from a running asyncio event loop.
"""
import asyncio
import logging
from typing import Optional, Set

from .errors import StoreError

logger = logging.getLogger(__name__)

DEFAULT_DELAY_SECS = 0.5


class NotesAutosaveController:
    """Owns one note buffer and at most one pending write-back timer."""

    def __init__(self, store, owner_id: str, delay: float = DEFAULT_DELAY_SECS):
        self.store = store                # NoteStoreClient-like: get(owner), upsert(owner, content)
        self.owner_id = owner_id
        self.delay = delay
        self.content = ""
        self.closed = False
        self.last_error: Optional[str] = None
        self._timer: Optional[asyncio.TimerHandle] = None
        self._inflight: Set[asyncio.Task] = set()

    # ── Lifecycle ────────────────────────────────────────────────────────

    async def load(self) -> str:
        """Fetch the owner's note. On failure the buffer stays empty."""
        owner = self.owner_id
        try:
            note = await asyncio.to_thread(self.store.get, owner)
        except StoreError as e:
            self.last_error = str(e)
            logger.error(f"Failed to load note for {owner}: {e}")
            return self.content
        # Ignore if the owner changed or the user started typing meanwhile
        if owner == self.owner_id and not self.pending and not self.closed:
            self.content = note.content
        return self.content

    def switch_owner(self, owner_id: str) -> None:
        """Drop the pending write for the old owner and start an empty buffer."""
        self.cancel()
        self.owner_id = owner_id
        self.content = ""

    def close(self) -> None:
        """Teardown: cancel the pending timer. In-flight saves run to completion."""
        self.cancel()
        self.closed = True

    async def __aenter__(self) -> "NotesAutosaveController":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ── Editing ──────────────────────────────────────────────────────────

    def set_content(self, text: str) -> None:
        """Update the buffer and (re)arm the debounce timer."""
        if self.closed:
            raise RuntimeError("NotesAutosaveController is closed")
        self.content = text
        self.cancel()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.delay, self._fire, self.owner_id)

    def cancel(self) -> bool:
        """Cancel the pending timer, if any."""
        if self._timer is None:
            return False
        self._timer.cancel()
        self._timer = None
        return True

    @property
    def pending(self) -> bool:
        return self._timer is not None

    async def wait_idle(self) -> None:
        """Wait for saves already sent to finish."""
        while self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    # ── Write-back ───────────────────────────────────────────────────────

    def _fire(self, owner_id: str) -> None:
        self._timer = None
        if self.closed or owner_id != self.owner_id:
            return
        task = asyncio.ensure_future(self._save(owner_id, self.content))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _save(self, owner_id: str, content: str) -> None:
        try:
            await asyncio.to_thread(self.store.upsert, owner_id, content)
        except StoreError as e:
            # No rollback and no retry: the next edit re-arms the timer
            self.last_error = str(e)
            logger.error(f"Failed to save note for {owner_id}: {e}")
        else:
            self.last_error = None
            logger.debug(f"Saved note for {owner_id} ({len(content)} chars)")
