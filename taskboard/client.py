"""
HTTP clients for the task store and the note store.

Both speak JSON over REST (see board_server.py). Every failure, whether
transport, non-2xx status or undecodable body, surfaces as StoreError so the
sync layer can wrap it into FetchError / SyncError.

These calls block; the async layers run them through asyncio.to_thread.
"""
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from .errors import StoreError
from .schema import Note, Task

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5


class _JsonClient:
    """Shared session handling for the store clients."""

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        api_key: str = "",
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        if api_key:
            self.session.headers.update({"X-API-Key": api_key})

    def _url(self, *parts: str) -> str:
        return "/".join([self.base_url] + [quote(str(p), safe="") for p in parts])

    def _request(self, method: str, url: str, ok_statuses=(), **kwargs) -> Any:
        try:
            r = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise StoreError(f"{method} {url} failed: {e}") from e

        if r.status_code in ok_statuses:
            return None
        if not r.ok:
            try:
                body = r.json()
            except ValueError:
                body = r.text
            if isinstance(body, dict):
                detail = str(body.get("error", ""))
            else:
                detail = str(body or "")[:200]
            raise StoreError(f"{method} {url} → {r.status_code} {detail}".strip(), status=r.status_code)

        try:
            return r.json()
        except ValueError as e:
            raise StoreError(f"{method} {url} returned invalid JSON") from e

    def close(self) -> None:
        self.session.close()


class TaskStoreClient(_JsonClient):
    """list-by-owner, create, update-by-id, delete-by-id."""

    def list_by_owner(self, owner_id: str) -> List[Task]:
        data = self._request("GET", self._url("tasks", owner_id))
        if not isinstance(data, list):
            raise StoreError(f"Expected a task list for {owner_id}, got {type(data).__name__}")
        try:
            return [Task.from_dict(item) for item in data]
        except (AttributeError, ValueError) as e:
            raise StoreError(f"Malformed task record: {e}") from e

    def create(self, payload: Dict[str, Any]) -> Task:
        data = self._request("POST", self._url("tasks"), json=payload)
        return self._to_task(data)

    def update(self, task_id: str, fields: Dict[str, Any]) -> Task:
        data = self._request("PUT", self._url("tasks", task_id), json=fields)
        return self._to_task(data)

    def delete(self, task_id: str) -> None:
        # Already gone counts as deleted
        self._request("DELETE", self._url("tasks", task_id), ok_statuses=(404,))

    @staticmethod
    def _to_task(data: Any) -> Task:
        try:
            return Task.from_dict(data)
        except (AttributeError, ValueError) as e:
            raise StoreError(f"Malformed task record: {e}") from e


class NoteStoreClient(_JsonClient):
    """get-by-owner (find-or-create) and upsert-by-owner."""

    def get(self, owner_id: str) -> Note:
        data = self._request("GET", self._url("notes", owner_id))
        return Note(owner_id=owner_id, content=self._content(data))

    def upsert(self, owner_id: str, content: str) -> Note:
        data = self._request("PUT", self._url("notes", owner_id), json={"content": content})
        return Note(owner_id=owner_id, content=self._content(data))

    @staticmethod
    def _content(data: Any) -> str:
        if not isinstance(data, dict):
            raise StoreError("Malformed note response")
        # Older servers answered {"notes": ...}
        content = data.get("content", data.get("notes", ""))
        return content if isinstance(content, str) else ""
