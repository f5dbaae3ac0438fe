"""
Event fan-out for the task board.

The sync facade republishes the collection on COLLECTION_CHANGED; the
deadline scheduler publishes alerts on NOTIFICATION. Subscribers are plain
callables invoked synchronously in registration order.
"""
import logging
from typing import Callable, Dict, List

logger = logging.getLogger(__name__)

COLLECTION_CHANGED = "collection_changed"
NOTIFICATION = "notification"


class EventBus:
    """Routes named events to registered callbacks."""

    def __init__(self):
        self.subscribers: Dict[str, List[Callable]] = {}  # event_type -> callbacks

    def subscribe(self, event_type: str, callback: Callable) -> None:
        """Register a callback for an event type."""
        if event_type not in self.subscribers:
            self.subscribers[event_type] = []
        self.subscribers[event_type].append(callback)

    def emit(self, event_type: str, **kwargs) -> None:
        """Emit an event to all subscribers. A failing callback does not stop the rest."""
        for callback in list(self.subscribers.get(event_type, [])):
            try:
                callback(**kwargs)
            except Exception:
                logger.exception(f"Error in {event_type} callback {callback!r}")
