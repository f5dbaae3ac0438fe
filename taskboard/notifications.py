"""
Deadline notification scheduler.

Scans the whole collection on every change and emits one-shot alerts for
tasks due today (urgent) or tomorrow (warning). Each alert plays the audio
cue once.

With dedupe on, an alert keyed by (task_id, deadline, severity) fires once
per session; moving the deadline yields a new key and a new alert. With
dedupe off every scan re-alerts every still-matching task.
"""
import logging
import sys
from datetime import date, timedelta
from typing import Callable, Iterable, List, Optional, Set, Tuple

from .events import EventBus, NOTIFICATION
from .schema import NotificationEvent, Severity, Task

logger = logging.getLogger(__name__)

DUE_TODAY = "due_today"
DUE_TOMORROW = "due_tomorrow"

AlertKey = Tuple[str, str, Severity]


def terminal_bell() -> None:
    """Default audio cue."""
    sys.stdout.write("\a")
    sys.stdout.flush()


class DeadlineNotificationScheduler:
    """Emits due-today / due-tomorrow alerts when the task collection changes."""

    def __init__(
        self,
        bus: Optional[EventBus] = None,
        dedupe: bool = True,
        clock: Optional[Callable[[], date]] = None,
        chime: Optional[Callable[[], None]] = terminal_bell,
    ):
        self.bus = bus or EventBus()
        self.dedupe = dedupe
        self.clock = clock or date.today
        self.chime = chime
        self._seen: Set[AlertKey] = set()

    def scan(self, tasks: Iterable[Task]) -> List[NotificationEvent]:
        """Check every task's deadline against today/tomorrow and emit alerts."""
        today = self.clock()
        today_str = today.isoformat()
        tomorrow_str = (today + timedelta(days=1)).isoformat()

        emitted: List[NotificationEvent] = []
        for task in tasks:
            if not task.deadline:
                continue
            if task.deadline == today_str:
                event = NotificationEvent(
                    message=f'🚨 Task Due Today: "{task.title}"',
                    severity=Severity.URGENT,
                    task_id=task.id,
                    deadline=task.deadline,
                    kind=DUE_TODAY,
                )
            elif task.deadline == tomorrow_str:
                event = NotificationEvent(
                    message=f'⏳ Task Due Tomorrow: "{task.title}"',
                    severity=Severity.WARNING,
                    task_id=task.id,
                    deadline=task.deadline,
                    kind=DUE_TOMORROW,
                )
            else:
                continue

            key = (task.id, task.deadline, event.severity)
            if self.dedupe and key in self._seen:
                continue
            self._seen.add(key)
            self._notify(event)
            emitted.append(event)
        return emitted

    def dismiss(self, task_id: str) -> None:
        """Forget alerts for a task so a later scan may raise them again."""
        self._seen = {k for k in self._seen if k[0] != task_id}

    def reset(self) -> None:
        """End the session: forget every alert raised so far."""
        self._seen.clear()

    @property
    def alerted(self) -> Set[AlertKey]:
        return set(self._seen)

    def _notify(self, event: NotificationEvent) -> None:
        logger.info(f"[{event.severity.value}] {event.message}")
        if self.chime is not None:
            try:
                self.chime()
            except Exception as e:
                logger.warning(f"Audio cue failed: {e}")
        self.bus.emit(NOTIFICATION, event=event)
