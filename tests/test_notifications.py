"""
Tests for the deadline notification scheduler.
"""
from datetime import date

import pytest

from conftest import make_task
from taskboard.events import EventBus, NOTIFICATION
from taskboard.notifications import DUE_TODAY, DUE_TOMORROW, DeadlineNotificationScheduler
from taskboard.schema import Severity

TODAY = date(2024, 6, 10)


class Chime:
    def __init__(self):
        self.plays = 0

    def __call__(self):
        self.plays += 1


@pytest.fixture
def chime():
    return Chime()


def make_scheduler(chime, dedupe=True, bus=None):
    return DeadlineNotificationScheduler(bus=bus, dedupe=dedupe, clock=lambda: TODAY, chime=chime)


def deadline_tasks():
    return [
        make_task("today", deadline="2024-06-10", title="Pay rent"),
        make_task("tomorrow", deadline="2024-06-11", title="Call mum"),
        make_task("later", deadline="2024-06-12"),
        make_task("past", deadline="2024-06-09"),
        make_task("none"),
    ]


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Boundaries
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_today_is_urgent_tomorrow_is_warning(chime):
    events = make_scheduler(chime).scan(deadline_tasks())

    assert [(e.task_id, e.severity, e.kind) for e in events] == [
        ("today", Severity.URGENT, DUE_TODAY),
        ("tomorrow", Severity.WARNING, DUE_TOMORROW),
    ]
    assert events[0].message == '🚨 Task Due Today: "Pay rent"'
    assert events[1].message == '⏳ Task Due Tomorrow: "Call mum"'


def test_chime_plays_once_per_event(chime):
    make_scheduler(chime).scan(deadline_tasks())
    assert chime.plays == 2


def test_month_rollover():
    sched = DeadlineNotificationScheduler(clock=lambda: date(2024, 6, 30), chime=None)
    events = sched.scan([make_task("x", deadline="2024-07-01")])
    assert [e.severity for e in events] == [Severity.WARNING]


def test_events_published_on_bus(chime):
    bus = EventBus()
    received = []
    bus.subscribe(NOTIFICATION, lambda event: received.append(event))

    make_scheduler(chime, bus=bus).scan(deadline_tasks())

    assert [e.task_id for e in received] == ["today", "tomorrow"]


def test_failing_chime_does_not_stop_alerts():
    def broken():
        raise OSError("no audio device")

    sched = DeadlineNotificationScheduler(clock=lambda: TODAY, chime=broken)
    assert len(sched.scan(deadline_tasks())) == 2


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Repeat alerts across scans
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_dedupe_suppresses_repeat_alerts(chime):
    sched = make_scheduler(chime, dedupe=True)
    tasks = deadline_tasks()

    assert len(sched.scan(tasks)) == 2
    assert sched.scan(tasks) == []
    assert sched.scan(tasks) == []
    assert chime.plays == 2


def test_without_dedupe_every_scan_re_alerts(chime):
    sched = make_scheduler(chime, dedupe=False)
    tasks = deadline_tasks()

    assert len(sched.scan(tasks)) == 2
    assert len(sched.scan(tasks)) == 2
    assert len(sched.scan(tasks)) == 2
    assert chime.plays == 6


def test_new_deadline_alerts_again(chime):
    sched = make_scheduler(chime)
    sched.scan([make_task("a", deadline="2024-06-11")])

    events = sched.scan([make_task("a", deadline="2024-06-10")])
    assert [e.severity for e in events] == [Severity.URGENT]


def test_dismiss_allows_realert(chime):
    sched = make_scheduler(chime)
    tasks = deadline_tasks()
    sched.scan(tasks)

    sched.dismiss("today")
    events = sched.scan(tasks)
    assert [e.task_id for e in events] == ["today"]


def test_reset_ends_session(chime):
    sched = make_scheduler(chime)
    tasks = deadline_tasks()
    sched.scan(tasks)
    assert len(sched.alerted) == 2

    sched.reset()
    assert sched.alerted == set()
    assert len(sched.scan(tasks)) == 2
