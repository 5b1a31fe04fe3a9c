"""
Reminder scheduler tests.

Verifies:
- Three jobs with fixed names, delays and payload
- Broker failures are logged and swallowed
- No deduplication across calls
"""

import logging

from repairshop.services.reminder_service import REMINDER_JOBS, ReminderScheduler

from conftest import RecordingQueue


def test_enqueues_three_delayed_jobs():
    queue = RecordingQueue()
    scheduler = ReminderScheduler(queue, queue_name="reminders")

    assert scheduler.schedule_reminders(42) == 3

    assert queue.sent == [
        {"name": "reminder-1d", "kwargs": {"ticketId": "42"}, "countdown": 86_400, "queue": "reminders"},
        {"name": "reminder-20d", "kwargs": {"ticketId": "42"}, "countdown": 1_728_000, "queue": "reminders"},
        {"name": "reminder-30d", "kwargs": {"ticketId": "42"}, "countdown": 2_592_000, "queue": "reminders"},
    ]


def test_delays_in_milliseconds():
    assert dict(REMINDER_JOBS) == {
        "reminder-1d": 86_400_000,
        "reminder-20d": 1_728_000_000,
        "reminder-30d": 2_592_000_000,
    }


def test_failures_are_logged_not_raised(caplog):
    queue = RecordingQueue(fail_on={"reminder-20d"})
    scheduler = ReminderScheduler(queue)

    with caplog.at_level(logging.ERROR, logger="repairshop.services.reminder_service"):
        enqueued = scheduler.schedule_reminders(7)

    assert enqueued == 2
    assert [job["name"] for job in queue.sent] == ["reminder-1d", "reminder-30d"]
    assert "reminder-20d" in caplog.text
    assert "7" in caplog.text


def test_total_broker_outage_returns_zero():
    queue = RecordingQueue(fail_on={name for name, _ in REMINDER_JOBS})

    assert ReminderScheduler(queue).schedule_reminders(7) == 0
    assert queue.sent == []


def test_repeat_calls_are_not_deduplicated():
    queue = RecordingQueue()
    scheduler = ReminderScheduler(queue)

    scheduler.schedule_reminders(9)
    scheduler.schedule_reminders(9)

    assert len(queue.for_ticket(9)) == 6
