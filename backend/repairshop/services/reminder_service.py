# Overview: Post-commit hand-off of ticket follow-up reminders to the job queue.

"""
Reminder Service - delayed follow-ups per ticket

Three jobs are posted for every call: 1, 20 and 30 days out. Scheduling is
best-effort and never part of the ticket transaction: a broker failure is
logged and swallowed, the ticket stays created. Calls are not deduplicated,
so scheduling the same ticket twice yields six jobs.
"""

from __future__ import annotations

import logging

from flask import current_app

logger = logging.getLogger(__name__)

DAY_MS = 24 * 60 * 60 * 1000

REMINDER_JOBS = (
    ("reminder-1d", 1 * DAY_MS),
    ("reminder-20d", 20 * DAY_MS),
    ("reminder-30d", 30 * DAY_MS),
)


class ReminderScheduler:
    """
    Posts reminder jobs onto a Celery-compatible queue.

    `queue` needs a `send_task(name, kwargs=..., countdown=..., queue=...)`
    method; in production it is the process-wide Celery app.
    """

    def __init__(self, queue, queue_name: str = "reminders"):
        self.queue = queue
        self.queue_name = queue_name

    def schedule_reminders(self, ticket_id: int) -> int:
        """Enqueue the reminder set for a ticket. Returns how many jobs were accepted."""
        payload = {"ticketId": str(ticket_id)}
        enqueued = 0
        for name, delay_ms in REMINDER_JOBS:
            try:
                self.queue.send_task(
                    name,
                    kwargs=payload,
                    countdown=delay_ms // 1000,
                    queue=self.queue_name,
                )
            except Exception:
                logger.exception("Failed to enqueue %s for ticket %s", name, ticket_id)
                continue
            enqueued += 1

        if enqueued:
            logger.info("Scheduled %d reminder(s) for ticket %s", enqueued, ticket_id)
        return enqueued


def get_scheduler() -> ReminderScheduler:
    """The scheduler built for this app in create_app()."""
    return current_app.extensions["reminder_scheduler"]
