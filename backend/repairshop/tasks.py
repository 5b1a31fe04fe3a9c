"""
Celery tasks for ticket follow-up reminders.

The API only enqueues these (see services/reminder_service.py); a worker
process runs them. Each task looks the ticket up again at run time and sends
a text through the messaging bot's /send endpoint.
"""

import logging
import re

import httpx
from celery import shared_task
from flask import current_app

from .extensions import db
from .models import Ticket
from .models.tickets import STATUS_CLOSED

logger = logging.getLogger(__name__)

REMINDER_MESSAGES = {
    "reminder-1d": (
        "Hi {name}, thanks for dropping off your {device}. "
        "Your ticket is {code}; we will keep you posted."
    ),
    "reminder-20d": (
        "Hi {name}, an update on ticket {code} ({device}): "
        "current status is {status}. Reply here if you have questions."
    ),
    "reminder-30d": (
        "Hi {name}, your {device} (ticket {code}) has been with us for 30 days. "
        "Please contact us to arrange pickup."
    ),
}


def whatsapp_jid(phone: str) -> str:
    """Bot recipient id for a phone number: digits only plus the user domain."""
    return f"{re.sub(r'[^0-9]', '', phone)}@s.whatsapp.net"


def send_ticket_reminder(kind: str, ticket_id) -> str:
    """
    Send one reminder for a ticket.

    Returns "sent" or "skipped". Raises httpx.HTTPError when the bot is
    unreachable or rejects the message.
    """
    ticket = db.session.get(Ticket, int(ticket_id))
    if ticket is None:
        logger.info("Skipping %s: ticket %s no longer exists", kind, ticket_id)
        return "skipped"

    if ticket.status == STATUS_CLOSED:
        logger.info("Skipping %s: ticket %s is closed", kind, ticket.code)
        return "skipped"

    customer = ticket.customer
    if customer is None or not customer.phone:
        logger.info("Skipping %s: ticket %s has no customer phone", kind, ticket.code)
        return "skipped"

    text = REMINDER_MESSAGES[kind].format(
        name=customer.name,
        device=ticket.device,
        code=ticket.code,
        status=ticket.status.replace("_", " ").lower(),
    )

    response = httpx.post(
        f"{current_app.config['BOT_URL'].rstrip('/')}/send",
        json={"to": whatsapp_jid(customer.phone), "text": text},
        timeout=current_app.config["BOT_TIMEOUT_SECONDS"],
    )
    response.raise_for_status()

    logger.info("Sent %s for ticket %s", kind, ticket.code)
    return "sent"


def _run_reminder(task, kind: str, payload: dict) -> str:
    try:
        return send_ticket_reminder(kind, payload["ticketId"])
    except httpx.HTTPError as exc:
        logger.warning("Reminder %s for ticket %s failed: %s", kind, payload.get("ticketId"), exc)
        raise task.retry(exc=exc, countdown=60 * (2 ** task.request.retries))


@shared_task(bind=True, name="reminder-1d", max_retries=3)
def reminder_1d(self, **payload):
    return _run_reminder(self, "reminder-1d", payload)


@shared_task(bind=True, name="reminder-20d", max_retries=3)
def reminder_20d(self, **payload):
    return _run_reminder(self, "reminder-20d", payload)


@shared_task(bind=True, name="reminder-30d", max_retries=3)
def reminder_30d(self, **payload):
    return _run_reminder(self, "reminder-30d", payload)
