# Overview: Repair ticket lifecycle; creation, partial updates and the per-ticket update log.

from __future__ import annotations

import logging

from ..errors import NotFoundError, ValidationError
from ..extensions import db
from ..models import Ticket, TicketUpdate, TICKET_STATUSES
from ..models.tickets import STATUS_DROPPED_OFF
from ..time_utils import utcnow
from .concurrency import storage_errors, unit_of_work
from .customer_service import normalize_customer_input, resolve_customer
from .identifier_service import assign_display_code, ticket_code
from .reminder_service import ReminderScheduler, get_scheduler

logger = logging.getLogger(__name__)

TICKET_MUTABLE_FIELDS = ("status", "estimate_cents", "notes")
TICKET_UPDATE_FIELDS = TICKET_MUTABLE_FIELDS + ("message",)


def _require_text(value, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required")
    return value.strip()


def _validate_estimate(value) -> int | None:
    if value is None:
        return None
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("estimate_cents must be an integer")
    if value < 0:
        raise ValidationError("estimate_cents must be >= 0")
    return value


def _validate_status(value) -> str:
    if value not in TICKET_STATUSES:
        raise ValidationError(
            f"Invalid status: {value!r}",
            details={"allowed": list(TICKET_STATUSES)},
        )
    return value


def create_ticket(
    customer: dict,
    device: str,
    issue: str,
    estimate_cents: int | None = None,
    notes: str | None = None,
    *,
    scheduler: ReminderScheduler | None = None,
) -> Ticket:
    """
    Open a ticket in DROPPED_OFF and schedule its reminders.

    The customer is resolved and the ticket inserted and coded in one
    transaction. Reminders are handed off only after the commit succeeds.
    """
    device = _require_text(device, "device")
    issue = _require_text(issue, "issue")
    estimate_cents = _validate_estimate(estimate_cents)
    if notes is not None and not isinstance(notes, str):
        raise ValidationError("notes must be a string")

    customer_input = normalize_customer_input(customer)
    if customer_input is None:
        raise ValidationError("customer is required")

    with unit_of_work():
        resolved = resolve_customer(**customer_input)

        now = utcnow()
        ticket = Ticket(
            customer=resolved,
            device=device,
            issue=issue,
            status=STATUS_DROPPED_OFF,
            estimate_cents=estimate_cents,
            notes=notes or "",
            created_at=now,
            updated_at=now,
        )
        db.session.add(ticket)
        assign_display_code(ticket, "code", lambda t: ticket_code(t.id))

    logger.info("Created ticket %s (id=%s)", ticket.code, ticket.id)

    (scheduler or get_scheduler()).schedule_reminders(ticket.id)
    return ticket


def update_ticket(ticket_id: int, patch: dict) -> Ticket:
    """
    Apply a partial update and optionally append one log message.

    Fields set to None count as not supplied. An update that supplies nothing
    is rejected rather than treated as a no-op. Any status in the enumeration
    may follow any other.
    """
    if not isinstance(patch, dict):
        raise ValidationError("Invalid update payload")

    unknown = [k for k in patch if k not in TICKET_UPDATE_FIELDS]
    if unknown:
        raise ValidationError(f"Field not allowed: {', '.join(sorted(unknown))}")

    supplied = {k: v for k, v in patch.items() if v is not None}
    if not supplied:
        raise ValidationError("No fields to update")

    changes: dict = {}
    if "status" in supplied:
        changes["status"] = _validate_status(supplied["status"])
    if "estimate_cents" in supplied:
        changes["estimate_cents"] = _validate_estimate(supplied["estimate_cents"])
    if "notes" in supplied:
        if not isinstance(supplied["notes"], str):
            raise ValidationError("notes must be a string")
        changes["notes"] = supplied["notes"]

    message = None
    if "message" in supplied:
        message = _require_text(supplied["message"], "message")

    with unit_of_work():
        ticket = db.session.get(Ticket, ticket_id)
        if ticket is None:
            raise NotFoundError(f"Ticket {ticket_id} not found", details={"ticket_id": ticket_id})

        for field, value in changes.items():
            setattr(ticket, field, value)

        now = utcnow()
        ticket.updated_at = now
        if message is not None:
            ticket.updates.append(TicketUpdate(message=message, created_at=now))

    if "status" in changes:
        logger.info("Ticket %s moved to %s", ticket.code, changes["status"])
    return ticket


def get_ticket(ticket_id: int) -> Ticket:
    with storage_errors():
        ticket = db.session.get(Ticket, ticket_id)
    if ticket is None:
        raise NotFoundError(f"Ticket {ticket_id} not found", details={"ticket_id": ticket_id})
    return ticket


def list_tickets(status: str | None = None) -> list[Ticket]:
    """Newest first. A status outside the enumeration is ignored, not an error."""
    with storage_errors():
        q = db.session.query(Ticket)
        if status in TICKET_STATUSES:
            q = q.filter(Ticket.status == status)
        return q.order_by(Ticket.created_at.desc(), Ticket.id.desc()).all()
