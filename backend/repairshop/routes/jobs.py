# Overview: Explicit job endpoints; re-schedules reminder sets for an existing ticket.

from flask import Blueprint, request, jsonify

from ..errors import ServiceError
from ..services import ticket_service
from ..services.reminder_service import get_scheduler


jobs_bp = Blueprint("jobs", __name__, url_prefix="/api/jobs")


@jobs_bp.post("/reminders")
def schedule_reminders_route():
    """
    Enqueue another 1/20/30-day reminder set for a ticket.

    Not deduplicated: each call adds three more jobs.
    """
    data = request.get_json(silent=True) or {}
    raw_id = data.get("ticketId")

    try:
        ticket_id = int(str(raw_id).strip())
    except (TypeError, ValueError):
        return jsonify({"error": "ticketId must be a ticket id"}), 400

    try:
        ticket = ticket_service.get_ticket(ticket_id)
    except ServiceError as e:
        return jsonify({"error": str(e), "details": e.details}), e.status_code

    enqueued = get_scheduler().schedule_reminders(ticket.id)
    return jsonify({"ok": enqueued > 0, "ticket_id": ticket.id, "enqueued": enqueued}), 200
