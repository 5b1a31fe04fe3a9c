# Overview: Flask API routes for repair tickets; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, current_app

from ..errors import ServiceError, PersistenceError
from ..services import ticket_service


tickets_bp = Blueprint("tickets", __name__, url_prefix="/api/tickets")


@tickets_bp.get("")
def list_tickets_route():
    """
    List tickets, newest first.

    Query params:
    - status: str (optional) - ignored unless it is a known status
    """
    try:
        tickets = ticket_service.list_tickets(request.args.get("status"))
        items = [t.to_dict(include_updates=False) for t in tickets]
        return jsonify({"items": items, "total": len(items)}), 200

    except PersistenceError:
        current_app.logger.exception("Failed to list tickets")
        return jsonify({"error": "Storage unavailable"}), 503


@tickets_bp.post("")
def create_ticket_route():
    """Open a new ticket; status is always DROPPED_OFF regardless of payload."""
    data = request.get_json(silent=True) or {}
    try:
        ticket = ticket_service.create_ticket(
            customer=data.get("customer"),
            device=data.get("device"),
            issue=data.get("issue"),
            estimate_cents=data.get("estimate_cents"),
            notes=data.get("notes"),
        )
        return jsonify({"ticket": ticket.to_dict()}), 201

    except PersistenceError:
        current_app.logger.exception("Failed to create ticket")
        return jsonify({"error": "Storage unavailable"}), 503
    except ServiceError as e:
        return jsonify({"error": str(e), "details": e.details}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create ticket")
        return jsonify({"error": "Internal server error"}), 500


@tickets_bp.get("/<int:ticket_id>")
def get_ticket_route(ticket_id: int):
    try:
        ticket = ticket_service.get_ticket(ticket_id)
        return jsonify({"ticket": ticket.to_dict()}), 200

    except PersistenceError:
        current_app.logger.exception("Failed to load ticket")
        return jsonify({"error": "Storage unavailable"}), 503
    except ServiceError as e:
        return jsonify({"error": str(e), "details": e.details}), e.status_code


@tickets_bp.patch("/<int:ticket_id>")
def update_ticket_route(ticket_id: int):
    """
    Partial update.

    Body fields (all optional, at least one required):
    - status, estimate_cents, notes
    - message: appended to the ticket's update log
    """
    data = request.get_json(silent=True)
    try:
        ticket = ticket_service.update_ticket(ticket_id, data if data is not None else {})
        return jsonify({"ticket": ticket.to_dict()}), 200

    except PersistenceError:
        current_app.logger.exception("Failed to update ticket")
        return jsonify({"error": "Storage unavailable"}), 503
    except ServiceError as e:
        return jsonify({"error": str(e), "details": e.details}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update ticket")
        return jsonify({"error": "Internal server error"}), 500
