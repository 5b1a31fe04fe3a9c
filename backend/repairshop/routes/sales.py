# Overview: Flask API routes for sales operations; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, current_app

from ..errors import ServiceError, PersistenceError
from ..services import sales_service


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


@sales_bp.get("")
def list_sales_route():
    """
    List sales with their items, newest first.

    Query params:
    - limit: int (optional)
    """
    limit = request.args.get("limit", type=int)
    if limit is None and request.args.get("limit") is not None:
        return jsonify({"error": "limit must be a positive integer"}), 400
    try:
        sales = sales_service.list_sales(limit=limit)
        items = [s.to_dict() for s in sales]
        return jsonify({"items": items, "total": len(items)}), 200

    except PersistenceError:
        current_app.logger.exception("Failed to list sales")
        return jsonify({"error": "Storage unavailable"}), 503
    except ServiceError as e:
        return jsonify({"error": str(e), "details": e.details}), e.status_code


@sales_bp.post("")
def create_sale_route():
    """
    Record a sale.

    Body:
    - payment_method: str
    - items: [{product_id, quantity}]
    - customer: {name, phone, email?} (optional)
    """
    data = request.get_json(silent=True) or {}
    try:
        sale = sales_service.create_sale(
            payment_method=data.get("payment_method"),
            items=data.get("items"),
            customer=data.get("customer"),
        )
        return jsonify({"sale": sale.to_dict()}), 201

    except PersistenceError:
        current_app.logger.exception("Failed to create sale")
        return jsonify({"error": "Storage unavailable"}), 503
    except ServiceError as e:
        return jsonify({"error": str(e), "details": e.details}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create sale")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.get("/<int:sale_id>")
def get_sale_route(sale_id: int):
    try:
        sale = sales_service.get_sale(sale_id)
        return jsonify({"sale": sale.to_dict()}), 200

    except PersistenceError:
        current_app.logger.exception("Failed to load sale")
        return jsonify({"error": "Storage unavailable"}), 503
    except ServiceError as e:
        return jsonify({"error": str(e), "details": e.details}), e.status_code
