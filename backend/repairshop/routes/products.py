# Overview: Flask API routes for the product catalog; parses input and returns JSON responses.

from flask import Blueprint, request, current_app

from ..errors import ServiceError, PersistenceError
from ..services import products_service

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
def list_products():
    try:
        products = products_service.list_products()
    except PersistenceError:
        current_app.logger.exception("Failed to list products")
        return {"error": "Storage unavailable"}, 503
    return {"items": [p.to_dict() for p in products], "count": len(products)}


@products_bp.get("/<int:product_id>")
def get_product_route(product_id: int):
    try:
        product = products_service.get_product(product_id)
    except PersistenceError:
        current_app.logger.exception("Failed to load product")
        return {"error": "Storage unavailable"}, 503
    except ServiceError as e:
        return {"error": str(e), "details": e.details}, e.status_code

    return product.to_dict(), 200


@products_bp.put("")
def upsert_product_route():
    """Create or overwrite a product by SKU (201 when created, 200 when updated)."""
    payload = request.get_json(silent=True) or {}
    try:
        product, created = products_service.upsert_product(payload)
    except PersistenceError:
        current_app.logger.exception("Failed to upsert product")
        return {"error": "Storage unavailable"}, 503
    except ServiceError as e:
        return {"error": str(e), "details": e.details}, e.status_code

    return product.to_dict(), 201 if created else 200


@products_bp.patch("/<int:product_id>")
def update_product_route(product_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        product = products_service.update_product(product_id, payload)
    except PersistenceError:
        current_app.logger.exception("Failed to update product")
        return {"error": "Storage unavailable"}, 503
    except ServiceError as e:
        return {"error": str(e), "details": e.details}, e.status_code

    return product.to_dict(), 200
