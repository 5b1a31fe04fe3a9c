# Overview: Error taxonomy shared by services and translated to HTTP by routes.

from __future__ import annotations


class ServiceError(Exception):
    """Base class for caller-visible service failures."""
    status_code = 500

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class ValidationError(ServiceError, ValueError):
    """400-level input problem."""
    status_code = 400


class NotFoundError(ServiceError):
    """Referenced entity id does not exist."""
    status_code = 404


class ConflictError(ServiceError, ValueError):
    """409-level business rule conflict (e.g., duplicate SKU)."""
    status_code = 409


class InsufficientStockError(ServiceError):
    """A sale line asks for more units than the product has on hand."""
    status_code = 409

    def __init__(self, product_id: int, product_name: str, requested: int, available: int):
        super().__init__(
            f"Insufficient stock for {product_name}: requested {requested}, available {available}",
            details={
                "product_id": product_id,
                "product_name": product_name,
                "requested": requested,
                "available": available,
            },
        )
        self.product_id = product_id
        self.product_name = product_name
        self.requested = requested
        self.available = available


class PersistenceError(ServiceError):
    """Storage engine failure, connection failure or lock timeout."""
    status_code = 503
