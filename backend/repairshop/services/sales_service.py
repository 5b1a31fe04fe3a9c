"""
Sales Service - atomic multi-line point-of-sale transactions

Each sale runs as one transaction. Lines are processed in the order given:
the product row is locked, its current price snapshotted and its stock
checked and decremented before the next line is touched. A later line for
the same product therefore sees the earlier decrement. Any failure rolls
back every decrement, the header and the items together.

Prices are read under the lock, not taken from the request, so a committed
sale always reflects the price and stock at the moment it executed.
"""

from __future__ import annotations

import logging

from ..errors import InsufficientStockError, NotFoundError, ValidationError
from ..extensions import db
from ..models import Product, Sale, SaleItem
from ..time_utils import utcnow
from .concurrency import begin_write_lock, lock_for_update, storage_errors, unit_of_work
from .customer_service import normalize_customer_input, resolve_customer
from .identifier_service import assign_display_code, invoice_code

logger = logging.getLogger(__name__)

MAX_PAYMENT_METHOD_LENGTH = 32


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _validate_payment_method(value) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("payment_method is required")
    value = value.strip()
    if len(value) > MAX_PAYMENT_METHOD_LENGTH:
        raise ValidationError(f"payment_method exceeds max length {MAX_PAYMENT_METHOD_LENGTH}")
    return value


def _validate_items(items, min_items: int) -> list[tuple[int, int]]:
    if not isinstance(items, list):
        raise ValidationError("items must be a list")
    if len(items) < max(min_items, 1):
        raise ValidationError(f"At least {max(min_items, 1)} item(s) required")

    lines = []
    for i, item in enumerate(items, start=1):
        if not isinstance(item, dict):
            raise ValidationError(f"Item {i} must be an object")
        product_id = item.get("product_id")
        quantity = item.get("quantity")
        if not _is_int(product_id):
            raise ValidationError(f"Item {i}: product_id must be an integer")
        if not _is_int(quantity) or quantity <= 0:
            raise ValidationError(f"Item {i}: quantity must be a positive integer")
        lines.append((product_id, quantity))
    return lines


def _take_stock(product_id: int, quantity: int) -> tuple[int, int]:
    """Lock a product, check and decrement its stock. Returns (unit_price, line_total)."""
    product = lock_for_update(db.session.query(Product).filter_by(id=product_id)).first()
    if product is None:
        raise NotFoundError(f"Product {product_id} not found", details={"product_id": product_id})

    if product.stock < quantity:
        raise InsufficientStockError(
            product_id=product.id,
            product_name=product.name,
            requested=quantity,
            available=product.stock,
        )

    unit_price = product.price_cents
    product.stock = product.stock - quantity
    db.session.flush()
    return unit_price, unit_price * quantity


def create_sale(
    payment_method: str,
    items: list[dict],
    customer: dict | None = None,
    *,
    min_items: int = 1,
) -> Sale:
    """
    Record a sale and decrement stock, all or nothing.

    Raises ValidationError for malformed input, NotFoundError for an unknown
    product, InsufficientStockError when a line exceeds stock and
    PersistenceError for storage failures. Identical payloads are not
    deduplicated.
    """
    method = _validate_payment_method(payment_method)
    lines = _validate_items(items, min_items)
    customer_input = normalize_customer_input(customer)

    with unit_of_work():
        begin_write_lock()

        resolved = resolve_customer(**customer_input) if customer_input else None

        total_cents = 0
        priced = []
        for product_id, quantity in lines:
            unit_price, line_total = _take_stock(product_id, quantity)
            total_cents += line_total
            priced.append((product_id, quantity, unit_price, line_total))

        sale = Sale(
            customer=resolved,
            total_cents=total_cents,
            payment_method=method,
            created_at=utcnow(),
        )
        db.session.add(sale)
        assign_display_code(sale, "invoice_code", lambda s: invoice_code(s.id, s.created_at.year))

        for product_id, quantity, unit_price, line_total in priced:
            sale.items.append(SaleItem(
                product_id=product_id,
                quantity=quantity,
                unit_price_cents=unit_price,
                line_total_cents=line_total,
            ))
        db.session.flush()

    logger.info("Recorded sale %s total_cents=%s lines=%d", sale.invoice_code, total_cents, len(priced))
    return sale


def get_sale(sale_id: int) -> Sale:
    with storage_errors():
        sale = db.session.get(Sale, sale_id)
    if sale is None:
        raise NotFoundError(f"Sale {sale_id} not found", details={"sale_id": sale_id})
    return sale


def list_sales(limit: int | None = None) -> list[Sale]:
    """Newest first, items included. limit=None returns every sale."""
    if limit is not None and (not _is_int(limit) or limit < 1):
        raise ValidationError("limit must be a positive integer", details={"limit": limit})

    with storage_errors():
        q = db.session.query(Sale).order_by(Sale.created_at.desc(), Sale.id.desc())
        if limit is not None:
            q = q.limit(limit)
        return q.all()
