# backend/repairshop/services/products_service.py
"""
Products Service - catalog admin

Products are keyed by SKU for upserts. Admin stock edits take the same row
lock as sales so they never interleave with a sale's check-and-decrement.
"""
from __future__ import annotations

from ..errors import ConflictError, NotFoundError, ValidationError
from ..extensions import db
from ..models import Product
from ..validation import ModelValidationPolicy, validate_payload, enforce_rules_product
from .concurrency import begin_write_lock, lock_for_update, storage_errors, unit_of_work

PRODUCT_MUTABLE_FIELDS = {"sku", "name", "price_cents", "stock"}

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields=PRODUCT_MUTABLE_FIELDS,
    required_on_create={"sku", "name"},
)


def apply_product_patch(p: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_MUTABLE_FIELDS:
            continue
        setattr(p, k, v)


def list_products() -> list[Product]:
    with storage_errors():
        return (
            db.session.query(Product)
            .order_by(Product.name.asc(), Product.id.asc())
            .all()
        )


def get_product(product_id: int) -> Product:
    with storage_errors():
        product = db.session.get(Product, product_id)
    if product is None:
        raise NotFoundError(f"Product {product_id} not found", details={"product_id": product_id})
    return product


def upsert_product(payload: dict) -> tuple[Product, bool]:
    """
    Create or overwrite a product by SKU.

    Returns (product, created). Omitted price/stock keep their current
    values on update and default to 0 on create.
    """
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
    enforce_rules_product(patch)

    with unit_of_work():
        begin_write_lock()
        product = lock_for_update(db.session.query(Product).filter_by(sku=patch["sku"])).first()
        created = product is None
        if created:
            product = Product(price_cents=0, stock=0)
            db.session.add(product)
        apply_product_patch(product, patch)

    return product, created


def update_product(product_id: int, payload: dict) -> Product:
    """Partial admin edit of a product."""
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=True)
    if not patch:
        raise ValidationError("No fields to update")
    enforce_rules_product(patch)

    with unit_of_work():
        begin_write_lock()
        product = lock_for_update(db.session.query(Product).filter_by(id=product_id)).first()
        if product is None:
            raise NotFoundError(f"Product {product_id} not found", details={"product_id": product_id})

        new_sku = patch.get("sku")
        if new_sku and new_sku != product.sku:
            clash = db.session.query(Product.id).filter(
                Product.sku == new_sku,
                Product.id != product.id,
            ).first()
            if clash:
                raise ConflictError(f"SKU '{new_sku}' already exists", details={"sku": new_sku})

        apply_product_patch(product, patch)

    return product
