# Overview: Customer resolution; maps (name, phone, email) onto one row per phone.

from __future__ import annotations

from ..errors import ValidationError
from ..extensions import db
from ..models import Customer


def _clean(value) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError("Customer fields must be strings")
    value = value.strip()
    return value or None


def normalize_customer_input(data) -> dict | None:
    """
    Normalize a caller-supplied customer mapping.

    Returns None when nothing is supplied (or every field is blank); raises
    ValidationError when some but not all required fields are present.
    """
    if data is None:
        return None
    if not isinstance(data, dict):
        raise ValidationError("customer must be an object")

    name = _clean(data.get("name"))
    phone = _clean(data.get("phone"))
    email = _clean(data.get("email"))

    if not (name or phone or email):
        return None
    if not phone:
        raise ValidationError("customer.phone is required")
    if not name:
        raise ValidationError("customer.name is required")

    return {"name": name, "phone": phone, "email": email}


def resolve_customer(name: str, phone: str, email: str | None = None) -> Customer:
    """
    Insert-or-merge a customer keyed by phone.

    An existing row gets the new name; its email is replaced only when a new
    one is supplied. Runs inside the caller's transaction and does not commit.
    A racing insert of the same phone surfaces as a storage error.
    """
    name = _clean(name)
    phone = _clean(phone)
    email = _clean(email)

    if not phone:
        raise ValidationError("phone is required")
    if not name:
        raise ValidationError("name is required")

    customer = db.session.query(Customer).filter_by(phone=phone).first()
    if customer is None:
        customer = Customer(name=name, phone=phone, email=email)
        db.session.add(customer)
    else:
        customer.name = name
        if email is not None:
            customer.email = email

    db.session.flush()
    return customer
