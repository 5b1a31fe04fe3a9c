from __future__ import annotations

from ..extensions import db
from ..time_utils import utcnow, to_utc_z


class Customer(db.Model):
    """
    Customer master data, keyed by phone number.

    Customers are created or merged by the customer resolver when a ticket or
    sale names one. Tickets and sales keep a nullable back-reference so that
    removing a customer never removes their history.
    """
    __tablename__ = "customers"
    __table_args__ = (
        db.UniqueConstraint("phone", name="uq_customers_phone"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(32), nullable=False)
    email = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<Customer id={self.id} phone={self.phone!r} name={self.name!r}>"

    def summary(self) -> dict | None:
        """Short form embedded in tickets and sales; None when no field is set."""
        if not (self.name or self.phone or self.email):
            return None
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "email": self.email,
        }

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "email": self.email,
            "created_at": to_utc_z(self.created_at),
        }
