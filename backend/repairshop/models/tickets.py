from __future__ import annotations

from ..extensions import db
from ..time_utils import utcnow, to_utc_z

# Repair lifecycle. Any status may follow any other; only membership is enforced.
STATUS_DROPPED_OFF = "DROPPED_OFF"
STATUS_DIAGNOSING = "DIAGNOSING"
STATUS_WAITING_APPROVAL = "WAITING_APPROVAL"
STATUS_APPROVED = "APPROVED"
STATUS_REJECTED = "REJECTED"
STATUS_IN_REPAIR = "IN_REPAIR"
STATUS_READY = "READY"
STATUS_WAITING_PICKUP = "WAITING_PICKUP"
STATUS_CLOSED = "CLOSED"

TICKET_STATUSES = (
    STATUS_DROPPED_OFF,
    STATUS_DIAGNOSING,
    STATUS_WAITING_APPROVAL,
    STATUS_APPROVED,
    STATUS_REJECTED,
    STATUS_IN_REPAIR,
    STATUS_READY,
    STATUS_WAITING_PICKUP,
    STATUS_CLOSED,
)

_STATUS_SQL_LIST = ", ".join(f"'{s}'" for s in TICKET_STATUSES)


class Ticket(db.Model):
    """
    Repair ticket.

    The display code (T-00001) is derived from the numeric id, so it is
    written in the same transaction right after the insert is flushed. It is
    nullable at the column level only for that window.
    """
    __tablename__ = "tickets"
    __table_args__ = (
        db.UniqueConstraint("code", name="uq_tickets_code"),
        db.CheckConstraint(f"status IN ({_STATUS_SQL_LIST})", name="ck_tickets_status"),
        db.CheckConstraint("estimate_cents IS NULL OR estimate_cents >= 0", name="ck_tickets_estimate_non_negative"),
        db.Index("ix_tickets_status_created", "status", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(32), nullable=True)

    customer_id = db.Column(
        db.Integer,
        db.ForeignKey("customers.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    device = db.Column(db.String(255), nullable=False)
    issue = db.Column(db.Text, nullable=False)
    status = db.Column(db.String(32), nullable=False, default=STATUS_DROPPED_OFF)

    # Authoritative storage in cents
    estimate_cents = db.Column(db.Integer, nullable=True)
    notes = db.Column(db.Text, nullable=False, default="")

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    customer = db.relationship("Customer", backref=db.backref("tickets", lazy=True, passive_deletes=True))
    updates = db.relationship(
        "TicketUpdate",
        back_populates="ticket",
        order_by=lambda: [TicketUpdate.created_at, TicketUpdate.id],
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Ticket id={self.id} code={self.code!r} status={self.status}>"

    def to_dict(self, include_updates: bool = True) -> dict:
        data = {
            "id": self.id,
            "code": self.code,
            "device": self.device,
            "issue": self.issue,
            "status": self.status,
            "estimate_cents": self.estimate_cents,
            "notes": self.notes,
            "customer": self.customer.summary() if self.customer else None,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if include_updates:
            data["updates"] = [u.to_dict() for u in self.updates]
        return data


class TicketUpdate(db.Model):
    """Append-only log entry on a ticket. Never edited or deleted."""
    __tablename__ = "ticket_updates"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    ticket_id = db.Column(
        db.Integer,
        db.ForeignKey("tickets.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    message = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    ticket = db.relationship("Ticket", back_populates="updates")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "ticket_id": self.ticket_id,
            "message": self.message,
            "created_at": to_utc_z(self.created_at),
        }
