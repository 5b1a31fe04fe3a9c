# Overview: Display codes derived from numeric row ids (T-00001, INV-2026-00001).

"""
Identifier Service - human-readable codes for tickets and sales

Codes carry no uniqueness logic of their own: uniqueness comes from the
autoincrement id they are derived from. A code can only be computed once the
row has been flushed, so assignment happens inside the owning transaction,
before commit, and a row is never visible without its code.
"""

from __future__ import annotations

from typing import Callable

from ..extensions import db

CODE_WIDTH = 5
TICKET_PREFIX = "T"
INVOICE_PREFIX = "INV"


def format_code(prefix: str, number: int, width: int = CODE_WIDTH) -> str:
    """Zero-pad a positive id behind a prefix. Wider numbers are not truncated."""
    if isinstance(number, bool) or not isinstance(number, int) or number <= 0:
        raise ValueError(f"Code number must be a positive integer, got {number!r}")
    return f"{prefix}-{number:0{width}d}"


def ticket_code(ticket_id: int) -> str:
    return format_code(TICKET_PREFIX, ticket_id)


def invoice_code(sale_id: int, year: int) -> str:
    return format_code(f"{INVOICE_PREFIX}-{year}", sale_id)


def assign_display_code(row, attribute: str, build: Callable) -> str:
    """
    Flush row to learn its id, then write the derived code onto it.

    Raises ValueError if the row already carries a code; codes are immutable.
    """
    if getattr(row, attribute):
        raise ValueError(f"{attribute} is already assigned for {row!r}")

    if row.id is None:
        db.session.flush()

    code = build(row)
    setattr(row, attribute, code)
    db.session.flush()
    return code
