"""
Payment tracking service.

At most one tracking row exists per (bill_type, bill_id, month, year).
Writes go through upsert_payment, which updates that row when present and
inserts it otherwise.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.calculations.aggregation import bill_outlay
from app.db.models import RECURRING_BILL, PaymentTracking

logger = logging.getLogger(__name__)


def find_payment(
    db: Session, bill_type: str, bill_id: int, month: int, year: int
) -> Optional[PaymentTracking]:
    return (
        db.query(PaymentTracking)
        .filter(
            PaymentTracking.bill_type == bill_type,
            PaymentTracking.bill_id == bill_id,
            PaymentTracking.payment_month == month,
            PaymentTracking.payment_year == year,
        )
        .first()
    )


def payments_for_period(db: Session, month: int, year: int) -> List[PaymentTracking]:
    """All tracking rows for one calendar month."""
    return (
        db.query(PaymentTracking)
        .filter(
            PaymentTracking.payment_month == month,
            PaymentTracking.payment_year == year,
        )
        .order_by(PaymentTracking.bill_id)
        .all()
    )


def _apply(row: PaymentTracking, values: dict) -> None:
    for field, value in values.items():
        setattr(row, field, value)


def upsert_payment(
    db: Session,
    bill_id: int,
    month: int,
    year: int,
    is_paid: bool,
    bill_type: str = RECURRING_BILL,
    property_id: Optional[int] = None,
    paid_date: Optional[date] = None,
    amount_paid: Optional[Decimal] = None,
    notes: str = "",
    commit: bool = True,
) -> PaymentTracking:
    """
    Set the paid state of one bill for one month.

    If a concurrent request inserted the same period first, the unique
    constraint rejects our insert; only the savepoint is rolled back and
    the existing row is updated instead.
    """
    values = {
        "property_id": property_id,
        "is_paid": is_paid,
        "paid_date": paid_date,
        "amount_paid": amount_paid,
        "notes": notes or "",
    }

    row = find_payment(db, bill_type, bill_id, month, year)
    if row is None:
        row = PaymentTracking(
            bill_type=bill_type,
            bill_id=bill_id,
            payment_month=month,
            payment_year=year,
            **values,
        )
        try:
            with db.begin_nested():
                db.add(row)
        except IntegrityError:
            logger.warning(
                "Tracking row for %s %s %s/%s already exists, updating it",
                bill_type, bill_id, month, year,
            )
            row = find_payment(db, bill_type, bill_id, month, year)
            _apply(row, values)
    else:
        _apply(row, values)

    if commit:
        db.commit()
        db.refresh(row)
    return row


def paid_values(bill, is_paid: bool, today: Optional[date] = None) -> dict:
    """paid_date/amount_paid for marking ``bill`` paid or unpaid."""
    if not is_paid:
        return {"paid_date": None, "amount_paid": None}
    return {"paid_date": today or date.today(), "amount_paid": bill_outlay(bill)}


def toggle_payment(db: Session, bill, month: int, year: int) -> PaymentTracking:
    """Flip the paid state of ``bill`` for the period; untracked bills become paid."""
    existing = find_payment(db, RECURRING_BILL, bill.id, month, year)
    is_paid = not existing.is_paid if existing else True
    return upsert_payment(
        db,
        bill_id=bill.id,
        month=month,
        year=year,
        is_paid=is_paid,
        property_id=bill.property_id,
        **paid_values(bill, is_paid),
    )


def mark_bills(
    db: Session, bills: Iterable, month: int, year: int, is_paid: bool
) -> List[PaymentTracking]:
    """Mark every bill in ``bills`` paid or unpaid for the period in one transaction."""
    notes = "Marked as paid in bulk" if is_paid else ""
    rows = [
        upsert_payment(
            db,
            bill_id=bill.id,
            month=month,
            year=year,
            is_paid=is_paid,
            property_id=bill.property_id,
            notes=notes,
            commit=False,
            **paid_values(bill, is_paid),
        )
        for bill in bills
    ]
    db.commit()
    logger.info(
        "Marked %d bills %s for %s/%s", len(rows), "paid" if is_paid else "unpaid", month, year
    )
    return rows
