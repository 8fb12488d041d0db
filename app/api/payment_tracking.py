"""
Payment tracking API endpoints.

Every write is an upsert on (bill_type, bill_id, payment_month,
payment_year), so repeating a request never creates a second row.
"""

import logging
from datetime import date
from decimal import Decimal

from fastapi import APIRouter, HTTPException, Depends, Query
from pydantic import BaseModel, Field
from typing import Optional, List
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.recurring_bills import get_bill_or_404, load_active_bills
from app.calculations.recurrence import bills_due_in
from app.db.database import get_db
from app.db.models import RECURRING_BILL
from app.services.payments import (
    mark_bills,
    payments_for_period,
    toggle_payment,
    upsert_payment,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class PaymentUpsert(BaseModel):
    """Schema for setting a bill's payment status for one month."""

    bill_type: str = RECURRING_BILL
    bill_id: int
    property_id: Optional[int] = None
    payment_month: int = Field(ge=1, le=12)
    payment_year: int = Field(ge=1, le=9999)
    is_paid: bool
    paid_date: Optional[date] = None
    amount_paid: Optional[Decimal] = None
    notes: str = ""


class PaymentToggle(BaseModel):
    """Flip one bill's paid state for a month."""

    bill_id: int
    payment_month: int = Field(ge=1, le=12)
    payment_year: int = Field(ge=1, le=9999)


class BulkPaymentUpdate(BaseModel):
    """Mark every bill due in a month paid or unpaid."""

    payment_month: int = Field(ge=1, le=12)
    payment_year: int = Field(ge=1, le=9999)
    is_paid: bool = True


class PaymentResponse(BaseModel):
    """Schema for payment tracking response."""

    id: int
    bill_type: str
    bill_id: int
    property_id: Optional[int]
    payment_month: int
    payment_year: int = Field(ge=1, le=9999)
    is_paid: bool
    paid_date: Optional[date]
    amount_paid: Optional[Decimal]
    notes: str

    class Config:
        from_attributes = True


class BulkPaymentResponse(BaseModel):
    updated: int
    payments: List[PaymentResponse]


@router.get("/", response_model=List[PaymentResponse])
async def list_payments(
    month: int = Query(ge=1, le=12),
    year: int = Query(ge=1, le=9999),
    db: Session = Depends(get_db),
):
    """List tracking rows for one month."""
    return [PaymentResponse.model_validate(p) for p in payments_for_period(db, month, year)]


@router.post("/", response_model=PaymentResponse)
async def set_payment(
    payment: PaymentUpsert,
    db: Session = Depends(get_db),
):
    """Create or update the tracking row for a bill and month."""
    try:
        row = upsert_payment(
            db,
            bill_id=payment.bill_id,
            month=payment.payment_month,
            year=payment.payment_year,
            is_paid=payment.is_paid,
            bill_type=payment.bill_type,
            property_id=payment.property_id,
            paid_date=payment.paid_date,
            amount_paid=payment.amount_paid,
            notes=payment.notes,
        )
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error saving payment for bill %s", payment.bill_id)
        raise HTTPException(status_code=500, detail="Failed to save payment")

    return PaymentResponse.model_validate(row)


@router.post("/toggle", response_model=PaymentResponse)
async def toggle(
    request: PaymentToggle,
    db: Session = Depends(get_db),
):
    """Flip a bill's paid state; an untracked bill becomes paid."""
    bill = get_bill_or_404(db, request.bill_id)
    try:
        row = toggle_payment(db, bill, request.payment_month, request.payment_year)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error toggling payment for bill %s", bill.id)
        raise HTTPException(status_code=500, detail="Failed to toggle payment")

    return PaymentResponse.model_validate(row)


@router.post("/bulk", response_model=BulkPaymentResponse)
async def mark_all(
    request: BulkPaymentUpdate,
    db: Session = Depends(get_db),
):
    """Mark every active bill due in the month paid or unpaid."""
    due = bills_due_in(load_active_bills(db), request.payment_month, request.payment_year)
    try:
        rows = mark_bills(db, due, request.payment_month, request.payment_year, request.is_paid)
    except SQLAlchemyError:
        db.rollback()
        logger.exception(
            "Error marking bills for %s/%s", request.payment_month, request.payment_year
        )
        raise HTTPException(status_code=500, detail="Failed to update payments")

    return BulkPaymentResponse(
        updated=len(rows),
        payments=[PaymentResponse.model_validate(r) for r in rows],
    )
