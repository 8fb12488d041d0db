"""
Recurring bill API endpoints.

Bills are listed with the name of the property they belong to (null for
general bills and for bills whose property has been deleted). Deleting a
bill deactivates it.
"""

import logging
from decimal import Decimal

from fastapi import APIRouter, HTTPException, Depends
from pydantic import BaseModel, Field, model_validator
from typing import Optional, List
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.calculations.recurrence import (
    repair_bill_name,
    repair_description,
    sort_bills_for_display,
)
from app.db.database import get_db
from app.db.models import BillFrequency, Property, RecurringBill

logger = logging.getLogger(__name__)

router = APIRouter()

REPAIR_CATEGORY = "repairs"


class RecurringBillCreate(BaseModel):
    """Schema for creating a bill."""

    property_id: Optional[int] = None
    name: str = Field(min_length=1)
    amount: Decimal
    frequency: BillFrequency = BillFrequency.monthly.value
    due_month: Optional[int] = Field(default=None, ge=1, le=12)
    category: str = "other"
    payment_link: str = ""
    notes: str = ""
    is_one_time: bool = False
    one_time_year: Optional[int] = Field(default=None, ge=1, le=9999)
    escrow_amount: Decimal = Field(default=Decimal("0"), ge=0)
    is_active: bool = True

    class Config:
        use_enum_values = True

    @model_validator(mode="after")
    def check_schedule(self):
        if self.is_one_time and (self.due_month is None or self.one_time_year is None):
            raise ValueError("one-time bills need due_month and one_time_year")
        if self.frequency == BillFrequency.annual.value and self.due_month is None:
            raise ValueError("annual bills need a due_month")
        return self


class RecurringBillUpdate(BaseModel):
    """Schema for updating a bill."""

    property_id: Optional[int] = None
    name: Optional[str] = Field(default=None, min_length=1)
    amount: Optional[Decimal] = None
    frequency: Optional[BillFrequency] = None
    due_month: Optional[int] = Field(default=None, ge=1, le=12)
    category: Optional[str] = None
    payment_link: Optional[str] = None
    notes: Optional[str] = None
    is_one_time: Optional[bool] = None
    one_time_year: Optional[int] = Field(default=None, ge=1, le=9999)
    escrow_amount: Optional[Decimal] = Field(default=None, ge=0)
    is_active: Optional[bool] = None

    class Config:
        use_enum_values = True


class RepairCreate(BaseModel):
    """A one-time repair charged to a single month."""

    property_id: Optional[int] = None
    description: str = Field(min_length=1)
    amount: Decimal
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=1, le=9999)
    notes: str = ""


class RecurringBillResponse(BaseModel):
    """Schema for bill response."""

    id: int
    property_id: Optional[int]
    property_name: Optional[str] = None
    name: str
    amount: Decimal
    frequency: str
    due_month: Optional[int]
    category: str
    payment_link: str
    notes: str
    is_one_time: bool
    one_time_year: Optional[int]
    escrow_amount: Decimal
    is_active: bool
    repair_description: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


# Columns that may be cleared to null on update
NULLABLE_FIELDS = {"property_id", "due_month", "one_time_year"}


def bill_to_response(
    bill: RecurringBill, property_name: Optional[str] = None
) -> RecurringBillResponse:
    """Convert RecurringBill model to response schema."""
    return RecurringBillResponse(
        id=bill.id,
        property_id=bill.property_id,
        property_name=property_name,
        name=bill.name,
        amount=bill.amount,
        frequency=bill.frequency,
        due_month=bill.due_month,
        category=bill.category,
        payment_link=bill.payment_link or "",
        notes=bill.notes or "",
        is_one_time=bill.is_one_time,
        one_time_year=bill.one_time_year,
        escrow_amount=bill.escrow_amount or Decimal("0"),
        is_active=bill.is_active,
        repair_description=repair_description(bill.name) if bill.is_one_time else None,
        created_at=bill.created_at.isoformat() if bill.created_at else None,
        updated_at=bill.updated_at.isoformat() if bill.updated_at else None,
    )


def query_active_bills(db: Session, property_id: Optional[int] = None):
    """Active bills joined to their property's name, in display order."""
    query = (
        db.query(RecurringBill, Property.name)
        .outerjoin(Property, RecurringBill.property_id == Property.id)
        .filter(RecurringBill.is_active == True)  # noqa: E712
    )
    if property_id is not None:
        query = query.filter(RecurringBill.property_id == property_id)

    rows = query.all()
    names = {bill.id: name for bill, name in rows}
    return [(bill, names[bill.id]) for bill in sort_bills_for_display(b for b, _ in rows)]


def load_active_bills(db: Session) -> List[RecurringBill]:
    """All active bills, for feeding the calculators."""
    return db.query(RecurringBill).filter(RecurringBill.is_active == True).all()  # noqa: E712


def get_bill_or_404(db: Session, bill_id: int) -> RecurringBill:
    bill = db.query(RecurringBill).filter(RecurringBill.id == bill_id).first()
    if not bill:
        raise HTTPException(status_code=404, detail="Bill not found")
    return bill


def lookup_property_name(db: Session, property_id: Optional[int]) -> Optional[str]:
    if property_id is None:
        return None
    prop = db.query(Property).filter(Property.id == property_id).first()
    return prop.name if prop else None


def save_bill(db: Session, bill: RecurringBill, action: str) -> RecurringBill:
    try:
        db.add(bill)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error trying to %s bill", action)
        raise HTTPException(status_code=500, detail=f"Failed to {action} bill")
    db.refresh(bill)
    return bill


@router.get("/", response_model=List[RecurringBillResponse])
async def list_bills(
    property_id: Optional[int] = None,
    db: Session = Depends(get_db),
):
    """List active bills, optionally for one property."""
    return [bill_to_response(bill, name) for bill, name in query_active_bills(db, property_id)]


@router.post("/", response_model=RecurringBillResponse, status_code=201)
async def create_bill(
    bill_data: RecurringBillCreate,
    db: Session = Depends(get_db),
):
    """Create a new bill."""
    bill = save_bill(db, RecurringBill(**bill_data.model_dump()), "create")
    logger.info("Created %s bill %s (%s)", bill.frequency, bill.id, bill.name)
    return bill_to_response(bill, lookup_property_name(db, bill.property_id))


@router.post("/repairs", response_model=RecurringBillResponse, status_code=201)
async def create_repair(
    repair: RepairCreate,
    db: Session = Depends(get_db),
):
    """Record a one-time repair that only counts in the given month."""
    bill = RecurringBill(
        property_id=repair.property_id,
        name=repair_bill_name(repair.description, repair.month, repair.year),
        amount=repair.amount,
        frequency=BillFrequency.annual.value,
        due_month=repair.month,
        category=REPAIR_CATEGORY,
        payment_link="",
        notes=repair.notes or "One-time repair",
        is_one_time=True,
        one_time_year=repair.year,
        is_active=True,
    )
    bill = save_bill(db, bill, "create")
    return bill_to_response(bill, lookup_property_name(db, bill.property_id))


@router.get("/{bill_id}", response_model=RecurringBillResponse)
async def get_bill(
    bill_id: int,
    db: Session = Depends(get_db),
):
    """Get a bill by ID."""
    bill = get_bill_or_404(db, bill_id)
    return bill_to_response(bill, lookup_property_name(db, bill.property_id))


@router.put("/{bill_id}", response_model=RecurringBillResponse)
async def update_bill(
    bill_id: int,
    bill_data: RecurringBillUpdate,
    db: Session = Depends(get_db),
):
    """Update a bill."""
    bill = get_bill_or_404(db, bill_id)

    update_data = bill_data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        if value is None and field not in NULLABLE_FIELDS:
            continue
        setattr(bill, field, value)

    if bill.is_one_time and (bill.due_month is None or bill.one_time_year is None):
        raise HTTPException(
            status_code=422, detail="one-time bills need due_month and one_time_year"
        )
    if bill.frequency == BillFrequency.annual.value and bill.due_month is None:
        raise HTTPException(status_code=422, detail="annual bills need a due_month")

    bill = save_bill(db, bill, "update")
    return bill_to_response(bill, lookup_property_name(db, bill.property_id))


@router.delete("/{bill_id}")
async def delete_bill(
    bill_id: int,
    db: Session = Depends(get_db),
):
    """Deactivate a bill so it drops out of listings and totals."""
    bill = get_bill_or_404(db, bill_id)
    bill.is_active = False
    save_bill(db, bill, "delete")
    return {"deleted": True, "id": bill_id}
