"""
Prospective acquisition API endpoints.

Each listed property carries its ROI analysis so the pipeline can be
compared at a glance.
"""

import logging
from decimal import Decimal

from fastapi import APIRouter, HTTPException, Depends
from pydantic import BaseModel, Field
from typing import Optional, List
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.calculations.money import round_fields
from app.calculations.roi import ROIResult, evaluate_roi
from app.config import get_settings
from app.db.database import get_db
from app.db.models import PotentialProperty, PotentialPropertyStatus

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter()


class PurchaseAssumptions(BaseModel):
    """Financing, income and expense inputs shared by storage and ad hoc analysis."""

    purchase_price: Decimal = Field(ge=0)
    is_cash_purchase: bool = False
    down_payment_percent: Decimal = Field(
        default=Decimal(str(settings.default_down_payment_percent)), ge=0, le=100
    )
    interest_rate: Decimal = Field(
        default=Decimal(str(settings.default_interest_rate)), ge=0, le=100
    )
    loan_term_years: int = Field(default=settings.default_loan_term_years, ge=0)
    estimated_monthly_rent: Decimal = Field(ge=0)
    property_tax_annual: Decimal = Field(default=Decimal("0"), ge=0)
    insurance_annual: Decimal = Field(default=Decimal("0"), ge=0)
    hoa_monthly: Decimal = Field(default=Decimal("0"), ge=0)
    property_management_percent: Decimal = Field(
        default=Decimal(str(settings.default_management_percent)), ge=0, le=100
    )
    maintenance_monthly: Decimal = Field(default=Decimal("0"), ge=0)
    other_expenses_monthly: Decimal = Field(default=Decimal("0"), ge=0)


class PotentialPropertyCreate(PurchaseAssumptions):
    """Schema for creating a potential property."""

    name: str = Field(min_length=1)
    address: str = ""
    notes: str = ""
    status: PotentialPropertyStatus = PotentialPropertyStatus.analyzing.value

    class Config:
        use_enum_values = True


class PotentialPropertyUpdate(BaseModel):
    """Schema for updating a potential property."""

    name: Optional[str] = Field(default=None, min_length=1)
    address: Optional[str] = None
    purchase_price: Optional[Decimal] = Field(default=None, ge=0)
    is_cash_purchase: Optional[bool] = None
    down_payment_percent: Optional[Decimal] = Field(default=None, ge=0, le=100)
    interest_rate: Optional[Decimal] = Field(default=None, ge=0, le=100)
    loan_term_years: Optional[int] = Field(default=None, ge=0)
    estimated_monthly_rent: Optional[Decimal] = Field(default=None, ge=0)
    property_tax_annual: Optional[Decimal] = Field(default=None, ge=0)
    insurance_annual: Optional[Decimal] = Field(default=None, ge=0)
    hoa_monthly: Optional[Decimal] = Field(default=None, ge=0)
    property_management_percent: Optional[Decimal] = Field(default=None, ge=0, le=100)
    maintenance_monthly: Optional[Decimal] = Field(default=None, ge=0)
    other_expenses_monthly: Optional[Decimal] = Field(default=None, ge=0)
    notes: Optional[str] = None
    status: Optional[PotentialPropertyStatus] = None

    class Config:
        use_enum_values = True


class ROIResponse(BaseModel):
    """ROI analysis, money and percentages rounded to cents."""

    monthly_mortgage: Decimal
    down_payment: Decimal
    loan_amount: Decimal
    closing_costs: Decimal
    monthly_property_tax: Decimal
    monthly_insurance: Decimal
    property_management_fee: Decimal
    total_monthly_expenses: Decimal
    monthly_cash_flow: Decimal
    annual_cash_flow: Decimal
    total_investment: Decimal
    cash_on_cash_return: Decimal
    annual_net_income: Decimal
    cap_rate: Decimal
    rating: str
    rating_color: str


class PotentialPropertyResponse(BaseModel):
    """Schema for potential property response."""

    id: int
    name: str
    address: str
    purchase_price: Decimal
    is_cash_purchase: bool
    down_payment_percent: Decimal
    interest_rate: Decimal
    loan_term_years: int
    estimated_monthly_rent: Decimal
    property_tax_annual: Decimal
    insurance_annual: Decimal
    hoa_monthly: Decimal
    property_management_percent: Decimal
    maintenance_monthly: Decimal
    other_expenses_monthly: Decimal
    notes: str
    status: str
    analysis: ROIResponse
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


def roi_to_response(result: ROIResult) -> ROIResponse:
    """Round every Decimal in ``result`` to cents."""
    return ROIResponse(**round_fields(result))


def potential_property_to_response(prop: PotentialProperty) -> PotentialPropertyResponse:
    """Convert PotentialProperty model to response schema."""
    return PotentialPropertyResponse(
        id=prop.id,
        name=prop.name,
        address=prop.address or "",
        purchase_price=prop.purchase_price,
        is_cash_purchase=prop.is_cash_purchase,
        down_payment_percent=prop.down_payment_percent,
        interest_rate=prop.interest_rate,
        loan_term_years=prop.loan_term_years,
        estimated_monthly_rent=prop.estimated_monthly_rent,
        property_tax_annual=prop.property_tax_annual,
        insurance_annual=prop.insurance_annual,
        hoa_monthly=prop.hoa_monthly,
        property_management_percent=prop.property_management_percent,
        maintenance_monthly=prop.maintenance_monthly,
        other_expenses_monthly=prop.other_expenses_monthly,
        notes=prop.notes or "",
        status=prop.status,
        analysis=roi_to_response(evaluate_roi(prop)),
        created_at=prop.created_at.isoformat() if prop.created_at else None,
        updated_at=prop.updated_at.isoformat() if prop.updated_at else None,
    )


def get_potential_property_or_404(db: Session, property_id: int) -> PotentialProperty:
    prop = db.query(PotentialProperty).filter(PotentialProperty.id == property_id).first()
    if not prop:
        raise HTTPException(status_code=404, detail="Property not found")
    return prop


def commit_or_500(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error trying to %s potential property", action)
        raise HTTPException(status_code=500, detail=f"Failed to {action} potential property")


@router.get("/", response_model=List[PotentialPropertyResponse])
async def list_potential_properties(db: Session = Depends(get_db)):
    """List all potential properties, newest first."""
    properties = (
        db.query(PotentialProperty)
        .order_by(PotentialProperty.created_at.desc(), PotentialProperty.id.desc())
        .all()
    )
    return [potential_property_to_response(p) for p in properties]


@router.post("/", response_model=PotentialPropertyResponse, status_code=201)
async def create_potential_property(
    property_data: PotentialPropertyCreate,
    db: Session = Depends(get_db),
):
    """Create a new potential property."""
    prop = PotentialProperty(**property_data.model_dump())
    db.add(prop)
    commit_or_500(db, "create")
    db.refresh(prop)
    return potential_property_to_response(prop)


@router.get("/{property_id}", response_model=PotentialPropertyResponse)
async def get_potential_property(
    property_id: int,
    db: Session = Depends(get_db),
):
    """Get a potential property by ID."""
    return potential_property_to_response(get_potential_property_or_404(db, property_id))


@router.get("/{property_id}/analysis", response_model=ROIResponse)
async def analyze_potential_property(
    property_id: int,
    db: Session = Depends(get_db),
):
    """Run the ROI analysis for a stored potential property."""
    return roi_to_response(evaluate_roi(get_potential_property_or_404(db, property_id)))


@router.put("/{property_id}", response_model=PotentialPropertyResponse)
async def update_potential_property(
    property_id: int,
    property_data: PotentialPropertyUpdate,
    db: Session = Depends(get_db),
):
    """Update a potential property."""
    prop = get_potential_property_or_404(db, property_id)

    update_data = property_data.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in update_data.items():
        setattr(prop, field, value)

    commit_or_500(db, "update")
    db.refresh(prop)
    return potential_property_to_response(prop)


@router.delete("/{property_id}")
async def delete_potential_property(
    property_id: int,
    db: Session = Depends(get_db),
):
    """Delete a potential property."""
    prop = get_potential_property_or_404(db, property_id)
    db.delete(prop)
    commit_or_500(db, "delete")
    return {"deleted": True, "id": property_id}
