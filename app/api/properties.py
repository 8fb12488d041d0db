"""
Property management API endpoints.
"""

import logging
from decimal import Decimal

from fastapi import APIRouter, HTTPException, Depends
from pydantic import BaseModel, Field
from typing import Optional, List
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_settings
from app.db.database import get_db
from app.db.models import Property

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter()


class PropertyCreate(BaseModel):
    """Schema for creating a property."""

    name: str = Field(min_length=1)
    address: str = ""
    monthly_rent: Decimal = Field(ge=0)
    property_management_percent: Decimal = Field(
        default=Decimal(str(settings.default_management_percent)), ge=0, le=100
    )
    extra_monthly_expenses: Decimal = Field(default=Decimal("0"), ge=0)
    hoa_fee: Decimal = Field(default=Decimal("0"), ge=0)
    is_paid_off: bool = False
    is_rental: bool = True
    purchase_price: Decimal = Field(default=Decimal("0"), ge=0)
    notes: str = ""


class PropertyUpdate(BaseModel):
    """Schema for updating a property."""

    name: Optional[str] = Field(default=None, min_length=1)
    address: Optional[str] = None
    monthly_rent: Optional[Decimal] = Field(default=None, ge=0)
    property_management_percent: Optional[Decimal] = Field(default=None, ge=0, le=100)
    extra_monthly_expenses: Optional[Decimal] = Field(default=None, ge=0)
    hoa_fee: Optional[Decimal] = Field(default=None, ge=0)
    is_paid_off: Optional[bool] = None
    is_rental: Optional[bool] = None
    purchase_price: Optional[Decimal] = Field(default=None, ge=0)
    notes: Optional[str] = None


class PropertyResponse(BaseModel):
    """Schema for property response."""

    id: int
    name: str
    address: str
    monthly_rent: Decimal
    property_management_percent: Decimal
    extra_monthly_expenses: Decimal
    hoa_fee: Decimal
    is_paid_off: bool
    is_rental: bool
    purchase_price: Decimal
    notes: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    class Config:
        from_attributes = True


def property_to_response(prop: Property) -> PropertyResponse:
    """Convert Property model to response schema."""
    return PropertyResponse(
        id=prop.id,
        name=prop.name,
        address=prop.address or "",
        monthly_rent=prop.monthly_rent,
        property_management_percent=prop.property_management_percent,
        extra_monthly_expenses=prop.extra_monthly_expenses or Decimal("0"),
        hoa_fee=prop.hoa_fee or Decimal("0"),
        is_paid_off=prop.is_paid_off,
        is_rental=prop.is_rental,
        purchase_price=prop.purchase_price or Decimal("0"),
        notes=prop.notes or "",
        created_at=prop.created_at.isoformat() if prop.created_at else None,
        updated_at=prop.updated_at.isoformat() if prop.updated_at else None,
    )


def get_property_or_404(db: Session, property_id: int) -> Property:
    db_property = db.query(Property).filter(Property.id == property_id).first()
    if not db_property:
        raise HTTPException(status_code=404, detail="Property not found")
    return db_property


@router.get("/", response_model=List[PropertyResponse])
async def list_properties(db: Session = Depends(get_db)):
    """List all properties, newest first."""
    properties = (
        db.query(Property).order_by(Property.created_at.desc(), Property.id.desc()).all()
    )
    return [property_to_response(p) for p in properties]


@router.post("/", response_model=PropertyResponse, status_code=201)
async def create_property(
    property_data: PropertyCreate,
    db: Session = Depends(get_db),
):
    """Create a new property."""
    db_property = Property(**property_data.model_dump())

    try:
        db.add(db_property)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error creating property")
        raise HTTPException(status_code=500, detail="Failed to create property")

    db.refresh(db_property)
    logger.info("Created property %s (%s)", db_property.id, db_property.name)
    return property_to_response(db_property)


@router.get("/{property_id}", response_model=PropertyResponse)
async def get_property(
    property_id: int,
    db: Session = Depends(get_db),
):
    """Get a property by ID."""
    return property_to_response(get_property_or_404(db, property_id))


@router.put("/{property_id}", response_model=PropertyResponse)
async def update_property(
    property_id: int,
    property_data: PropertyUpdate,
    db: Session = Depends(get_db),
):
    """Update a property."""
    db_property = get_property_or_404(db, property_id)

    # Update only provided fields
    update_data = property_data.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in update_data.items():
        setattr(db_property, field, value)

    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error updating property %s", property_id)
        raise HTTPException(status_code=500, detail="Failed to update property")

    db.refresh(db_property)
    return property_to_response(db_property)


@router.delete("/{property_id}")
async def delete_property(
    property_id: int,
    db: Session = Depends(get_db),
):
    """
    Delete a property.

    Bills and payment rows that reference it are left in place.
    """
    db_property = get_property_or_404(db, property_id)

    try:
        db.delete(db_property)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error deleting property %s", property_id)
        raise HTTPException(status_code=500, detail="Failed to delete property")

    return {"deleted": True, "id": property_id}
