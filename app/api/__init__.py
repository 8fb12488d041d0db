"""
API routes for the rental cash flow tracker.
"""

from fastapi import APIRouter

from app.api import (
    calculations,
    payment_tracking,
    potential_properties,
    properties,
    recurring_bills,
)

router = APIRouter()

# Include sub-routers
router.include_router(properties.router, prefix="/properties", tags=["properties"])
router.include_router(recurring_bills.router, prefix="/recurring-bills", tags=["bills"])
router.include_router(
    payment_tracking.router, prefix="/payment-tracking", tags=["payment tracking"]
)
router.include_router(
    potential_properties.router, prefix="/potential-properties", tags=["potential properties"]
)
router.include_router(calculations.router, prefix="/calculate", tags=["calculations"])
