"""
Application services module.
"""

from app.services.payments import (
    mark_bills,
    payments_for_period,
    toggle_payment,
    upsert_payment,
)

__all__ = ["mark_bills", "payments_for_period", "toggle_payment", "upsert_payment"]
