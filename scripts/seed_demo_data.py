#!/usr/bin/env python3
"""
Seed the database with a small demo portfolio.

Creates two rentals with their mortgage, tax, insurance and HOA bills,
one general bill, and a prospective acquisition.

Usage:
    python scripts/seed_demo_data.py
"""
import sys
import os
from decimal import Decimal

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.db.database import get_db_context, init_db
from app.db.models import Property, RecurringBill, PotentialProperty


def main():
    init_db()

    with get_db_context() as db:
        existing = db.query(Property).filter(Property.name == "Maple Duplex").first()
        if existing:
            print(f"Demo data already present (property ID: {existing.id})")
            return

        duplex = Property(
            name="Maple Duplex",
            address="412 Maple St",
            monthly_rent=Decimal("2400"),
            property_management_percent=Decimal("8"),
            extra_monthly_expenses=Decimal("50"),
            purchase_price=Decimal("285000"),
        )
        condo = Property(
            name="Harbor Condo",
            address="88 Harbor Way #5",
            monthly_rent=Decimal("1650"),
            property_management_percent=Decimal("10"),
            hoa_fee=Decimal("310"),
            is_paid_off=True,
            purchase_price=Decimal("199000"),
        )
        db.add_all([duplex, condo])
        db.flush()
        print(f"Created properties: {duplex.name} ({duplex.id}), {condo.name} ({condo.id})")

        bills = [
            RecurringBill(
                property_id=duplex.id,
                name="Maple mortgage",
                amount=Decimal("1245.18"),
                escrow_amount=Decimal("410.00"),
                frequency="monthly",
                category="mortgage",
            ),
            RecurringBill(
                property_id=condo.id,
                name="Harbor HOA",
                amount=Decimal("310"),
                frequency="monthly",
                category="hoa",
            ),
            RecurringBill(
                property_id=condo.id,
                name="Harbor property tax",
                amount=Decimal("1840"),
                frequency="semi-annual",
                category="taxes",
            ),
            RecurringBill(
                property_id=condo.id,
                name="Harbor insurance",
                amount=Decimal("960"),
                frequency="annual",
                due_month=3,
                category="insurance",
            ),
            RecurringBill(
                property_id=None,
                name="Bookkeeping software",
                amount=Decimal("30"),
                frequency="quarterly",
                category="other",
            ),
        ]
        db.add_all(bills)
        print(f"Created {len(bills)} bills")

        prospect = PotentialProperty(
            name="Elm Street Triplex",
            address="19 Elm St",
            purchase_price=Decimal("420000"),
            down_payment_percent=Decimal("25"),
            interest_rate=Decimal("6.875"),
            loan_term_years=30,
            estimated_monthly_rent=Decimal("4100"),
            property_tax_annual=Decimal("5200"),
            insurance_annual=Decimal("1900"),
            maintenance_monthly=Decimal("250"),
        )
        db.add(prospect)
        print(f"Created potential property: {prospect.name}")

    print("\nDemo data created successfully!")


if __name__ == "__main__":
    main()
