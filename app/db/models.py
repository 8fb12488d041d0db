"""
SQLAlchemy ORM models for the rental cash flow tracker.
"""

from datetime import datetime
from sqlalchemy import (
    Column,
    String,
    Numeric,
    Integer,
    Boolean,
    Date,
    DateTime,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base
import enum


class BillFrequency(str, enum.Enum):
    """How often a recurring bill comes due."""
    monthly = "monthly"
    quarterly = "quarterly"
    semi_annual = "semi-annual"
    annual = "annual"


class PotentialPropertyStatus(str, enum.Enum):
    """Pipeline status of a prospective acquisition."""
    analyzing = "analyzing"
    interested = "interested"
    offer_made = "offer_made"
    passed = "passed"
    purchased = "purchased"


RECURRING_BILL = "recurring_bill"

Base = declarative_base()

# Money columns: up to 10 billion with cents
Money = Numeric(12, 2)
# Percentages such as 6.875
Percent = Numeric(7, 4)


class TimestampMixin:
    """Server-assigned timestamps shared by every table."""

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )


class Property(TimestampMixin, Base):
    """A property in the owned portfolio."""

    __tablename__ = "properties"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    address = Column(String(500), default="", nullable=False)

    # Income
    monthly_rent = Column(Money, nullable=False)

    # Operating costs
    property_management_percent = Column(Percent, default=10, nullable=False)
    extra_monthly_expenses = Column(Money, default=0, nullable=False)
    hoa_fee = Column(Money, default=0, nullable=False)

    # Status
    is_paid_off = Column(Boolean, default=False, nullable=False)
    is_rental = Column(Boolean, default=True, nullable=False)

    purchase_price = Column(Money, default=0, nullable=False)
    notes = Column(Text, default="", nullable=False)


class RecurringBill(TimestampMixin, Base):
    """A recurring bill rule, or a one-time expense when is_one_time is set."""

    __tablename__ = "recurring_bills"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # Null means a general bill. Not a foreign key: bills outlive a deleted property.
    property_id = Column(Integer, nullable=True, index=True)

    name = Column(String(255), nullable=False)
    amount = Column(Money, nullable=False)
    frequency = Column(String(20), default=BillFrequency.monthly.value, nullable=False)
    due_month = Column(Integer, nullable=True)  # 1-12
    category = Column(String(50), default="other", nullable=False)
    payment_link = Column(String(1000), default="", nullable=False)
    notes = Column(Text, default="", nullable=False)

    # One-time expenses (repairs) only apply to due_month of one_time_year
    is_one_time = Column(Boolean, default=False, nullable=False)
    one_time_year = Column(Integer, nullable=True)

    # Taxes/insurance impounds bundled with a mortgage payment
    escrow_amount = Column(Money, default=0, nullable=False)

    is_active = Column(Boolean, default=True, nullable=False)


class PaymentTracking(TimestampMixin, Base):
    """Paid/unpaid status of one bill for one calendar month."""

    __tablename__ = "payment_tracking"
    __table_args__ = (
        UniqueConstraint(
            "bill_type",
            "bill_id",
            "payment_month",
            "payment_year",
            name="uq_payment_tracking_period",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    bill_type = Column(String(50), default=RECURRING_BILL, nullable=False)
    bill_id = Column(Integer, nullable=False, index=True)
    property_id = Column(Integer, nullable=True)
    payment_month = Column(Integer, nullable=False)  # 1-12
    payment_year = Column(Integer, nullable=False)
    is_paid = Column(Boolean, default=False, nullable=False)
    paid_date = Column(Date, nullable=True)
    amount_paid = Column(Money, nullable=True)
    notes = Column(Text, default="", nullable=False)


class PotentialProperty(TimestampMixin, Base):
    """A prospective acquisition under ROI analysis."""

    __tablename__ = "potential_properties"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    address = Column(String(500), default="", nullable=False)

    # Purchase and financing
    purchase_price = Column(Money, nullable=False)
    is_cash_purchase = Column(Boolean, default=False, nullable=False)
    down_payment_percent = Column(Percent, default=20, nullable=False)
    interest_rate = Column(Percent, default=7, nullable=False)
    loan_term_years = Column(Integer, default=30, nullable=False)

    # Income
    estimated_monthly_rent = Column(Money, nullable=False)

    # Expenses
    property_tax_annual = Column(Money, default=0, nullable=False)
    insurance_annual = Column(Money, default=0, nullable=False)
    hoa_monthly = Column(Money, default=0, nullable=False)
    property_management_percent = Column(Percent, default=10, nullable=False)
    maintenance_monthly = Column(Money, default=0, nullable=False)
    other_expenses_monthly = Column(Money, default=0, nullable=False)

    notes = Column(Text, default="", nullable=False)
    status = Column(
        String(20), default=PotentialPropertyStatus.analyzing.value, nullable=False
    )
