"""
Cash flow calculation API endpoints.

The monthly and yearly endpoints load the current properties, active bills
and payment rows, then hand them to the calculation engine. The mortgage
and ROI endpoints work on submitted inputs alone.
"""

from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from typing import List, Optional
from sqlalchemy.orm import Session

from app.api.potential_properties import PurchaseAssumptions, ROIResponse, roi_to_response
from app.api.recurring_bills import (
    RecurringBillResponse,
    bill_to_response,
    query_active_bills,
)
from app.calculations import aggregation, mortgage, roi
from app.calculations.money import round_fields, round_money
from app.calculations.recurrence import bills_due_in, month_name, shift_month
from app.db.database import get_db
from app.db.models import Property
from app.services.payments import payments_for_period

router = APIRouter()


class Period(BaseModel):
    month: int
    year: int
    month_name: str


class MonthlyTotalsResponse(BaseModel):
    total_income: Decimal
    total_management: Decimal
    total_bills: Decimal
    net_income: Decimal


class BillTotalsResponse(BaseModel):
    total: Decimal
    paid: Decimal
    unpaid: Decimal
    count: int
    paid_count: int


class DueBill(RecurringBillResponse):
    """A bill due this month with its payment status."""

    is_paid: bool


class PropertyNet(BaseModel):
    property_id: int
    name: str
    monthly_rent: Decimal
    management: Decimal
    net: Decimal


class MonthlySummaryResponse(BaseModel):
    period: Period
    previous: Period
    next: Period
    totals: MonthlyTotalsResponse
    bill_totals: BillTotalsResponse
    is_fully_paid: bool
    bills: List[DueBill]
    properties: List[PropertyNet]


class MonthlyDataResponse(BaseModel):
    month: int
    month_name: str
    income: Decimal
    management: Decimal
    bills: Decimal
    net_cash_flow: Decimal


class PropertyROIResponse(BaseModel):
    property_id: int
    name: str
    year: int
    annual_income: Decimal
    annual_management: Decimal
    annual_bills: Decimal
    annual_mortgage: Decimal
    annual_net: Decimal
    annual_net_without_mortgage: Decimal
    purchase_price: Decimal
    roi: Decimal
    roi_without_mortgage: Decimal
    bill_count: int


class YearlySummaryResponse(BaseModel):
    year: int
    months: List[MonthlyDataResponse]
    income: Decimal
    management: Decimal
    bills: Decimal
    net: Decimal
    average_monthly_net: Decimal
    properties: List[PropertyROIResponse]


class MortgageInput(BaseModel):
    """Input for mortgage payment calculation."""

    principal: Decimal = Field(ge=0)
    annual_rate: Decimal = Field(ge=0, le=100)  # percent, 7 means 7%
    loan_term_years: int = Field(ge=0)


class MortgageResponse(BaseModel):
    monthly_payment: Decimal
    total_interest: Decimal
    total_paid: Decimal


def _period(month: int, year: int) -> Period:
    return Period(month=month, year=year, month_name=month_name(month))


def _current_month() -> int:
    return date.today().month


def _current_year() -> int:
    return date.today().year


@router.get("/monthly", response_model=MonthlySummaryResponse)
async def monthly_summary(
    month: Optional[int] = Query(default=None, ge=1, le=12),
    year: Optional[int] = Query(default=None, ge=1, le=9999),
    db: Session = Depends(get_db),
):
    """Bills due, payment status and cash flow for one month (default: this month)."""
    month = month or _current_month()
    year = year or _current_year()

    properties = db.query(Property).all()
    bill_rows = query_active_bills(db)
    names = {bill.id: name for bill, name in bill_rows}

    due = bills_due_in([bill for bill, _ in bill_rows], month, year)
    is_paid = aggregation.paid_lookup(payments_for_period(db, month, year))

    totals = aggregation.monthly_totals(properties, due)
    bill_totals = aggregation.bill_totals(due, is_paid)

    previous_month, previous_year = shift_month(month, year, -1)
    next_month, next_year = shift_month(month, year, 1)

    return MonthlySummaryResponse(
        period=_period(month, year),
        previous=_period(previous_month, previous_year),
        next=_period(next_month, next_year),
        totals=MonthlyTotalsResponse(**round_fields(totals)),
        bill_totals=BillTotalsResponse(**round_fields(bill_totals)),
        is_fully_paid=aggregation.is_month_fully_paid(due, is_paid),
        bills=[
            DueBill(
                **bill_to_response(bill, names[bill.id]).model_dump(),
                is_paid=is_paid(bill),
            )
            for bill in due
        ],
        properties=[
            PropertyNet(
                property_id=p.id,
                name=p.name,
                monthly_rent=round_money(p.monthly_rent),
                management=round_money(aggregation.monthly_management(p)),
                net=round_money(aggregation.property_monthly_net(p)),
            )
            for p in properties
        ],
    )


@router.get("/yearly", response_model=YearlySummaryResponse)
async def yearly_summary(
    year: Optional[int] = Query(default=None, ge=1, le=9999),
    db: Session = Depends(get_db),
):
    """Twelve months of cash flow plus per-property ROI for one year."""
    year = year or _current_year()

    properties = db.query(Property).all()
    bills = [bill for bill, _ in query_active_bills(db)]

    summary = aggregation.yearly_totals(properties, bills, year)
    property_rois = aggregation.portfolio_roi(properties, bills, year)

    return YearlySummaryResponse(
        year=summary.year,
        months=[MonthlyDataResponse(**round_fields(m)) for m in summary.months],
        income=round_money(summary.income),
        management=round_money(summary.management),
        bills=round_money(summary.bills),
        net=round_money(summary.net),
        average_monthly_net=round_money(summary.average_monthly_net),
        properties=[PropertyROIResponse(**round_fields(r, exclude=("bills",))) for r in property_rois],
    )


@router.post("/mortgage", response_model=MortgageResponse)
async def calculate_mortgage(inputs: MortgageInput):
    """Monthly payment and lifetime interest for a fixed-rate loan."""
    payment = mortgage.calculate_payment(
        inputs.principal, inputs.annual_rate, inputs.loan_term_years
    )
    total_interest = mortgage.calculate_total_interest(
        inputs.principal, inputs.annual_rate, inputs.loan_term_years
    )
    return MortgageResponse(
        monthly_payment=round_money(payment),
        total_interest=round_money(total_interest),
        total_paid=round_money(inputs.principal + total_interest),
    )


@router.post("/roi", response_model=ROIResponse)
async def calculate_roi(inputs: PurchaseAssumptions):
    """ROI analysis for a deal that has not been saved."""
    return roi_to_response(roi.evaluate_roi(inputs))
