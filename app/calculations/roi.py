"""
Acquisition ROI Analysis

Evaluates a prospective purchase: financing, monthly cash flow,
cash-on-cash return, cap rate, and a four-tier rating.
"""

from dataclasses import dataclass
from decimal import Decimal

from app.calculations.money import (
    HUNDRED,
    TWELVE,
    ZERO,
    percent_of,
    safe_ratio_percent,
    to_decimal,
)
from app.calculations.mortgage import calculate_payment

# Financed purchases carry an estimated 3% in closing costs; cash purchases none
CLOSING_COST_PERCENT = Decimal("3")

EXCELLENT = "excellent"
GOOD = "good"
FAIR = "fair"
POOR = "poor"

RATING_COLORS = {
    EXCELLENT: "green",
    GOOD: "blue",
    FAIR: "orange",
    POOR: "red",
}

# (minimum return metric, minimum monthly cash flow) for excellent and good.
# Cash purchases are judged on cap rate, financed ones on cash-on-cash return.
CASH_THRESHOLDS = {
    EXCELLENT: (Decimal("8"), Decimal("200")),
    GOOD: (Decimal("6"), Decimal("0")),
    FAIR: (Decimal("4"), Decimal("-100")),
}
FINANCED_THRESHOLDS = {
    EXCELLENT: (Decimal("10"), Decimal("200")),
    GOOD: (Decimal("6"), Decimal("0")),
    FAIR: (Decimal("3"), Decimal("-100")),
}


@dataclass
class PurchaseInputs:
    """In-memory acquisition record; ORM PotentialProperty rows work the same way."""

    purchase_price: Decimal
    estimated_monthly_rent: Decimal
    is_cash_purchase: bool = False
    down_payment_percent: Decimal = Decimal("20")
    interest_rate: Decimal = Decimal("7")
    loan_term_years: int = 30
    property_tax_annual: Decimal = Decimal("0")
    insurance_annual: Decimal = Decimal("0")
    hoa_monthly: Decimal = Decimal("0")
    property_management_percent: Decimal = Decimal("10")
    maintenance_monthly: Decimal = Decimal("0")
    other_expenses_monthly: Decimal = Decimal("0")


@dataclass
class ROIResult:
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


def rate_investment(
    is_cash_purchase: bool,
    cap_rate: Decimal,
    cash_on_cash_return: Decimal,
    monthly_cash_flow: Decimal,
) -> str:
    """
    Rate a deal on the ladder that matches how it is paid for.

    Tiers are checked best first and the first match wins. Excellent and
    good need both the return and the cash flow; fair needs either.
    """
    if is_cash_purchase:
        metric, thresholds = to_decimal(cap_rate), CASH_THRESHOLDS
    else:
        metric, thresholds = to_decimal(cash_on_cash_return), FINANCED_THRESHOLDS
    cash_flow = to_decimal(monthly_cash_flow)

    for tier in (EXCELLENT, GOOD):
        min_return, min_cash_flow = thresholds[tier]
        if metric >= min_return and cash_flow > min_cash_flow:
            return tier

    min_return, min_cash_flow = thresholds[FAIR]
    if metric >= min_return or cash_flow > min_cash_flow:
        return FAIR

    return POOR


def evaluate_roi(prop) -> ROIResult:
    """
    Run the full acquisition analysis for ``prop``.

    Accepts a PotentialProperty row or PurchaseInputs. Zero purchase price
    or zero total investment yields a 0 cap rate / cash-on-cash return
    instead of dividing by zero.
    """
    purchase_price = to_decimal(prop.purchase_price)
    monthly_rent = to_decimal(prop.estimated_monthly_rent)
    property_tax_annual = to_decimal(prop.property_tax_annual)
    insurance_annual = to_decimal(prop.insurance_annual)
    hoa_monthly = to_decimal(prop.hoa_monthly)
    maintenance_monthly = to_decimal(prop.maintenance_monthly)
    other_expenses_monthly = to_decimal(prop.other_expenses_monthly)
    is_cash_purchase = bool(prop.is_cash_purchase)

    # === FINANCING ===
    if is_cash_purchase:
        down_payment = purchase_price
        loan_amount = ZERO
        monthly_mortgage = ZERO
        closing_costs = ZERO
    else:
        down_payment = percent_of(purchase_price, prop.down_payment_percent)
        loan_amount = purchase_price - down_payment
        monthly_mortgage = calculate_payment(
            loan_amount, prop.interest_rate, prop.loan_term_years
        )
        closing_costs = purchase_price * CLOSING_COST_PERCENT / HUNDRED

    # === MONTHLY EXPENSES ===
    monthly_property_tax = property_tax_annual / TWELVE
    monthly_insurance = insurance_annual / TWELVE
    management_fee = percent_of(monthly_rent, prop.property_management_percent)

    total_monthly_expenses = (
        monthly_mortgage
        + monthly_property_tax
        + monthly_insurance
        + hoa_monthly
        + management_fee
        + maintenance_monthly
        + other_expenses_monthly
    )

    # === RETURNS ===
    monthly_cash_flow = monthly_rent - total_monthly_expenses
    annual_cash_flow = monthly_cash_flow * TWELVE

    total_investment = down_payment + closing_costs
    cash_on_cash_return = safe_ratio_percent(annual_cash_flow, total_investment)

    # Cap rate ignores financing
    annual_net_income = monthly_rent * TWELVE - (
        property_tax_annual
        + insurance_annual
        + hoa_monthly * TWELVE
        + management_fee * TWELVE
        + maintenance_monthly * TWELVE
        + other_expenses_monthly * TWELVE
    )
    cap_rate = safe_ratio_percent(annual_net_income, purchase_price)

    rating = rate_investment(
        is_cash_purchase, cap_rate, cash_on_cash_return, monthly_cash_flow
    )

    return ROIResult(
        monthly_mortgage=monthly_mortgage,
        down_payment=down_payment,
        loan_amount=loan_amount,
        closing_costs=closing_costs,
        monthly_property_tax=monthly_property_tax,
        monthly_insurance=monthly_insurance,
        property_management_fee=management_fee,
        total_monthly_expenses=total_monthly_expenses,
        monthly_cash_flow=monthly_cash_flow,
        annual_cash_flow=annual_cash_flow,
        total_investment=total_investment,
        cash_on_cash_return=cash_on_cash_return,
        annual_net_income=annual_net_income,
        cap_rate=cap_rate,
        rating=rating,
        rating_color=RATING_COLORS[rating],
    )
