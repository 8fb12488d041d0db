"""
Cash Flow Aggregation

Rolls properties and due bills up into monthly and yearly cash-flow
summaries, bill payment status, and per-property annual ROI.

A bill's cash outlay is its amount plus any escrow bundled with it. That
rule holds for every total in this module. Mortgage principal and interest
(the amount of a "mortgage" category bill, excluding escrow) is tracked
separately so ROI can be shown with and without the loan.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Tuple

from app.calculations.money import (
    ZERO,
    TWELVE,
    percent_of,
    safe_ratio_percent,
    to_decimal,
)
from app.calculations.recurrence import (
    MONTH_NAMES,
    bills_due_in,
    occurrences_in_year,
)

MORTGAGE_CATEGORY = "mortgage"
RECURRING_BILL = "recurring_bill"


@dataclass
class RentalProperty:
    """In-memory property record; ORM Property rows work the same way."""

    id: int
    name: str
    monthly_rent: Decimal
    property_management_percent: Decimal = Decimal("10")
    extra_monthly_expenses: Decimal = Decimal("0")
    hoa_fee: Decimal = Decimal("0")
    purchase_price: Decimal = Decimal("0")
    is_paid_off: bool = False
    is_rental: bool = True


@dataclass
class MonthlyTotals:
    total_income: Decimal
    total_management: Decimal
    total_bills: Decimal
    net_income: Decimal


@dataclass
class MonthlyData:
    """One row of the yearly view."""

    month: int
    month_name: str
    income: Decimal
    management: Decimal
    bills: Decimal
    net_cash_flow: Decimal


@dataclass
class YearlySummary:
    year: int
    months: List[MonthlyData]
    income: Decimal
    management: Decimal
    bills: Decimal
    net: Decimal
    average_monthly_net: Decimal


@dataclass
class BillTotals:
    total: Decimal
    paid: Decimal
    unpaid: Decimal
    count: int
    paid_count: int


@dataclass
class PropertyROI:
    """Annual return breakdown for one owned property."""

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
    bill_count: int = 0
    bills: List[Dict] = field(default_factory=list)


def bill_outlay(bill) -> Decimal:
    """Cash leaving the account when ``bill`` is paid: amount plus escrow."""
    return to_decimal(bill.amount) + to_decimal(getattr(bill, "escrow_amount", None))


def monthly_management(prop) -> Decimal:
    """Management fee plus extra monthly expenses for one property."""
    return percent_of(prop.monthly_rent, prop.property_management_percent) + to_decimal(
        prop.extra_monthly_expenses
    )


def monthly_totals(properties: Iterable, bills_due: Iterable) -> MonthlyTotals:
    """
    Combine every property's rent and costs with the bills due this month.

    Args:
        properties: Property records
        bills_due: Bills already resolved for the month (see bills_due_in)

    Returns:
        MonthlyTotals; all zero for empty inputs
    """
    properties = list(properties)

    total_income = sum((to_decimal(p.monthly_rent) for p in properties), ZERO)
    total_management = sum((monthly_management(p) for p in properties), ZERO)
    total_bills = sum((bill_outlay(b) for b in bills_due), ZERO)

    return MonthlyTotals(
        total_income=total_income,
        total_management=total_management,
        total_bills=total_bills,
        net_income=total_income - total_management - total_bills,
    )


def yearly_totals(properties: Iterable, all_bills: Iterable, year: int) -> YearlySummary:
    """
    Build the twelve monthly rows of ``year`` and their aggregate.

    One-time bills only land in ``year`` when their one_time_year matches,
    which the resolver already enforces.
    """
    properties = list(properties)
    all_bills = list(all_bills)

    months = []
    for month in range(1, 13):
        totals = monthly_totals(properties, bills_due_in(all_bills, month, year))
        months.append(
            MonthlyData(
                month=month,
                month_name=MONTH_NAMES[month - 1],
                income=totals.total_income,
                management=totals.total_management,
                bills=totals.total_bills,
                net_cash_flow=totals.net_income,
            )
        )

    net = sum((m.net_cash_flow for m in months), ZERO)

    return YearlySummary(
        year=year,
        months=months,
        income=sum((m.income for m in months), ZERO),
        management=sum((m.management for m in months), ZERO),
        bills=sum((m.bills for m in months), ZERO),
        net=net,
        average_monthly_net=net / TWELVE,
    )


def paid_lookup(
    tracking_rows: Iterable, bill_type: str = RECURRING_BILL
) -> Callable[[object], bool]:
    """
    Build an "is this bill paid" predicate from one period's tracking rows.

    Rows are keyed on (bill_type, bill_id); callers pass only the rows of
    the month being viewed.
    """
    paid: Dict[Tuple[str, int], bool] = {
        (row.bill_type, row.bill_id): bool(row.is_paid) for row in tracking_rows
    }

    def is_paid(bill) -> bool:
        return paid.get((bill_type, bill.id), False)

    return is_paid


def bill_totals(bills_due: Iterable, is_paid: Callable[[object], bool]) -> BillTotals:
    """Split the month's bills into paid and unpaid sums."""
    bills_due = list(bills_due)
    paid_bills = [b for b in bills_due if is_paid(b)]

    total = sum((bill_outlay(b) for b in bills_due), ZERO)
    paid = sum((bill_outlay(b) for b in paid_bills), ZERO)

    return BillTotals(
        total=total,
        paid=paid,
        unpaid=total - paid,
        count=len(bills_due),
        paid_count=len(paid_bills),
    )


def is_month_fully_paid(bills_due: Iterable, is_paid: Callable[[object], bool]) -> bool:
    """True when at least one bill is due and every due bill is paid."""
    bills_due = list(bills_due)
    if not bills_due:
        return False
    return all(is_paid(b) for b in bills_due)


def property_monthly_net(prop) -> Decimal:
    """Rent less management, extra expenses and HOA for one property."""
    return (
        to_decimal(prop.monthly_rent)
        - monthly_management(prop)
        - to_decimal(prop.hoa_fee)
    )


def property_annual_roi(prop, bills: Iterable, year: int) -> PropertyROI:
    """
    Annual ROI for one property in ``year``.

    Only bills whose property_id matches are counted. Each bill is
    annualized by the number of months it falls due in ``year``, escrow
    included. ROI without mortgage removes only the P&I of mortgage bills;
    escrow for taxes and insurance is assumed to survive a payoff.
    """
    annual_income = to_decimal(prop.monthly_rent) * TWELVE
    annual_management = monthly_management(prop) * TWELVE

    annual_bills = ZERO
    annual_mortgage = ZERO
    breakdown = []
    for bill in bills:
        if bill.property_id != prop.id:
            continue
        occurrences = occurrences_in_year(bill, year)
        if occurrences == 0:
            continue
        annual_amount = bill_outlay(bill) * occurrences
        annual_bills += annual_amount
        if bill.category == MORTGAGE_CATEGORY:
            annual_mortgage += to_decimal(bill.amount) * occurrences
        breakdown.append(
            {
                "bill_id": bill.id,
                "name": bill.name,
                "category": bill.category,
                "occurrences": occurrences,
                "annual_amount": annual_amount,
            }
        )

    annual_net = annual_income - annual_management - annual_bills
    annual_net_without_mortgage = annual_net + annual_mortgage
    purchase_price = to_decimal(prop.purchase_price)

    return PropertyROI(
        property_id=prop.id,
        name=prop.name,
        year=year,
        annual_income=annual_income,
        annual_management=annual_management,
        annual_bills=annual_bills,
        annual_mortgage=annual_mortgage,
        annual_net=annual_net,
        annual_net_without_mortgage=annual_net_without_mortgage,
        purchase_price=purchase_price,
        roi=safe_ratio_percent(annual_net, purchase_price),
        roi_without_mortgage=safe_ratio_percent(annual_net_without_mortgage, purchase_price),
        bill_count=len(breakdown),
        bills=breakdown,
    )


def portfolio_roi(properties: Iterable, bills: Iterable, year: int) -> List[PropertyROI]:
    """Per-property annual ROI for every property."""
    bills = list(bills)
    return [property_annual_roi(p, bills, year) for p in properties]
