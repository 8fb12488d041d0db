"""
Bill Recurrence Resolution

Decides which bills are due in a given calendar month. Months are
1-indexed (January = 1) everywhere.
"""

import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

MONTHLY = "monthly"
QUARTERLY = "quarterly"
SEMI_ANNUAL = "semi-annual"
ANNUAL = "annual"

FREQUENCIES = (MONTHLY, QUARTERLY, SEMI_ANNUAL, ANNUAL)

# Quarterly and semi-annual bills fire on fixed calendar months,
# whatever the bill's own due_month says.
QUARTERLY_MONTHS = frozenset({1, 4, 7, 10})
SEMI_ANNUAL_MONTHS = frozenset({1, 7})

MONTH_NAMES = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]

_REPAIR_NAME = re.compile(r"^[A-Za-z]+ \d{4} - (.+)$")


@dataclass
class Bill:
    """
    In-memory bill record.

    ORM RecurringBill rows carry the same attributes and can be passed to
    every function here in place of this class.
    """

    id: int
    name: str
    amount: Decimal
    frequency: str = MONTHLY
    due_month: Optional[int] = None
    property_id: Optional[int] = None
    category: str = "other"
    is_one_time: bool = False
    one_time_year: Optional[int] = None
    escrow_amount: Decimal = Decimal("0")
    is_active: bool = True


def _check_month(month: int) -> None:
    if not 1 <= month <= 12:
        raise ValueError(f"month must be between 1 and 12, got {month}")


def is_bill_due(bill, month: int, year: int) -> bool:
    """
    Return True if ``bill`` falls due in ``month`` of ``year``.

    One-time bills match only their own month and year and never recur by
    frequency. The active flag is not consulted; inactive bills are filtered
    out by the store query.
    """
    _check_month(month)

    if bill.is_one_time:
        return bill.due_month == month and bill.one_time_year == year

    frequency = bill.frequency
    if frequency == MONTHLY:
        return True
    if frequency == ANNUAL:
        return bill.due_month == month
    if frequency == QUARTERLY:
        return month in QUARTERLY_MONTHS
    if frequency == SEMI_ANNUAL:
        return month in SEMI_ANNUAL_MONTHS
    return False


def bills_due_in(bills: Iterable, month: int, year: int) -> List:
    """Return the subset of ``bills`` due in ``month`` of ``year``."""
    _check_month(month)
    return [bill for bill in bills if is_bill_due(bill, month, year)]


def occurrences_in_year(bill, year: int) -> int:
    """Count the months of ``year`` in which ``bill`` is due."""
    return sum(1 for month in range(1, 13) if is_bill_due(bill, month, year))


def sort_bills_for_display(bills: Iterable) -> List:
    """Order by due month (bills without one last), then name."""
    return sorted(
        bills,
        key=lambda b: (b.due_month is None, b.due_month or 0, b.name or ""),
    )


def month_name(month: int) -> str:
    _check_month(month)
    return MONTH_NAMES[month - 1]


def shift_month(month: int, year: int, delta: int) -> Tuple[int, int]:
    """
    Move ``delta`` months forward (or back) from ``month``/``year``.

    Returns the new (month, year), wrapping across year boundaries.
    """
    _check_month(month)
    shifted_year, month_index = divmod(year * 12 + month - 1 + delta, 12)
    return month_index + 1, shifted_year


def repair_bill_name(description: str, month: int, year: int) -> str:
    """Name a one-time repair so it reads like "March 2024 - Roof patch"."""
    return f"{month_name(month)} {year} - {description}"


def repair_description(name: str) -> str:
    """Strip the "Month Year - " prefix added by repair_bill_name."""
    match = _REPAIR_NAME.match(name)
    return match.group(1) if match else name
