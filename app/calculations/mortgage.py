"""
Mortgage Payment Calculations

Fixed-rate loan payment, matching Excel's PMT() with the sign flipped.
Rates are whole-number annual percentages (7 means 7%).
"""

from decimal import Decimal

from app.calculations.money import HUNDRED, TWELVE, ZERO, Number, to_decimal


def calculate_payment(principal: Number, annual_rate_percent: Number, years: int) -> Decimal:
    """
    Calculate the monthly payment on a fixed-rate loan.

    Args:
        principal: Loan principal amount
        annual_rate_percent: Annual interest rate in percent (e.g., 7 for 7%)
        years: Loan term in years

    Returns:
        Monthly payment amount (positive number), 0 for an empty loan or term
    """
    principal = to_decimal(principal)
    num_payments = int(years or 0) * 12

    if principal <= 0:
        return ZERO
    if num_payments <= 0:
        return ZERO

    monthly_rate = to_decimal(annual_rate_percent) / HUNDRED / TWELVE

    if monthly_rate == 0:
        return principal / num_payments

    growth = (1 + monthly_rate) ** num_payments
    return principal * monthly_rate * growth / (growth - 1)


def calculate_total_interest(principal: Number, annual_rate_percent: Number, years: int) -> Decimal:
    """Interest paid over the full term if the loan runs to maturity."""
    payment = calculate_payment(principal, annual_rate_percent, years)
    if payment == 0:
        return ZERO
    return payment * int(years) * 12 - to_decimal(principal)
