"""
Tests for the cash flow calculation engine.
"""

import pytest
from dataclasses import dataclass
from decimal import Decimal

from app.calculations.aggregation import (
    RentalProperty,
    bill_outlay,
    bill_totals,
    is_month_fully_paid,
    monthly_totals,
    paid_lookup,
    portfolio_roi,
    property_annual_roi,
    property_monthly_net,
    yearly_totals,
)
from app.calculations.money import round_fields, round_money, to_decimal
from app.calculations.mortgage import calculate_payment, calculate_total_interest
from app.calculations.recurrence import (
    Bill,
    bills_due_in,
    is_bill_due,
    month_name,
    occurrences_in_year,
    repair_bill_name,
    repair_description,
    shift_month,
    sort_bills_for_display,
)
from app.calculations.roi import PurchaseInputs, evaluate_roi, rate_investment


@dataclass
class TrackingRow:
    bill_id: int
    is_paid: bool
    bill_type: str = "recurring_bill"


def D(value):
    return Decimal(str(value))


class TestBillRecurrence:
    """Test which bills fall due in a month."""

    def test_monthly_bill_due_every_month(self):
        bill = Bill(id=1, name="Mortgage", amount=D(1000))
        assert all(is_bill_due(bill, m, 2024) for m in range(1, 13))

    def test_annual_bill_due_only_in_its_month(self):
        bill = Bill(id=1, name="Insurance", amount=D(1200), frequency="annual", due_month=6)
        assert is_bill_due(bill, 6, 2024)
        assert not is_bill_due(bill, 5, 2024)
        assert occurrences_in_year(bill, 2024) == 1

    def test_annual_bill_without_due_month_never_due(self):
        bill = Bill(id=1, name="Insurance", amount=D(1200), frequency="annual")
        assert occurrences_in_year(bill, 2024) == 0

    def test_quarterly_bill_fixed_months(self):
        """Quarterly bills land in January, April, July and October."""
        bill = Bill(id=1, name="Pest control", amount=D(90), frequency="quarterly", due_month=3)
        assert not is_bill_due(bill, 3, 2024)
        assert is_bill_due(bill, 4, 2024)
        due = [m for m in range(1, 13) if is_bill_due(bill, m, 2024)]
        assert due == [1, 4, 7, 10]

    def test_semi_annual_bill_fixed_months(self):
        bill = Bill(id=1, name="Property tax", amount=D(1800), frequency="semi-annual")
        due = [m for m in range(1, 13) if is_bill_due(bill, m, 2024)]
        assert due == [1, 7]

    def test_one_time_bill_only_in_its_month_and_year(self):
        bill = Bill(
            id=1,
            name="March 2024 - Roof patch",
            amount=D(500),
            frequency="monthly",
            due_month=3,
            is_one_time=True,
            one_time_year=2024,
        )
        assert is_bill_due(bill, 3, 2024)
        assert not is_bill_due(bill, 3, 2025)
        assert not is_bill_due(bill, 4, 2024)

    def test_one_time_bill_missing_year_never_due(self):
        bill = Bill(id=1, name="Repair", amount=D(500), due_month=3, is_one_time=True)
        assert occurrences_in_year(bill, 2024) == 0

    def test_unknown_frequency_never_due(self):
        bill = Bill(id=1, name="Odd", amount=D(10), frequency="weekly")
        assert occurrences_in_year(bill, 2024) == 0

    def test_invalid_month_raises(self):
        bill = Bill(id=1, name="Mortgage", amount=D(1000))
        with pytest.raises(ValueError):
            is_bill_due(bill, 13, 2024)
        with pytest.raises(ValueError):
            bills_due_in([bill], 0, 2024)

    def test_bills_due_in_filters(self):
        bills = [
            Bill(id=1, name="Mortgage", amount=D(1000)),
            Bill(id=2, name="Insurance", amount=D(1200), frequency="annual", due_month=6),
            Bill(id=3, name="Pest control", amount=D(90), frequency="quarterly"),
        ]
        assert [b.id for b in bills_due_in(bills, 1, 2024)] == [1, 3]
        assert [b.id for b in bills_due_in(bills, 6, 2024)] == [1, 2]
        assert bills_due_in([], 6, 2024) == []

    def test_sort_for_display(self):
        bills = [
            Bill(id=1, name="Zeta", amount=D(1)),
            Bill(id=2, name="Beta", amount=D(1), frequency="annual", due_month=9),
            Bill(id=3, name="Alpha", amount=D(1), frequency="annual", due_month=2),
            Bill(id=4, name="Alpha", amount=D(1)),
        ]
        assert [b.id for b in sort_bills_for_display(bills)] == [3, 2, 4, 1]


class TestMonthNavigation:
    """Test month names, navigation and repair naming."""

    def test_month_name(self):
        assert month_name(1) == "January"
        assert month_name(12) == "December"

    def test_shift_month_wraps_years(self):
        assert shift_month(12, 2024, 1) == (1, 2025)
        assert shift_month(1, 2024, -1) == (12, 2023)
        assert shift_month(5, 2024, 0) == (5, 2024)
        assert shift_month(11, 2024, 14) == (1, 2026)

    def test_shift_month_at_calendar_limits(self):
        assert shift_month(1, 1, -1) == (12, 0)
        assert shift_month(12, 9999, 1) == (1, 10000)

    def test_repair_name_round_trip(self):
        name = repair_bill_name("Roof patch", 3, 2024)
        assert name == "March 2024 - Roof patch"
        assert repair_description(name) == "Roof patch"

    def test_repair_description_plain_name(self):
        assert repair_description("Water heater") == "Water heater"


class TestMoney:
    """Test Decimal conversion helpers."""

    def test_to_decimal_float_goes_through_str(self):
        assert to_decimal(0.1) == Decimal("0.1")

    def test_to_decimal_defaults(self):
        assert to_decimal(None) == Decimal("0")
        assert to_decimal("") == Decimal("0")

    def test_round_money_half_up(self):
        assert round_money(Decimal("2.345")) == Decimal("2.35")
        assert round_money(Decimal("-2.345")) == Decimal("-2.35")

    def test_round_fields(self):
        totals = monthly_totals(
            [RentalProperty(id=1, name="Flat", monthly_rent=D("1000.005"))], []
        )
        data = round_fields(totals, exclude=("total_bills",))
        assert data["total_income"] == Decimal("1000.01")
        assert data["total_management"] == Decimal("100.00")
        assert "total_bills" not in data


# ============================================================================
# Aggregation
# ============================================================================

@pytest.fixture
def properties():
    return [
        RentalProperty(
            id=1,
            name="Maple Duplex",
            monthly_rent=D(2000),
            property_management_percent=D(10),
            extra_monthly_expenses=D(50),
            purchase_price=D(200000),
        ),
        RentalProperty(
            id=2,
            name="Harbor Condo",
            monthly_rent=D(1000),
            property_management_percent=D(8),
        ),
    ]


@pytest.fixture
def bills():
    return [
        Bill(
            id=1,
            name="Mortgage",
            amount=D(1000),
            escrow_amount=D(200),
            category="mortgage",
            property_id=1,
        ),
        Bill(
            id=2,
            name="Property tax",
            amount=D(1200),
            frequency="semi-annual",
            category="taxes",
            property_id=1,
        ),
        Bill(
            id=3,
            name="March 2024 - Roof patch",
            amount=D(500),
            frequency="annual",
            due_month=3,
            category="repairs",
            is_one_time=True,
            one_time_year=2024,
            property_id=1,
        ),
        Bill(id=4, name="Condo HOA", amount=D(999), category="hoa", property_id=2),
        Bill(id=5, name="Software", amount=D(30), frequency="quarterly"),
    ]


class TestMonthlyTotals:
    """Test single-month roll-up."""

    def test_monthly_totals(self, properties):
        due = [
            Bill(id=1, name="Mortgage", amount=D(1200), escrow_amount=D(300)),
            Bill(id=2, name="Utilities", amount=D(100)),
        ]
        totals = monthly_totals(properties, due)

        assert totals.total_income == D(3000)
        # 200 + 50 extra, plus 80
        assert totals.total_management == D(330)
        assert totals.total_bills == D(1600)
        assert totals.net_income == D(1070)

    def test_monthly_totals_empty(self):
        totals = monthly_totals([], [])
        assert totals.total_income == 0
        assert totals.total_management == 0
        assert totals.total_bills == 0
        assert totals.net_income == 0

    def test_net_identity(self, properties, bills):
        totals = monthly_totals(properties, bills_due_in(bills, 7, 2024))
        assert totals.net_income == (
            totals.total_income - totals.total_management - totals.total_bills
        )

    def test_bill_outlay_includes_escrow(self):
        assert bill_outlay(Bill(id=1, name="Mortgage", amount=D(1000), escrow_amount=D(250))) == D(1250)

    def test_property_monthly_net(self):
        prop = RentalProperty(
            id=1, name="Condo", monthly_rent=D(1650), property_management_percent=D(10), hoa_fee=D(310)
        )
        assert property_monthly_net(prop) == D(1175)


class TestYearlyTotals:
    """Test the twelve-month view."""

    def test_months_and_aggregate(self, properties, bills):
        summary = yearly_totals(properties, bills, 2024)

        assert len(summary.months) == 12
        assert [m.month for m in summary.months] == list(range(1, 13))
        assert summary.months[0].month_name == "January"

        assert summary.income == sum(m.income for m in summary.months)
        assert summary.management == sum(m.management for m in summary.months)
        assert summary.bills == sum(m.bills for m in summary.months)
        assert summary.net == sum(m.net_cash_flow for m in summary.months)
        assert summary.average_monthly_net == summary.net / 12

    def test_bill_placement(self, properties, bills):
        summary = yearly_totals(properties, bills, 2024)
        by_month = {m.month: m.bills for m in summary.months}

        # mortgage 1200 + HOA 999 every month
        assert by_month[2] == D(2199)
        # plus semi-annual tax and quarterly software
        assert by_month[1] == D(2199) + D(1200) + D(30)
        # plus the repair, only in March 2024
        assert by_month[3] == D(2199) + D(500)

    def test_one_time_bill_excluded_in_other_years(self, properties, bills):
        with_repair = yearly_totals(properties, bills, 2024)
        without_repair = yearly_totals(properties, bills, 2025)
        assert with_repair.bills - without_repair.bills == D(500)

    def test_empty_year(self):
        summary = yearly_totals([], [], 2024)
        assert summary.net == 0
        assert summary.average_monthly_net == 0


class TestBillTotals:
    """Test paid/unpaid split for a month."""

    def test_paid_and_unpaid(self, bills):
        due = bills_due_in(bills, 1, 2024)
        rows = [
            TrackingRow(bill_id=1, is_paid=True),
            TrackingRow(bill_id=2, is_paid=False),
            TrackingRow(bill_id=5, is_paid=True, bill_type="other_bill"),
        ]
        totals = bill_totals(due, paid_lookup(rows))

        assert totals.count == 4
        assert totals.paid_count == 1
        assert totals.paid == D(1200)
        assert totals.total == D(1200) + D(1200) + D(999) + D(30)
        assert totals.paid + totals.unpaid == totals.total

    def test_fully_paid(self, bills):
        due = bills_due_in(bills, 2, 2024)
        rows = [TrackingRow(bill_id=b.id, is_paid=True) for b in due]
        assert is_month_fully_paid(due, paid_lookup(rows))

        rows[0].is_paid = False
        assert not is_month_fully_paid(due, paid_lookup(rows))

    def test_no_bills_is_not_fully_paid(self):
        assert not is_month_fully_paid([], paid_lookup([]))
        totals = bill_totals([], paid_lookup([]))
        assert totals.count == 0
        assert totals.total == 0


class TestPropertyROI:
    """Test per-property annual ROI."""

    def test_annual_roi(self, properties, bills):
        result = property_annual_roi(properties[0], bills, 2024)

        assert result.annual_income == D(24000)
        assert result.annual_management == D(3000)
        # mortgage 14400, tax 2400, repair 500
        assert result.annual_bills == D(17300)
        assert result.annual_mortgage == D(12000)
        assert result.annual_net == D(3700)
        assert result.annual_net_without_mortgage == D(15700)
        assert result.roi == D("1.85")
        assert result.roi_without_mortgage == D("7.85")
        assert result.bill_count == 3

    def test_only_own_bills_counted(self, properties, bills):
        result = property_annual_roi(properties[1], bills, 2024)
        assert result.annual_bills == D(999) * 12
        assert [b["bill_id"] for b in result.bills] == [4]

    def test_one_time_bill_outside_year(self, properties, bills):
        result = property_annual_roi(properties[0], bills, 2025)
        assert result.annual_bills == D(16800)
        assert result.bill_count == 2

    def test_zero_purchase_price(self, properties, bills):
        result = property_annual_roi(properties[1], bills, 2024)
        assert result.purchase_price == 0
        assert result.roi == 0
        assert result.roi_without_mortgage == 0

    def test_portfolio(self, properties, bills):
        results = portfolio_roi(properties, bills, 2024)
        assert [r.property_id for r in results] == [1, 2]


# ============================================================================
# Mortgage and acquisition analysis
# ============================================================================

class TestMortgage:
    """Test fixed-rate loan payments."""

    def test_standard_payment(self):
        # $200k at 7% for 30 years
        payment = calculate_payment(200000, 7, 30)
        assert abs(payment - D("1330.60")) < D("0.01")

    def test_zero_rate(self):
        assert calculate_payment(200000, 0, 30) == D(200000) / 360

    def test_empty_loan_or_term(self):
        assert calculate_payment(0, 7, 30) == 0
        assert calculate_payment(200000, 7, 0) == 0

    def test_total_interest(self):
        interest = calculate_total_interest(200000, 7, 30)
        assert interest == calculate_payment(200000, 7, 30) * 360 - 200000
        assert calculate_total_interest(200000, 0, 30) == 0
        assert calculate_total_interest(200000, 7, 0) == 0


class TestROIAnalysis:
    """Test acquisition analysis."""

    def test_cash_purchase(self):
        result = evaluate_roi(
            PurchaseInputs(
                purchase_price=D(300000),
                estimated_monthly_rent=D(2500),
                is_cash_purchase=True,
                property_tax_annual=D(3600),
                insurance_annual=D(1200),
                property_management_percent=D(10),
                maintenance_monthly=D(100),
            )
        )

        assert result.monthly_mortgage == 0
        assert result.loan_amount == 0
        assert result.closing_costs == 0
        assert result.down_payment == D(300000)
        assert result.total_investment == D(300000)
        assert result.property_management_fee == D(250)
        assert result.total_monthly_expenses == D(750)
        assert result.monthly_cash_flow == D(1750)
        assert result.annual_cash_flow == D(21000)

        expected_noi = D(2500) * 12 - (D(3600) + D(1200) + D(250) * 12 + D(100) * 12)
        assert result.annual_net_income == expected_noi
        assert result.cap_rate == expected_noi / D(300000) * 100
        assert result.cap_rate == D(7)
        assert result.rating == "good"
        assert result.rating_color == "blue"

    def test_financed_purchase(self):
        result = evaluate_roi(
            PurchaseInputs(
                purchase_price=D(100000),
                estimated_monthly_rent=D(1500),
                down_payment_percent=D(20),
                interest_rate=D(0),
                loan_term_years=30,
                property_management_percent=D(0),
            )
        )

        assert result.down_payment == D(20000)
        assert result.loan_amount == D(80000)
        assert result.closing_costs == D(3000)
        assert result.total_investment == D(23000)
        assert result.monthly_mortgage == D(80000) / 360
        assert result.cash_on_cash_return == result.annual_cash_flow / D(23000) * 100
        assert result.rating == "excellent"
        assert result.rating_color == "green"

    def test_financed_negative_cash_flow(self):
        result = evaluate_roi(
            PurchaseInputs(
                purchase_price=D(100000),
                estimated_monthly_rent=D(0),
                interest_rate=D(0),
                property_management_percent=D(0),
            )
        )
        assert result.monthly_cash_flow < -100
        assert result.rating == "poor"
        assert result.rating_color == "red"

    def test_zero_purchase_price(self):
        result = evaluate_roi(
            PurchaseInputs(
                purchase_price=D(0),
                estimated_monthly_rent=D(0),
                is_cash_purchase=True,
            )
        )
        assert result.total_investment == 0
        assert result.cap_rate == 0
        assert result.cash_on_cash_return == 0
        assert result.rating == "fair"

    @pytest.mark.parametrize(
        "price,rent,other,expected",
        [
            (100000, 1200, 0, "excellent"),
            (200000, 1000, 0, "good"),
            (400000, 1000, 0, "fair"),
            (400000, 1000, 1200, "poor"),
        ],
    )
    def test_cash_rating_ladder(self, price, rent, other, expected):
        result = evaluate_roi(
            PurchaseInputs(
                purchase_price=D(price),
                estimated_monthly_rent=D(rent),
                is_cash_purchase=True,
                property_management_percent=D(0),
                other_expenses_monthly=D(other),
            )
        )
        assert result.rating == expected


class TestRatingLadder:
    """Test tier boundaries."""

    @pytest.mark.parametrize(
        "cap_rate,cash_flow,expected",
        [
            ("8", "200.01", "excellent"),
            ("8", "200", "good"),
            ("7.99", "500", "good"),
            ("6", "0", "fair"),
            ("4", "-1000", "fair"),
            ("3.99", "-99", "fair"),
            ("3.99", "-100", "poor"),
        ],
    )
    def test_cash(self, cap_rate, cash_flow, expected):
        assert rate_investment(True, D(cap_rate), D(99), D(cash_flow)) == expected

    @pytest.mark.parametrize(
        "coc,cash_flow,expected",
        [
            ("10", "200.01", "excellent"),
            ("10", "200", "good"),
            ("6", "0.01", "good"),
            ("6", "0", "fair"),
            ("3", "-500", "fair"),
            ("-5", "-99", "fair"),
            ("2.99", "-100", "poor"),
        ],
    )
    def test_financed(self, coc, cash_flow, expected):
        assert rate_investment(False, D(-99), D(coc), D(cash_flow)) == expected
