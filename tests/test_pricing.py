"""
Unit tests for the pricing service.

Tests:
- Line item total calculation (qty × unit_price)
- Cost estimate rollup totals
- Prorated rental pricing across calendar months
- Amount and currency formatting
"""

import pytest
from datetime import date, datetime
from decimal import Decimal
from boohk.services.pricing import (
    calculate_line_item_total,
    calculate_estimate_totals,
    calculate_prorated_price,
    calculate_duration_days,
    calculate_quotation_total,
    format_amount,
    format_currency,
)


class TestCalculateLineItemTotal:
    """Tests for line item total calculation."""

    def test_basic_calculation(self):
        """Basic quantity × unit_price calculation."""
        result = calculate_line_item_total(
            quantity=Decimal('10'),
            unit_price=Decimal('25.50')
        )
        assert result == Decimal('255.00')

    def test_fractional_quantity(self):
        """Calculation with fractional quantity."""
        result = calculate_line_item_total(
            quantity=Decimal('2.5'),
            unit_price=Decimal('100')
        )
        assert result == Decimal('250.00')

    def test_rounding(self):
        """Result should be rounded half up to 2 decimal places."""
        result = calculate_line_item_total(
            quantity=Decimal('3'),
            unit_price=Decimal('33.333')
        )
        # 3 × 33.333 = 99.999, rounded to 100.00
        assert result == Decimal('100.00')

    def test_float_inputs(self):
        """Floats from JSON bodies are converted without binary noise."""
        result = calculate_line_item_total(quantity=3, unit_price=0.1)
        assert result == Decimal('0.30')

    def test_none_quantity(self):
        """None quantity should return zero."""
        result = calculate_line_item_total(
            quantity=None,
            unit_price=Decimal('100')
        )
        assert result == Decimal('0')

    def test_none_price(self):
        """None price should return zero."""
        result = calculate_line_item_total(
            quantity=Decimal('10'),
            unit_price=None
        )
        assert result == Decimal('0')


class TestCalculateEstimateTotals:
    """Tests for cost estimate rollups."""

    def test_basic_totals(self):
        """Line totals are filled in and summed."""
        result = calculate_estimate_totals([
            {'description': 'Rental', 'quantity': 2, 'unit_price': 150000},
            {'description': 'Production', 'quantity': 1, 'unit_price': '12500.50'},
        ])

        assert result['total_amount'] == Decimal('312500.50')
        assert result['line_items'][0]['total'] == 300000.0
        assert result['line_items'][1]['total'] == 12500.5

    def test_missing_quantity_defaults_to_one(self):
        """A line without quantity counts once."""
        result = calculate_estimate_totals([{'unit_price': 500}])
        assert result['total_amount'] == Decimal('500.00')

    def test_empty(self):
        """No line items gives a zero total."""
        result = calculate_estimate_totals([])
        assert result['total_amount'] == Decimal('0.00')
        assert result['line_items'] == []

    def test_input_not_mutated(self):
        """Returned lines are copies."""
        items = [{'quantity': 1, 'unit_price': 100}]
        calculate_estimate_totals(items)
        assert 'total' not in items[0]


class TestCalculateProratedPrice:
    """Tests for monthly-rate proration."""

    def test_full_month(self):
        """A whole calendar month costs the monthly price."""
        result = calculate_prorated_price(
            Decimal('31000'), date(2024, 1, 1), date(2024, 1, 31)
        )
        assert result == Decimal('31000.00')

    def test_spans_two_months(self):
        """Each month is charged at its own daily rate."""
        # Jan 15-31: 17 days at 31000/31; Feb 1-14 (leap year): 14 days at 31000/29
        result = calculate_prorated_price(
            Decimal('31000'), date(2024, 1, 15), date(2024, 2, 14)
        )
        assert result == Decimal('31965.52')

    def test_single_day(self):
        """Start and end are inclusive."""
        result = calculate_prorated_price(
            Decimal('30000'), date(2024, 6, 10), date(2024, 6, 10)
        )
        assert result == Decimal('1000.00')

    def test_accepts_datetimes(self):
        """Datetimes are priced by their calendar date."""
        result = calculate_prorated_price(
            30000, datetime(2024, 6, 1, 8, 0), datetime(2024, 6, 30, 23, 59)
        )
        assert result == Decimal('30000.00')

    def test_end_before_start(self):
        """An inverted range costs nothing."""
        result = calculate_prorated_price(
            Decimal('30000'), date(2024, 6, 10), date(2024, 6, 1)
        )
        assert result == Decimal('0.00')


class TestQuotationTotal:
    """Tests for pricing a quoted site."""

    def test_duration_days_inclusive(self):
        assert calculate_duration_days(date(2024, 3, 1), date(2024, 3, 31)) == 31

    def test_duration_days_missing_date(self):
        assert calculate_duration_days(None, date(2024, 3, 31)) is None

    def test_quotation_total(self):
        """Item carries its duration and prorated total."""
        item = {'name': 'EDSA Guadalupe LED', 'price': 30000}
        result = calculate_quotation_total(date(2024, 4, 1), date(2024, 4, 30), item)

        assert result['duration_days'] == 30
        assert result['total_amount'] == Decimal('30000.00')
        assert result['item']['item_total_amount'] == 30000.0
        assert result['item']['duration_days'] == 30
        assert 'duration_days' not in item


class TestFormatting:
    """Tests for document amount formatting."""

    @pytest.mark.parametrize("value,expected", [
        (Decimal('1234.5'), '1,234.50'),
        (0, '0.00'),
        (1000000, '1,000,000.00'),
        (2.675, '2.68'),
        (None, 'N/A'),
        (True, 'true'),
        ('TBD', 'TBD'),
    ])
    def test_format_amount(self, value, expected):
        assert format_amount(value) == expected

    def test_format_currency(self):
        assert format_currency(Decimal('310000')) == 'PHP 310,000.00'

    def test_format_currency_none(self):
        assert format_currency(None) == 'PHP 0.00'
