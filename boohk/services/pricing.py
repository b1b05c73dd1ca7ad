"""
Pricing Service

Handles:
- Line item total calculation (qty × unit_price)
- Cost estimate rollup totals
- Prorated rental pricing across calendar months
- Quotation duration and total calculation
- Amount and currency formatting
"""

import calendar
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Union

CENTS = Decimal("0.01")
CURRENCY_PREFIX = "PHP"


def _to_decimal(value) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _as_date(value: Union[date, datetime]) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def calculate_line_item_total(quantity, unit_price) -> Decimal:
    """
    Calculate line item total from quantity and unit price.

    Args:
        quantity: The quantity
        unit_price: Price per unit

    Returns:
        Total (quantity × unit_price), rounded to 2 decimal places
    """
    if quantity is None or unit_price is None:
        return Decimal("0")

    total = _to_decimal(quantity) * _to_decimal(unit_price)
    return total.quantize(CENTS, rounding=ROUND_HALF_UP)


def calculate_estimate_totals(line_items: List[dict]) -> dict:
    """
    Recalculate each line's total and the grand total.

    Args:
        line_items: Dicts with 'quantity' and 'unit_price' keys

    Returns:
        Dictionary with:
        - line_items: copies of the input with 'total' filled in (floats, JSON-safe)
        - total_amount: Decimal sum of line totals
    """
    priced = []
    total_amount = Decimal("0")
    for item in line_items:
        line_total = calculate_line_item_total(
            item.get("quantity", 1), item.get("unit_price", 0)
        )
        total_amount += line_total
        priced.append({**item, "total": float(line_total)})

    return {
        "line_items": priced,
        "total_amount": total_amount.quantize(CENTS, rounding=ROUND_HALF_UP),
    }


def recalculate_cost_estimate(cost_estimate):
    """Recalculate a CostEstimate's line totals and total_amount in place."""
    totals = calculate_estimate_totals(list(cost_estimate.line_items or []))
    cost_estimate.line_items = totals["line_items"]
    cost_estimate.total_amount = totals["total_amount"]
    return cost_estimate


def calculate_prorated_price(
    price, start_date: Union[date, datetime], end_date: Union[date, datetime]
) -> Decimal:
    """
    Calculate rental cost for a date range with a monthly price.

    Each calendar month in the range is charged at price / days_in_month
    per day covered. Both start and end dates are inclusive.

    Args:
        price: Monthly price
        start_date: First rental day
        end_date: Last rental day

    Returns:
        Prorated total, rounded to 2 decimal places
    """
    start = _as_date(start_date)
    end = _as_date(end_date)
    monthly = _to_decimal(price)
    total = Decimal("0")

    current = start
    while current <= end:
        days_in_month = calendar.monthrange(current.year, current.month)[1]
        daily_rate = monthly / Decimal(days_in_month)

        month_end = date(current.year, current.month, days_in_month)
        last_day = min(month_end, end)
        days_counted = (last_day - current).days + 1

        total += daily_rate * days_counted
        current = month_end + timedelta(days=1)

    return total.quantize(CENTS, rounding=ROUND_HALF_UP)


def calculate_duration_days(
    start_date: Optional[Union[date, datetime]], end_date: Optional[Union[date, datetime]]
) -> Optional[int]:
    """Inclusive number of days between two dates, or None if either is missing."""
    if not start_date or not end_date:
        return None
    return (_as_date(end_date) - _as_date(start_date)).days + 1


def calculate_quotation_total(start_date, end_date, item: dict) -> dict:
    """
    Price a quoted site for its rental period.

    Args:
        start_date: Rental start
        end_date: Rental end
        item: Site snapshot with a monthly 'price'

    Returns:
        Dictionary with:
        - duration_days
        - total_amount (Decimal)
        - item: copy of the item with duration_days and item_total_amount set
    """
    duration_days = calculate_duration_days(start_date, end_date) or 0
    item_total = calculate_prorated_price(item.get("price") or 0, start_date, end_date)

    return {
        "duration_days": duration_days,
        "total_amount": item_total,
        "item": {
            **item,
            "duration_days": duration_days,
            "item_total_amount": float(item_total),
        },
    }


def format_amount(value) -> str:
    """Format a value for documents: numbers as 1,234.56, None as N/A."""
    if value is None:
        return "N/A"
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float, Decimal)):
        return f"{_to_decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP):,.2f}"
    return str(value)


def format_currency(value) -> str:
    """Format a decimal value as Philippine peso currency."""
    if value is None:
        return f"{CURRENCY_PREFIX} 0.00"
    return f"{CURRENCY_PREFIX} {format_amount(value)}"
