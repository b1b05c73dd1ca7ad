from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from sqlalchemy.orm import Session

from boohk.models import Booking, Product, Quotation
from boohk.timeutil import utc_now

MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

# Shown when a year has no bookings at all
DEFAULT_BEST_MONTH = (11, 20)
DEFAULT_WORST_MONTH = (8, 5)

CONVERTED_QUOTATION_STATUSES = ("reserved",)
INACTIVE_BOOKING_STATUSES = ("COMPLETED", "CANCELLED")


def percentage(part: int, whole: int) -> int:
    """Whole-number percentage, rounded half up. Zero when whole is zero."""
    if not whole:
        return 0
    value = Decimal(part) * 100 / Decimal(whole)
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def site_performance(bookings, product_names: dict) -> list:
    """Bookings per site, most booked first, with each site's share of all bookings."""
    counts = {}
    for booking in bookings:
        if booking.product_id:
            counts[booking.product_id] = counts.get(booking.product_id, 0) + 1

    total = len(bookings)
    performance = [
        {
            "productId": product_id,
            "name": product_names.get(product_id, "Unknown Site"),
            "bookingCount": count,
            "percentage": percentage(count, total),
        }
        for product_id, count in counts.items()
    ]
    performance.sort(key=lambda site: site["bookingCount"], reverse=True)
    return performance


def conversion_rate(quotations) -> dict:
    converted = len([q for q in quotations if q.status in CONVERTED_QUOTATION_STATUSES])
    total = len(quotations)
    return {
        "quotations": total,
        "bookings": converted,
        "rate": min(100, percentage(converted, total)),
    }


def monthly_occupancy(bookings, year: int) -> dict:
    """
    Share of the year's bookings starting in each month.

    Best and worst month fall back to fixed defaults when the year has no
    bookings.
    """
    counts = [0] * 12
    for booking in bookings:
        if booking.start_date and booking.start_date.year == year:
            counts[booking.start_date.month - 1] += 1

    total = sum(counts)
    monthly = {month: percentage(count, total) for month, count in enumerate(counts)}

    if total == 0:
        best, best_pct = DEFAULT_BEST_MONTH
        worst, worst_pct = DEFAULT_WORST_MONTH
    else:
        best = max(range(12), key=lambda m: (monthly[m], -m))
        worst = min(range(12), key=lambda m: (monthly[m], m))
        best_pct, worst_pct = monthly[best], monthly[worst]

    return {
        "monthlyData": monthly,
        "bestMonth": {"name": MONTH_NAMES[best], "percentage": best_pct},
        "worstMonth": {"name": MONTH_NAMES[worst], "percentage": worst_pct},
    }


def occupancy_snapshot(products, bookings, now: datetime) -> dict:
    """Sites occupied right now by an active booking, split static vs digital."""
    active_by_product = {}
    for booking in bookings:
        if booking.status in INACTIVE_BOOKING_STATUSES:
            continue
        if booking.start_date and booking.end_date and booking.start_date <= now <= booking.end_date:
            active_by_product[booking.product_id] = True

    result = {"staticUnavailable": 0, "staticTotal": 0, "dynamicUnavailable": 0, "dynamicTotal": 0}
    for product in products:
        prefix = "dynamic" if product.is_digital else "static"
        result[f"{prefix}Total"] += 1
        if active_by_product.get(product.id):
            result[f"{prefix}Unavailable"] += 1
    return result


def get_business_dashboard(
    db: Session,
    company_id: str,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    year: Optional[int] = None,
    now: Optional[datetime] = None,
) -> dict:
    now = now or utc_now()

    bookings = db.query(Booking).filter(
        Booking.company_id == company_id, Booking.deleted == False
    ).order_by(Booking.created_at.desc()).all()

    quotations = db.query(Quotation).filter(
        Quotation.company_id == company_id, Quotation.deleted == False
    ).order_by(Quotation.created_at.desc()).all()

    products = db.query(Product).filter(
        Product.company_id == company_id, Product.deleted == False
    ).all()

    filtered_bookings = bookings
    if start_date:
        filtered_bookings = [b for b in filtered_bookings if b.start_date and b.start_date >= start_date]
    if end_date:
        filtered_bookings = [b for b in filtered_bookings if b.end_date and b.end_date <= end_date]

    if start_date or end_date:
        quotations = [
            q for q in quotations
            if (not start_date or q.created_at >= start_date) and (not end_date or q.created_at <= end_date)
        ]
    elif year:
        quotations = [q for q in quotations if q.created_at.year == year]

    performance = site_performance(filtered_bookings, {p.id: p.name or "Unknown Site" for p in products})
    no_data = {"name": "No Data", "percentage": 0}
    best = performance[0] if performance else no_data
    worst = performance[-1] if performance else no_data

    return {
        "bestPerforming": {"name": best["name"], "percentage": best["percentage"]},
        "worstPerforming": {"name": worst["name"], "percentage": worst["percentage"]},
        "totalBookings": len(filtered_bookings),
        "siteCount": len(performance),
        "conversionRate": conversion_rate(quotations),
        "occupancy": occupancy_snapshot(products, bookings, now),
        "occupancyPerformance": monthly_occupancy(filtered_bookings, year or now.year),
    }
