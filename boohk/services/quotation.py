"""
Quotation Service

Handles:
- Quotation number and client password generation
- Default project compliance checklist
- Creating, updating and copying quotations
- Turning an accepted quotation into a booking
"""

import logging
import secrets
from datetime import timedelta
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from boohk.models import Quotation, Booking, Product
from boohk.services import search
from boohk.services.lifecycle import apply_transition
from boohk.services.pricing import calculate_quotation_total
from boohk.services.validators import validate_date_range
from boohk.timeutil import utc_now, epoch_ms, isoformat

logger = logging.getLogger(__name__)

VALIDITY_DAYS = 30
MAX_NUMBER_ATTEMPTS = 10

COMPLIANCE_ITEMS = [
    ("signedQuotation", "Signed Quotation"),
    ("signedContract", "Signed Contract"),
    ("irrevocablePo", "Irrevocable PO"),
    ("finalArtwork", "Final Artwork"),
    ("paymentAsDeposit", "Payment as Deposit"),
]

# Fields a sales user may edit on an open quotation
UPDATABLE_FIELDS = [
    "client_name",
    "client_email",
    "client_company_name",
    "client_phone",
    "client_address",
    "client_designation",
    "notes",
    "start_date",
    "end_date",
    "valid_until",
]


def generate_quotation_number(now=None) -> str:
    """Format: QT-YYYYMMDD-<last 4 digits of epoch ms>."""
    now = now or utc_now()
    suffix = str(epoch_ms())[-4:]
    return f"QT-{now.strftime('%Y%m%d')}-{suffix}"


def unique_quotation_number(db: Session, now=None) -> str:
    """
    Allocate a quotation number not used by any stored quotation.

    The epoch-ms suffix repeats every 10 seconds, so a taken number is
    retried with a random 4-digit suffix.

    Raises:
        RuntimeError: If no free number is found
    """
    now = now or utc_now()
    number = generate_quotation_number(now)
    for _ in range(MAX_NUMBER_ATTEMPTS):
        taken = db.query(Quotation.id).filter(Quotation.quotation_number == number).first()
        if not taken:
            return number
        logger.warning(f"Quotation number {number} already used, retrying")
        number = f"QT-{now.strftime('%Y%m%d')}-{secrets.randbelow(10000):04d}"
    raise RuntimeError("Could not allocate a unique quotation number")


def generate_password() -> str:
    """Eight random digits used to open client-facing documents."""
    return "".join(secrets.choice("0123456789") for _ in range(8))


def default_project_compliance() -> dict:
    return {
        key: {"name": name, "completed": False, "file_url": None}
        for key, name in COMPLIANCE_ITEMS
    }


def pending_compliance_items(compliance: Optional[dict]) -> list:
    """Compliance items that are neither completed nor have a file attached."""
    pending = []
    for key, item in (compliance or {}).items():
        item = item or {}
        if not item.get("completed") and not item.get("file_url"):
            pending.append(key)
    return pending


def product_snapshot(product: Product) -> dict:
    """Freeze the quoted site's details onto the quotation."""
    item = {
        "product_id": product.id,
        "name": product.name,
        "site_code": product.site_code,
        "location": product.location,
        "type": product.type,
        "price": float(product.price or 0),
    }
    if product.is_digital and (product.specs or {}).get("cms"):
        item["cms"] = product.specs["cms"]
    return item


def _apply_pricing(quotation: Quotation):
    if quotation.start_date and quotation.end_date:
        priced = calculate_quotation_total(
            quotation.start_date, quotation.end_date, dict(quotation.items or {})
        )
        quotation.items = priced["item"]
        quotation.duration_days = priced["duration_days"]
        quotation.total_amount = priced["total_amount"]
    else:
        quotation.duration_days = 0
        quotation.total_amount = Decimal(str((quotation.items or {}).get("price") or 0))


def create_quotation(db: Session, data: dict, product: Product, user) -> Quotation:
    """
    Create a draft quotation for one site.

    Args:
        db: Database session
        data: Client snapshot, dates and notes
        product: The quoted site
        user: The seller creating the quotation

    Returns:
        The new Quotation (committed)
    """
    validate_date_range(data.get("start_date"), data.get("end_date")).raise_if_invalid()

    now = utc_now()
    quotation = Quotation(
        quotation_number=unique_quotation_number(db, now),
        company_id=product.company_id,
        product_id=product.id,
        client_id=data.get("client_id"),
        proposal_id=data.get("proposal_id"),
        client_name=data.get("client_name"),
        client_email=data.get("client_email"),
        client_company_name=data.get("client_company_name"),
        client_phone=data.get("client_phone"),
        client_address=data.get("client_address"),
        client_designation=data.get("client_designation"),
        items=product_snapshot(product),
        start_date=data.get("start_date"),
        end_date=data.get("end_date"),
        notes=data.get("notes"),
        status="draft",
        valid_until=now + timedelta(days=VALIDITY_DAYS),
        password=generate_password(),
        project_compliance=default_project_compliance(),
        seller_id=user.id if user else None,
    )
    _apply_pricing(quotation)

    db.add(quotation)
    db.commit()
    db.refresh(quotation)

    index_quotation(quotation)
    return quotation


def update_quotation(db: Session, quotation: Quotation, data: dict) -> Quotation:
    """
    Apply a partial update to an open quotation.

    Raises:
        ValueError: If the quotation is already responded to or booked, or the
            merged dates end before they start
    """
    if quotation.is_locked:
        raise ValueError(f"Quotation is {quotation.status} and can no longer be edited")

    validate_date_range(
        data.get("start_date", quotation.start_date),
        data.get("end_date", quotation.end_date),
    ).raise_if_invalid()

    repricing = False
    for field in UPDATABLE_FIELDS:
        if field in data:
            setattr(quotation, field, data[field])
            if field in ("start_date", "end_date"):
                repricing = True

    if "price" in data and data["price"] is not None:
        quotation.items = {**(quotation.items or {}), "price": float(data["price"])}
        repricing = True

    if repricing:
        _apply_pricing(quotation)

    db.commit()
    db.refresh(quotation)

    index_quotation(quotation)
    return quotation


def copy_quotation(db: Session, source: Quotation, user) -> Quotation:
    """Duplicate a quotation as a new draft with its own number and password."""
    now = utc_now()
    copy = Quotation(
        quotation_number=unique_quotation_number(db, now),
        company_id=source.company_id,
        product_id=source.product_id,
        client_id=source.client_id,
        proposal_id=source.proposal_id,
        client_name=source.client_name,
        client_email=source.client_email,
        client_company_name=source.client_company_name,
        client_phone=source.client_phone,
        client_address=source.client_address,
        client_designation=source.client_designation,
        items=dict(source.items or {}),
        start_date=source.start_date,
        end_date=source.end_date,
        duration_days=source.duration_days,
        total_amount=source.total_amount,
        vat_rate=source.vat_rate,
        vat_amount=source.vat_amount,
        notes=source.notes,
        status="draft",
        valid_until=now + timedelta(days=VALIDITY_DAYS),
        password=generate_password(),
        project_compliance=default_project_compliance(),
        seller_id=user.id if user else source.seller_id,
    )
    db.add(copy)
    db.commit()
    db.refresh(copy)

    index_quotation(copy)
    return copy


def update_compliance_item(
    db: Session, quotation: Quotation, key: str, completed=None, file_url=None
) -> dict:
    """
    Update one project compliance item and mirror it onto related bookings.

    Raises:
        ValueError: If the key is not a known compliance item
    """
    compliance = dict(quotation.project_compliance or default_project_compliance())
    if key not in compliance:
        raise ValueError(f"Unknown compliance item: {key}")

    item = dict(compliance[key])
    if completed is not None:
        item["completed"] = bool(completed)
    if file_url is not None:
        item["file_url"] = file_url
        item["completed"] = True
    item["updated_at"] = isoformat(utc_now())
    compliance[key] = item
    quotation.project_compliance = compliance

    bookings = (
        db.query(Booking)
        .filter(Booking.quotation_id == quotation.id, Booking.deleted == False)
        .all()
    )
    for booking in bookings:
        booking.project_compliance = compliance

    db.commit()
    logger.info(
        f"Updated compliance '{key}' on quotation {quotation.id} "
        f"and {len(bookings)} booking(s)"
    )
    return compliance


def create_booking_from_quotation(
    db: Session, quotation: Quotation, user, project_name: Optional[str] = None
) -> Booking:
    """
    Reserve the quoted site for an accepted quotation.

    Raises:
        InvalidStatusTransition: If the quotation is not accepted
    """
    apply_transition(quotation, "reserved", allowed_statuses=Quotation.STATUSES)

    items = dict(quotation.items or {})
    total = quotation.total_amount or Decimal("0")
    booking = Booking(
        reservation_id=f"RV-{epoch_ms()}",
        company_id=quotation.company_id,
        quotation_id=quotation.id,
        quotation_number=quotation.quotation_number,
        product_id=quotation.product_id,
        product_name=items.get("name"),
        client={
            "id": quotation.client_id or "",
            "name": quotation.client_name or "",
            "company_name": quotation.client_company_name or "",
        },
        items=items,
        cost_details={
            "basePrice": items.get("price", 0),
            "days": quotation.duration_days or 0,
            "pricePerMonth": items.get("price", 0),
            "total": float(total),
            "vatRate": float(quotation.vat_rate or 0),
            "vatAmount": float(quotation.vat_amount or 0),
        },
        total_cost=total,
        start_date=quotation.start_date,
        end_date=quotation.end_date,
        status="RESERVED",
        project_name=project_name or "",
        project_compliance=dict(quotation.project_compliance or {}),
        user_id=user.id if user else None,
    )
    db.add(booking)
    db.commit()
    db.refresh(booking)

    logger.info(f"Booking {booking.reservation_id} created from quotation {quotation.id}")
    search.try_save_object("booking", booking_search_record(booking))
    return booking


def quotation_search_record(quotation: Quotation) -> dict:
    """Shape a quotation for the search index."""
    return {
        "objectID": quotation.id,
        "quotation_number": quotation.quotation_number,
        "client_name": quotation.client_name,
        "client_email": quotation.client_email,
        "client_company_name": quotation.client_company_name,
        "client_phone": quotation.client_phone,
        "client_address": quotation.client_address,
        "client_designation": quotation.client_designation,
        "items": dict(quotation.items or {}),
        "seller_id": quotation.seller_id,
        "status": quotation.status,
        "created": isoformat(quotation.created_at) or "",
        "total_amount": float(quotation.total_amount or 0),
        "company_id": quotation.company_id,
        "start_date": isoformat(quotation.start_date),
        "end_date": isoformat(quotation.end_date),
        "duration_days": quotation.duration_days,
        "valid_until": isoformat(quotation.valid_until) or "",
    }


def booking_search_record(booking: Booking) -> dict:
    return {
        "objectID": booking.id,
        "reservation_id": booking.reservation_id,
        "product_name": booking.product_name,
        "client_name": (booking.client or {}).get("name"),
        "status": booking.status,
        "company_id": booking.company_id,
        "start_date": isoformat(booking.start_date),
        "end_date": isoformat(booking.end_date),
    }


def index_quotation(quotation: Quotation) -> bool:
    """Index a quotation. Failures are logged, never raised."""
    return search.try_save_object("quotations", quotation_search_record(quotation))


def reindex_all_quotations(db: Session) -> dict:
    """
    Push every non-deleted quotation to the search index.

    Returns:
        Dictionary with success, message and per-item results
    """
    quotations = db.query(Quotation).filter(Quotation.deleted == False).all()
    logger.info(f"Found {len(quotations)} quotations to index")

    results = []
    for quotation in quotations:
        try:
            search.save_object("quotations", quotation_search_record(quotation))
            results.append({"id": quotation.id, "success": True})
        except Exception as e:
            logger.error(f"Failed to index quotation {quotation.id}: {e}")
            results.append({"id": quotation.id, "success": False, "error": str(e)})

    successful = len([r for r in results if r["success"]])
    failed = len(results) - successful
    logger.info(f"Indexing complete. Successful: {successful}, Failed: {failed}")

    return {
        "success": True,
        "message": f"Indexed {successful} quotations, {failed} failed",
        "results": results,
    }
