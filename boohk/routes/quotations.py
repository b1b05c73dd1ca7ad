import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from boohk.auth import require_role
from boohk.database import get_db
from boohk.models import Quotation, Product, User
from boohk.routes.helpers import (
    get_or_404,
    require_company_id,
    parse_date_param,
    paginate,
    pdf_response,
)
from boohk.services import mailer, search
from boohk.services import quotation as quotation_service
from boohk.services.collection import update_quotation_collection_status
from boohk.services.lifecycle import (
    apply_transition,
    mark_viewed,
    expire_if_past_valid_until,
    record_client_response,
)
from boohk.services.pdf import generate_quotation_pdf
from boohk.services.pricing import format_currency
from boohk.services.validators import validate_quotation
from boohk.timeutil import localdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/quotations", tags=["quotations"])


class QuotationCreateRequest(BaseModel):
    product_id: str
    client_id: Optional[str] = None
    proposal_id: Optional[str] = None
    client_name: Optional[str] = None
    client_email: Optional[str] = None
    client_company_name: Optional[str] = None
    client_phone: Optional[str] = None
    client_address: Optional[str] = None
    client_designation: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    notes: Optional[str] = None


class QuotationUpdateRequest(BaseModel):
    client_name: Optional[str] = None
    client_email: Optional[str] = None
    client_company_name: Optional[str] = None
    client_phone: Optional[str] = None
    client_address: Optional[str] = None
    client_designation: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    notes: Optional[str] = None
    price: Optional[float] = None


class StatusUpdateRequest(BaseModel):
    status: str


class ClientResponseRequest(BaseModel):
    action: str
    reason: Optional[str] = None


class SendEmailRequest(BaseModel):
    to: Optional[str] = None
    cc: Optional[List[str]] = None
    subject: Optional[str] = None
    body: Optional[str] = None


class ComplianceUpdateRequest(BaseModel):
    key: str
    completed: Optional[bool] = None
    file_url: Optional[str] = None


class BookRequest(BaseModel):
    project_name: Optional[str] = None


def _payload(data: BaseModel) -> dict:
    payload = data.dict(exclude_unset=True)
    for field in ("start_date", "end_date"):
        if field in payload:
            payload[field] = parse_date_param(payload[field], field)
    return payload


@router.post("")
async def create_quotation(
    data: QuotationCreateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales")),
):
    validation = validate_quotation(data.dict())
    if not validation.is_valid:
        raise HTTPException(status_code=400, detail="; ".join(validation.errors))

    product = get_or_404(db, Product, data.product_id, "Site", user=user)
    try:
        quotation = quotation_service.create_quotation(db, _payload(data), product, user)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "quotation": quotation.to_dict()}


@router.get("")
async def list_quotations(
    companyId: Optional[str] = None,
    status: Optional[str] = None,
    page: int = 1,
    pageSize: int = 20,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales")),
):
    require_company_id(companyId, user)
    query = db.query(Quotation).filter(
        Quotation.company_id == companyId, Quotation.deleted == False
    )
    if status:
        query = query.filter(Quotation.status == status)

    result = paginate(query.order_by(Quotation.created_at.desc()), page, pageSize)
    result["quotations"] = [q.to_dict() for q in result.pop("items")]
    return result


@router.post("/index")
async def reindex_quotations(
    db: Session = Depends(get_db),
    user: User = Depends(require_role("admin")),
):
    """Push every quotation to the search index."""
    if not search.is_configured():
        raise HTTPException(status_code=500, detail="Search service not configured")
    return quotation_service.reindex_all_quotations(db)


# -----------------------------
# Client-facing endpoints
# -----------------------------

@router.get("/public/{quotation_id}")
async def view_public_quotation(quotation_id: str, db: Session = Depends(get_db)):
    """Client view: expires stale quotations and records the first view."""
    quotation = get_or_404(db, Quotation, quotation_id, "Quotation")

    changed = expire_if_past_valid_until(quotation)
    changed = mark_viewed(quotation) or changed
    if changed:
        db.commit()
        db.refresh(quotation)
        quotation_service.index_quotation(quotation)

    return {"success": True, "quotation": quotation.to_dict(include_password=False)}


@router.post("/public/{quotation_id}/respond")
async def respond_to_quotation(
    quotation_id: str,
    data: ClientResponseRequest,
    db: Session = Depends(get_db),
):
    quotation = get_or_404(db, Quotation, quotation_id, "Quotation")

    if expire_if_past_valid_until(quotation):
        db.commit()
        raise HTTPException(status_code=400, detail="Quotation has expired")

    try:
        status = record_client_response(quotation, data.action, data.reason)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    db.commit()
    db.refresh(quotation)
    quotation_service.index_quotation(quotation)
    logger.info(f"Quotation {quotation.quotation_number} {status} by client")

    return {"success": True, "status": status}


# -----------------------------
# Single quotation
# -----------------------------

@router.get("/{quotation_id}")
async def get_quotation(
    quotation_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales")),
):
    quotation = get_or_404(db, Quotation, quotation_id, "Quotation", user=user)
    return quotation.to_dict()


@router.patch("/{quotation_id}")
async def update_quotation(
    quotation_id: str,
    data: QuotationUpdateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales")),
):
    quotation = get_or_404(db, Quotation, quotation_id, "Quotation", user=user)

    validation = validate_quotation(data.dict(), require_product=False)
    if not validation.is_valid:
        raise HTTPException(status_code=400, detail="; ".join(validation.errors))

    try:
        quotation = quotation_service.update_quotation(db, quotation, _payload(data))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {"success": True, "quotation": quotation.to_dict()}


@router.delete("/{quotation_id}")
async def delete_quotation(
    quotation_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales")),
):
    quotation = get_or_404(db, Quotation, quotation_id, "Quotation", user=user)
    quotation.deleted = True
    db.commit()

    search.try_delete_object("quotations", quotation.id)
    return {"success": True}


@router.post("/{quotation_id}/copy")
async def copy_quotation(
    quotation_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales")),
):
    source = get_or_404(db, Quotation, quotation_id, "Quotation", user=user)
    copy = quotation_service.copy_quotation(db, source, user)
    return {"success": True, "quotation": copy.to_dict()}


@router.patch("/{quotation_id}/status")
async def update_quotation_status(
    quotation_id: str,
    data: StatusUpdateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales")),
):
    quotation = get_or_404(db, Quotation, quotation_id, "Quotation", user=user)
    try:
        apply_transition(quotation, data.status, allowed_statuses=Quotation.STATUSES)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    db.commit()
    db.refresh(quotation)
    quotation_service.index_quotation(quotation)
    return {"success": True, "quotation": quotation.to_dict()}


@router.post("/{quotation_id}/send-email")
async def send_quotation_email(
    quotation_id: str,
    data: SendEmailRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales")),
):
    """Email the quotation PDF to the client and mark a draft as sent."""
    quotation = get_or_404(db, Quotation, quotation_id, "Quotation", user=user)

    to = (data.to or quotation.client_email or "").strip()
    if not to:
        raise HTTPException(status_code=400, detail="Missing quotation or client email address")
    if not mailer.is_valid_email(to):
        raise HTTPException(status_code=400, detail="Invalid 'To' email address format")

    cc = [address.strip() for address in (data.cc or []) if address and address.strip()]
    for address in cc:
        if not mailer.is_valid_email(address):
            raise HTTPException(status_code=400, detail=f"Invalid 'CC' email address format: {address}")

    if not mailer.is_configured():
        raise HTTPException(status_code=500, detail="Email service not configured")

    item = quotation.items or {}
    subject = data.subject or f"Quotation {quotation.quotation_number} - {item.get('name') or 'Site Rental'}"
    if data.body:
        html = mailer.text_to_html(data.body)
    else:
        html = (
            f"<p>Dear {quotation.client_name or 'Valued Client'},</p>"
            f"<p>Please find attached quotation <b>{quotation.quotation_number}</b> for "
            f"{item.get('name') or 'the requested site'}, totalling "
            f"<b>{format_currency(quotation.total_amount)}</b>.</p>"
            f"<p>This quotation is valid until {localdate(quotation.valid_until) or 'N/A'}. "
            f"Use access code <b>{quotation.password}</b> to view and respond online.</p>"
            f"<p>Best regards,<br/>{user.full_name}</p>"
        )

    pdf_bytes = generate_quotation_pdf(quotation)
    try:
        mailer.send_email(
            to,
            subject,
            html,
            cc=cc or None,
            reply_to=user.email,
            attachments=[mailer.pdf_attachment(f"Quotation_{quotation.quotation_number}.pdf", pdf_bytes)],
        )
    except mailer.EmailServiceError as e:
        raise HTTPException(status_code=500, detail=str(e))

    if quotation.status == "draft":
        apply_transition(quotation, "sent")
        db.commit()
        db.refresh(quotation)
        quotation_service.index_quotation(quotation)

    return {"success": True, "message": "Email sent successfully", "status": quotation.status}


@router.get("/{quotation_id}/pdf")
async def download_quotation_pdf(
    quotation_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales")),
):
    quotation = get_or_404(db, Quotation, quotation_id, "Quotation", user=user)
    return pdf_response(generate_quotation_pdf(quotation), f"Quotation_{quotation.quotation_number}.pdf")


@router.patch("/{quotation_id}/compliance")
async def update_quotation_compliance(
    quotation_id: str,
    data: ComplianceUpdateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales", "logistics")),
):
    quotation = get_or_404(db, Quotation, quotation_id, "Quotation", user=user)
    try:
        compliance = quotation_service.update_compliance_item(
            db, quotation, data.key, completed=data.completed, file_url=data.file_url
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {"success": True, "project_compliance": compliance}


@router.post("/{quotation_id}/book")
async def book_quotation(
    quotation_id: str,
    data: BookRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales")),
):
    """Reserve the site for an accepted quotation."""
    quotation = get_or_404(db, Quotation, quotation_id, "Quotation", user=user)
    if quotation.status != "accepted":
        raise HTTPException(status_code=400, detail="Only accepted quotations can be booked")

    try:
        booking = quotation_service.create_booking_from_quotation(db, quotation, user, data.project_name)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    quotation_service.index_quotation(quotation)
    return {"success": True, "booking": booking.to_dict()}


@router.get("/{quotation_id}/collection-status")
async def get_collection_status(
    quotation_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("treasury", "accounting", "sales")),
):
    quotation = get_or_404(db, Quotation, quotation_id, "Quotation", user=user)
    result = update_quotation_collection_status(db, quotation.id)
    if result is None:
        return {"success": True, "status": None, "message": "No collectibles for this quotation"}
    return {"success": True, **result}
