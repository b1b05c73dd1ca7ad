from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from boohk.auth import require_role
from boohk.database import get_db
from boohk.models import CostEstimate, Proposal, User
from boohk.routes.helpers import (
    get_or_404,
    require_company_id,
    parse_date_param,
    paginate,
    pdf_response,
)
from boohk.services import mailer, search
from boohk.services import cost_estimate as cost_estimate_service
from boohk.services.lifecycle import (
    apply_transition,
    mark_viewed,
    expire_if_past_valid_until,
    record_client_response,
)
from boohk.services.pdf import generate_cost_estimate_pdf

router = APIRouter(prefix="/api/cost-estimates", tags=["cost-estimates"])


class LineItem(BaseModel):
    id: Optional[str] = None
    description: str = ""
    quantity: float = 1
    unit_price: float = 0
    category: Optional[str] = None
    notes: Optional[str] = None


class CostEstimateCreateRequest(BaseModel):
    company_id: Optional[str] = None
    title: Optional[str] = None
    client: dict = {}
    line_items: List[LineItem] = []
    proposal_id: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    notes: Optional[str] = None
    custom_message: Optional[str] = None


class CostEstimateUpdateRequest(BaseModel):
    title: Optional[str] = None
    client: Optional[dict] = None
    line_items: Optional[List[LineItem]] = None
    notes: Optional[str] = None
    custom_message: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None


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


@router.post("")
async def create_cost_estimate(
    data: CostEstimateCreateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales")),
):
    """Create a cost estimate directly, or from a proposal when proposal_id is given."""
    start_date = parse_date_param(data.start_date, "start_date")
    end_date = parse_date_param(data.end_date, "end_date")
    line_items = [item.dict() for item in data.line_items]

    try:
        if data.proposal_id:
            proposal = get_or_404(db, Proposal, data.proposal_id, "Proposal", user=user)
            estimate = cost_estimate_service.create_cost_estimate_from_proposal(
                db, proposal, user,
                start_date=start_date,
                end_date=end_date,
                custom_line_items=line_items or None,
                notes=data.notes,
            )
        else:
            company_id = require_company_id(data.company_id or user.company_id, user)
            if not data.title:
                raise HTTPException(status_code=400, detail="Title is required")
            estimate = cost_estimate_service.create_cost_estimate(
                db,
                company_id=company_id,
                title=data.title,
                client=data.client,
                line_items=line_items,
                user=user,
                start_date=start_date,
                end_date=end_date,
                notes=data.notes,
                custom_message=data.custom_message,
            )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {"success": True, "costEstimate": estimate.to_dict()}


@router.get("")
async def list_cost_estimates(
    companyId: Optional[str] = None,
    status: Optional[str] = None,
    page: int = 1,
    pageSize: int = 20,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales")),
):
    require_company_id(companyId, user)
    query = db.query(CostEstimate).filter(
        CostEstimate.company_id == companyId, CostEstimate.deleted == False
    )
    if status:
        query = query.filter(CostEstimate.status == status)

    result = paginate(query.order_by(CostEstimate.created_at.desc()), page, pageSize)
    result["costEstimates"] = [ce.to_dict() for ce in result.pop("items")]
    return result


@router.get("/public/{estimate_id}")
async def view_public_cost_estimate(estimate_id: str, db: Session = Depends(get_db)):
    estimate = get_or_404(db, CostEstimate, estimate_id, "Cost estimate")

    changed = expire_if_past_valid_until(estimate)
    changed = mark_viewed(estimate) or changed
    if changed:
        db.commit()
        db.refresh(estimate)
        cost_estimate_service.index_cost_estimate(estimate)

    return {"success": True, "costEstimate": estimate.to_dict(include_password=False)}


@router.post("/public/{estimate_id}/respond")
async def respond_to_cost_estimate(
    estimate_id: str,
    data: ClientResponseRequest,
    db: Session = Depends(get_db),
):
    estimate = get_or_404(db, CostEstimate, estimate_id, "Cost estimate")

    if expire_if_past_valid_until(estimate):
        db.commit()
        raise HTTPException(status_code=400, detail="Cost estimate has expired")

    try:
        status = record_client_response(estimate, data.action, data.reason)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    db.commit()
    cost_estimate_service.index_cost_estimate(estimate)
    return {"success": True, "status": status}


@router.get("/{estimate_id}")
async def get_cost_estimate(
    estimate_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales")),
):
    return get_or_404(db, CostEstimate, estimate_id, "Cost estimate", user=user).to_dict()


@router.patch("/{estimate_id}")
async def update_cost_estimate(
    estimate_id: str,
    data: CostEstimateUpdateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales")),
):
    estimate = get_or_404(db, CostEstimate, estimate_id, "Cost estimate", user=user)

    payload = data.dict(exclude_unset=True)
    for field in ("start_date", "end_date"):
        if field in payload:
            payload[field] = parse_date_param(payload[field], field)

    try:
        estimate = cost_estimate_service.update_cost_estimate(db, estimate, payload)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {"success": True, "costEstimate": estimate.to_dict()}


@router.delete("/{estimate_id}")
async def delete_cost_estimate(
    estimate_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales")),
):
    estimate = get_or_404(db, CostEstimate, estimate_id, "Cost estimate", user=user)
    estimate.deleted = True
    db.commit()

    search.try_delete_object("cost_estimates", estimate.id)
    return {"success": True}


@router.patch("/{estimate_id}/status")
async def update_cost_estimate_status(
    estimate_id: str,
    data: StatusUpdateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales")),
):
    estimate = get_or_404(db, CostEstimate, estimate_id, "Cost estimate", user=user)
    try:
        apply_transition(estimate, data.status, allowed_statuses=CostEstimate.STATUSES)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    db.commit()
    db.refresh(estimate)
    cost_estimate_service.index_cost_estimate(estimate)
    return {"success": True, "costEstimate": estimate.to_dict()}


@router.post("/{estimate_id}/send-email")
async def send_cost_estimate_email(
    estimate_id: str,
    data: SendEmailRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales")),
):
    estimate = get_or_404(db, CostEstimate, estimate_id, "Cost estimate", user=user)

    to = (data.to or (estimate.client or {}).get("email") or "").strip()
    subject = (data.subject or "").strip()
    body = (data.body or "").strip()
    if not to or not subject or not body:
        raise HTTPException(status_code=400, detail="Recipient, subject and body are required")
    if not mailer.is_valid_email(to):
        raise HTTPException(status_code=400, detail="Invalid 'To' email address format")
    for address in data.cc or []:
        if not mailer.is_valid_email(address):
            raise HTTPException(status_code=400, detail=f"Invalid 'CC' email address format: {address}")

    pdf_bytes = generate_cost_estimate_pdf(estimate)
    try:
        mailer.send_email(
            to,
            subject,
            mailer.text_to_html(body),
            cc=data.cc or None,
            reply_to=user.email,
            attachments=[
                mailer.pdf_attachment(f"Cost_Estimate_{estimate.cost_estimate_number}.pdf", pdf_bytes)
            ],
        )
    except mailer.EmailServiceError as e:
        raise HTTPException(status_code=500, detail=str(e))

    if estimate.status == "draft":
        apply_transition(estimate, "sent")
        db.commit()
        cost_estimate_service.index_cost_estimate(estimate)

    return {"success": True, "message": "Email sent successfully", "status": estimate.status}


@router.get("/{estimate_id}/pdf")
async def download_cost_estimate_pdf(
    estimate_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales")),
):
    estimate = get_or_404(db, CostEstimate, estimate_id, "Cost estimate", user=user)
    return pdf_response(
        generate_cost_estimate_pdf(estimate), f"Cost_Estimate_{estimate.cost_estimate_number}.pdf"
    )
