import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from boohk.auth import require_role
from boohk.database import get_db
from boohk.models import Proposal, ProposalActivity, User
from boohk.routes.helpers import (
    get_or_404,
    require_company_id,
    require_param,
    parse_date_param,
    paginate,
    pdf_response,
)
from boohk.services import mailer, search
from boohk.services import proposal as proposal_service
from boohk.services.cost_estimate import create_cost_estimate_from_proposal
from boohk.services.pdf import generate_proposal_pdf
from boohk.services.temp_pdf import temp_pdf_store, temp_pdf_filename

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/proposals", tags=["proposals"])


class ProposalCreateRequest(BaseModel):
    company_id: Optional[str] = None
    title: str
    client: dict = {}
    products: List[dict] = []
    notes: Optional[str] = None
    custom_message: Optional[str] = None
    valid_until: Optional[str] = None


class ProposalUpdateRequest(BaseModel):
    title: Optional[str] = None
    client: Optional[dict] = None
    products: Optional[List[dict]] = None
    notes: Optional[str] = None
    custom_message: Optional[str] = None
    valid_until: Optional[str] = None


class StatusUpdateRequest(BaseModel):
    status: str


class CommentRequest(BaseModel):
    comment: str


class PublicViewRequest(BaseModel):
    password: Optional[str] = None


class TempPDFRequest(BaseModel):
    proposalId: Optional[str] = None


class SendEmailRequest(BaseModel):
    to: Optional[str] = None
    cc: Optional[List[str]] = None
    subject: Optional[str] = None
    body: Optional[str] = None


class CostEstimateFromProposalRequest(BaseModel):
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    line_items: Optional[List[dict]] = None
    notes: Optional[str] = None


@router.post("")
async def create_proposal(
    data: ProposalCreateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales")),
):
    payload = data.dict()
    payload["company_id"] = require_company_id(data.company_id or user.company_id, user)
    payload["valid_until"] = parse_date_param(data.valid_until, "valid_until")

    proposal = proposal_service.create_proposal(db, payload, user)
    return {"success": True, "proposal": proposal.to_dict()}


@router.get("")
async def list_proposals(
    companyId: Optional[str] = None,
    status: Optional[str] = None,
    page: int = 1,
    pageSize: int = 20,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales")),
):
    require_company_id(companyId, user)
    query = db.query(Proposal).filter(Proposal.company_id == companyId, Proposal.deleted == False)
    if status:
        query = query.filter(Proposal.status == status)

    result = paginate(query.order_by(Proposal.created_at.desc()), page, pageSize)
    result["proposals"] = [p.to_dict() for p in result.pop("items")]
    return result


# -----------------------------
# Temporary PDF hand-off
# -----------------------------

@router.post("/generate-temp-pdf")
async def generate_temp_pdf(
    data: TempPDFRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales")),
):
    """Render a proposal PDF and park it for a single download."""
    require_param(data.proposalId, "proposalId")
    proposal = get_or_404(db, Proposal, data.proposalId, "Proposal", user=user)

    pdf_bytes = generate_proposal_pdf(proposal)
    handle = temp_pdf_store.put(proposal.id, proposal.title, pdf_bytes)

    proposal_service.log_activity(
        db, proposal.id, "pdf_generated",
        "Proposal PDF generated",
        user.id, user.full_name,
        {"tempId": handle["tempId"]},
    )
    return {"success": True, **handle}


@router.get("/generate-temp-pdf")
async def download_temp_pdf(id: Optional[str] = None):
    require_param(id, "id")
    entry = temp_pdf_store.take(id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Temp PDF not found or expired")
    return pdf_response(entry["data"], entry["filename"], inline=False)


# -----------------------------
# Client-facing view
# -----------------------------

@router.post("/public/{proposal_id}")
async def view_public_proposal(
    proposal_id: str,
    data: PublicViewRequest,
    db: Session = Depends(get_db),
):
    proposal = get_or_404(db, Proposal, proposal_id, "Proposal")
    if not proposal_service.verify_proposal_password(proposal, data.password):
        raise HTTPException(status_code=401, detail="Invalid password")

    proposal_service.record_public_view(db, proposal)
    return {"success": True, "proposal": proposal.to_dict(include_password=False)}


# -----------------------------
# Single proposal
# -----------------------------

@router.get("/{proposal_id}")
async def get_proposal(
    proposal_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales")),
):
    return get_or_404(db, Proposal, proposal_id, "Proposal", user=user).to_dict()


@router.patch("/{proposal_id}")
async def update_proposal(
    proposal_id: str,
    data: ProposalUpdateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales")),
):
    proposal = get_or_404(db, Proposal, proposal_id, "Proposal", user=user)
    payload = data.dict(exclude_unset=True)
    if "valid_until" in payload:
        payload["valid_until"] = parse_date_param(payload["valid_until"], "valid_until")

    proposal = proposal_service.update_proposal(db, proposal, payload, user)
    return {"success": True, "proposal": proposal.to_dict()}


@router.delete("/{proposal_id}")
async def delete_proposal(
    proposal_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales")),
):
    proposal = get_or_404(db, Proposal, proposal_id, "Proposal", user=user)
    proposal.deleted = True
    db.commit()

    search.try_delete_object("proposals", proposal.id)
    return {"success": True}


@router.patch("/{proposal_id}/status")
async def update_proposal_status(
    proposal_id: str,
    data: StatusUpdateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales")),
):
    proposal = get_or_404(db, Proposal, proposal_id, "Proposal", user=user)
    try:
        proposal = proposal_service.update_proposal_status(
            db, proposal, data.status, user.id, user.full_name
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    proposal_service.index_proposal(proposal)
    return {"success": True, "proposal": proposal.to_dict()}


@router.post("/{proposal_id}/comments")
async def add_proposal_comment(
    proposal_id: str,
    data: CommentRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales")),
):
    proposal = get_or_404(db, Proposal, proposal_id, "Proposal", user=user)
    try:
        activity = proposal_service.add_comment(db, proposal, data.comment, user)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "activity": activity.to_dict() if activity else None}


@router.get("/{proposal_id}/activities")
async def list_proposal_activities(
    proposal_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales")),
):
    proposal = get_or_404(db, Proposal, proposal_id, "Proposal", user=user)
    activities = (
        db.query(ProposalActivity)
        .filter(ProposalActivity.proposal_id == proposal.id)
        .order_by(ProposalActivity.created_at.desc())
        .all()
    )
    return {"activities": [a.to_dict() for a in activities]}


@router.post("/{proposal_id}/send-email")
async def send_proposal_email(
    proposal_id: str,
    data: SendEmailRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales")),
):
    proposal = get_or_404(db, Proposal, proposal_id, "Proposal", user=user)

    to = (data.to or (proposal.client or {}).get("email") or "").strip()
    if not to:
        raise HTTPException(status_code=400, detail="Missing proposal or client email address")
    if not mailer.is_valid_email(to):
        raise HTTPException(status_code=400, detail="Invalid 'To' email address format")
    for address in data.cc or []:
        if not mailer.is_valid_email(address):
            raise HTTPException(status_code=400, detail=f"Invalid 'CC' email address format: {address}")

    subject = data.subject or f"Proposal: {proposal.title}"
    if data.body:
        html = mailer.text_to_html(data.body)
    else:
        html = (
            f"<p>Dear {proposal.contact_name or 'Valued Client'},</p>"
            f"<p>Please find attached our proposal <b>{proposal.title}</b>.</p>"
            f"<p>Use access code <b>{proposal.password}</b> to view it online.</p>"
            f"<p>Best regards,<br/>{user.full_name}</p>"
        )

    pdf_bytes = generate_proposal_pdf(proposal)
    try:
        mailer.send_email(
            to,
            subject,
            html,
            cc=data.cc or None,
            reply_to=user.email,
            attachments=[mailer.pdf_attachment(temp_pdf_filename(proposal.id, proposal.title), pdf_bytes)],
        )
    except mailer.EmailServiceError as e:
        raise HTTPException(status_code=500, detail=str(e))

    proposal_service.log_activity(
        db, proposal.id, "email_sent",
        f"Proposal emailed to {to}",
        user.id, user.full_name,
        {"to": to, "cc": data.cc or [], "subject": subject},
    )
    if proposal.status == "draft":
        proposal_service.update_proposal_status(db, proposal, "sent", user.id, user.full_name)
        proposal_service.index_proposal(proposal)

    return {"success": True, "message": "Email sent successfully", "status": proposal.status}


@router.get("/{proposal_id}/pdf")
async def download_proposal_pdf(
    proposal_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales")),
):
    proposal = get_or_404(db, Proposal, proposal_id, "Proposal", user=user)
    pdf_bytes = generate_proposal_pdf(proposal)
    proposal_service.log_activity(
        db, proposal.id, "pdf_generated",
        "Proposal PDF generated",
        user.id, user.full_name,
    )
    return pdf_response(pdf_bytes, temp_pdf_filename(proposal.id, proposal.title))


@router.post("/{proposal_id}/cost-estimate")
async def create_cost_estimate(
    proposal_id: str,
    data: CostEstimateFromProposalRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales")),
):
    proposal = get_or_404(db, Proposal, proposal_id, "Proposal", user=user)
    estimate = create_cost_estimate_from_proposal(
        db, proposal, user,
        start_date=parse_date_param(data.start_date, "start_date"),
        end_date=parse_date_param(data.end_date, "end_date"),
        custom_line_items=data.line_items,
        notes=data.notes,
    )
    return {"success": True, "costEstimate": estimate.to_dict()}
