"""
Proposal Service

Handles:
- Proposal creation with a client access password
- Password verification for the public proposal view
- Status changes with an activity trail
- Activity logging (created, status_changed, email_sent, viewed,
  pdf_generated, updated, comment_added)
"""

import logging
from datetime import timedelta
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from boohk.models import Proposal, ProposalActivity
from boohk.services import search
from boohk.services.quotation import generate_password, VALIDITY_DAYS
from boohk.timeutil import utc_now, isoformat

logger = logging.getLogger(__name__)

PUBLIC_VIEWER_ID = "public_viewer"
COMMENT_PREVIEW_LENGTH = 50

UPDATABLE_FIELDS = ["title", "client", "products", "notes", "custom_message", "valid_until"]


def proposal_total(products) -> Decimal:
    return sum((Decimal(str(p.get("price") or 0)) for p in products or []), Decimal("0"))


def log_activity(
    db: Session,
    proposal_id: str,
    activity_type: str,
    description: str,
    performed_by: str,
    performed_by_name: Optional[str] = None,
    details: Optional[dict] = None,
) -> Optional[ProposalActivity]:
    """Append an entry to a proposal's activity log. Failures are logged, not raised."""
    if activity_type not in ProposalActivity.TYPES:
        raise ValueError(f"Unknown activity type: {activity_type}")
    try:
        activity = ProposalActivity(
            proposal_id=proposal_id,
            type=activity_type,
            description=description,
            performed_by=performed_by,
            performed_by_name=performed_by_name,
            details=details or {},
        )
        db.add(activity)
        db.commit()
        return activity
    except Exception as e:
        db.rollback()
        logger.error(f"Error logging {activity_type} activity for proposal {proposal_id}: {e}")
        return None


def create_proposal(db: Session, data: dict, user) -> Proposal:
    products = data.get("products") or []
    proposal = Proposal(
        company_id=data.get("company_id") or (user.company_id if user else None),
        title=data["title"],
        client=data.get("client") or {},
        products=products,
        total_amount=proposal_total(products),
        status="draft",
        password=generate_password(),
        valid_until=data.get("valid_until") or utc_now() + timedelta(days=VALIDITY_DAYS),
        notes=data.get("notes"),
        custom_message=data.get("custom_message"),
        created_by=user.id if user else None,
    )
    db.add(proposal)
    db.commit()
    db.refresh(proposal)

    log_activity(
        db, proposal.id, "created",
        f'Proposal "{proposal.title}" was created',
        user.id, user.full_name,
    )
    index_proposal(proposal)
    return proposal


def update_proposal(db: Session, proposal: Proposal, data: dict, user) -> Proposal:
    changed = []
    for field in UPDATABLE_FIELDS:
        if field in data and data[field] is not None:
            setattr(proposal, field, data[field])
            changed.append(field)
    if "products" in changed:
        proposal.total_amount = proposal_total(proposal.products)

    db.commit()
    db.refresh(proposal)

    log_activity(
        db, proposal.id, "updated",
        f'Proposal "{proposal.title}" was updated',
        user.id, user.full_name,
        {"fields": changed},
    )
    index_proposal(proposal)
    return proposal


def verify_proposal_password(proposal: Proposal, password: Optional[str]) -> bool:
    """A proposal without a password is open to anyone with the link."""
    if not proposal.password:
        return True
    return password is not None and str(password) == proposal.password


def update_proposal_status(
    db: Session,
    proposal: Proposal,
    status: str,
    user_id: str,
    user_name: Optional[str] = None,
) -> Proposal:
    """
    Change a proposal's status and record the change.

    Raises:
        ValueError: If the status is unknown
    """
    if status not in Proposal.STATUSES:
        raise ValueError(f"Invalid proposal status: {status}")

    old_status = proposal.status or "unknown"
    proposal.status = status
    db.commit()
    db.refresh(proposal)

    if old_status != status:
        log_activity(
            db, proposal.id, "status_changed",
            f"Status changed from {old_status} to {status}",
            user_id, user_name,
            {"old_status": old_status, "new_status": status},
        )
    return proposal


def record_public_view(db: Session, proposal: Proposal) -> Proposal:
    """Log a client view and move a sent proposal to viewed."""
    viewer_name = proposal.contact_name
    log_activity(
        db, proposal.id, "viewed",
        f"Proposal viewed by {viewer_name}",
        PUBLIC_VIEWER_ID, viewer_name,
    )
    if proposal.status == "sent":
        update_proposal_status(db, proposal, "viewed", PUBLIC_VIEWER_ID, viewer_name)
    return proposal


def add_comment(db: Session, proposal: Proposal, comment: str, user) -> Optional[ProposalActivity]:
    comment = (comment or "").strip()
    if not comment:
        raise ValueError("Comment cannot be empty")
    preview = comment
    if len(comment) > COMMENT_PREVIEW_LENGTH:
        preview = comment[:COMMENT_PREVIEW_LENGTH] + "..."
    return log_activity(
        db, proposal.id, "comment_added",
        f"Comment added: {preview}",
        user.id, user.full_name,
        {"comment": comment},
    )


def proposal_search_record(proposal: Proposal) -> dict:
    client = proposal.client or {}
    return {
        "objectID": proposal.id,
        "title": proposal.title,
        "client_company": client.get("company"),
        "client_contact": client.get("contactPerson"),
        "status": proposal.status,
        "total_amount": float(proposal.total_amount or 0),
        "company_id": proposal.company_id,
        "created": isoformat(proposal.created_at) or "",
    }


def index_proposal(proposal: Proposal) -> bool:
    return search.try_save_object("proposals", proposal_search_record(proposal))
