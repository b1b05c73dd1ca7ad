"""
Cost Estimate Service

Handles:
- Cost estimate numbering (CE + epoch ms)
- Direct creation from submitted line items
- Creation from a proposal's products, with default cost categories
- Search indexing of estimates
"""

import logging
import uuid
from datetime import timedelta
from typing import List, Optional

from sqlalchemy.orm import Session

from boohk.models import CostEstimate, Proposal
from boohk.services import search
from boohk.services.pricing import (
    calculate_duration_days,
    calculate_prorated_price,
    recalculate_cost_estimate,
)
from boohk.services.quotation import generate_password, VALIDITY_DAYS
from boohk.services.validators import validate_date_range
from boohk.timeutil import utc_now, epoch_ms, isoformat

logger = logging.getLogger(__name__)

DEFAULT_COST_LINES = [
    ("production-cost", "Production Cost (Tarpaulin/LED Content)", "Production",
     "Estimated cost for content production."),
    ("installation-cost", "Installation/Dismantling Fees", "Installation",
     "Estimated cost for installation and dismantling."),
    ("maintenance-cost", "Maintenance & Monitoring", "Maintenance",
     "Estimated cost for ongoing maintenance and monitoring."),
]

UPDATABLE_FIELDS = ["title", "client", "notes", "custom_message", "start_date", "end_date", "valid_until"]


def generate_cost_estimate_number() -> str:
    return f"CE{epoch_ms()}"


def normalize_line_item(item: dict) -> dict:
    """Fill in ids and defaults for a submitted line item."""
    return {
        "id": item.get("id") or uuid.uuid4().hex[:12],
        "description": item.get("description") or "",
        "quantity": item.get("quantity", 1),
        "unit_price": item.get("unit_price", 0),
        "category": item.get("category") or "Other",
        "notes": item.get("notes") or "",
    }


def rental_line_items(proposal: Proposal, start_date=None, end_date=None) -> List[dict]:
    """One rental line per proposed site, prorated when dates are known."""
    lines = []
    for product in proposal.products or []:
        price = product.get("price") or 0
        if start_date and end_date:
            line_price = float(calculate_prorated_price(price, start_date, end_date))
        else:
            line_price = float(price)

        lines.append({
            "id": product.get("id") or uuid.uuid4().hex[:12],
            "description": product.get("name") or "Site rental",
            "quantity": 1,
            "unit_price": line_price,
            "category": (
                "LED Billboard Rental" if (product.get("type") or "").lower() in ("led", "digital", "dynamic")
                else "Static Billboard Rental"
            ),
            "notes": f"Location: {product.get('location') or 'N/A'}",
        })

    return lines


def default_cost_lines() -> List[dict]:
    return [
        {
            "id": line_id,
            "description": description,
            "quantity": 1,
            "unit_price": 0,
            "category": category,
            "notes": notes,
        }
        for line_id, description, category, notes in DEFAULT_COST_LINES
    ]


def create_cost_estimate(
    db: Session,
    company_id: str,
    title: str,
    client: dict,
    line_items: List[dict],
    user,
    proposal_id: Optional[str] = None,
    start_date=None,
    end_date=None,
    notes: Optional[str] = None,
    custom_message: Optional[str] = None,
) -> CostEstimate:
    """
    Create a draft cost estimate and compute its totals.

    Raises:
        ValueError: If end_date is before start_date
    """
    validate_date_range(start_date, end_date).raise_if_invalid()
    now = utc_now()
    estimate = CostEstimate(
        cost_estimate_number=generate_cost_estimate_number(),
        company_id=company_id,
        proposal_id=proposal_id,
        title=title,
        client=client or {},
        line_items=[normalize_line_item(item) for item in line_items],
        status="draft",
        notes=notes or "",
        custom_message=custom_message or "",
        start_date=start_date,
        end_date=end_date,
        duration_days=calculate_duration_days(start_date, end_date),
        valid_until=now + timedelta(days=VALIDITY_DAYS),
        password=generate_password(),
        created_by=user.id if user else None,
    )
    recalculate_cost_estimate(estimate)

    db.add(estimate)
    db.commit()
    db.refresh(estimate)

    index_cost_estimate(estimate)
    return estimate


def create_cost_estimate_from_proposal(
    db: Session,
    proposal: Proposal,
    user,
    start_date=None,
    end_date=None,
    custom_line_items: Optional[List[dict]] = None,
    notes: Optional[str] = None,
) -> CostEstimate:
    """Build an estimate from a proposal's sites plus the standard cost categories."""
    if custom_line_items:
        line_items = custom_line_items
    else:
        line_items = rental_line_items(proposal, start_date, end_date) + default_cost_lines()

    return create_cost_estimate(
        db,
        company_id=proposal.company_id,
        title=f"Cost Estimate for {proposal.title}",
        client=dict(proposal.client or {}),
        line_items=line_items,
        user=user,
        proposal_id=proposal.id,
        start_date=start_date,
        end_date=end_date,
        notes=notes,
    )


def update_cost_estimate(db: Session, estimate: CostEstimate, data: dict) -> CostEstimate:
    """
    Apply a partial update and recalculate totals.

    Raises:
        ValueError: If the estimate has already been responded to
    """
    if estimate.is_locked:
        raise ValueError(f"Cost estimate is {estimate.status} and can no longer be edited")

    validate_date_range(
        data.get("start_date", estimate.start_date),
        data.get("end_date", estimate.end_date),
    ).raise_if_invalid()

    for field in UPDATABLE_FIELDS:
        if field in data:
            setattr(estimate, field, data[field])

    if "line_items" in data and data["line_items"] is not None:
        estimate.line_items = [normalize_line_item(item) for item in data["line_items"]]

    estimate.duration_days = calculate_duration_days(estimate.start_date, estimate.end_date)
    recalculate_cost_estimate(estimate)

    db.commit()
    db.refresh(estimate)

    index_cost_estimate(estimate)
    return estimate


def cost_estimate_search_record(estimate: CostEstimate) -> dict:
    client = estimate.client or {}
    return {
        "objectID": estimate.id,
        "cost_estimate_number": estimate.cost_estimate_number,
        "title": estimate.title,
        "client_name": client.get("name") or client.get("contactPerson"),
        "client_company": client.get("company"),
        "status": estimate.status,
        "total_amount": float(estimate.total_amount or 0),
        "company_id": estimate.company_id,
        "proposal_id": estimate.proposal_id,
        "created": isoformat(estimate.created_at) or "",
    }


def index_cost_estimate(estimate: CostEstimate) -> bool:
    return search.try_save_object("cost_estimates", cost_estimate_search_record(estimate))
