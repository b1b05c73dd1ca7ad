"""
Job Order Service

Handles:
- JO number generation (plain and personalized by creator initials)
- Batch creation of job orders with assignee notifications
- Compliance snapshot of the source quotation
"""

import logging
import random
from typing import List, Optional

from sqlalchemy.orm import Session

from boohk.models import JobOrder, Notification, Quotation
from boohk.services.quotation import pending_compliance_items
from boohk.timeutil import epoch_ms

logger = logging.getLogger(__name__)

JOB_ORDER_FIELDS = [
    "jo_type",
    "company_id",
    "quotation_id",
    "booking_id",
    "product_id",
    "site_name",
    "site_location",
    "client_name",
    "client_company",
    "date_requested",
    "deadline",
    "requested_by",
    "assign_to",
    "remarks",
    "attachments",
]


def generate_jo_number() -> str:
    """Format: JO-<epoch ms>-<3 random digits>."""
    return f"JO-{epoch_ms()}-{random.randint(0, 999):03d}"


def user_initials(user) -> str:
    """Initials of first, middle and last name, at most 4 characters."""
    names = [user.first_name, user.middle_name, user.last_name]
    return "".join(name.strip()[0].upper() for name in names if name and name.strip())[:4]


def generate_personalized_jo_number(db: Session, user) -> str:
    """
    Format: <INITIALS>-<NNNN>, e.g. JPDM-0001.

    The sequence is the creator's job order count plus one. Falls back to
    the plain JO number when the user has no usable name.
    """
    initials = user_initials(user) if user else ""
    if not initials:
        return generate_jo_number()

    count = db.query(JobOrder).filter(JobOrder.created_by == user.id).count()
    return f"{initials}-{count + 1:04d}"


def notify_assignee(db: Session, job_order: JobOrder, creator) -> Optional[Notification]:
    """Tell the assignee about a new job order. Failures are logged, not raised."""
    try:
        notification = Notification(
            user_id=job_order.assign_to,
            company_id=job_order.company_id,
            type="job_order_assigned",
            title="New Job Order Assigned",
            message=(
                f"{creator.full_name if creator else 'Someone'} assigned you "
                f"{job_order.jo_type} job order {job_order.jo_number}"
                + (f" for {job_order.site_name}" if job_order.site_name else "")
            ),
            navigate_to=f"/logistics/job-orders/{job_order.id}",
        )
        db.add(notification)
        db.commit()
        return notification
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to create notification for job order {job_order.id}: {e}")
        return None


def create_job_orders(db: Session, payloads: List[dict], status: str, creator) -> List[JobOrder]:
    """
    Create one or more job orders with a shared status.

    Each job order snapshots its quotation's project compliance and records
    which items are still missing. Assignees other than the creator are
    notified.

    Raises:
        ValueError: If a payload is missing jo_type or uses an unknown type/status
    """
    if status not in JobOrder.STATUSES:
        raise ValueError(f"Invalid job order status: {status}")

    created = []
    for payload in payloads:
        jo_type = payload.get("jo_type")
        if not jo_type:
            raise ValueError("jo_type is required")
        if jo_type not in JobOrder.TYPES:
            raise ValueError(f"Invalid job order type: {jo_type}")

        job_order = JobOrder(
            jo_number=generate_personalized_jo_number(db, creator),
            status=status,
            created_by=creator.id if creator else None,
        )
        for field in JOB_ORDER_FIELDS:
            if field in payload and payload[field] is not None:
                setattr(job_order, field, payload[field])
        if not job_order.company_id and creator:
            job_order.company_id = creator.company_id

        if job_order.quotation_id:
            quotation = db.query(Quotation).filter(Quotation.id == job_order.quotation_id).first()
            if quotation:
                compliance = dict(quotation.project_compliance or {})
                job_order.project_compliance = compliance
                job_order.missing_compliance = pending_compliance_items(compliance)

        db.add(job_order)
        # Flush so the next personalized number counts this one
        db.flush()
        created.append(job_order)

    db.commit()
    for job_order in created:
        db.refresh(job_order)
        logger.info(f"Created job order {job_order.jo_number}")
        if job_order.assign_to and creator and job_order.assign_to != creator.id:
            notify_assignee(db, job_order, creator)

    return created


def list_job_orders_for_product(
    db: Session, product_id: str, page_size: int = 10, last_doc_id: Optional[str] = None
) -> dict:
    """
    Page through a site's job orders, newest first.

    Fetches one extra row to tell whether a next page exists.
    """
    query = db.query(JobOrder).filter(
        JobOrder.product_id == product_id, JobOrder.deleted == False
    )

    if last_doc_id:
        cursor = db.query(JobOrder).filter(JobOrder.id == last_doc_id).first()
        if cursor:
            query = query.filter(
                (JobOrder.created_at < cursor.created_at)
                | ((JobOrder.created_at == cursor.created_at) & (JobOrder.id < cursor.id))
            )

    rows = (
        query.order_by(JobOrder.created_at.desc(), JobOrder.id.desc())
        .limit(page_size + 1)
        .all()
    )
    page_rows = rows[:page_size]
    return {
        "jobOrders": [row.to_dict() for row in page_rows],
        "hasNext": len(rows) > page_size,
        "lastDocId": page_rows[-1].id if page_rows else None,
    }
