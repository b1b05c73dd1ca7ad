"""
Service Assignment Service

Handles SA numbering, creation from job orders and search indexing.
"""
import logging
import random

from sqlalchemy.orm import Session

from boohk.models import ServiceAssignment, JobOrder
from boohk.services import search
from boohk.timeutil import isoformat

logger = logging.getLogger(__name__)

ASSIGNMENT_FIELDS = [
    "job_order_id",
    "booking_id",
    "product_id",
    "site_name",
    "service_type",
    "assigned_to",
    "crew",
    "start_date",
    "end_date",
    "remarks",
    "attachments",
]


def generate_sa_number() -> str:
    """Six random digits, 100000-999999."""
    return str(random.randint(100000, 999999))


def validate_assignment_status(status: str):
    if status not in ServiceAssignment.STATUSES:
        raise ValueError(f"Invalid service assignment status: {status}")


def create_service_assignment(db: Session, data: dict, user) -> ServiceAssignment:
    """
    Create a service assignment, filling site and booking from its job order.

    Raises:
        ValueError: If service_type or status is invalid
    """
    service_type = data.get("service_type")
    if service_type not in ServiceAssignment.SERVICE_TYPES:
        raise ValueError(f"Invalid service type: {service_type}")
    status = data.get("status") or "Draft"
    validate_assignment_status(status)

    assignment = ServiceAssignment(
        sa_number=generate_sa_number(),
        company_id=data.get("company_id") or user.company_id,
        status=status,
        created_by=user.id,
    )
    for field in ASSIGNMENT_FIELDS:
        if data.get(field) is not None:
            setattr(assignment, field, data[field])

    if assignment.job_order_id:
        job_order = db.query(JobOrder).filter(JobOrder.id == assignment.job_order_id).first()
        if job_order is None:
            raise ValueError("Job order not found")
        assignment.booking_id = assignment.booking_id or job_order.booking_id
        assignment.product_id = assignment.product_id or job_order.product_id
        assignment.site_name = assignment.site_name or job_order.site_name

    db.add(assignment)
    db.commit()
    db.refresh(assignment)
    logger.info(f"Created service assignment SA#{assignment.sa_number}")

    index_service_assignment(assignment)
    return assignment


def update_service_assignment(db: Session, assignment: ServiceAssignment, data: dict) -> ServiceAssignment:
    if "service_type" in data and data["service_type"] not in ServiceAssignment.SERVICE_TYPES:
        raise ValueError(f"Invalid service type: {data['service_type']}")
    if "status" in data and data["status"] is not None:
        validate_assignment_status(data["status"])
        assignment.status = data["status"]
    for field in ASSIGNMENT_FIELDS:
        if field in data and data[field] is not None:
            setattr(assignment, field, data[field])

    db.commit()
    db.refresh(assignment)
    index_service_assignment(assignment)
    return assignment


def service_assignment_search_record(assignment: ServiceAssignment) -> dict:
    return {
        "objectID": assignment.id,
        "saNumber": assignment.sa_number,
        "serviceType": assignment.service_type,
        "siteName": assignment.site_name,
        "assignedTo": assignment.assigned_to,
        "status": assignment.status,
        "company_id": assignment.company_id,
        "created": isoformat(assignment.created_at) or "",
    }


def index_service_assignment(assignment: ServiceAssignment) -> bool:
    return search.try_save_object(
        "service_assignments", service_assignment_search_record(assignment)
    )
