from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from boohk.auth import require_role
from boohk.database import get_db
from boohk.models import ServiceAssignment, User
from boohk.routes.helpers import get_or_404, require_company_id, parse_date_param, paginate, pdf_response
from boohk.services import search
from boohk.services import service_assignment as assignment_service
from boohk.services.pdf import generate_service_assignment_pdf

router = APIRouter(prefix="/api/service-assignments", tags=["service-assignments"])


class ServiceAssignmentRequest(BaseModel):
    company_id: Optional[str] = None
    job_order_id: Optional[str] = None
    booking_id: Optional[str] = None
    product_id: Optional[str] = None
    site_name: Optional[str] = None
    service_type: Optional[str] = None
    assigned_to: Optional[str] = None
    crew: Optional[List] = None
    status: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    remarks: Optional[str] = None
    attachments: Optional[list] = None


class StatusUpdateRequest(BaseModel):
    status: str


def _payload(data: ServiceAssignmentRequest) -> dict:
    payload = data.dict(exclude_unset=True)
    for field in ("start_date", "end_date"):
        if field in payload:
            payload[field] = parse_date_param(payload[field], field)
    return payload


@router.post("")
async def create_service_assignment(
    data: ServiceAssignmentRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("logistics")),
):
    try:
        assignment = assignment_service.create_service_assignment(db, _payload(data), user)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "serviceAssignment": assignment.to_dict()}


@router.get("")
async def list_service_assignments(
    companyId: Optional[str] = None,
    status: Optional[str] = None,
    page: int = 1,
    pageSize: int = 20,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("logistics")),
):
    require_company_id(companyId, user)
    query = db.query(ServiceAssignment).filter(
        ServiceAssignment.company_id == companyId, ServiceAssignment.deleted == False
    )
    if status:
        query = query.filter(ServiceAssignment.status == status)

    result = paginate(query.order_by(ServiceAssignment.created_at.desc()), page, pageSize)
    result["serviceAssignments"] = [sa.to_dict() for sa in result.pop("items")]
    return result


@router.get("/{assignment_id}")
async def get_service_assignment(
    assignment_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("logistics")),
):
    return get_or_404(db, ServiceAssignment, assignment_id, "Service assignment", user=user).to_dict()


@router.patch("/{assignment_id}")
async def update_service_assignment(
    assignment_id: str,
    data: ServiceAssignmentRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("logistics")),
):
    assignment = get_or_404(db, ServiceAssignment, assignment_id, "Service assignment", user=user)
    try:
        assignment = assignment_service.update_service_assignment(db, assignment, _payload(data))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "serviceAssignment": assignment.to_dict()}


@router.patch("/{assignment_id}/status")
async def update_service_assignment_status(
    assignment_id: str,
    data: StatusUpdateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("logistics")),
):
    assignment = get_or_404(db, ServiceAssignment, assignment_id, "Service assignment", user=user)
    try:
        assignment = assignment_service.update_service_assignment(db, assignment, {"status": data.status})
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "serviceAssignment": assignment.to_dict()}


@router.delete("/{assignment_id}")
async def delete_service_assignment(
    assignment_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("logistics")),
):
    assignment = get_or_404(db, ServiceAssignment, assignment_id, "Service assignment", user=user)
    assignment.deleted = True
    db.commit()

    search.try_delete_object("service_assignments", assignment.id)
    return {"success": True}


@router.get("/{assignment_id}/pdf")
async def download_service_assignment_pdf(
    assignment_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("logistics")),
):
    assignment = get_or_404(db, ServiceAssignment, assignment_id, "Service assignment", user=user)
    return pdf_response(
        generate_service_assignment_pdf(assignment), f"SA_{assignment.sa_number}.pdf"
    )
