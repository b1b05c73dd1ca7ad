from typing import List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from boohk.auth import require_role
from boohk.database import get_db
from boohk.models import JobOrder, Product, User
from boohk.routes.helpers import (
    ensure_company_access,
    get_or_404,
    require_company_id,
    require_param,
    parse_date_param,
    paginate,
)
from boohk.services import job_order as job_order_service

router = APIRouter(prefix="/api/job-orders", tags=["job-orders"])
logistics_router = APIRouter(prefix="/api/logistics", tags=["logistics"])

JOB_ORDERS_PER_PAGE = 10


class JobOrderPayload(BaseModel):
    jo_type: str
    company_id: Optional[str] = None
    quotation_id: Optional[str] = None
    booking_id: Optional[str] = None
    product_id: Optional[str] = None
    site_name: Optional[str] = None
    site_location: Optional[str] = None
    client_name: Optional[str] = None
    client_company: Optional[str] = None
    date_requested: Optional[str] = None
    deadline: Optional[str] = None
    requested_by: Optional[str] = None
    assign_to: Optional[str] = None
    remarks: Optional[str] = None
    attachments: Optional[list] = None


class JobOrderCreateRequest(BaseModel):
    status: str = "pending"
    jobOrders: Union[JobOrderPayload, List[JobOrderPayload]]


class StatusUpdateRequest(BaseModel):
    status: str


def _payload(job_order: JobOrderPayload) -> dict:
    payload = job_order.dict(exclude_unset=True)
    for field in ("date_requested", "deadline"):
        if field in payload:
            payload[field] = parse_date_param(payload[field], field)
    return payload


@router.post("")
async def create_job_orders(
    data: JobOrderCreateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales", "logistics")),
):
    """Create one job order or a batch sharing the same status."""
    items = data.jobOrders if isinstance(data.jobOrders, list) else [data.jobOrders]
    if not items:
        raise HTTPException(status_code=400, detail="At least one job order is required")

    payloads = [_payload(item) for item in items]
    for payload in payloads:
        ensure_company_access(user, payload.get("company_id") or user.company_id)

    try:
        created = job_order_service.create_job_orders(db, payloads, data.status, user)
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))

    return {
        "success": True,
        "jobOrderIds": [jo.id for jo in created],
        "jobOrders": [jo.to_dict() for jo in created],
    }


@router.get("")
async def list_job_orders(
    companyId: Optional[str] = None,
    status: Optional[str] = None,
    page: int = 1,
    pageSize: int = 20,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales", "logistics")),
):
    require_company_id(companyId, user)
    query = db.query(JobOrder).filter(JobOrder.company_id == companyId, JobOrder.deleted == False)
    if status:
        query = query.filter(JobOrder.status == status)

    result = paginate(query.order_by(JobOrder.created_at.desc()), page, pageSize)
    result["jobOrders"] = [jo.to_dict() for jo in result.pop("items")]
    return result


@router.get("/{job_order_id}")
async def get_job_order(
    job_order_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales", "logistics")),
):
    return get_or_404(db, JobOrder, job_order_id, "Job order", user=user).to_dict()


@router.patch("/{job_order_id}/status")
async def update_job_order_status(
    job_order_id: str,
    data: StatusUpdateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales", "logistics")),
):
    job_order = get_or_404(db, JobOrder, job_order_id, "Job order", user=user)
    if data.status not in JobOrder.STATUSES:
        raise HTTPException(status_code=400, detail=f"Invalid job order status: {data.status}")

    job_order.status = data.status
    db.commit()
    db.refresh(job_order)
    return {"success": True, "jobOrder": job_order.to_dict()}


@logistics_router.get("/assignments/job-orders")
async def list_site_job_orders(
    productId: Optional[str] = None,
    page: int = 1,
    lastDocId: Optional[str] = None,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("logistics")),
):
    """Job orders for one site, newest first, ten per page."""
    require_param(productId, "productId")
    product = db.query(Product).filter(Product.id == productId).first()
    if product:
        ensure_company_access(user, product.company_id)
    result = job_order_service.list_job_orders_for_product(
        db, productId, page_size=JOB_ORDERS_PER_PAGE, last_doc_id=lastDocId
    )
    result["page"] = page
    return result
