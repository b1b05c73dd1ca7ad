from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from boohk.auth import require_role
from boohk.database import get_db
from boohk.models import Booking, User
from boohk.routes.helpers import get_or_404, require_company_id, paginate
from boohk.services import search
from boohk.services.quotation import booking_search_record

router = APIRouter(prefix="/api/bookings", tags=["bookings"])


class BookingStatusRequest(BaseModel):
    status: str
    cancel_reason: Optional[str] = None


@router.get("")
async def list_bookings(
    companyId: Optional[str] = None,
    status: Optional[str] = None,
    type: Optional[str] = None,
    page: int = 1,
    pageSize: int = 20,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales", "logistics")),
):
    require_company_id(companyId, user)
    query = db.query(Booking).filter(Booking.company_id == companyId, Booking.deleted == False)
    if status:
        query = query.filter(Booking.status == status)
    if type:
        query = query.filter(Booking.type == type)

    result = paginate(query.order_by(Booking.created_at.desc()), page, pageSize)
    result["bookings"] = [b.to_dict() for b in result.pop("items")]
    return result


@router.get("/completed/count")
async def count_completed_bookings(
    companyId: Optional[str] = None,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales", "logistics", "business")),
):
    require_company_id(companyId, user)
    count = db.query(Booking).filter(
        Booking.company_id == companyId,
        Booking.status == "COMPLETED",
        Booking.deleted == False,
    ).count()
    return {"count": count}


@router.get("/{booking_id}")
async def get_booking(
    booking_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales", "logistics")),
):
    return get_or_404(db, Booking, booking_id, "Booking", user=user).to_dict()


@router.patch("/{booking_id}/status")
async def update_booking_status(
    booking_id: str,
    data: BookingStatusRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales", "logistics")),
):
    booking = get_or_404(db, Booking, booking_id, "Booking", user=user)

    if data.status not in Booking.STATUSES:
        raise HTTPException(status_code=400, detail=f"Invalid booking status: {data.status}")
    if data.status == "CANCELLED":
        if not (data.cancel_reason or "").strip():
            raise HTTPException(status_code=400, detail="A cancel reason is required")
        booking.cancel_reason = data.cancel_reason.strip()

    booking.status = data.status
    db.commit()
    db.refresh(booking)

    search.try_save_object("booking", booking_search_record(booking))
    return {"success": True, "booking": booking.to_dict()}
