from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from boohk.auth import require_role
from boohk.database import get_db
from boohk.models import User
from boohk.routes.helpers import require_company_id, parse_date_param
from boohk.services.dashboard import get_business_dashboard

router = APIRouter(prefix="/api/business", tags=["business"])


@router.get("/dashboard")
async def business_dashboard(
    companyId: Optional[str] = None,
    startDate: Optional[str] = None,
    endDate: Optional[str] = None,
    year: Optional[int] = None,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("business")),
):
    """Site performance, conversion and occupancy for a company."""
    require_company_id(companyId, user)
    return get_business_dashboard(
        db,
        companyId,
        start_date=parse_date_param(startDate, "startDate"),
        end_date=parse_date_param(endDate, "endDate"),
        year=year,
    )
