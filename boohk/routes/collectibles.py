from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from boohk.auth import require_role
from boohk.database import get_db
from boohk.models import Collectible, User
from boohk.routes.helpers import ensure_company_access, get_or_404, require_company_id, parse_date_param, paginate
from boohk.services import search
from boohk.services.collection import (
    sync_collection_status_for_collectible,
    update_quotation_collection_status,
)
from boohk.services.validators import validate_collectible
from boohk.timeutil import isoformat

router = APIRouter(prefix="/api/collectibles", tags=["collectibles"])

COLLECTIBLE_FIELDS = [
    "company_id",
    "booking_id",
    "quotation_id",
    "type",
    "client_name",
    "invoice_no",
    "bs_no",
    "covered_period",
    "total_amount",
    "net_amount",
    "mode_of_payment",
    "due_date",
    "collection_date",
    "status",
    "bir_2307_url",
    "notes",
]


class CollectibleRequest(BaseModel):
    company_id: Optional[str] = None
    booking_id: Optional[str] = None
    quotation_id: Optional[str] = None
    type: Optional[str] = None
    client_name: Optional[str] = None
    invoice_no: Optional[str] = None
    bs_no: Optional[str] = None
    covered_period: Optional[str] = None
    total_amount: Optional[float] = None
    net_amount: Optional[float] = None
    mode_of_payment: Optional[str] = None
    due_date: Optional[str] = None
    collection_date: Optional[str] = None
    status: Optional[str] = None
    bir_2307_url: Optional[str] = None
    notes: Optional[str] = None


def _apply(collectible: Collectible, payload: dict):
    for field in COLLECTIBLE_FIELDS:
        if field not in payload:
            continue
        value = payload[field]
        if field in ("due_date", "collection_date"):
            value = parse_date_param(value, field)
        setattr(collectible, field, value)


def collectible_search_record(collectible: Collectible) -> dict:
    return {
        "objectID": collectible.id,
        "client_name": collectible.client_name,
        "invoice_no": collectible.invoice_no,
        "type": collectible.type,
        "status": collectible.status,
        "total_amount": float(collectible.total_amount or 0),
        "company_id": collectible.company_id,
        "due_date": isoformat(collectible.due_date),
    }


@router.post("")
async def create_collectible(
    data: CollectibleRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("treasury", "accounting")),
):
    payload = data.dict(exclude_unset=True)
    payload.setdefault("company_id", user.company_id)
    ensure_company_access(user, payload["company_id"])
    validation = validate_collectible(payload)
    if not validation.is_valid:
        raise HTTPException(status_code=400, detail="; ".join(validation.errors))

    collectible = Collectible(created_by=user.id)
    _apply(collectible, payload)
    db.add(collectible)
    db.commit()
    db.refresh(collectible)

    sync_collection_status_for_collectible(db, collectible.id)
    search.try_save_object("collectibles", collectible_search_record(collectible))
    return {"success": True, "collectible": collectible.to_dict()}


@router.get("")
async def list_collectibles(
    companyId: Optional[str] = None,
    status: Optional[str] = None,
    page: int = 1,
    pageSize: int = 20,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("treasury", "accounting")),
):
    require_company_id(companyId, user)
    query = db.query(Collectible).filter(
        Collectible.company_id == companyId, Collectible.deleted == False
    )
    if status:
        query = query.filter(Collectible.status == status)

    result = paginate(query.order_by(Collectible.created_at.desc()), page, pageSize)
    result["collectibles"] = [c.to_dict() for c in result.pop("items")]
    return result


@router.get("/{collectible_id}")
async def get_collectible(
    collectible_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("treasury", "accounting")),
):
    return get_or_404(db, Collectible, collectible_id, "Collectible", user=user).to_dict()


@router.patch("/{collectible_id}")
async def update_collectible(
    collectible_id: str,
    data: CollectibleRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("treasury", "accounting")),
):
    collectible = get_or_404(db, Collectible, collectible_id, "Collectible", user=user)

    payload = data.dict(exclude_unset=True)
    payload.pop("company_id", None)
    validation = validate_collectible(payload, partial=True)
    if not validation.is_valid:
        raise HTTPException(status_code=400, detail="; ".join(validation.errors))

    previous_quotation_id = collectible.quotation_id
    _apply(collectible, payload)
    db.commit()
    db.refresh(collectible)

    sync_collection_status_for_collectible(db, collectible.id)
    if previous_quotation_id and previous_quotation_id != collectible.quotation_id:
        # Moved to another quotation; refresh the old rollup too
        update_quotation_collection_status(db, previous_quotation_id)

    search.try_save_object("collectibles", collectible_search_record(collectible))
    return {"success": True, "collectible": collectible.to_dict()}


@router.delete("/{collectible_id}")
async def delete_collectible(
    collectible_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("treasury", "accounting")),
):
    collectible = get_or_404(db, Collectible, collectible_id, "Collectible", user=user)
    collectible.deleted = True
    db.commit()

    sync_collection_status_for_collectible(db, collectible.id)
    search.try_delete_object("collectibles", collectible.id)
    return {"success": True}
