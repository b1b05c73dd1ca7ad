from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from boohk.auth import require_role
from boohk.database import get_db
from boohk.models import Client, User
from boohk.routes.helpers import ensure_company_access, get_or_404, require_company_id, paginate
from boohk.services.validators import validate_client

router = APIRouter(prefix="/api/clients", tags=["clients"])

CLIENT_FIELDS = ["company_id", "name", "company_name", "email", "phone", "address", "designation"]


class ClientRequest(BaseModel):
    company_id: Optional[str] = None
    name: Optional[str] = None
    company_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    designation: Optional[str] = None


@router.post("")
async def create_client(
    data: ClientRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales")),
):
    payload = data.dict(exclude_unset=True)
    payload["company_id"] = payload.get("company_id") or user.company_id
    ensure_company_access(user, payload["company_id"])

    validation = validate_client(payload, db)
    if not validation.is_valid:
        raise HTTPException(status_code=400, detail="; ".join(validation.errors))

    client = Client(created_by=user.id)
    for field in CLIENT_FIELDS:
        if field in payload:
            setattr(client, field, payload[field])
    db.add(client)
    db.commit()
    db.refresh(client)
    return {"success": True, "client": client.to_dict(), "warnings": validation.warnings}


@router.get("")
async def list_clients(
    companyId: Optional[str] = None,
    q: Optional[str] = None,
    page: int = 1,
    pageSize: int = 20,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales")),
):
    require_company_id(companyId, user)
    query = db.query(Client).filter(Client.company_id == companyId, Client.deleted == False)
    if q:
        pattern = f"%{q.strip()}%"
        query = query.filter(Client.name.ilike(pattern) | Client.company_name.ilike(pattern))

    result = paginate(query.order_by(Client.name), page, pageSize)
    result["clients"] = [c.to_dict() for c in result.pop("items")]
    return result


@router.get("/{client_id}")
async def get_client(
    client_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales")),
):
    return get_or_404(db, Client, client_id, "Client", user=user).to_dict()


@router.patch("/{client_id}")
async def update_client(
    client_id: str,
    data: ClientRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales")),
):
    client = get_or_404(db, Client, client_id, "Client", user=user)
    payload = data.dict(exclude_unset=True)
    payload.pop("company_id", None)
    merged = {**client.to_dict(), **payload}

    validation = validate_client(merged, db, existing_id=client.id)
    if not validation.is_valid:
        raise HTTPException(status_code=400, detail="; ".join(validation.errors))

    for field in CLIENT_FIELDS:
        if field in payload:
            setattr(client, field, payload[field])
    db.commit()
    db.refresh(client)
    return {"success": True, "client": client.to_dict(), "warnings": validation.warnings}


@router.delete("/{client_id}")
async def delete_client(
    client_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales")),
):
    client = get_or_404(db, Client, client_id, "Client", user=user)
    client.deleted = True
    db.commit()
    return {"success": True}
