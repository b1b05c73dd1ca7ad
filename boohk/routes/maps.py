from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from boohk.auth import require_auth
from boohk.models import User
from boohk.routes.helpers import require_param
from boohk.services import maps as maps_service

router = APIRouter(prefix="/api/maps", tags=["maps"])


@router.get("/geocode")
async def geocode(address: Optional[str] = None, user: User = Depends(require_auth)):
    require_param((address or "").strip(), "address")
    try:
        results = maps_service.geocode(address.strip())
    except maps_service.MapsServiceError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"success": True, "results": results}
