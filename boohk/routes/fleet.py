from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from boohk.auth import require_role
from boohk.database import get_db
from boohk.models import FleetVehicle, User
from boohk.routes.helpers import get_or_404, require_company_id, parse_date_param
from boohk.services.validators import validate_fleet_vehicle

router = APIRouter(prefix="/api/fleet", tags=["fleet"])

VEHICLE_FIELDS = [
    "company_id",
    "vehicle_number",
    "vehicle_type",
    "make",
    "model",
    "plate_number",
    "status",
    "assigned_driver",
    "registration_expiry",
    "insurance_expiry",
    "notes",
]


class FleetVehicleRequest(BaseModel):
    company_id: Optional[str] = None
    vehicle_number: Optional[str] = None
    vehicle_type: Optional[str] = None
    make: Optional[str] = None
    model: Optional[str] = None
    plate_number: Optional[str] = None
    status: Optional[str] = None
    assigned_driver: Optional[str] = None
    registration_expiry: Optional[str] = None
    insurance_expiry: Optional[str] = None
    notes: Optional[str] = None


def _apply(vehicle: FleetVehicle, payload: dict):
    for field in VEHICLE_FIELDS:
        if field not in payload:
            continue
        value = payload[field]
        if field in ("registration_expiry", "insurance_expiry"):
            parsed = parse_date_param(value, field)
            value = parsed.date() if parsed else None
        setattr(vehicle, field, value)


@router.post("")
async def create_vehicle(
    data: FleetVehicleRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("logistics")),
):
    payload = data.dict(exclude_unset=True)
    payload["company_id"] = require_company_id(payload.get("company_id") or user.company_id, user)

    validation = validate_fleet_vehicle(payload, db)
    if not validation.is_valid:
        raise HTTPException(status_code=400, detail="; ".join(validation.errors))

    vehicle = FleetVehicle(created_by=user.id)
    _apply(vehicle, payload)
    db.add(vehicle)
    db.commit()
    db.refresh(vehicle)
    return {"success": True, "vehicle": vehicle.to_dict(), "warnings": validation.warnings}


@router.get("")
async def list_vehicles(
    companyId: Optional[str] = None,
    status: Optional[str] = None,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("logistics")),
):
    require_company_id(companyId, user)
    query = db.query(FleetVehicle).filter(
        FleetVehicle.company_id == companyId, FleetVehicle.deleted == False
    )
    if status:
        query = query.filter(FleetVehicle.status == status)
    vehicles = query.order_by(FleetVehicle.created_at.desc()).all()
    return {"vehicles": [v.to_dict() for v in vehicles]}


@router.get("/{vehicle_id}")
async def get_vehicle(
    vehicle_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("logistics")),
):
    return get_or_404(db, FleetVehicle, vehicle_id, "Vehicle", user=user).to_dict()


@router.patch("/{vehicle_id}")
async def update_vehicle(
    vehicle_id: str,
    data: FleetVehicleRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("logistics")),
):
    vehicle = get_or_404(db, FleetVehicle, vehicle_id, "Vehicle", user=user)
    payload = data.dict(exclude_unset=True)
    payload.pop("company_id", None)
    merged = {"vehicle_number": vehicle.vehicle_number, "company_id": vehicle.company_id, **payload}

    validation = validate_fleet_vehicle(merged, db, existing_id=vehicle.id)
    if not validation.is_valid:
        raise HTTPException(status_code=400, detail="; ".join(validation.errors))

    _apply(vehicle, payload)
    db.commit()
    db.refresh(vehicle)
    return {"success": True, "vehicle": vehicle.to_dict(), "warnings": validation.warnings}


@router.delete("/{vehicle_id}")
async def delete_vehicle(
    vehicle_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("logistics")),
):
    vehicle = get_or_404(db, FleetVehicle, vehicle_id, "Vehicle", user=user)
    vehicle.deleted = True
    db.commit()
    return {"success": True}
