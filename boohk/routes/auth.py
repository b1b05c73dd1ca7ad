from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from boohk.auth import (
    authenticate_user,
    set_session_cookie,
    clear_session_cookie,
    hash_password,
    verify_password,
    require_auth,
    require_admin,
)
from boohk.database import get_db
from boohk.models.user import User
from boohk.routes.helpers import get_or_404, require_company_id
from boohk.services.validators import validate_password, validate_roles, validate_user

router = APIRouter(prefix="/api/auth", tags=["auth"])
admin_router = APIRouter(prefix="/api/admin/users", tags=["admin"])


class LoginRequest(BaseModel):
    email: str
    password: str


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str


class UserCreateRequest(BaseModel):
    email: str
    password: str
    first_name: str
    middle_name: Optional[str] = None
    last_name: Optional[str] = None
    company_id: Optional[str] = None
    roles: List[str] = []


class RolesRequest(BaseModel):
    roles: List[str]


@router.post("/login")
async def login(data: LoginRequest, db: Session = Depends(get_db)):
    user = authenticate_user(db, data.email.strip().lower(), data.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    response = JSONResponse(content={"success": True, "user": user.to_dict()})
    set_session_cookie(response, user.id)
    return response


@router.post("/logout")
async def logout():
    """Log out the current user."""
    response = JSONResponse(content={"success": True})
    clear_session_cookie(response)
    return response


@router.get("/me")
async def me(user: User = Depends(require_auth)):
    return user.to_dict()


@router.post("/change-password")
async def change_password(
    data: ChangePasswordRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_auth),
):
    if not verify_password(data.current_password, user.password_hash):
        raise HTTPException(status_code=400, detail="Current password is incorrect")

    validation = validate_password(data.new_password)
    if not validation.is_valid:
        raise HTTPException(status_code=400, detail="; ".join(validation.errors))

    user.password_hash = hash_password(data.new_password)
    db.commit()
    return {"success": True}


# -----------------------------
# Access management (admin)
# -----------------------------

@admin_router.get("")
async def list_users(
    companyId: Optional[str] = None,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin()),
):
    require_company_id(companyId)
    users = (
        db.query(User)
        .filter(User.company_id == companyId)
        .order_by(User.first_name, User.last_name)
        .all()
    )
    return {"users": [u.to_dict() for u in users]}


@admin_router.post("")
async def create_user(
    data: UserCreateRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin()),
):
    payload = data.dict()
    payload["email"] = data.email.strip().lower()
    validation = validate_user(payload, db)
    if not validation.is_valid:
        raise HTTPException(status_code=400, detail="; ".join(validation.errors))

    user = User(
        email=payload["email"],
        password_hash=hash_password(data.password),
        first_name=data.first_name.strip(),
        middle_name=data.middle_name,
        last_name=data.last_name,
        company_id=data.company_id or admin.company_id,
        roles=list(dict.fromkeys(data.roles)),
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return {"success": True, "user": user.to_dict()}


@admin_router.put("/{user_id}/roles")
async def set_roles(
    user_id: str,
    data: RolesRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin()),
):
    user = get_or_404(db, User, user_id, "User")
    validation = validate_roles(data.roles)
    if not validation.is_valid:
        raise HTTPException(status_code=400, detail="; ".join(validation.errors))

    user.roles = list(dict.fromkeys(data.roles))
    db.commit()
    db.refresh(user)
    return {"success": True, "user": user.to_dict()}


@admin_router.post("/{user_id}/deactivate")
async def deactivate_user(
    user_id: str,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin()),
):
    user = get_or_404(db, User, user_id, "User")
    if user.id == admin.id:
        raise HTTPException(status_code=400, detail="You cannot deactivate your own account")
    user.is_active = False
    db.commit()
    return {"success": True}
