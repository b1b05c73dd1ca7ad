"""Shared lookups and request checks for the JSON API."""
from typing import Optional

from fastapi import HTTPException
from fastapi.responses import Response

from boohk.timeutil import parse_datetime

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def ensure_company_access(user, company_id: Optional[str]):
    """403 unless the user belongs to the company. Admins may open any company."""
    if user is None or user.is_admin:
        return
    if company_id != user.company_id:
        raise HTTPException(status_code=403, detail="Access denied for this company")


def get_or_404(db, model, object_id: str, label: str, user=None):
    """
    Load a non-deleted row by id or raise 404 "<label> not found".

    When a user is given, rows owned by another company raise 403.
    """
    query = db.query(model).filter(model.id == object_id)
    if hasattr(model, "deleted"):
        query = query.filter(model.deleted == False)
    obj = query.first()
    if not obj:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    if user is not None and hasattr(model, "company_id"):
        ensure_company_access(user, obj.company_id)
    return obj


def require_company_id(company_id: Optional[str], user=None) -> str:
    if not company_id:
        raise HTTPException(status_code=400, detail="companyId is required")
    ensure_company_access(user, company_id)
    return company_id


def require_param(value, name: str):
    if value is None or value == "":
        raise HTTPException(status_code=400, detail=f"Missing required parameter: {name}")
    return value


def parse_date_param(value: Optional[str], name: str):
    try:
        return parse_datetime(value)
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail=f"Invalid date for {name}")


def paginate(query, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> dict:
    """Offset pagination. Pages are 1-based."""
    page = max(page or 1, 1)
    page_size = min(max(page_size or DEFAULT_PAGE_SIZE, 1), MAX_PAGE_SIZE)
    total = query.count()
    rows = query.offset((page - 1) * page_size).limit(page_size).all()
    return {
        "items": rows,
        "page": page,
        "pageSize": page_size,
        "total": total,
        "hasNext": page * page_size < total,
    }


def pdf_response(pdf_bytes: bytes, filename: str, inline: bool = True) -> Response:
    disposition = "inline" if inline else "attachment"
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'{disposition}; filename="{filename}"'},
    )
