from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from boohk.auth import require_role
from boohk.database import get_db
from boohk.models import Product, User
from boohk.routes.helpers import ensure_company_access, get_or_404, require_company_id, paginate
from boohk.services import search
from boohk.services.validators import validate_product
from boohk.timeutil import isoformat

router = APIRouter(prefix="/api/products", tags=["products"])

PRODUCT_FIELDS = ["company_id", "name", "site_code", "location", "type", "price", "specs"]


class ProductRequest(BaseModel):
    company_id: Optional[str] = None
    name: Optional[str] = None
    site_code: Optional[str] = None
    location: Optional[str] = None
    type: Optional[str] = None
    price: Optional[float] = None
    specs: Optional[dict] = None


def product_search_record(product: Product) -> dict:
    return {
        "objectID": product.id,
        "name": product.name,
        "site_code": product.site_code,
        "location": product.location,
        "type": product.type,
        "price": float(product.price or 0),
        "company_id": product.company_id,
        "updated": isoformat(product.updated_at) or "",
    }


def _apply(product: Product, payload: dict):
    for field in PRODUCT_FIELDS:
        if field in payload and payload[field] is not None:
            setattr(product, field, payload[field])


@router.post("")
async def create_product(
    data: ProductRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales", "admin")),
):
    payload = data.dict(exclude_unset=True)
    payload["company_id"] = payload.get("company_id") or user.company_id
    ensure_company_access(user, payload["company_id"])

    validation = validate_product(payload, db)
    if not validation.is_valid:
        raise HTTPException(status_code=400, detail="; ".join(validation.errors))

    product = Product(created_by=user.id)
    _apply(product, payload)
    db.add(product)
    db.commit()
    db.refresh(product)

    search.try_save_object("products", product_search_record(product))
    return {"success": True, "product": product.to_dict(), "warnings": validation.warnings}


@router.get("")
async def list_products(
    companyId: Optional[str] = None,
    type: Optional[str] = None,
    page: int = 1,
    pageSize: int = 20,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales", "logistics", "cms")),
):
    require_company_id(companyId, user)
    query = db.query(Product).filter(Product.company_id == companyId, Product.deleted == False)
    if type:
        query = query.filter(Product.type == type)

    result = paginate(query.order_by(Product.name), page, pageSize)
    result["products"] = [p.to_dict() for p in result.pop("items")]
    return result


@router.get("/{product_id}")
async def get_product(
    product_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales", "logistics", "cms")),
):
    return get_or_404(db, Product, product_id, "Site", user=user).to_dict()


@router.patch("/{product_id}")
async def update_product(
    product_id: str,
    data: ProductRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales", "admin")),
):
    product = get_or_404(db, Product, product_id, "Site", user=user)
    payload = data.dict(exclude_unset=True)
    payload.pop("company_id", None)
    merged = {**product.to_dict(), **payload}

    validation = validate_product(merged, db, existing_id=product.id)
    if not validation.is_valid:
        raise HTTPException(status_code=400, detail="; ".join(validation.errors))

    _apply(product, payload)
    db.commit()
    db.refresh(product)

    search.try_save_object("products", product_search_record(product))
    return {"success": True, "product": product.to_dict(), "warnings": validation.warnings}


@router.delete("/{product_id}")
async def delete_product(
    product_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("sales", "admin")),
):
    product = get_or_404(db, Product, product_id, "Site", user=user)
    product.deleted = True
    db.commit()

    search.try_delete_object("products", product.id)
    return {"success": True}
