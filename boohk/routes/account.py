from fastapi import APIRouter, Depends, HTTPException, UploadFile, File
from sqlalchemy.orm import Session

from boohk.auth import require_auth
from boohk.database import get_db
from boohk.models import User
from boohk.services import storage

router = APIRouter(prefix="/api/account", tags=["account"])

MAX_SIGNATURE_SIZE = 5 * 1024 * 1024


@router.post("/signature")
async def upload_signature(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    user: User = Depends(require_auth),
):
    """Store the user's signature image and remember its URL."""
    if file.content_type and not file.content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail="Signature must be an image")

    data = await file.read()
    if not data:
        raise HTTPException(status_code=400, detail="Signature file is empty")
    if len(data) > MAX_SIGNATURE_SIZE:
        raise HTTPException(status_code=400, detail="Signature file is too large")

    try:
        url = storage.upload_signature(user.id, data)
    except storage.StorageError as e:
        raise HTTPException(status_code=500, detail=str(e))

    user.signature_url = url
    db.commit()
    return {"success": True, "url": url}
