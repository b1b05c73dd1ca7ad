from typing import Optional

from fastapi import APIRouter, Depends, Form, HTTPException, UploadFile, File
from pydantic import BaseModel
from sqlalchemy.orm import Session

from boohk.auth import require_role
from boohk.database import get_db
from boohk.models import CompanyFolder, CompanyFile, User
from boohk.routes.helpers import get_or_404, require_company_id
from boohk.services import storage

router = APIRouter(prefix="/api/files", tags=["files"])


class FolderCreateRequest(BaseModel):
    name: str
    company_id: Optional[str] = None
    parent_id: Optional[str] = None


class RenameRequest(BaseModel):
    name: str


@router.post("/folders")
async def create_folder(
    data: FolderCreateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("admin")),
):
    name = data.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Folder name is required")
    company_id = require_company_id(data.company_id or user.company_id, user)
    if data.parent_id:
        get_or_404(db, CompanyFolder, data.parent_id, "Parent folder", user=user)

    folder = CompanyFolder(company_id=company_id, name=name, parent_id=data.parent_id, created_by=user.id)
    db.add(folder)
    db.commit()
    db.refresh(folder)
    return {"success": True, "folder": folder.to_dict()}


@router.get("/folders")
async def list_folders(
    companyId: Optional[str] = None,
    parentId: Optional[str] = None,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("admin")),
):
    require_company_id(companyId, user)
    folders = (
        db.query(CompanyFolder)
        .filter(
            CompanyFolder.company_id == companyId,
            CompanyFolder.parent_id == parentId,
            CompanyFolder.deleted == False,
        )
        .order_by(CompanyFolder.name)
        .all()
    )
    return {"folders": [f.to_dict() for f in folders]}


@router.post("/upload")
async def upload_file(
    file: UploadFile = File(...),
    name: str = Form(None),
    folder_id: str = Form(None),
    company_id: str = Form(None),
    db: Session = Depends(get_db),
    user: User = Depends(require_role("admin")),
):
    """Upload a company document to object storage."""
    company_id = require_company_id(company_id or user.company_id, user)
    if folder_id:
        get_or_404(db, CompanyFolder, folder_id, "Folder", user=user)

    data = await file.read()
    original_filename = file.filename or "file"
    try:
        stored = storage.upload_company_file(company_id, original_filename, data, file.content_type)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except storage.StorageError as e:
        raise HTTPException(status_code=500, detail=str(e))

    company_file = CompanyFile(
        company_id=company_id,
        folder_id=folder_id,
        name=name or original_filename,
        original_filename=original_filename,
        storage_key=stored["key"],
        url=stored["url"],
        file_size=len(data),
        mime_type=file.content_type,
        uploaded_by=user.id,
    )
    db.add(company_file)
    db.commit()
    db.refresh(company_file)
    return {"success": True, "file": company_file.to_dict()}


@router.get("")
async def list_files(
    companyId: Optional[str] = None,
    folderId: Optional[str] = None,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("admin")),
):
    require_company_id(companyId, user)
    files = (
        db.query(CompanyFile)
        .filter(
            CompanyFile.company_id == companyId,
            CompanyFile.folder_id == folderId,
            CompanyFile.deleted == False,
        )
        .order_by(CompanyFile.created_at.desc())
        .all()
    )
    return {"files": [f.to_dict() for f in files]}


@router.patch("/{file_id}")
async def rename_file(
    file_id: str,
    data: RenameRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("admin")),
):
    company_file = get_or_404(db, CompanyFile, file_id, "File", user=user)
    if not data.name.strip():
        raise HTTPException(status_code=400, detail="File name is required")
    company_file.name = data.name.strip()
    db.commit()
    db.refresh(company_file)
    return {"success": True, "file": company_file.to_dict()}


@router.delete("/{file_id}")
async def delete_file(
    file_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("admin")),
):
    company_file = get_or_404(db, CompanyFile, file_id, "File", user=user)
    company_file.deleted = True
    db.commit()
    return {"success": True}


@router.delete("/folders/{folder_id}")
async def delete_folder(
    folder_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("admin")),
):
    folder = get_or_404(db, CompanyFolder, folder_id, "Folder", user=user)
    if any(not f.deleted for f in folder.files):
        raise HTTPException(status_code=400, detail="Folder is not empty")
    folder.deleted = True
    db.commit()
    return {"success": True}
