# file_routes.py

import io
from typing import List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

import file_service
import schemas
from auth import AdminSession, ShareSession
from database import get_db
from guards import require_admin, require_admin_or_share, require_share
from storage import get_storage

router = APIRouter(prefix="/api/files", tags=["Files"])


# ─── SHARE: UPLOAD / LIST ─────────────────────────────────

@router.post("/upload", response_model=schemas.UploadResult)
def upload_files(
    files: Optional[List[UploadFile]] = File(None),
    db: Session = Depends(get_db),
    session: ShareSession = Depends(require_share),
    storage=Depends(get_storage),
):
    incoming = [
        file_service.IncomingFile(filename=f.filename, content_type=f.content_type, data=f.file.read())
        for f in files or []
    ]
    records = file_service.upload_files(db, storage, session.share_id, incoming)
    return {"message": "Upload successful", "files": records}


@router.get("", response_model=List[schemas.FileOut])
def list_files(
    db: Session = Depends(get_db),
    session: ShareSession = Depends(require_share),
):
    return file_service.list_share_files(db, session.share_id)


# ─── SHARE: PREVIEW ───────────────────────────────────────

@router.get("/{file_id}/preview")
def preview_file(
    file_id: str,
    db: Session = Depends(get_db),
    session: ShareSession = Depends(require_share),
    storage=Depends(get_storage),
):
    db_file = file_service.get_file_for_share(db, file_id, session.share_id)
    data = file_service.read_blob(storage, db_file)
    return StreamingResponse(io.BytesIO(data), media_type=db_file.mime_type)


# ─── ADMIN: DOWNLOAD ──────────────────────────────────────

@router.get("/{file_id}/download")
def download_file(
    file_id: str,
    db: Session = Depends(get_db),
    admin: AdminSession = Depends(require_admin),
    storage=Depends(get_storage),
):
    db_file = file_service.get_file(db, file_id)
    data = file_service.read_blob(storage, db_file)
    return StreamingResponse(
        io.BytesIO(data),
        media_type=db_file.mime_type or "application/octet-stream",
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(db_file.original_name)}"},
    )


# ─── ADMIN OR OWNING SHARE: DELETE ────────────────────────

@router.delete("/{file_id}", response_model=schemas.Message)
def delete_file(
    file_id: str,
    db: Session = Depends(get_db),
    session=Depends(require_admin_or_share),
    storage=Depends(get_storage),
):
    file_service.delete_file(db, storage, file_id, session)
    return {"message": "File deleted"}
