# share_routes.py

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

import schemas
import shares
from auth import AdminSession
from database import get_db
from guards import require_admin
from storage import get_storage

router = APIRouter(prefix="/api/shares", tags=["Shares"])


# ─── ADMIN: CREATE / LIST ─────────────────────────────────

@router.post("", response_model=schemas.ShareOut)
def create_share(
    req: schemas.ShareCreate,
    db: Session = Depends(get_db),
    admin: AdminSession = Depends(require_admin),
):
    return shares.create_share(db, req.name, req.password, req.expires_at)


@router.get("", response_model=List[schemas.ShareOut])
def list_shares(
    db: Session = Depends(get_db),
    admin: AdminSession = Depends(require_admin),
):
    return shares.list_shares(db)


# ─── PUBLIC: VERIFY PASSWORD ──────────────────────────────

@router.post("/verify", response_model=schemas.ShareAccess)
def verify_share(req: schemas.ShareVerify, db: Session = Depends(get_db)):
    return shares.verify_share(db, req.share_id, req.password)


# ─── ADMIN: DETAIL / DELETE ───────────────────────────────

@router.get("/{share_id}/admin", response_model=schemas.ShareDetail)
def get_share_detail(
    share_id: str,
    db: Session = Depends(get_db),
    admin: AdminSession = Depends(require_admin),
):
    return shares.get_share_detail(db, share_id)


@router.delete("/{share_id}", response_model=schemas.Message)
def delete_share(
    share_id: str,
    db: Session = Depends(get_db),
    admin: AdminSession = Depends(require_admin),
    storage=Depends(get_storage),
):
    shares.delete_share(db, storage, share_id)
    return {"message": "Share and associated files deleted"}
