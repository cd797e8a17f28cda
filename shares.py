"""
shares.py - share lifecycle: create, verify password, list, detail, delete.

A share is Active until its expires_at passes (Expired is derived at read time,
never stored) and Deleted once an admin removes it together with its files.
"""
import logging
import secrets
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

import models
from auth import issue_share_token
from database import write_lock
from errors import Expired, InvalidCredential, NotFound, ValidationError
from security import hash_password, verify_password

logger = logging.getLogger(__name__)

SHARE_ID_LENGTH = 10


def _new_share_id(db: Session) -> str:
    while True:
        share_id = secrets.token_urlsafe(SHARE_ID_LENGTH)[:SHARE_ID_LENGTH]
        if db.get(models.Share, share_id) is None:
            return share_id


def is_expired(share: models.Share, now: Optional[datetime] = None) -> bool:
    if share.expires_at is None:
        return False
    now = now or datetime.now(timezone.utc)
    return models.as_utc(share.expires_at) < now


def get_share(db: Session, share_id: str) -> models.Share:
    share = db.get(models.Share, share_id)
    if share is None:
        raise NotFound("Share not found")
    return share


def get_active_share(db: Session, share_id: str) -> models.Share:
    share = get_share(db, share_id)
    if is_expired(share):
        raise Expired()
    return share


def create_share(db: Session, name: str, password: str, expires_at: Optional[datetime] = None) -> models.Share:
    name = (name or "").strip()
    if not name or not password:
        raise ValidationError("Name and password required.")
    if expires_at is not None:
        expires_at = models.as_utc(expires_at)

    password_hash = hash_password(password)
    with write_lock:
        share = models.Share(
            id=_new_share_id(db),
            name=name,
            password_hash=password_hash,
            expires_at=expires_at,
            created_at=models.utcnow(),
        )
        db.add(share)
        db.commit()
        db.refresh(share)

    logger.info(f"Share created: id={share.id} expires_at={share.expires_at}")
    return share


def verify_share(db: Session, share_id: str, password: str) -> dict:
    """Exchange a share password for a share-scoped token."""
    # Expiry is checked before the password: an expired share is closed
    # whatever password is supplied.
    share = get_active_share(db, share_id)
    if not verify_password(password or "", share.password_hash):
        raise InvalidCredential()
    return {"token": issue_share_token(share), "share_name": share.name}


def list_shares(db: Session):
    return db.query(models.Share).order_by(models.Share.created_at.asc()).all()


def get_share_detail(db: Session, share_id: str) -> models.Share:
    """Share with its files loaded via the relationship."""
    return get_share(db, share_id)


def delete_share(db: Session, storage, share_id: str) -> int:
    """Delete a share and every file in it. Returns the number of files removed."""
    with write_lock:
        share = get_share(db, share_id)
        files = db.query(models.File).filter(models.File.share_id == share.id).all()

        for f in files:
            try:
                if not storage.delete(f.stored_name):
                    logger.warning(f"Blob {f.stored_name} already missing while deleting share {share.id}")
            except (OSError, ValueError) as e:
                logger.warning(f"Could not remove blob {f.stored_name} for share {share.id}: {e}")

        try:
            for f in files:
                db.delete(f)
            db.delete(share)
            db.commit()
        except Exception:
            db.rollback()
            logger.exception(f"Deleting share {share_id} failed; records kept")
            raise

    logger.info(f"Share deleted: id={share_id} files={len(files)}")
    return len(files)
