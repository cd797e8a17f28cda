"""
file_service.py - images inside a share: upload, list, lookup, delete.

Every check that ties a file to a share uses the share_id stored on the File
record, never one supplied by the client.
"""
import logging
import os
import re
import secrets
import uuid
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.orm import Session

import models
from auth import AdminSession, ShareSession
from database import write_lock
from errors import Forbidden, NotFound, ValidationError
from shares import get_active_share

logger = logging.getLogger(__name__)

# Extension → MIME type map, used when the client sends no usable content type
IMAGE_MIME_MAP = {
    "png":  "image/png",
    "jpg":  "image/jpeg",
    "jpeg": "image/jpeg",
    "gif":  "image/gif",
    "webp": "image/webp",
    "bmp":  "image/bmp",
    "svg":  "image/svg+xml",
    "tif":  "image/tiff",
    "tiff": "image/tiff",
    "heic": "image/heic",
    "avif": "image/avif",
}

_SAFE_EXT = re.compile(r"^\.[A-Za-z0-9]{1,10}$")


@dataclass
class IncomingFile:
    filename: str
    content_type: Optional[str]
    data: bytes


def detect_mime(filename: str) -> str:
    """Detect MIME type from file extension."""
    if "." in filename:
        ext = filename.rsplit(".", 1)[-1].lower()
        return IMAGE_MIME_MAP.get(ext, "application/octet-stream")
    return "application/octet-stream"


def resolve_mime(upload: IncomingFile) -> str:
    content_type = (upload.content_type or "").split(";", 1)[0].strip().lower()
    if not content_type or content_type == "application/octet-stream":
        content_type = detect_mime(upload.filename or "")
    return content_type


def is_image(mime_type: str) -> bool:
    return mime_type.startswith("image/")


def stored_name_for(original_name: str) -> str:
    ext = os.path.splitext(original_name or "")[1].lower()
    if not _SAFE_EXT.match(ext):
        ext = ""
    return secrets.token_urlsafe(16) + ext


def upload_files(db: Session, storage, share_id: str, uploads: List[IncomingFile]) -> List[models.File]:
    if not uploads:
        raise ValidationError("No files uploaded")

    prepared = []
    for upload in uploads:
        mime_type = resolve_mime(upload)
        if not is_image(mime_type):
            raise ValidationError("Only images are allowed")
        original_name = os.path.basename(upload.filename or "") or "upload"
        prepared.append((upload, original_name, mime_type))

    written = []
    records = []
    try:
        for upload, original_name, mime_type in prepared:
            stored_name = stored_name_for(original_name)
            storage.put(stored_name, upload.data, content_type=mime_type)
            written.append(stored_name)
            records.append(models.File(
                id=uuid.uuid4().hex,
                share_id=share_id,
                stored_name=stored_name,
                original_name=original_name,
                mime_type=mime_type,
                size=len(upload.data),
                created_at=models.utcnow(),
            ))

        with write_lock:
            # The guard checked the share before the lock; a delete may have won since
            db.expire_all()
            get_active_share(db, share_id)
            db.add_all(records)
            db.commit()
    except Exception:
        db.rollback()
        for stored_name in written:
            try:
                storage.delete(stored_name)
            except OSError as e:
                logger.warning(f"Could not clean up blob {stored_name}: {e}")
        raise

    for record in records:
        db.refresh(record)
    logger.info(f"Uploaded {len(records)} file(s) to share {share_id}")
    return records


def list_share_files(db: Session, share_id: str) -> List[models.File]:
    return (
        db.query(models.File)
        .filter(models.File.share_id == share_id)
        .order_by(models.File.created_at.asc())
        .all()
    )


def get_file(db: Session, file_id: str) -> models.File:
    db_file = db.get(models.File, file_id)
    if db_file is None:
        raise NotFound("File not found")
    return db_file


def get_file_for_share(db: Session, file_id: str, share_id: str) -> models.File:
    db_file = get_file(db, file_id)
    if db_file.share_id != share_id:
        raise Forbidden()
    return db_file


def read_blob(storage, db_file: models.File) -> bytes:
    # May race with a delete in flight; the reader then sees NotFound
    data = storage.get(db_file.stored_name)
    if data is None:
        raise NotFound("File not found")
    return data


def delete_file(db: Session, storage, file_id: str, session) -> None:
    """Delete one file as an admin (any file) or as the owning share."""
    with write_lock:
        # Re-read under the lock so concurrent deletes of the same id see NotFound
        db.expire_all()
        db_file = get_file(db, file_id)

        if isinstance(session, ShareSession):
            if db_file.share_id != session.share_id:
                logger.warning(f"Share {session.share_id} tried to delete file {file_id} of share {db_file.share_id}")
                raise Forbidden()
        elif not isinstance(session, AdminSession):
            raise Forbidden()

        try:
            if not storage.delete(db_file.stored_name):
                logger.warning(f"Blob {db_file.stored_name} already missing for file {file_id}")
        except (OSError, ValueError) as e:
            logger.warning(f"Could not remove blob {db_file.stored_name}: {e}")

        db.delete(db_file)
        db.commit()

    logger.info(f"File deleted: id={file_id}")
