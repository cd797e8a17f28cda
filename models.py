from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, BigInteger, ForeignKey
from sqlalchemy.orm import relationship

from database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; everything is stored as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ─────────────────────────────────────────────────────────────
# Admin Account
# ─────────────────────────────────────────────────────────────
class AdminAccount(Base):
    __tablename__ = "admin_accounts"

    id = Column(String, primary_key=True)
    username = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)


# ─────────────────────────────────────────────────────────────
# Share (password-gated virtual folder)
# ─────────────────────────────────────────────────────────────
class Share(Base):
    __tablename__ = "shares"

    id = Column(String(16), primary_key=True)
    name = Column(String, nullable=False)
    password_hash = Column(String, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=True)  # NULL = never
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)

    files = relationship(
        "File",
        back_populates="share",
        order_by="File.created_at",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


# ─────────────────────────────────────────────────────────────
# File (image uploaded into a share)
# ─────────────────────────────────────────────────────────────
class File(Base):
    __tablename__ = "files"

    id = Column(String, primary_key=True)
    share_id = Column(String(16), ForeignKey("shares.id", ondelete="CASCADE"), index=True, nullable=False)
    stored_name = Column(String, unique=True, nullable=False)
    original_name = Column(String, nullable=False)
    mime_type = Column(String, nullable=False)
    size = Column(BigInteger, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    share = relationship("Share", back_populates="files")
