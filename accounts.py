"""
accounts.py - the single admin account: bootstrap and login.
"""
import logging
import uuid

from sqlalchemy.orm import Session

import config
import models
from auth import issue_admin_token
from database import write_lock
from errors import InvalidCredential
from security import burn_verification, hash_password, verify_password

logger = logging.getLogger(__name__)


def ensure_admin_account(db: Session, username: str = None, password: str = None) -> models.AdminAccount:
    """Create the bootstrap admin if no account exists yet. Safe to call repeatedly."""
    username = username or config.BOOTSTRAP_ADMIN_USERNAME
    password = password or config.BOOTSTRAP_ADMIN_PASSWORD
    with write_lock:
        existing = db.query(models.AdminAccount).order_by(models.AdminAccount.created_at.asc()).first()
        if existing is not None:
            return existing

        account = models.AdminAccount(
            id=uuid.uuid4().hex,
            username=username,
            password_hash=hash_password(password),
        )
        db.add(account)
        db.commit()
        db.refresh(account)

    logger.info(f"Seeded admin account '{username}'")
    if password == "admin":
        logger.warning("Admin account uses the default password; set BOOTSTRAP_ADMIN_PASSWORD")
    return account


def authenticate_admin(db: Session, username: str, password: str) -> str:
    """Check admin credentials and return an admin token."""
    account = db.query(models.AdminAccount).filter(models.AdminAccount.username == username).first()
    if account is None:
        burn_verification(password or "")
        raise InvalidCredential()
    if not verify_password(password or "", account.password_hash):
        raise InvalidCredential()
    return issue_admin_token(account)
