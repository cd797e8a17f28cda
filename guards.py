"""
guards.py - request-level access checks.

Each guard is a FastAPI dependency. It parses the presented token into one of
the two session kinds and re-checks the store (account still exists, share
still exists and is not expired) before the endpoint runs.
"""
import logging

from fastapi import Depends, Query
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

import models
from auth import AdminSession, ShareSession, parse_token
from database import get_db
from errors import Forbidden, Unauthorized
from shares import get_active_share

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/auth/login", auto_error=False)


def _check_admin(db: Session, session: AdminSession) -> AdminSession:
    account = db.get(models.AdminAccount, session.account_id)
    if account is None:
        logger.warning(f"Admin token for missing account {session.account_id}")
        raise Forbidden()
    return session


def _check_share(db: Session, session: ShareSession) -> ShareSession:
    # NotFound if the share is gone, Expired if past its window
    get_active_share(db, session.share_id)
    return session


def require_admin(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> AdminSession:
    """Admin scope: full access to every share and file."""
    if not token:
        raise Unauthorized()
    session = parse_token(token)
    if not isinstance(session, AdminSession):
        raise Forbidden()
    return _check_admin(db, session)


def share_token(
    header_token: str = Depends(oauth2_scheme),
    token: str = Query(None, description="Share token for <img> previews that cannot send headers"),
) -> str:
    return header_token or token


def require_share(
    token: str = Depends(share_token),
    db: Session = Depends(get_db),
) -> ShareSession:
    """Share scope: access to the files of exactly one share."""
    if not token:
        raise Unauthorized()
    session = parse_token(token)
    if not isinstance(session, ShareSession):
        raise Forbidden()
    return _check_share(db, session)


def require_admin_or_share(
    token: str = Depends(share_token),
    db: Session = Depends(get_db),
):
    """Either scope; callers must still compare a ShareSession against the target record."""
    if not token:
        raise Unauthorized()
    session = parse_token(token)
    if isinstance(session, AdminSession):
        return _check_admin(db, session)
    return _check_share(db, session)
