"""
auth.py - the two session kinds and their signed tokens.

AdminSession and ShareSession are disjoint: an admin token carries the account
identity and no share id, a share token carries one share id and nothing else.
Both are HS256 JWTs signed with the process-wide SECRET_KEY; nothing is stored
server-side.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

from jose import jwt, JWTError

import config
from errors import InvalidToken

SECRET_KEY = config.SECRET_KEY
ALGORITHM = config.ALGORITHM

ADMIN_KIND = "admin"
SHARE_KIND = "share"


@dataclass(frozen=True)
class AdminSession:
    account_id: str
    username: str


@dataclass(frozen=True)
class ShareSession:
    share_id: str


Session = Union[AdminSession, ShareSession]


def _encode(claims: dict, lifetime: timedelta) -> str:
    now = datetime.now(timezone.utc)
    to_encode = dict(claims)
    to_encode.update({"iat": now, "exp": now + lifetime})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def issue_admin_token(account, expires_delta: Optional[timedelta] = None) -> str:
    """Token for an AdminAccount, valid ADMIN_TOKEN_EXPIRE_HOURS by default."""
    lifetime = expires_delta if expires_delta is not None else timedelta(hours=config.ADMIN_TOKEN_EXPIRE_HOURS)
    return _encode(
        {"kind": ADMIN_KIND, "accountId": account.id, "username": account.username},
        lifetime,
    )


def issue_share_token(share, expires_delta: Optional[timedelta] = None) -> str:
    """Token scoped to a single share, valid SHARE_TOKEN_EXPIRE_HOURS by default."""
    lifetime = expires_delta if expires_delta is not None else timedelta(hours=config.SHARE_TOKEN_EXPIRE_HOURS)
    return _encode({"kind": SHARE_KIND, "shareId": share.id}, lifetime)


def parse_token(token: str) -> Session:
    """Verify signature and expiry, then decode into one of the two sessions."""
    if not token:
        raise InvalidToken("empty token")
    try:
        payload = jwt.decode(
            token,
            SECRET_KEY,
            algorithms=[ALGORITHM],
            options={"require_exp": True},
        )
    except JWTError as e:
        raise InvalidToken(str(e))

    kind = payload.get("kind")
    account_id = payload.get("accountId")
    share_id = payload.get("shareId")

    if kind == ADMIN_KIND:
        if share_id is not None:
            raise InvalidToken("admin token carries a share id")
        username = payload.get("username")
        if not isinstance(account_id, str) or not isinstance(username, str):
            raise InvalidToken("admin token missing identity")
        return AdminSession(account_id=account_id, username=username)

    if kind == SHARE_KIND:
        if account_id is not None:
            raise InvalidToken("share token carries an account id")
        if not isinstance(share_id, str) or not share_id:
            raise InvalidToken("share token missing share id")
        return ShareSession(share_id=share_id)

    raise InvalidToken(f"unknown token kind {kind!r}")
