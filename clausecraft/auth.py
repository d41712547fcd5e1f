from __future__ import annotations

import hashlib
import hmac
import secrets
from typing import Optional

from fastapi import HTTPException, Request

from clausecraft.schemas import User

SESSION_USER_KEY = "user_id"

# scrypt cost parameters
_N, _R, _P, _DKLEN = 16384, 8, 1, 64


def hash_password(password: str) -> str:
    """Return "<hex hash>.<hex salt>" using salted scrypt."""
    salt = secrets.token_hex(16)
    digest = hashlib.scrypt(
        password.encode("utf-8"), salt=salt.encode("utf-8"), n=_N, r=_R, p=_P, dklen=_DKLEN
    )
    return f"{digest.hex()}.{salt}"


def verify_password(password: str, stored: str) -> bool:
    hashed, _, salt = stored.partition(".")
    if not hashed or not salt:
        return False
    digest = hashlib.scrypt(
        password.encode("utf-8"), salt=salt.encode("utf-8"), n=_N, r=_R, p=_P, dklen=_DKLEN
    )
    return hmac.compare_digest(digest.hex(), hashed)


def login(request: Request, user: User) -> None:
    request.session[SESSION_USER_KEY] = user.id


def logout(request: Request) -> None:
    request.session.clear()


def current_user(request: Request) -> Optional[User]:
    """
    Resolve the logged-in user from the signed session cookie, or None.
    """
    user_id = request.session.get(SESSION_USER_KEY)
    if user_id is None:
        return None
    record = request.app.state.store.get_user(user_id)
    return record.public() if record else None


def require_user(request: Request) -> User:
    user = current_user(request)
    if user is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user
