import logging
from datetime import timedelta
from typing import Optional

import jwt
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from auth.constants import (
    ACCESS_TOKEN_EXPIRE_DAYS,
    ALGORITHM,
    SECRET_KEY,
    Action,
    Role,
    can,
)
from common.database import get_mongo_db
from common.exceptions import AuthError, ForbiddenError, NotFoundError
from common.helpers import to_object_id, utcnow

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)


def create_access_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    now = utcnow()
    expire = now + (expires_delta or timedelta(days=ACCESS_TOKEN_EXPIRE_DAYS))
    to_encode = {"user_id": str(user_id), "exp": expire, "iat": now}
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.warning("Rejected expired token")
        raise AuthError("Token has expired")
    except jwt.InvalidTokenError:
        logger.warning("Rejected invalid token")
        raise AuthError("Could not validate credentials")


def verify_token(token: str = Depends(oauth2_scheme)) -> dict:
    return decode_token(token)


def _load_user(db, payload: dict) -> dict:
    user_id = payload.get("user_id")
    if not user_id:
        raise AuthError("Could not validate credentials")
    try:
        oid = to_object_id(user_id)
    except NotFoundError:
        raise AuthError("Could not validate credentials")
    user = db.users.find_one({"_id": oid})
    if not user:
        raise AuthError("User no longer exists")
    return user


def get_current_user(payload: dict = Depends(verify_token), db=Depends(get_mongo_db)):
    """Resolve the bearer token to the stored user document."""
    return _load_user(db, payload)


def get_optional_user(
    token: Optional[str] = Depends(optional_oauth2_scheme), db=Depends(get_mongo_db)
):
    """Like ``get_current_user`` but anonymous callers get ``None``.

    A token that is present but invalid is still rejected.
    """
    if not token:
        return None
    return _load_user(db, decode_token(token))


def require(action: Action):
    """Dependency factory: the single gate between roles and operations."""

    def checker(user: dict = Depends(get_current_user)) -> dict:
        role = Role(user["role"])
        if not can(role, action):
            raise ForbiddenError(
                f"User role '{role.value}' is not authorized to access this route"
            )
        return user

    return checker
