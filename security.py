"""
Password hashing and session tokens.
"""
import hmac
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from werkzeug.security import generate_password_hash, check_password_hash

from config import settings

log = logging.getLogger(__name__)

ALGORITHM = "HS256"
HASH_PREFIXES = ("scrypt:", "pbkdf2:")

ROLE_OWNER = "owner"
ROLE_TENANT = "tenant"

security = HTTPBearer(auto_error=False)


def is_hashed(stored_password: Optional[str]) -> bool:
    return bool(stored_password) and stored_password.startswith(HASH_PREFIXES)


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password: str, stored_password: Optional[str]) -> tuple:
    """
    Check a password against the stored value.

    Returns (valid, needs_upgrade). Seed data may still hold plaintext
    passwords; those match by constant-time comparison and should be
    rewritten as hashes by the caller.
    """
    if not stored_password or not password:
        return False, False
    if is_hashed(stored_password):
        return check_password_hash(stored_password, password), False
    valid = hmac.compare_digest(stored_password.encode(), password.encode())
    return valid, valid


def create_access_token(subject: str, role: str, **claims) -> str:
    expires = datetime.now(timezone.utc) + timedelta(minutes=settings.session_ttl_minutes)
    payload = {"sub": subject, "role": role, "exp": expires, **claims}
    return jwt.encode(payload, settings.session_secret, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.session_secret, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Session expired. Please log in again.")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid session token")


def get_current_principal(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)) -> dict:
    if credentials is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    payload = decode_access_token(credentials.credentials)
    if not payload.get("sub") or payload.get("role") not in (ROLE_OWNER, ROLE_TENANT):
        raise HTTPException(status_code=401, detail="Invalid token payload")
    return payload


def require_owner(principal: dict = Depends(get_current_principal)) -> dict:
    if principal["role"] != ROLE_OWNER:
        raise HTTPException(status_code=403, detail="Owner access required")
    return principal
