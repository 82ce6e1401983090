"""
Authentication Router
Login against owners and embedded tenants, issuing a session token
"""
import logging

from fastapi import APIRouter, HTTPException, Depends

from schemas import LoginIn
from security import get_current_principal
from services import authenticate, INVALID_CREDENTIALS

log = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login")
def login(credentials: LoginIn):
    """
    Owner or tenant login.
    Returns a bearer token and where the client should go next.
    """
    if not credentials.identifier.strip() or not credentials.password:
        raise HTTPException(status_code=400, detail="Please enter both email/username and password.")

    result = authenticate(credentials.identifier, credentials.password)
    if result is None:
        log.warning(f"Login failed for identifier={credentials.identifier}")
        raise HTTPException(status_code=401, detail=INVALID_CREDENTIALS)
    return result


@router.get("/me")
def me(principal: dict = Depends(get_current_principal)):
    """Echo the verified session claims."""
    return {k: v for k, v in principal.items() if k != "exp"}
