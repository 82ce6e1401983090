"""
Users Router
Owner accounts; created out of band or through POST /users
"""
import logging

from fastapi import APIRouter, HTTPException, Depends

from database import create_document, get_documents
from schemas import UserIn
from security import hash_password, require_owner
from services import USERS, public_user

log = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("")
def list_users(principal: dict = Depends(require_owner)):
    return [public_user(u) for u in get_documents(USERS)]


@router.post("", status_code=201)
def create_user(payload: UserIn):
    if not payload.email and not payload.username:
        raise HTTPException(status_code=400, detail="Email or username is required")
    if not payload.password:
        raise HTTPException(status_code=400, detail="Password is required")

    for existing in get_documents(USERS):
        if payload.email and (existing.get("email") or "").lower() == payload.email.lower():
            raise HTTPException(status_code=409, detail="Email already registered")
        if payload.username and (existing.get("username") or "").lower() == payload.username.lower():
            raise HTTPException(status_code=409, detail="Username already taken")

    user = payload.model_copy(update={"password": hash_password(payload.password)})
    user_id = create_document(USERS, user)
    log.info(f"Created {payload.role} user {user_id}")
    return {"id": user_id, "role": payload.role, "email": payload.email, "username": payload.username}
