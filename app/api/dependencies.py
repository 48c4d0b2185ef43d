from __future__ import annotations

from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.config import settings
from app.core.errors import ForbiddenError, UnauthorizedError
from app.core.security import decode_token
from app.db.connection import Database
from app.db.ticket_batches import TicketBatchStore
from app.db.users import UserStore
from app.services.proof_storage import ProofStorage

bearer = HTTPBearer(auto_error=False)


def require_db(request: Request) -> Database:
    db = getattr(request.app.state, "db", None)
    if db is None:
        raise HTTPException(status_code=500, detail="Database is not configured")
    return db


def get_batch_store(db: Database = Depends(require_db)) -> TicketBatchStore:
    return TicketBatchStore(db)


def get_user_store(db: Database = Depends(require_db)) -> UserStore:
    return UserStore(db)


def get_proof_storage() -> ProofStorage:
    return ProofStorage(settings.upload_dir, settings.proof_file_prefix)


def get_current_user(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
) -> dict:
    if not creds:
        raise UnauthorizedError("Not authenticated")
    return decode_token(creds.credentials)


def optional_user(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
) -> Optional[dict]:
    if not settings.enforce_auth:
        return None
    return get_current_user(creds)


def require_admin(user: Optional[dict] = Depends(optional_user)) -> Optional[dict]:
    if user is not None and user["role"] != "admin":
        raise ForbiddenError("Administrator role required")
    return user


def ensure_owner_access(user: Optional[dict], owner_id: int) -> None:
    if user is None or user["role"] == "admin":
        return
    if user["id"] != owner_id:
        raise ForbiddenError("Not allowed to access another user's batches")


def can_assign_admin(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
) -> bool:
    if not settings.enforce_auth:
        return True
    if not creds:
        return False
    return decode_token(creds.credentials)["role"] == "admin"
