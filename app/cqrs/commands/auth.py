from __future__ import annotations

import logging
from typing import Optional

from app.core.errors import ForbiddenError, NotFoundError
from app.core.security import hash_password
from app.db.users import UserStore
from app.models.schemas import PasswordReset, UserRegister

logger = logging.getLogger(__name__)


def register_user(users: UserStore, payload: UserRegister, allow_admin: bool = True) -> dict:
    if payload.role == "admin" and not allow_admin:
        raise ForbiddenError("Only administrators can create administrator accounts")
    password_hash = hash_password(payload.password)
    user = users.insert(payload.name, payload.phone, payload.email, password_hash, payload.role)
    logger.info("Registered user %s with role %s", user["id"], user["role"])
    return user


def reset_password(users: UserStore, payload: PasswordReset, actor: Optional[dict] = None) -> dict:
    row = users.get_by_email(payload.email)
    if actor is not None and actor["role"] != "admin":
        if row is None or row["id"] != actor["id"]:
            raise ForbiddenError("Not allowed to reset another user's password")
    if row is None:
        raise NotFoundError("User not found")
    users.update_password(payload.email, hash_password(payload.new_password))
    logger.info("Password reset for %s", payload.email)
    return {"message": "Password updated successfully"}
