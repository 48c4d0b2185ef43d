from typing import Optional

from fastapi import APIRouter, Depends

from app.api.dependencies import can_assign_admin, get_current_user, get_user_store, optional_user
from app.core.errors import NotFoundError
from app.cqrs.commands import auth as auth_commands
from app.cqrs.queries import auth as auth_queries
from app.db.users import UserStore
from app.models.schemas import (
    LoginResponse,
    MessageResponse,
    PasswordReset,
    UserLogin,
    UserOut,
    UserRegister,
)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=UserOut, status_code=201)
def register(
    payload: UserRegister,
    users: UserStore = Depends(get_user_store),
    allow_admin: bool = Depends(can_assign_admin),
):
    return auth_commands.register_user(users, payload, allow_admin=allow_admin)


@router.post("/login", response_model=LoginResponse)
def login(payload: UserLogin, users: UserStore = Depends(get_user_store)):
    return auth_queries.login_user(users, payload)


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(
    payload: PasswordReset,
    users: UserStore = Depends(get_user_store),
    actor: Optional[dict] = Depends(optional_user),
):
    return auth_commands.reset_password(users, payload, actor=actor)


@router.get("/me", response_model=UserOut)
def me(user: dict = Depends(get_current_user), users: UserStore = Depends(get_user_store)):
    row = users.get(user["id"])
    if row is None:
        raise NotFoundError("User not found")
    return row
