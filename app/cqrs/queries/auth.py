from __future__ import annotations

from app.core.errors import UnauthorizedError
from app.core.security import create_access_token, verify_password
from app.db.users import UserStore
from app.models.schemas import UserLogin


def login_user(users: UserStore, payload: UserLogin) -> dict:
    row = users.get_by_email(payload.email)
    if not row or not verify_password(payload.password, row["password_hash"]):
        raise UnauthorizedError("Invalid credentials")
    return {
        "message": "Login successful",
        "token": create_access_token(row["id"], row["role"]),
        "user": {
            "id": row["id"],
            "name": row["name"],
            "phone": row.get("phone"),
            "email": row["email"],
            "role": row["role"],
        },
    }
