from __future__ import annotations

from typing import Optional

from app.core.errors import ConflictError


class UserStore:
    def __init__(self, db):
        self.db = db

    def get_by_email(self, email: str) -> Optional[dict]:
        return self.db.fetch_one(
            """
            SELECT id, name, phone, email, password_hash, role
            FROM users
            WHERE email = %s
            """,
            (email,),
        )

    def get(self, user_id: int) -> Optional[dict]:
        return self.db.fetch_one(
            "SELECT id, name, phone, email, role FROM users WHERE id = %s",
            (user_id,),
        )

    def insert(self, name: str, phone: Optional[str], email: str, password_hash: str, role: str) -> dict:
        def _handler(conn):
            cur = conn.cursor()
            cur.execute("SELECT id FROM users WHERE email = %s", (email,))
            if cur.fetchone():
                cur.close()
                raise ConflictError("User already exists")
            cur.execute(
                """
                INSERT INTO users (name, phone, email, password_hash, role)
                VALUES (%s, %s, %s, %s, %s)
                RETURNING id, name, phone, email, role
                """,
                (name, phone, email, password_hash, role),
            )
            row = cur.fetchone()
            cur.close()
            return {
                "id": row[0],
                "name": row[1],
                "phone": row[2],
                "email": row[3],
                "role": row[4],
            }

        return self.db.run_transaction(_handler)

    def update_password(self, email: str, password_hash: str) -> int:
        return self.db.execute(
            "UPDATE users SET password_hash = %s WHERE email = %s",
            (password_hash, email),
        )
