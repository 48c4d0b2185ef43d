from decimal import Decimal
import io

import pytest
from fastapi.testclient import TestClient

from app.api import dependencies
from app.core.errors import ConflictError, ValidationError
from app.main import app
from app.models.ticket_batch import BatchStatus, TicketBatch
from app.services.proof_storage import ProofStorage


class FakeUserStore:
    def __init__(self):
        self.rows: dict[int, dict] = {}
        self._next_id = 1

    def add(self, name: str, email: str = None, role: str = "player", user_id: int = None) -> dict:
        user_id = user_id or self._next_id
        self._next_id = max(self._next_id, user_id) + 1
        row = {
            "id": user_id,
            "name": name,
            "phone": None,
            "email": email or f"user{user_id}@example.com",
            "password_hash": "",
            "role": role,
        }
        self.rows[user_id] = row
        return row

    def get_by_email(self, email):
        for row in self.rows.values():
            if row["email"] == email:
                return dict(row)
        return None

    def get(self, user_id):
        row = self.rows.get(user_id)
        if row is None:
            return None
        return {key: row[key] for key in ("id", "name", "phone", "email", "role")}

    def insert(self, name, phone, email, password_hash, role):
        if self.get_by_email(email):
            raise ConflictError("User already exists")
        row = self.add(name, email=email, role=role)
        row["phone"] = phone
        row["password_hash"] = password_hash
        return self.get(row["id"])

    def update_password(self, email, password_hash):
        for row in self.rows.values():
            if row["email"] == email:
                row["password_hash"] = password_hash
                return 1
        return 0


class FakeBatchStore:
    def __init__(self, users: FakeUserStore):
        self.users = users
        self.rows: dict[int, dict] = {}
        self._next_id = 1
        self.set_status_calls = []

    def create(self, owner_id, numbers, total_amount):
        if not numbers:
            raise ValidationError("At least one number is required")
        if owner_id not in self.users.rows:
            raise ValidationError("Owner does not exist")
        batch_id = self._next_id
        self._next_id += 1
        self.rows[batch_id] = {
            "id": batch_id,
            "owner_id": owner_id,
            "numbers": list(numbers),
            "total_amount": Decimal(total_amount),
            "status": BatchStatus.OWED.value,
            "payment_proof_ref": None,
        }
        return batch_id

    def get(self, batch_id):
        row = self.rows.get(batch_id)
        return TicketBatch.from_row(row) if row else None

    def list_by_owner(self, owner_id):
        return [TicketBatch.from_row(row) for row in self.rows.values() if row["owner_id"] == owner_id]

    def list_all(self):
        return [
            (TicketBatch.from_row(row), self.users.rows[row["owner_id"]]["name"])
            for row in self.rows.values()
            if row["owner_id"] in self.users.rows
        ]

    def set_status(self, batch_id, status, proof_ref=None):
        self.set_status_calls.append((batch_id, status, proof_ref))
        row = self.rows.get(batch_id)
        if row is None:
            return 0
        row["status"] = BatchStatus(status).value
        if proof_ref is not None:
            row["payment_proof_ref"] = proof_ref
        return 1


@pytest.fixture
def users():
    return FakeUserStore()


@pytest.fixture
def store(users):
    return FakeBatchStore(users)


@pytest.fixture
def proof_storage(tmp_path):
    return ProofStorage(tmp_path / "uploads", prefix="proof_")


@pytest.fixture
def client(users, store, proof_storage):
    app.dependency_overrides[dependencies.get_user_store] = lambda: users
    app.dependency_overrides[dependencies.get_batch_store] = lambda: store
    app.dependency_overrides[dependencies.get_proof_storage] = lambda: proof_storage
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def png_bytes():
    return io.BytesIO(b"\x89PNG\r\n\x1a\nfake-image")
