from decimal import Decimal
import io

import pytest

from app.core.errors import NotFoundError, StorageError, ValidationError
from app.cqrs.commands.payments import attach_payment_proof, settle_batch
from app.cqrs.commands.reservations import create_reservation
from app.cqrs.queries.batches import list_all_batches, list_user_batches
from app.models.schemas import ReservationRequest


def _reserve(store, owner_id=42, numbers=(3, 7, 21), amount="15.00"):
    payload = ReservationRequest(owner_id=owner_id, numbers=list(numbers), total_amount=amount)
    return create_reservation(store, payload)["batch_id"]


def test_reserve_settle_and_settle_again(users, store):
    users.add("Ana", user_id=42)
    batch_id = _reserve(store)

    listed = list_user_batches(store, 42)
    assert len(listed) == 1
    assert listed[0]["status"] == "Owed"
    assert listed[0]["numbers"] == [3, 7, 21]
    assert listed[0]["total_amount"] == Decimal("15.00")

    assert settle_batch(store, batch_id) == {"message": "Payment updated successfully"}
    assert store.get(batch_id).status.value == "Cancelled"

    assert settle_batch(store, batch_id) == {"message": "Payment already settled"}
    assert store.get(batch_id).status.value == "Cancelled"
    assert len(store.set_status_calls) == 1


def test_reservation_amount_is_rounded_to_cents(users, store):
    users.add("Ana", user_id=1)
    payload = ReservationRequest(owner_id=1, numbers=[5], total_amount=Decimal("7.5"))
    batch_id = create_reservation(store, payload)["batch_id"]
    assert store.get(batch_id).total_amount == Decimal("7.50")


def test_reservation_for_unknown_owner_fails(store):
    with pytest.raises(ValidationError):
        _reserve(store, owner_id=99)


def test_settle_unknown_batch_is_not_found(store):
    with pytest.raises(NotFoundError):
        settle_batch(store, 1234)


def test_list_by_owner_excludes_other_owners(users, store):
    users.add("Ana", user_id=1)
    users.add("Luis", user_id=2)
    mine = _reserve(store, owner_id=1, numbers=[1])
    _reserve(store, owner_id=2, numbers=[2])
    assert [row["id"] for row in list_user_batches(store, 1)] == [mine]


def test_list_all_attaches_owner_names(users, store):
    users.add("Ana", user_id=1)
    users.add("Luis", user_id=2)
    _reserve(store, owner_id=1, numbers=[1])
    _reserve(store, owner_id=2, numbers=[2])
    rows = list_all_batches(store)
    assert [(row["owner_id"], row["owner_name"]) for row in rows] == [(1, "Ana"), (2, "Luis")]


def test_proof_upload_settles_and_records_image(users, store, proof_storage, png_bytes):
    users.add("Ana", user_id=42)
    batch_id = _reserve(store)

    result = attach_payment_proof(store, proof_storage, batch_id, "image/png", png_bytes)

    image_ref = result["image_ref"]
    assert image_ref.startswith("proof_") and image_ref.endswith(".png")
    assert proof_storage.path_for(image_ref).read_bytes().startswith(b"\x89PNG")
    batch = store.get(batch_id)
    assert batch.status.value == "Cancelled"
    assert batch.payment_proof_ref == image_ref


def test_admin_settle_leaves_proof_reference_empty(users, store):
    users.add("Ana", user_id=42)
    batch_id = _reserve(store)
    settle_batch(store, batch_id)
    assert store.get(batch_id).payment_proof_ref is None


def test_proof_for_missing_batch_writes_nothing(store, proof_storage, png_bytes):
    for _ in range(2):
        with pytest.raises(NotFoundError):
            attach_payment_proof(store, proof_storage, 777, "image/png", png_bytes)
    assert not proof_storage.directory.exists() or not any(proof_storage.directory.iterdir())
    assert store.set_status_calls == []


def test_proof_must_be_an_image(users, store, proof_storage):
    users.add("Ana", user_id=42)
    batch_id = _reserve(store)
    with pytest.raises(ValidationError):
        attach_payment_proof(store, proof_storage, batch_id, "text/plain", io.BytesIO(b"hi"))
    assert store.get(batch_id).status.value == "Owed"


def test_proof_file_removed_when_update_fails(users, store, proof_storage, png_bytes, monkeypatch):
    users.add("Ana", user_id=42)
    batch_id = _reserve(store)

    def failing_set_status(*args, **kwargs):
        raise StorageError()

    monkeypatch.setattr(store, "set_status", failing_set_status)
    with pytest.raises(StorageError):
        attach_payment_proof(store, proof_storage, batch_id, "image/png", png_bytes)
    assert list(proof_storage.directory.iterdir()) == []
    assert store.get(batch_id).payment_proof_ref is None


def test_proof_file_removed_when_batch_disappears(users, store, proof_storage, png_bytes, monkeypatch):
    users.add("Ana", user_id=42)
    batch_id = _reserve(store)
    monkeypatch.setattr(store, "set_status", lambda *args, **kwargs: 0)
    with pytest.raises(NotFoundError):
        attach_payment_proof(store, proof_storage, batch_id, "image/png", png_bytes)
    assert list(proof_storage.directory.iterdir()) == []


def test_file_write_failure_is_a_storage_error(users, store, proof_storage, png_bytes, monkeypatch):
    users.add("Ana", user_id=42)
    batch_id = _reserve(store)

    def broken_save(extension, stream):
        raise PermissionError("read-only filesystem")

    monkeypatch.setattr(proof_storage, "save", broken_save)
    with pytest.raises(StorageError):
        attach_payment_proof(store, proof_storage, batch_id, "image/png", png_bytes)
    assert store.get(batch_id).status.value == "Owed"
