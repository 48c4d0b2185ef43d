from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile

from app.api.dependencies import (
    ensure_owner_access,
    get_batch_store,
    get_proof_storage,
    optional_user,
    require_admin,
)
from app.core.errors import NotFoundError
from app.cqrs.commands import payments
from app.db.ticket_batches import TicketBatchStore
from app.models.schemas import MessageResponse, ProofUploadResponse
from app.services.proof_storage import ProofStorage

router = APIRouter(prefix="/payments", tags=["payments"])


@router.put("/{batch_id}/settle", response_model=MessageResponse)
def settle(
    batch_id: int,
    store: TicketBatchStore = Depends(get_batch_store),
    _: Optional[dict] = Depends(require_admin),
):
    return payments.settle_batch(store, batch_id)


@router.post("/{batch_id}/proof", response_model=ProofUploadResponse)
def upload_proof(
    batch_id: int,
    image: UploadFile = File(...),
    store: TicketBatchStore = Depends(get_batch_store),
    storage: ProofStorage = Depends(get_proof_storage),
    user: Optional[dict] = Depends(optional_user),
):
    if user is not None:
        batch = store.get(batch_id)
        if batch is None:
            raise NotFoundError("Record not found")
        ensure_owner_access(user, batch.owner_id)
    return payments.attach_payment_proof(
        store,
        storage,
        batch_id,
        image.content_type,
        image.file,
    )
