from typing import Optional

from fastapi import APIRouter, Depends

from app.api.dependencies import ensure_owner_access, get_batch_store, optional_user, require_admin
from app.cqrs.queries import batches
from app.db.ticket_batches import TicketBatchStore
from app.models.schemas import TicketBatchOut, TicketBatchWithOwnerOut

router = APIRouter(prefix="/batches", tags=["batches"])


@router.get("", response_model=list[TicketBatchWithOwnerOut])
def list_batches(
    store: TicketBatchStore = Depends(get_batch_store),
    _: Optional[dict] = Depends(require_admin),
):
    return batches.list_all_batches(store)


@router.get("/user/{owner_id}", response_model=list[TicketBatchOut])
def list_user_batches(
    owner_id: int,
    store: TicketBatchStore = Depends(get_batch_store),
    user: Optional[dict] = Depends(optional_user),
):
    ensure_owner_access(user, owner_id)
    return batches.list_user_batches(store, owner_id)
