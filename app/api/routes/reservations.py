from typing import Optional

from fastapi import APIRouter, Depends

from app.api.dependencies import ensure_owner_access, get_batch_store, optional_user
from app.cqrs.commands import reservations
from app.db.ticket_batches import TicketBatchStore
from app.models.schemas import ReservationRequest, ReservationResponse

router = APIRouter(prefix="/reservations", tags=["reservations"])


@router.post("", response_model=ReservationResponse, status_code=201)
def create_reservation(
    payload: ReservationRequest,
    store: TicketBatchStore = Depends(get_batch_store),
    user: Optional[dict] = Depends(optional_user),
):
    ensure_owner_access(user, payload.owner_id)
    return reservations.create_reservation(store, payload)
