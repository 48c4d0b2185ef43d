from __future__ import annotations

from decimal import Decimal
import logging

from app.db.ticket_batches import TicketBatchStore
from app.models.schemas import ReservationRequest

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def create_reservation(store: TicketBatchStore, payload: ReservationRequest) -> dict:
    total_amount = payload.total_amount.quantize(CENTS)
    batch_id = store.create(payload.owner_id, list(payload.numbers), total_amount)
    logger.info(
        "Reserved %d number(s) for user %s in batch %s",
        len(payload.numbers),
        payload.owner_id,
        batch_id,
    )
    return {"message": "Numbers saved successfully", "batch_id": batch_id}
