from __future__ import annotations

import logging
from typing import BinaryIO, Optional

from app.core.errors import NotFoundError, StorageError, ValidationError
from app.db.ticket_batches import TicketBatchStore
from app.models.ticket_batch import PaymentEvent, apply_event, is_settled
from app.services.proof_storage import ProofStorage, extension_for

logger = logging.getLogger(__name__)


def settle_batch(store: TicketBatchStore, batch_id: int) -> dict:
    batch = store.get(batch_id)
    if batch is None:
        raise NotFoundError("Record not found")
    if is_settled(batch.status):
        logger.info("Batch %s already settled", batch_id)
        return {"message": "Payment already settled"}
    new_status = apply_event(batch.status, PaymentEvent.ADMIN_SETTLE)
    if store.set_status(batch_id, new_status) == 0:
        raise NotFoundError("Record not found")
    logger.info("Batch %s settled by administrator", batch_id)
    return {"message": "Payment updated successfully"}


def attach_payment_proof(
    store: TicketBatchStore,
    storage: ProofStorage,
    batch_id: int,
    content_type: Optional[str],
    stream: BinaryIO,
) -> dict:
    extension = extension_for(content_type)
    if extension is None:
        raise ValidationError("A PNG, JPEG, GIF or WebP image is required")
    batch = store.get(batch_id)
    if batch is None:
        raise NotFoundError("Record not found")
    new_status = apply_event(batch.status, PaymentEvent.PROOF_UPLOADED)

    try:
        image_ref = storage.save(extension, stream)
    except OSError as exc:
        logger.exception("Could not store payment proof for batch %s", batch_id)
        raise StorageError() from exc

    try:
        affected = store.set_status(batch_id, new_status, image_ref)
    except Exception:
        storage.delete(image_ref)
        raise
    if affected == 0:
        storage.delete(image_ref)
        raise NotFoundError("Record not found")

    logger.info("Payment proof %s attached to batch %s", image_ref, batch_id)
    return {"message": "Proof uploaded and status updated", "image_ref": image_ref}
