from __future__ import annotations

from app.db.ticket_batches import TicketBatchStore


def list_user_batches(store: TicketBatchStore, owner_id: int) -> list[dict]:
    return [batch.as_dict() for batch in store.list_by_owner(owner_id)]


def list_all_batches(store: TicketBatchStore) -> list[dict]:
    return [
        {**batch.as_dict(), "owner_name": owner_name}
        for batch, owner_name in store.list_all()
    ]
