from __future__ import annotations

from decimal import Decimal
from typing import Optional

from app.core.errors import ValidationError
from app.models.ticket_batch import BatchStatus, TicketBatch, encode_numbers

_BATCH_COLUMNS = "b.id, b.owner_id, b.numbers, b.total_amount, b.status, b.payment_proof_ref"


class TicketBatchStore:
    def __init__(self, db):
        self.db = db

    def create(self, owner_id: int, numbers: list[int], total_amount: Decimal) -> int:
        if not numbers:
            raise ValidationError("At least one number is required")

        def _handler(conn):
            cur = conn.cursor()
            cur.execute("SELECT id FROM users WHERE id = %s", (owner_id,))
            if cur.fetchone() is None:
                cur.close()
                raise ValidationError("Owner does not exist")
            cur.execute(
                """
                INSERT INTO ticket_batches (owner_id, numbers, total_amount, status)
                VALUES (%s, %s, %s, %s)
                RETURNING id
                """,
                (owner_id, encode_numbers(numbers), total_amount, BatchStatus.OWED.value),
            )
            batch_id = cur.fetchone()[0]
            cur.close()
            return batch_id

        return self.db.run_transaction(_handler)

    def get(self, batch_id: int) -> Optional[TicketBatch]:
        row = self.db.fetch_one(
            f"SELECT {_BATCH_COLUMNS} FROM ticket_batches b WHERE b.id = %s",
            (batch_id,),
        )
        if not row:
            return None
        return TicketBatch.from_row(row)

    def list_by_owner(self, owner_id: int) -> list[TicketBatch]:
        rows = self.db.fetch_all(
            f"""
            SELECT {_BATCH_COLUMNS}
            FROM ticket_batches b
            WHERE b.owner_id = %s
            ORDER BY b.id ASC
            """,
            (owner_id,),
        )
        return [TicketBatch.from_row(row) for row in rows]

    def list_all(self) -> list[tuple[TicketBatch, str]]:
        rows = self.db.fetch_all(
            f"""
            SELECT {_BATCH_COLUMNS}, u.name AS owner_name
            FROM ticket_batches b
            JOIN users u ON u.id = b.owner_id
            ORDER BY b.id ASC
            """
        )
        return [(TicketBatch.from_row(row), row["owner_name"]) for row in rows]

    def set_status(
        self,
        batch_id: int,
        status: BatchStatus,
        proof_ref: Optional[str] = None,
    ) -> int:
        if proof_ref is None:
            return self.db.execute(
                "UPDATE ticket_batches SET status = %s, updated_at = now() WHERE id = %s",
                (BatchStatus(status).value, batch_id),
            )
        return self.db.execute(
            """
            UPDATE ticket_batches
            SET status = %s, payment_proof_ref = %s, updated_at = now()
            WHERE id = %s
            """,
            (BatchStatus(status).value, proof_ref, batch_id),
        )
