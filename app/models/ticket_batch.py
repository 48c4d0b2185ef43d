"""Ticket batch entity and its payment state machine.

A batch is created ``Owed`` and moves to ``Cancelled`` once payment is
confirmed, either by an administrator or by a proof-of-payment upload.
``Cancelled`` is the stored label for a settled batch and is terminal.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
import json
from typing import Optional


class BatchStatus(str, Enum):
    OWED = "Owed"
    CANCELLED = "Cancelled"


class PaymentEvent(str, Enum):
    ADMIN_SETTLE = "admin_settle"
    PROOF_UPLOADED = "proof_uploaded"


_TRANSITIONS: dict[tuple[BatchStatus, PaymentEvent], BatchStatus] = {
    (BatchStatus.OWED, PaymentEvent.ADMIN_SETTLE): BatchStatus.CANCELLED,
    (BatchStatus.OWED, PaymentEvent.PROOF_UPLOADED): BatchStatus.CANCELLED,
    (BatchStatus.CANCELLED, PaymentEvent.ADMIN_SETTLE): BatchStatus.CANCELLED,
    (BatchStatus.CANCELLED, PaymentEvent.PROOF_UPLOADED): BatchStatus.CANCELLED,
}


def apply_event(status: BatchStatus | str, event: PaymentEvent) -> BatchStatus:
    current = BatchStatus(status)
    return _TRANSITIONS[(current, PaymentEvent(event))]


def is_settled(status: BatchStatus | str) -> bool:
    return BatchStatus(status) is BatchStatus.CANCELLED


def encode_numbers(numbers: list[int]) -> str:
    return json.dumps([int(number) for number in numbers])


def decode_numbers(raw) -> list[int]:
    if raw is None:
        return []
    if isinstance(raw, (list, tuple)):
        return [int(value) for value in raw]
    return [int(value) for value in json.loads(raw)]


@dataclass(frozen=True)
class TicketBatch:
    id: int
    owner_id: int
    numbers: list[int]
    total_amount: Decimal
    status: BatchStatus
    payment_proof_ref: Optional[str] = None

    @classmethod
    def from_row(cls, row: dict) -> "TicketBatch":
        return cls(
            id=row["id"],
            owner_id=row["owner_id"],
            numbers=decode_numbers(row["numbers"]),
            total_amount=Decimal(row["total_amount"]),
            status=BatchStatus(row["status"]),
            payment_proof_ref=row.get("payment_proof_ref"),
        )

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "numbers": list(self.numbers),
            "total_amount": self.total_amount,
            "status": self.status.value,
            "payment_proof_ref": self.payment_proof_ref,
        }
