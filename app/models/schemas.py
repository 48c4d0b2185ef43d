from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import AliasChoices, BaseModel, EmailStr, Field, field_validator


class HealthResponse(BaseModel):
    status: str
    time: datetime


class MigrationRunResponse(BaseModel):
    status: str
    applied_at: datetime


class MessageResponse(BaseModel):
    message: str


class UserRegister(BaseModel):
    name: str = Field(..., min_length=2, max_length=120)
    phone: Optional[str] = Field(None, max_length=30)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    role: Literal["player", "admin"] = "player"


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class PasswordReset(BaseModel):
    email: EmailStr
    new_password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        validation_alias=AliasChoices("new_password", "newPassword"),
    )


class UserOut(BaseModel):
    id: int
    name: str
    phone: Optional[str]
    email: EmailStr
    role: str


class LoginResponse(BaseModel):
    message: str
    token: str
    user: UserOut


class ReservationRequest(BaseModel):
    owner_id: int = Field(..., gt=0, validation_alias=AliasChoices("owner_id", "ownerId"))
    numbers: list[int] = Field(..., min_length=1, max_length=1000)
    total_amount: Decimal = Field(
        ...,
        ge=0,
        max_digits=10,
        decimal_places=2,
        validation_alias=AliasChoices("total_amount", "totalAmount"),
    )

    @field_validator("numbers")
    @classmethod
    def _non_negative(cls, value: list[int]) -> list[int]:
        if any(number < 0 for number in value):
            raise ValueError("Raffle numbers must be non-negative")
        return value


class ReservationResponse(BaseModel):
    message: str
    batch_id: int


class ProofUploadResponse(BaseModel):
    message: str
    image_ref: str


class TicketBatchOut(BaseModel):
    id: int
    owner_id: int
    numbers: list[int]
    total_amount: Decimal
    status: str
    payment_proof_ref: Optional[str]


class TicketBatchWithOwnerOut(TicketBatchOut):
    owner_name: str
