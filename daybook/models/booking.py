"""Booking model definitions."""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, Field


class PaymentMethod(str, Enum):
    CASH = 'cash'
    CARD = 'card'


class Booking(BaseModel):
    """Represents a confirmed day booking as stored in the ledger file."""

    date: date
    method: PaymentMethod
    deposit: int = Field(ge=0)
    payment_reference: str | None = Field(default=None, alias='paymentReference')
    created_at: datetime = Field(alias='createdAt')
    name: str = ''
    phone: str = ''
    email: str | None = None
    vehicle: str | None = None

    class Config:
        populate_by_name = True
        frozen = True

    def to_record(self) -> dict:
        return self.model_dump(mode='json', by_alias=True)
