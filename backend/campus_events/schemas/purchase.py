"""
Pydantic schemas for ticket purchases.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class PurchaseRequest(BaseModel):
    quantity: int = Field(default=1, ge=1)


class PurchaseReceipt(BaseModel):
    event_id: int
    event_name: str
    event_date: datetime
    purchase_count: int


class PurchasedEventRef(BaseModel):
    id: int
    name: str
    date: datetime


class PurchaseResponse(BaseModel):
    success: bool = True
    message: str = "Ticket purchased successfully"
    purchase_count: int
    event: PurchasedEventRef

    @classmethod
    def from_receipt(cls, receipt: PurchaseReceipt) -> "PurchaseResponse":
        return cls(
            purchase_count=receipt.purchase_count,
            event=PurchasedEventRef(id=receipt.event_id, name=receipt.event_name, date=receipt.event_date),
        )


class PurchasedClubRef(BaseModel):
    id: int
    name: str
    image: Optional[str] = None


class PurchasedEventResponse(BaseModel):
    event_id: int
    name: str
    date: datetime
    venue: str
    price: float
    club: PurchasedClubRef
    purchased_at: datetime
    purchase_id: int
