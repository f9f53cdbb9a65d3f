"""
Pydantic schemas for event-related request/response validation.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class EventCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    date: datetime
    venue: str = Field(..., min_length=1, max_length=255)
    price: float = Field(..., ge=0)

    model_config = {"str_strip_whitespace": True}


class EventUpdate(BaseModel):
    """Partial patch; owner, ledger and counter are not patchable."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    date: Optional[datetime] = None
    venue: Optional[str] = Field(None, min_length=1, max_length=255)
    price: Optional[float] = Field(None, ge=0)

    model_config = {"extra": "forbid", "str_strip_whitespace": True}

    @model_validator(mode="after")
    def no_null_fields(self) -> "EventUpdate":
        for field in self.model_fields_set:
            if getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class ClubSummary(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    image: Optional[str] = None

    model_config = {"from_attributes": True}


class EventResponse(BaseModel):
    id: int
    name: str
    date: datetime
    venue: str
    price: float
    owner_club_id: int
    purchase_count: int
    created_at: datetime
    club: Optional[ClubSummary] = None

    model_config = {"from_attributes": True}


class BuyerSummary(BaseModel):
    id: int
    name: str
    email: str

    model_config = {"from_attributes": True}


class RecentPurchase(BaseModel):
    id: int
    buyer: BuyerSummary
    purchased_at: datetime

    model_config = {"from_attributes": True}


class EventStats(BaseModel):
    id: int
    name: str
    date: datetime
    total_purchases: int
    recent_purchases: list[RecentPurchase]


class MessageResponse(BaseModel):
    message: str
