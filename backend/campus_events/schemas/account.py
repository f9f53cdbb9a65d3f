"""
Pydantic schemas for account sign-up, login and club moderation.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator


class _AccountCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)

    model_config = {"str_strip_whitespace": True}

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()


class StudentCreate(_AccountCreate):
    course: str = Field(..., min_length=1, max_length=255)
    year: Optional[int] = Field(None, ge=1, le=10)


class ClubCreate(_AccountCreate):
    description: Optional[str] = Field(None, max_length=1000)
    image: Optional[str] = Field(None, max_length=500)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()


class AccountResponse(BaseModel):
    id: int
    role: str
    name: str
    email: str
    description: Optional[str] = None
    image: Optional[str] = None
    course: Optional[str] = None
    year: Optional[int] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class AuthResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    account: AccountResponse


class ClubResponse(BaseModel):
    id: int
    name: str
    email: str
    description: Optional[str] = None
    image: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class ClubUpdate(BaseModel):
    """Admin patch over a club's public profile."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    image: Optional[str] = Field(None, max_length=500)

    model_config = {"extra": "forbid", "str_strip_whitespace": True}

    @model_validator(mode="after")
    def name_not_null(self) -> "ClubUpdate":
        if "name" in self.model_fields_set and self.name is None:
            raise ValueError("name cannot be null")
        return self
