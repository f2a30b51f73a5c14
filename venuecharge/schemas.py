"""
Pydantic schemas for the site backend.

Request and response bodies use camelCase keys on the wire; attributes
stay snake_case in Python.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    StrictInt,
    field_validator,
)
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Insertable subsets


class InsertUser(CamelModel):
    username: str
    password: str


class InsertContactSubmission(CamelModel):
    name: str
    email: str
    phone: Optional[str] = None
    business: str
    message: Optional[str] = None


class ContactForm(InsertContactSubmission):
    """Public contact form; stricter than the stored shape."""

    name: str = Field(..., min_length=2)
    email: EmailStr
    phone: str = Field(..., min_length=10)
    business: str = Field(..., min_length=2)
    message: Optional[str] = None

    @field_validator("message", mode="before")
    @classmethod
    def _message_not_null(cls, value):
        # May be omitted, but an explicit null is rejected.
        if value is None:
            raise ValueError("message must be a string when provided")
        return value


class InsertVenue(CamelModel):
    name: str
    contact_name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    number_of_stations: Optional[StrictInt] = None
    notes: Optional[str] = None


class InsertAdvertiser(CamelModel):
    name: str
    contact_name: str
    email: str
    phone: Optional[str] = None
    industry: Optional[str] = None
    address: Optional[str] = None
    package_type: Optional[str] = None
    notes: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


# Responses


class Venue(CamelModel):
    id: int
    name: str
    contact_name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    number_of_stations: Optional[int] = None
    is_active: Optional[bool] = None
    installation_date: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime


class Advertiser(CamelModel):
    id: int
    name: str
    contact_name: str
    email: str
    phone: Optional[str] = None
    industry: Optional[str] = None
    address: Optional[str] = None
    package_type: Optional[str] = None
    is_active: Optional[bool] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime


class ContactSubmitResponse(BaseModel):
    success: Literal[True] = True
    message: str = "Form submitted successfully"


class ErrorResponse(BaseModel):
    success: Literal[False] = False
    message: str
    errors: Optional[list[dict]] = None
