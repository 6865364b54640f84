"""Pydantic schemas for Events."""
from __future__ import annotations
from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, Field, field_validator

from eventapp.models.event import EventStatus
from eventapp.utils import as_utc


class EventPatch(BaseModel):
    """Fields an organizer may change on an existing event.

    Only the fields the client actually sent are applied, see ``changes()``.
    Unknown fields are rejected rather than merged into the row.
    """

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    location: Optional[str] = Field(None, max_length=500)
    category: Optional[str] = Field(None, max_length=100)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    max_attendees: Optional[int] = Field(None, ge=1)
    publicity: Optional[bool] = None
    status: Optional[EventStatus] = None

    model_config = {"extra": "forbid"}

    @field_validator("start_date", "end_date")
    @classmethod
    def _to_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)

    @field_validator("status")
    @classmethod
    def _not_deleted(cls, value: Optional[EventStatus]) -> Optional[EventStatus]:
        if value == EventStatus.deleted:
            raise ValueError("use DELETE to remove an event")
        return value

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class EventCreate(EventPatch):
    title: str = Field(..., min_length=1, max_length=255)


class OrganizerOut(BaseModel):
    user_id: str
    username: str
    first_name: str
    last_name: str
    email: str

    model_config = {"from_attributes": True}


class EventOut(BaseModel):
    event_id: str
    organizer_id: str
    organizer: Optional[OrganizerOut] = None
    title: str
    description: Optional[str] = None
    location: Optional[str] = None
    category: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    max_attendees: int
    publicity: bool
    status: EventStatus
    image: Optional[str] = None
    image_url: Optional[str] = None
    version: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class EventDeleted(BaseModel):
    message: str
