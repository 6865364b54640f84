"""Pydantic schemas for Participations."""
from datetime import datetime
from pydantic import BaseModel

from eventapp.models.participation import ParticipationStatus


class ParticipationCreate(BaseModel):
    event_id: str
    user_id: str


class ParticipationDecision(BaseModel):
    status: ParticipationStatus  # approved or rejected


class ParticipationOut(BaseModel):
    participation_id: str
    event_id: str
    user_id: str
    status: ParticipationStatus
    created_at: datetime

    model_config = {"from_attributes": True}
