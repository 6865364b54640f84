"""Pydantic schemas for Users."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class UserCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)
    first_name: str = ""
    last_name: str = ""
    email: str = Field(..., min_length=3, max_length=255)


class UserUpdate(BaseModel):
    username: Optional[str] = Field(None, min_length=1, max_length=50)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = Field(None, min_length=3, max_length=255)


class UserOut(BaseModel):
    user_id: str
    username: str
    first_name: str
    last_name: str
    email: str
    avatar: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}
