"""Pydantic schemas for roster Users (attendees)."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, field_validator


class UserCreate(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name is required")
        return value


class UserOut(BaseModel):
    user_id: str
    name: str
    event_id: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class RosterEntryOut(UserOut):
    attendance_count: int = 0
