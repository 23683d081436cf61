"""Pydantic schemas for Events."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, field_validator


class EventCreate(BaseModel):
    name: str
    description: Optional[str] = None
    location: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Event name is required")
        return value

    @field_validator("description", "location")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None


class EventActiveUpdate(BaseModel):
    is_active: bool


class EventOut(BaseModel):
    event_id: str
    name: str
    description: Optional[str] = None
    location: Optional[str] = None
    is_active: bool
    admin_user_id: Optional[str] = None
    qr_code_data: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
