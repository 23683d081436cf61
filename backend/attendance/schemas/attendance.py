"""Pydantic schemas for Attendances and check-in flows."""
from __future__ import annotations
from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, field_validator


class AttendanceOut(BaseModel):
    attendance_id: str
    event_id: str
    event_name: str
    user_id: str
    user_name: str
    checked_in_at: datetime
    check_in_date: date

    model_config = {"from_attributes": True}


class SelfCheckIn(BaseModel):
    event_id: str
    name: str

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name is required")
        return value


class ManualCheckIn(BaseModel):
    user_ids: list[str]

    @field_validator("user_ids")
    @classmethod
    def _at_least_one(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("Select at least one user to check in")
        return value


class CheckInResult(BaseModel):
    user_id: str
    success: bool
    error: Optional[str] = None
    attendance: Optional[AttendanceOut] = None


class ManualCheckInOut(BaseModel):
    success_count: int
    already_checked_in_count: int
    results: list[CheckInResult]
    message: str


# Rebuild CheckInResult now that AttendanceOut is defined
CheckInResult.model_rebuild()
