"""Pydantic schemas for sign-up, sign-in and sessions."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, field_validator, model_validator

from attendance.config import settings


class SignIn(BaseModel):
    username: str
    password: str

    @field_validator("username")
    @classmethod
    def _strip_username(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Username is required")
        return value


class SignUp(SignIn):
    confirm_password: str
    group_name: str

    @field_validator("group_name")
    @classmethod
    def _strip_group_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Group name is required")
        return value

    @model_validator(mode="after")
    def _check_passwords(self) -> "SignUp":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        if len(self.password) < settings.MIN_PASSWORD_LENGTH:
            raise ValueError(
                f"Password must be at least {settings.MIN_PASSWORD_LENGTH} characters"
            )
        return self


class SessionOut(BaseModel):
    token: str
    account_id: str
    username: str
    expires_at: datetime
    event_id: Optional[str] = None
