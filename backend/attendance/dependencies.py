"""Shared FastAPI dependencies: bearer-token session and owned-event lookup."""
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from attendance.database import get_db
from attendance.models.account import AuthSession
from attendance.models.event import Event
from attendance.services import auth_service, event_service

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> AuthSession:
    token = credentials.credentials if credentials else None
    return auth_service.resolve_session(db, token)


def get_owned_event(
    event_id: str,
    session: AuthSession = Depends(get_current_session),
    db: Session = Depends(get_db),
) -> Event:
    """Resolve ``event_id`` from the path and require the caller to own it."""
    return event_service.get_owned_event(db, event_id, session.account_id)
