"""Roster API routes: attendees of one event."""
import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from attendance.database import get_db
from attendance.dependencies import get_owned_event
from attendance.models.event import Event
from attendance.schemas.attendance import AttendanceOut
from attendance.schemas.user import RosterEntryOut, UserCreate, UserOut
from attendance.services import roster_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/", response_model=list[RosterEntryOut])
def list_users(event: Event = Depends(get_owned_event), db: Session = Depends(get_db)):
    """List attendees ordered by name, with their attendance counts."""
    return roster_service.list_roster_with_counts(db, event.event_id)


@router.post("/", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def add_user(payload: UserCreate, event: Event = Depends(get_owned_event), db: Session = Depends(get_db)):
    return roster_service.add_user(db, event.event_id, payload.name)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: str, event: Event = Depends(get_owned_event), db: Session = Depends(get_db)):
    """Remove an attendee together with their attendance records."""
    roster_service.delete_user(db, event.event_id, user_id)


@router.get("/{user_id}/attendances", response_model=list[AttendanceOut])
def user_history(user_id: str, event: Event = Depends(get_owned_event), db: Session = Depends(get_db)):
    return roster_service.user_history(db, event.event_id, user_id)
