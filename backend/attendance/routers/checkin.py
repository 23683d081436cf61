"""Public self-check-in routes reached from an event's QR code."""
import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from attendance.database import get_db
from attendance.schemas.attendance import AttendanceOut, SelfCheckIn
from attendance.services import attendance_service, event_service, roster_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=AttendanceOut, status_code=status.HTTP_201_CREATED)
def check_in(payload: SelfCheckIn, db: Session = Depends(get_db)):
    """Mark the named attendee present for today."""
    return attendance_service.check_in_by_name(db, payload.event_id, payload.name)


@router.get("/{event_id}/suggestions", response_model=list[str])
def suggest_names(event_id: str, q: str = Query(""), db: Session = Depends(get_db)):
    """Roster names matching what the attendee has typed so far."""
    event_service.get_event(db, event_id)
    return roster_service.suggest_names(db, event_id, q)
