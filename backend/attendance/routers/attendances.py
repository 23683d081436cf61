"""Attendance API routes: admin views, manual check-in, cancellation and export."""
import logging
from datetime import date
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from attendance.database import get_db
from attendance.dependencies import get_owned_event
from attendance.models.event import Event
from attendance.schemas.attendance import AttendanceOut, ManualCheckIn, ManualCheckInOut
from attendance.schemas.user import UserOut
from attendance.services import attendance_service, export_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/", response_model=list[AttendanceOut])
def list_attendances(
    on_date: Optional[date] = Query(None, alias="date"),
    event: Event = Depends(get_owned_event),
    db: Session = Depends(get_db),
):
    """Attendance records, newest first; ``?date=YYYY-MM-DD`` limits to one day."""
    return attendance_service.list_attendances(db, event.event_id, on_date)


@router.post("/manual", response_model=ManualCheckInOut)
def manual_check_in(payload: ManualCheckIn, event: Event = Depends(get_owned_event), db: Session = Depends(get_db)):
    """Check in the selected attendees on the admin's behalf."""
    return attendance_service.manual_check_in(db, event, payload.user_ids)


@router.get("/absentees", response_model=list[UserOut])
def absentees(
    on_date: Optional[date] = Query(None, alias="date"),
    event: Event = Depends(get_owned_event),
    db: Session = Depends(get_db),
):
    """Roster members who have not checked in today (or on ``?date=``)."""
    return attendance_service.absentees(db, event.event_id, on_date)


@router.get("/export")
def export_attendances(event: Event = Depends(get_owned_event), db: Session = Depends(get_db)):
    """Download the full attendance history as an xlsx workbook."""
    filename, workbook = export_service.export_event(db, event)
    headers = {"Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}"}
    return StreamingResponse(workbook, media_type=export_service.XLSX_MEDIA_TYPE, headers=headers)


@router.delete("/{attendance_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_attendance(attendance_id: str, event: Event = Depends(get_owned_event), db: Session = Depends(get_db)):
    """Cancel a check-in."""
    attendance_service.delete_attendance(db, event.event_id, attendance_id)
