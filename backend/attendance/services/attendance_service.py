"""Attendance service: check-ins, cancellations and the absentee view.

Calendar days are evaluated in ``settings.TIMEZONE``. Each attendance row
stores its local ``check_in_date`` so that the (user, event, day) uniqueness
constraint can reject a second same-day check-in at the database level.
"""
import logging
from datetime import date, datetime, timezone
from typing import Any, Iterable, Optional, Sequence

import pytz
from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from attendance.config import settings
from attendance.models.attendance import Attendance
from attendance.models.event import Event
from attendance.models.user import User
from attendance.services import event_service, roster_service
from attendance.services.change_feed import feed, INSERT, DELETE

logger = logging.getLogger(__name__)

ALREADY_CHECKED_IN = "Already checked in today"


def local_date_of(moment: datetime) -> date:
    """Calendar day of ``moment`` in the configured timezone (naive values are UTC)."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(pytz.timezone(settings.TIMEZONE)).date()


def local_today() -> date:
    return local_date_of(datetime.now(timezone.utc))


def compute_absentees(roster: Sequence[Any], attended_user_ids: Iterable[str]) -> list[Any]:
    """Roster members with no check-in, by user id; roster order is preserved."""
    attended = set(attended_user_ids)
    return [user for user in roster if user.user_id not in attended]


def record_check_in(db: Session, event_id: str, user_id: str, now: Optional[datetime] = None) -> Attendance:
    """Insert one attendance row and commit.

    Raises IntegrityError (after rolling back) when the user already has a
    record for the same local day.
    """
    now = now or datetime.now(timezone.utc)
    attendance = Attendance(
        event_id=event_id,
        user_id=user_id,
        checked_in_at=now,
        check_in_date=local_date_of(now),
    )
    db.add(attendance)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise
    db.refresh(attendance)
    feed.publish("attendances", event_id, INSERT)
    return attendance


def check_in_by_name(db: Session, event_id: str, name: str) -> Attendance:
    """Attendee self-check-in from the QR screen."""
    event = event_service.get_event(db, event_id)
    if not event.is_active:
        logger.warning("Rejected check-in for inactive event %s", event_id)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid or inactive event")

    name = name.strip()
    user = db.query(User).filter(User.event_id == event_id, User.name == name).first()
    if not user:
        logger.warning("Rejected check-in for unregistered name '%s' on event %s", name, event_id)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User is not registered")

    try:
        attendance = record_check_in(db, event_id, user.user_id)
    except IntegrityError:
        logger.warning("Duplicate check-in for user %s on event %s", user.user_id, event_id)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=ALREADY_CHECKED_IN)

    logger.info("User '%s' checked in to event %s", user.name, event_id)
    return attendance


def manual_check_in(db: Session, event: Event, user_ids: list[str]) -> dict[str, Any]:
    """Admin check-in of several roster members, one record per user.

    Does not look at ``event.is_active``: the flag only gates the public QR
    path.
    """
    roster_ids = {user.user_id for user in roster_service.list_roster(db, event.event_id)}
    event_id = event.event_id
    results: list[dict[str, Any]] = []
    seen: set[str] = set()

    for user_id in user_ids:
        if user_id in seen:
            continue
        seen.add(user_id)

        if user_id not in roster_ids:
            results.append({"user_id": user_id, "success": False, "error": "User not found"})
            continue
        try:
            attendance = record_check_in(db, event_id, user_id)
        except IntegrityError:
            results.append({"user_id": user_id, "success": False, "error": ALREADY_CHECKED_IN})
            continue
        results.append({"user_id": user_id, "success": True, "attendance": attendance})

    success_count = sum(1 for r in results if r["success"])
    already_count = sum(1 for r in results if r.get("error") == ALREADY_CHECKED_IN)
    logger.info(
        "Manual check-in on event %s: %d checked in, %d already present",
        event_id, success_count, already_count,
    )
    return {
        "success_count": success_count,
        "already_checked_in_count": already_count,
        "results": results,
        "message": f"{success_count} attendee(s) checked in",
    }


def list_attendances(db: Session, event_id: str, on_date: Optional[date] = None) -> list[Attendance]:
    """Attendance records for an event, newest first, optionally for one day."""
    query = db.query(Attendance).filter(Attendance.event_id == event_id)
    if on_date is not None:
        query = query.filter(Attendance.check_in_date == on_date)
    return query.order_by(Attendance.checked_in_at.desc()).all()


def delete_attendance(db: Session, event_id: str, attendance_id: str) -> None:
    """Cancel a check-in."""
    attendance = (
        db.query(Attendance)
        .filter(Attendance.attendance_id == attendance_id, Attendance.event_id == event_id)
        .first()
    )
    if not attendance:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Attendance record not found")
    db.delete(attendance)
    db.commit()
    feed.publish("attendances", event_id, DELETE)
    logger.info("Cancelled attendance %s on event %s", attendance_id, event_id)


def absentees(db: Session, event_id: str, on_date: Optional[date] = None) -> list[User]:
    """Roster members without a check-in on ``on_date`` (default: today)."""
    on_date = on_date or local_today()
    roster = roster_service.list_roster(db, event_id)
    attended = (
        row.user_id
        for row in db.query(Attendance.user_id).filter(
            Attendance.event_id == event_id,
            Attendance.check_in_date == on_date,
        )
    )
    return compute_absentees(roster, attended)
