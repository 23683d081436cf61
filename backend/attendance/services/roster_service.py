"""Roster service: attendees registered on an event."""
import logging
from typing import Any

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from attendance.models.attendance import Attendance
from attendance.models.user import User
from attendance.services.change_feed import feed, INSERT, DELETE

logger = logging.getLogger(__name__)

SUGGESTION_LIMIT = 5


def list_roster(db: Session, event_id: str) -> list[User]:
    return db.query(User).filter(User.event_id == event_id).order_by(User.name).all()


def list_roster_with_counts(db: Session, event_id: str) -> list[dict[str, Any]]:
    """Roster ordered by name, each entry carrying its total attendance count."""
    counts = dict(
        db.query(Attendance.user_id, func.count(Attendance.attendance_id))
        .filter(Attendance.event_id == event_id)
        .group_by(Attendance.user_id)
        .all()
    )
    return [
        {
            "user_id": user.user_id,
            "name": user.name,
            "event_id": user.event_id,
            "created_at": user.created_at,
            "attendance_count": counts.get(user.user_id, 0),
        }
        for user in list_roster(db, event_id)
    ]


def get_user(db: Session, event_id: str, user_id: str) -> User:
    user = db.query(User).filter(User.user_id == user_id, User.event_id == event_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


def add_user(db: Session, event_id: str, name: str) -> User:
    name = name.strip()
    if db.query(User).filter(User.event_id == event_id, User.name == name).first():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"'{name}' is already registered")

    user = User(event_id=event_id, name=name)
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"'{name}' is already registered")
    db.refresh(user)
    feed.publish("users", event_id, INSERT)
    logger.info("Added user '%s' (%s) to event %s", user.name, user.user_id, event_id)
    return user


def delete_user(db: Session, event_id: str, user_id: str) -> None:
    """Remove an attendee and, with them, their attendance records."""
    user = get_user(db, event_id, user_id)
    db.delete(user)
    db.commit()
    feed.publish("users", event_id, DELETE)
    feed.publish("attendances", event_id, DELETE)
    logger.info("Removed user %s from event %s", user_id, event_id)


def user_history(db: Session, event_id: str, user_id: str) -> list[Attendance]:
    """Every check-in of one attendee, newest first."""
    get_user(db, event_id, user_id)
    return (
        db.query(Attendance)
        .filter(Attendance.user_id == user_id)
        .order_by(Attendance.checked_in_at.desc())
        .all()
    )


def suggest_names(db: Session, event_id: str, query: str, limit: int = SUGGESTION_LIMIT) -> list[str]:
    """Case-insensitive substring match on roster names for the check-in screen."""
    needle = query.strip().lower()
    if not needle:
        return []
    return [user.name for user in list_roster(db, event_id) if needle in user.name.lower()][:limit]
