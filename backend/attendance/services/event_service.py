"""Event service — ownership checks, QR payloads and event lifecycle.

Responsibilities:
- Ownership hook: only the owning admin may toggle, delete or manage an event
- QR payload: a check-in URL carrying the event id as ``eventId``
- Change notifications for every event mutation
"""
import logging
import uuid
from typing import Optional
from urllib.parse import urlencode

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from attendance.config import settings
from attendance.models.event import Event
from attendance.services.change_feed import feed, UPDATE, DELETE

logger = logging.getLogger(__name__)


def build_qr_payload(event_id: str) -> str:
    """URL encoded into the event's QR code; scanning opens the check-in screen."""
    base = settings.PUBLIC_BASE_URL.rstrip("/")
    return f"{base}/check-in?{urlencode({'eventId': event_id})}"


def new_event(
    name: str,
    admin_user_id: Optional[str] = None,
    description: Optional[str] = None,
    location: Optional[str] = None,
) -> Event:
    """Build an active event whose QR payload already points at its own id."""
    event_id = str(uuid.uuid4())
    return Event(
        event_id=event_id,
        name=name,
        description=description,
        location=location,
        is_active=True,
        admin_user_id=admin_user_id,
        qr_code_data=build_qr_payload(event_id),
    )


def get_event(db: Session, event_id: str) -> Event:
    event = db.query(Event).filter(Event.event_id == event_id).first()
    if not event:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    return event


def _check_ownership(event: Event, account_id: str) -> None:
    """Only the owning admin may modify this event or read its records."""
    if event.admin_user_id != account_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not manage this event",
        )


def get_owned_event(db: Session, event_id: str, account_id: str) -> Event:
    event = get_event(db, event_id)
    _check_ownership(event, account_id)
    return event


def find_admin_event(db: Session, account_id: str) -> Optional[Event]:
    return db.query(Event).filter(Event.admin_user_id == account_id).first()


def get_admin_event(db: Session, account_id: str) -> Event:
    """The admin's own event; 404 when sign-up left them without one."""
    event = find_admin_event(db, account_id)
    if not event:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No event found for this account")
    return event


def list_events(db: Session, account_id: str) -> list[Event]:
    return (
        db.query(Event)
        .filter(Event.admin_user_id == account_id)
        .order_by(Event.created_at.desc())
        .all()
    )


def create_event(
    db: Session,
    account_id: str,
    name: str,
    description: Optional[str] = None,
    location: Optional[str] = None,
) -> Event:
    """Create the admin's event if they do not own one yet."""
    existing = find_admin_event(db, account_id)
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Account already manages event {existing.event_id}",
        )

    event = new_event(name=name, admin_user_id=account_id, description=description, location=location)
    db.add(event)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Account already manages an event")
    db.refresh(event)
    logger.info("Created event '%s' (%s) for admin %s", event.name, event.event_id, account_id)
    return event


def set_event_active(db: Session, event: Event, is_active: bool) -> Event:
    event.is_active = is_active
    db.commit()
    db.refresh(event)
    feed.publish("events", event.event_id, UPDATE)
    logger.info("Event %s is now %s", event.event_id, "active" if is_active else "inactive")
    return event


def delete_event(db: Session, event: Event) -> None:
    """Delete an event together with its roster and attendance records."""
    event_id = event.event_id
    db.delete(event)
    db.commit()
    for table in ("events", "users", "attendances"):
        feed.publish(table, event_id, DELETE)
    logger.info("Deleted event %s", event_id)
