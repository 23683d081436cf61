"""Event API routes — delegates to event_service for ownership enforcement."""
import asyncio
import contextlib
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from attendance.database import SessionLocal, get_db
from attendance.dependencies import get_current_session, get_owned_event
from attendance.models.account import AuthSession
from attendance.models.event import Event
from attendance.schemas.event import EventActiveUpdate, EventCreate, EventOut
from attendance.services import auth_service, event_service
from attendance.services.change_feed import feed

logger = logging.getLogger(__name__)
router = APIRouter()

LIVE_TABLES = ("events", "users", "attendances")


@router.post("/", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(
    payload: EventCreate,
    session: AuthSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Create the caller's event (for accounts whose sign-up left them without one)."""
    return event_service.create_event(
        db=db,
        account_id=session.account_id,
        name=payload.name,
        description=payload.description,
        location=payload.location,
    )


@router.get("/", response_model=list[EventOut])
def list_events(session: AuthSession = Depends(get_current_session), db: Session = Depends(get_db)):
    """List the caller's events, newest first."""
    return event_service.list_events(db, session.account_id)


@router.get("/mine", response_model=EventOut)
def get_my_event(session: AuthSession = Depends(get_current_session), db: Session = Depends(get_db)):
    return event_service.get_admin_event(db, session.account_id)


@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: str, db: Session = Depends(get_db)):
    """Public lookup used by the check-in screen."""
    return event_service.get_event(db, event_id)


@router.patch("/{event_id}/active", response_model=EventOut)
def set_event_active(
    payload: EventActiveUpdate,
    event: Event = Depends(get_owned_event),
    db: Session = Depends(get_db),
):
    """Activate or deactivate self-check-in for an event."""
    return event_service.set_event_active(db, event, payload.is_active)


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(event: Event = Depends(get_owned_event), db: Session = Depends(get_db)):
    """Delete an event with its roster and attendance history."""
    event_service.delete_event(db, event)


def _authorize_subscriber(event_id: str, token: str) -> None:
    """Token and ownership check on a short-lived session, released before streaming starts."""
    with SessionLocal() as db:
        session = auth_service.resolve_session(db, token)
        event_service.get_owned_event(db, event_id, session.account_id)


@router.websocket("/{event_id}/changes")
async def event_changes(websocket: WebSocket, event_id: str, token: str = Query("")):
    """Push a message whenever the event, its roster or its attendance changes."""
    try:
        await run_in_threadpool(_authorize_subscriber, event_id, token)
    except HTTPException as exc:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=str(exc.detail))
        return

    subscription = feed.subscribe(LIVE_TABLES, event_id)
    await websocket.accept()

    async def _forward():
        while True:
            await websocket.send_json(await subscription.get())

    forwarder = asyncio.create_task(_forward())
    try:
        while True:
            # Client messages are ignored; receiving is how a disconnect is noticed
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.debug("Change subscriber for event %s disconnected", event_id)
    finally:
        forwarder.cancel()
        with contextlib.suppress(asyncio.CancelledError, WebSocketDisconnect, RuntimeError):
            await forwarder
        subscription.close()
