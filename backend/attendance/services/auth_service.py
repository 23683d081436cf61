"""Auth service: admin accounts, password checks and session tokens.

Usernames are stored as synthetic addresses (``<username>@AUTH_EMAIL_DOMAIN``)
and stripped back for display.
"""
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash

from attendance.config import settings
from attendance.models.account import AdminAccount, AuthSession
from attendance.services import event_service

logger = logging.getLogger(__name__)


def username_to_email(username: str) -> str:
    return f"{username.strip()}@{settings.AUTH_EMAIL_DOMAIN}"


def email_to_username(email: str) -> str:
    suffix = f"@{settings.AUTH_EMAIL_DOMAIN}"
    if email.endswith(suffix):
        return email[: -len(suffix)]
    return email


def _as_utc(moment: datetime) -> datetime:
    """SQLite hands back naive datetimes; every stored timestamp is UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def find_account(db: Session, username: str) -> Optional[AdminAccount]:
    return db.query(AdminAccount).filter(AdminAccount.email == username_to_email(username)).first()


def _issue_session(db: Session, account: AdminAccount) -> AuthSession:
    now = datetime.now(timezone.utc)
    session = AuthSession(
        token=secrets.token_urlsafe(32),
        account_id=account.account_id,
        created_at=now,
        expires_at=now + timedelta(hours=settings.SESSION_TTL_HOURS),
    )
    db.add(session)
    return session


def sign_up(db: Session, username: str, password: str, group_name: str) -> AuthSession:
    """Create an admin account, its event and a session in one transaction."""
    if find_account(db, username):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username is already taken")

    account = AdminAccount(email=username_to_email(username), password_hash=generate_password_hash(password))
    try:
        db.add(account)
        db.flush()
        event = event_service.new_event(name=group_name, admin_user_id=account.account_id)
        db.add(event)
        session = _issue_session(db, account)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username is already taken")
    db.refresh(session)
    logger.info("Signed up admin %s with event '%s' (%s)", username, event.name, event.event_id)
    return session


def sign_in(db: Session, username: str, password: str) -> AuthSession:
    account = find_account(db, username)
    if not account or not check_password_hash(account.password_hash, password):
        logger.warning("Failed sign-in for %s", username)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid username or password")

    session = _issue_session(db, account)
    db.commit()
    db.refresh(session)
    logger.info("Admin %s signed in", username)
    return session


def sign_out(db: Session, token: str) -> None:
    """Drop the session; signing out twice is not an error."""
    deleted = db.query(AuthSession).filter(AuthSession.token == token).delete()
    db.commit()
    if deleted:
        logger.info("Session signed out")


def resolve_session(db: Session, token: Optional[str]) -> AuthSession:
    """Return the live session for ``token`` or raise 401."""
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")

    session = db.query(AuthSession).filter(AuthSession.token == token).first()
    if not session:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid session")

    if _as_utc(session.expires_at) <= datetime.now(timezone.utc):
        db.delete(session)
        db.commit()
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Session expired")
    return session


def describe_session(db: Session, session: AuthSession) -> dict[str, Any]:
    """Shape a session for the API, including the admin's event if it exists."""
    event = event_service.find_admin_event(db, session.account_id)
    return {
        "token": session.token,
        "account_id": session.account_id,
        "username": email_to_username(session.account.email),
        "expires_at": _as_utc(session.expires_at),
        "event_id": event.event_id if event else None,
    }
