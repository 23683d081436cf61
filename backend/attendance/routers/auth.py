"""Auth API routes: sign-up, sign-in, sign-out and the current session."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from attendance.database import get_db
from attendance.dependencies import bearer_scheme, get_current_session
from attendance.models.account import AuthSession
from attendance.schemas.auth import SignIn, SignUp, SessionOut
from attendance.services import auth_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/signup", response_model=SessionOut, status_code=status.HTTP_201_CREATED)
def sign_up(payload: SignUp, db: Session = Depends(get_db)):
    """Create an admin account with its event; returns a signed-in session."""
    session = auth_service.sign_up(db, payload.username, payload.password, payload.group_name)
    return auth_service.describe_session(db, session)


@router.post("/signin", response_model=SessionOut)
def sign_in(payload: SignIn, db: Session = Depends(get_db)):
    session = auth_service.sign_in(db, payload.username, payload.password)
    return auth_service.describe_session(db, session)


@router.post("/signout", status_code=status.HTTP_204_NO_CONTENT)
def sign_out(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
):
    """End the caller's session. Unknown or missing tokens are accepted silently."""
    if credentials:
        auth_service.sign_out(db, credentials.credentials)


@router.get("/session", response_model=SessionOut)
def current_session(session: AuthSession = Depends(get_current_session), db: Session = Depends(get_db)):
    return auth_service.describe_session(db, session)
