"""Pytest fixtures — file-backed SQLite database for fast, isolated tests."""
import os

# The application's own engine is never used by tests; keep it in memory
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from attendance.database import Base, SessionLocal, enable_sqlite_foreign_keys, engine, get_db
from attendance.main import app

# Import all models so they register with Base.metadata
from attendance.models.account import AdminAccount, AuthSession  # noqa: F401
from attendance.models.event import Event                          # noqa: F401
from attendance.models.user import User                            # noqa: F401
from attendance.models.attendance import Attendance                # noqa: F401

SQLITE_URL = "sqlite:///./test.db"


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})
    enable_sqlite_foreign_keys(engine)

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(db_engine):
    """Yield a database session bound to the test engine."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_engine):
    """FastAPI TestClient with the database dependency overridden to use SQLite."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def _override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    # Routes that open their own short-lived sessions use the same test engine
    SessionLocal.configure(bind=db_engine)
    try:
        with TestClient(app) as c:
            yield c
    finally:
        SessionLocal.configure(bind=engine)
        app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers: create admins, attendees and check-ins via the API
# ---------------------------------------------------------------------------
def auth_headers(session: dict) -> dict:
    return {"Authorization": f"Bearer {session['token']}"}


def create_test_admin(client: TestClient, username: str = "organizer", group_name: str = "Study Group",
                      password: str = "secret123") -> dict:
    """Helper — POST /api/auth/signup and return the session JSON (includes event_id)."""
    resp = client.post("/api/auth/signup", json={
        "username": username,
        "password": password,
        "confirm_password": password,
        "group_name": group_name,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_test_user(client: TestClient, session: dict, name: str) -> dict:
    """Helper — add an attendee to the admin's event and return the user JSON."""
    resp = client.post(
        f"/api/events/{session['event_id']}/users/",
        json={"name": name},
        headers=auth_headers(session),
    )
    assert resp.status_code == 201, resp.text
    return resp.json()
