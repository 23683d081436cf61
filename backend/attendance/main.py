"""FastAPI application entry point."""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from attendance.config import settings
from attendance.database import Base, engine

# Import routers
from attendance.routers import auth, events, users, attendances, checkin

# Import all models so Base.metadata knows about them
from attendance.models.account import AdminAccount, AuthSession  # noqa: F401
from attendance.models.event import Event                          # noqa: F401
from attendance.models.user import User                            # noqa: F401
from attendance.models.attendance import Attendance                # noqa: F401

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="QR Attendance",
    description="QR-code self check-in, attendee rosters and attendance exports for small groups",
    version="0.1.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(events.router, prefix="/api/events", tags=["Events"])
app.include_router(users.router, prefix="/api/events/{event_id}/users", tags=["Users"])
app.include_router(attendances.router, prefix="/api/events/{event_id}/attendances", tags=["Attendances"])
app.include_router(checkin.router, prefix="/api/checkin", tags=["CheckIn"])


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode)."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)


@app.get("/api/health")
def health_check():
    return {"status": "ok"}
