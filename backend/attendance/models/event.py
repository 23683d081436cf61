"""Event ORM model: one attendance-tracked group owned by an administrator."""
import uuid
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from attendance.database import Base


class Event(Base):
    __tablename__ = "events"

    event_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(150), nullable=False)
    description = Column(String(1000), nullable=True)
    location = Column(String(255), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    # One administrator owns at most one event
    admin_user_id = Column(
        String(36),
        ForeignKey("admin_accounts.account_id", ondelete="CASCADE"),
        nullable=True,
        unique=True,
    )
    qr_code_data = Column(String(500), nullable=False, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    users = relationship("User", back_populates="event", cascade="all, delete-orphan")
    attendances = relationship("Attendance", back_populates="event", cascade="all, delete-orphan")
