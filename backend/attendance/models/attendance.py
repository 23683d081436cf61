"""Attendance ORM model: one check-in of a user to an event.

The (user, event, calendar day) uniqueness constraint is what rejects a second
same-day check-in; services translate the resulting IntegrityError into a 409.
"""
import uuid
from sqlalchemy import Column, String, Date, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from attendance.database import Base


class Attendance(Base):
    __tablename__ = "attendances"
    __table_args__ = (
        UniqueConstraint("user_id", "event_id", "check_in_date", name="uq_attendances_user_event_day"),
    )

    attendance_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), ForeignKey("events.event_id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    checked_in_at = Column(DateTime(timezone=True), nullable=False)
    check_in_date = Column(Date, nullable=False, index=True)  # local calendar day

    event = relationship("Event", back_populates="attendances")
    user = relationship("User", back_populates="attendances")

    @property
    def user_name(self) -> str:
        return self.user.name if self.user else ""

    @property
    def event_name(self) -> str:
        return self.event.name if self.event else ""
