"""AdminAccount and AuthSession ORM models: organizer credentials and issued sessions."""
import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from attendance.database import Base


class AdminAccount(Base):
    __tablename__ = "admin_accounts"

    account_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), nullable=False, unique=True)  # <username>@AUTH_EMAIL_DOMAIN
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    sessions = relationship("AuthSession", back_populates="account", cascade="all, delete-orphan")


class AuthSession(Base):
    __tablename__ = "auth_sessions"

    token = Column(String(64), primary_key=True)
    account_id = Column(
        String(36), ForeignKey("admin_accounts.account_id", ondelete="CASCADE"), nullable=False,
    )
    created_at = Column(DateTime(timezone=True), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)

    account = relationship("AdminAccount", back_populates="sessions")
