# backend/tutorly/models/oauth_credential.py
"""Stored OAuth tokens for a user's connected Zoom / Google account."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.ulid_helper import generate_ulid
from ..database import Base


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class OAuthCredential(Base):
    """One connected provider account per (user, provider)."""

    __tablename__ = "oauth_credentials"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    user_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    provider = Column(String(20), nullable=False)
    access_token = Column(Text, nullable=True)
    refresh_token = Column(Text, nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    scope = Column(String(512), nullable=True)
    external_account_id = Column(String(255), nullable=True)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=_now_utc, server_default=func.now()
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=_now_utc,
        onupdate=_now_utc,
        server_default=func.now(),
    )

    user = relationship("User", back_populates="oauth_credentials")

    __table_args__ = (UniqueConstraint("user_id", "provider", name="uq_oauth_user_provider"),)

    def __repr__(self) -> str:
        return f"<OAuthCredential {self.provider} user={self.user_id}>"
