"""
BugLab Backend — Server-side Session Model
===========================================

What:  Binds an opaque cookie token to an authenticated User id.
Who:   Owned by SessionAuthenticator.

Lifecycle:
    Created by login, deleted by logout, by expiry on resolve, or together
    with its User (explicit delete plus ON DELETE CASCADE).
"""

from datetime import datetime, timezone

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from buglab.database import Base, UTCDateTime


class UserSession(Base):
    __tablename__ = "user_sessions"

    token: Mapped[str] = mapped_column(String(128), primary_key=True)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    expires_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    def __repr__(self) -> str:
        return f"<UserSession(user_id={self.user_id}, expires_at='{self.expires_at}')>"
