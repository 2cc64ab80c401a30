"""
BugLab Backend — User Model
============================

What:  Login identity: email + bcrypt hash.
Who:   Owned by IdentityService; referenced by Scientist and UserSession.

Lifecycle:
    Created together with its Scientist at registration.
    Deleted together with its Scientist (either side triggers both).
"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from buglab.database import Base, UTCDateTime

if TYPE_CHECKING:
    from buglab.models.scientist import Scientist


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
    )

    # passlib bcrypt hash ("$2b$..."); never serialized by any schema
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    scientist: Mapped[Optional["Scientist"]] = relationship(
        back_populates="user",
        uselist=False,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
