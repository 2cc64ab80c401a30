"""
BugLab Backend — Scientist Model
=================================

What:  Domain profile, optionally linked 1:1 to a User.
Who:   Owned by ProfileService.

Invariants enforced by the schema:
    - email is unique across scientists
    - user_id is unique (a User maps to at most one Scientist)
    - user_id may be NULL (admin-created / legacy profiles)
"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from buglab.database import Base, UTCDateTime

if TYPE_CHECKING:
    from buglab.models.bug import Bug
    from buglab.models.user import User


class Scientist(Base):
    __tablename__ = "scientist"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
    )

    user_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=True,
        unique=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    user: Mapped[Optional["User"]] = relationship(back_populates="scientist")

    # Read-only view through the join table; writes go through ScientistBug rows
    bugs: Mapped[List["Bug"]] = relationship(
        secondary="scientist_bugs",
        order_by="Bug.id",
        viewonly=True,
    )

    def __repr__(self) -> str:
        return f"<Scientist(id={self.id}, email='{self.email}', user_id={self.user_id})>"
