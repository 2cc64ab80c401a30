"""
BugLab Backend — Assignment (join table) Model
===============================================

What:  Many-to-many link between Scientist and Bug.
Who:   Owned by AssignmentService. Rows are removed explicitly when either
       side is deleted; the ON DELETE CASCADE foreign keys back that up.

The composite primary key makes a duplicate (scientist_id, bug_id) pair
impossible at the database level.
"""

from datetime import datetime, timezone

from sqlalchemy import ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column

from buglab.database import Base, UTCDateTime


class ScientistBug(Base):
    __tablename__ = "scientist_bugs"

    scientist_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("scientist.id", ondelete="CASCADE"),
        primary_key=True,
    )
    bug_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("bugs.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    assigned_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<ScientistBug(scientist_id={self.scientist_id}, bug_id={self.bug_id})>"
