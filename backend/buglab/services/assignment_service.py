"""
BugLab Backend — Assignment Service
====================================

What:  Manages the Scientist ↔ Bug join rows.
How:   Existence checks and the write run in the same transaction, so an
       entity deleted between check and insert cannot leave a dangling row
       (the foreign keys reject it and the transaction rolls back).
Who:   /scientists/{id}/assign, /unassign and /bugs routes.

State per (scientist, bug) pair:
    unassigned ──assign──▶ assigned ──unassign──▶ unassigned
    assign on assigned      → ConflictError
    unassign on unassigned  → ConflictError ("not assigned")
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from buglab.database import is_foreign_key_violation, transaction
from buglab.exceptions import ConflictError, NotFoundError
from buglab.models.assignment import ScientistBug
from buglab.models.bug import Bug
from buglab.models.scientist import Scientist
from buglab.schemas.bug import BugResponse
from buglab.schemas.scientist import AssignmentResponse
from buglab.services.validation import require_id

logger = logging.getLogger(__name__)


async def _ensure_exists(db: AsyncSession, scientist_id: int, bug_id: int) -> None:
    if await db.get(Scientist, scientist_id) is None:
        raise NotFoundError(resource="scientist", resource_id=scientist_id)
    if await db.get(Bug, bug_id) is None:
        raise NotFoundError(resource="bug", resource_id=bug_id)


class AssignmentService:
    """
    Args:
        session_factory: The shared connection pool; one session per call.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._sessions = session_factory

    async def assign(self, scientist_id: int, bug_id: Optional[int]) -> AssignmentResponse:
        """
        Raises:
            ValidationError: bug_id missing.
            NotFoundError: scientist or bug absent.
            ConflictError: the pair is already assigned.
        """
        bug_id = require_id(bug_id, "bug_id")

        async with transaction(self._sessions) as db:
            await _ensure_exists(db, scientist_id, bug_id)

            if await db.get(ScientistBug, (scientist_id, bug_id)) is not None:
                raise ConflictError("This bug is already assigned to this scientist")

            assignment = ScientistBug(scientist_id=scientist_id, bug_id=bug_id)
            db.add(assignment)
            try:
                await db.flush()
            except IntegrityError as e:
                if is_foreign_key_violation(e):
                    # scientist or bug deleted after the existence check
                    raise NotFoundError(
                        resource="scientist or bug",
                        context={"scientist_id": scientist_id, "bug_id": bug_id},
                    ) from e
                raise ConflictError(
                    "This bug is already assigned to this scientist",
                    details=str(e.orig),
                ) from e
            created = AssignmentResponse.model_validate(assignment)

        logger.info("Bug %s assigned to scientist %s", bug_id, scientist_id)
        return created

    async def unassign(self, scientist_id: int, bug_id: Optional[int]) -> AssignmentResponse:
        """
        Returns:
            The removed assignment.

        Raises:
            ValidationError: bug_id missing.
            NotFoundError: scientist or bug absent.
            ConflictError: the pair is not assigned.
        """
        bug_id = require_id(bug_id, "bug_id")

        async with transaction(self._sessions) as db:
            await _ensure_exists(db, scientist_id, bug_id)

            assignment = await db.get(ScientistBug, (scientist_id, bug_id))
            if assignment is None:
                raise ConflictError("Bug is not assigned to this scientist")

            removed = AssignmentResponse.model_validate(assignment)
            await db.delete(assignment)
            await db.flush()

        logger.info("Bug %s unassigned from scientist %s", bug_id, scientist_id)
        return removed

    async def list_for_scientist(self, scientist_id: int) -> List[BugResponse]:
        """
        Bugs assigned to a scientist, ordered by bug id.

        Raises:
            NotFoundError: no Scientist with this id.
        """
        async with transaction(self._sessions) as db:
            if await db.get(Scientist, scientist_id) is None:
                raise NotFoundError(resource="scientist", resource_id=scientist_id)

            result = await db.execute(
                select(Bug)
                .join(ScientistBug, ScientistBug.bug_id == Bug.id)
                .where(ScientistBug.scientist_id == scientist_id)
                .order_by(Bug.id)
            )
            return [BugResponse.model_validate(b) for b in result.scalars().all()]
