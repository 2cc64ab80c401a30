"""
BugLab Backend — Bug Service
=============================

What:  CRUD for Bug rows.
How:   One transaction per call; delete removes the bug's assignments in the
       same transaction as the bug itself.
Who:   /bugs routes, the seed script.
"""

import logging
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from buglab.database import transaction
from buglab.exceptions import NotFoundError, ValidationError
from buglab.models.assignment import ScientistBug
from buglab.models.bug import Bug
from buglab.schemas.bug import BugResponse
from buglab.services.validation import require_text

logger = logging.getLogger(__name__)


def _require_strength(value: Optional[int]) -> int:
    # 0 is a valid strength; only absence is rejected
    if value is None:
        raise ValidationError("strength is required", field="strength")
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("strength must be an integer", field="strength")
    return value


class BugService:
    """
    Args:
        session_factory: The shared connection pool; one session per call.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._sessions = session_factory

    async def create(
        self,
        name: Optional[str],
        strength: Optional[int],
        type: Optional[str],
    ) -> BugResponse:
        """
        Raises:
            ValidationError: name, strength or type missing.
        """
        name = require_text(name, "name")
        strength = _require_strength(strength)
        type = require_text(type, "type")

        async with transaction(self._sessions) as db:
            bug = Bug(name=name, strength=strength, type=type)
            db.add(bug)
            await db.flush()
            created = BugResponse.model_validate(bug)

        logger.info("Bug %s created (%s, strength=%d)", created.id, created.type, created.strength)
        return created

    async def list_bugs(self) -> List[BugResponse]:
        async with transaction(self._sessions) as db:
            result = await db.execute(select(Bug).order_by(Bug.id))
            return [BugResponse.model_validate(b) for b in result.scalars().all()]

    async def get(self, bug_id: int) -> BugResponse:
        async with transaction(self._sessions) as db:
            bug = await db.get(Bug, bug_id)
            if bug is None:
                raise NotFoundError(resource="bug", resource_id=bug_id)
            return BugResponse.model_validate(bug)

    async def update(
        self,
        bug_id: int,
        name: Optional[str] = None,
        strength: Optional[int] = None,
        type: Optional[str] = None,
    ) -> BugResponse:
        """
        Partial update: fields left as None keep their current value.

        Raises:
            ValidationError: no field given, or a given field is blank/invalid.
            NotFoundError: no Bug with this id.
        """
        if name is None and strength is None and type is None:
            raise ValidationError("At least one of name, strength or type is required")
        changes = {}
        if name is not None:
            changes["name"] = require_text(name, "name")
        if strength is not None:
            changes["strength"] = _require_strength(strength)
        if type is not None:
            changes["type"] = require_text(type, "type")

        async with transaction(self._sessions) as db:
            bug = await db.get(Bug, bug_id)
            if bug is None:
                raise NotFoundError(resource="bug", resource_id=bug_id)
            for field, value in changes.items():
                setattr(bug, field, value)
            await db.flush()
            updated = BugResponse.model_validate(bug)

        logger.info("Bug %s updated: %s", bug_id, sorted(changes))
        return updated

    async def delete(self, bug_id: int) -> BugResponse:
        """
        Delete a bug and every assignment referencing it.

        Returns:
            The deleted bug.

        Raises:
            NotFoundError: no Bug with this id.
        """
        async with transaction(self._sessions) as db:
            bug = await db.get(Bug, bug_id)
            if bug is None:
                raise NotFoundError(resource="bug", resource_id=bug_id)
            deleted = BugResponse.model_validate(bug)

            unassigned = await db.execute(delete(ScientistBug).where(ScientistBug.bug_id == bug_id))
            await db.execute(delete(Bug).where(Bug.id == bug_id))

        logger.info("Bug %s deleted (%d assignments removed)", bug_id, unassigned.rowcount)
        return deleted
