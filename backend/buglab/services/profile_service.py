"""
BugLab Backend — Profile Service (Scientist registration, update, delete)
==========================================================================

What:  Owns Scientist rows and keeps them consistent with their linked User.
How:   Each public method is a single transaction opened through
       `transaction()`; any exception inside it rolls the whole unit back.
Who:   /auth/register, /scientists routes, the seed script.

Registration flow:
    ┌────────────┐   ┌──────────┐   ┌──────────────────────────────────────┐
    │  Validate  │──▶│  Hash    │──▶│ BEGIN                                │
    │  fields    │   │  secret  │   │  email free in users? ─ no → 409     │
    └────────────┘   └──────────┘   │  email free in scientist? ─ no → 409 │
                                    │  INSERT users → INSERT scientist     │
                                    │ COMMIT  (ROLLBACK on any failure)    │
                                    └──────────────────────────────────────┘

    Hashing runs before the transaction so a pooled connection is never held
    across bcrypt. A constraint violation racing past the checks surfaces as
    ConflictError after rollback; a User without a Scientist (or the reverse)
    is never observable.
"""

import logging
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from buglab.database import transaction
from buglab.exceptions import ConflictError, InvalidStateError, NotFoundError
from buglab.models.assignment import ScientistBug
from buglab.models.scientist import Scientist
from buglab.schemas.scientist import ScientistResponse, ScientistWithBugs
from buglab.services.credential_service import PasswordHasher
from buglab.services.identity_service import fetch_user_by_email, fetch_user_by_id, insert_user, purge_user
from buglab.services.validation import require_email, require_password, require_text

logger = logging.getLogger(__name__)


async def _email_owned_by_other_scientist(
    db: AsyncSession, email: str, exclude_id: Optional[int] = None
) -> bool:
    query = select(Scientist.id).where(Scientist.email == email)
    if exclude_id is not None:
        query = query.where(Scientist.id != exclude_id)
    result = await db.execute(query.limit(1))
    return result.scalar_one_or_none() is not None


class ProfileService:
    """
    Scientist profile management.

    Args:
        session_factory: The shared connection pool; one session per call.
        hasher: Credential store used for registration and password changes.
        password_min_length: Minimum accepted password length.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        hasher: PasswordHasher,
        password_min_length: int = 8,
    ):
        self._sessions = session_factory
        self._hasher = hasher
        self._password_min_length = password_min_length

    async def register(
        self,
        name: Optional[str],
        email: Optional[str],
        password: Optional[str],
    ) -> ScientistResponse:
        """
        Create a User and its linked Scientist atomically.

        Returns:
            The new Scientist, including `user_id` of the linked User.

        Raises:
            ValidationError: missing field, bad email shape or short password.
            ConflictError: the email belongs to an existing User or Scientist.
        """
        name = require_text(name, "name")
        email = require_email(email)
        password = require_password(password, self._password_min_length)

        hashed_password = await self._hasher.hash(password)

        async with transaction(self._sessions) as db:
            user = await insert_user(db, email, hashed_password)

            if await _email_owned_by_other_scientist(db, email):
                raise ConflictError(
                    "Scientist profile with this email already exists",
                    context={"email": email},
                )

            scientist = Scientist(name=name, email=email, user_id=user.id)
            db.add(scientist)
            try:
                await db.flush()
            except IntegrityError as e:
                raise ConflictError(
                    "Scientist profile with this email already exists",
                    details=str(e.orig),
                    context={"email": email},
                ) from e

            created = ScientistResponse.model_validate(scientist)

        logger.info("Registered scientist %s linked to user %s", created.id, created.user_id)
        return created

    async def create_profile(self, name: Optional[str], email: Optional[str]) -> ScientistResponse:
        """
        Create a Scientist with no login (user_id stays NULL).

        Raises:
            ValidationError: name/email missing or malformed.
            ConflictError: another Scientist already has this email.
        """
        name = require_text(name, "name")
        email = require_email(email)

        async with transaction(self._sessions) as db:
            if await _email_owned_by_other_scientist(db, email):
                raise ConflictError(
                    "Scientist profile with this email already exists",
                    context={"email": email},
                )
            scientist = Scientist(name=name, email=email)
            db.add(scientist)
            await db.flush()
            created = ScientistResponse.model_validate(scientist)

        logger.info("Created unlinked scientist %s", created.id)
        return created

    async def list_scientists(self) -> List[ScientistWithBugs]:
        """All scientists with their assigned bugs, ordered by id."""
        async with transaction(self._sessions) as db:
            result = await db.execute(
                select(Scientist).options(selectinload(Scientist.bugs)).order_by(Scientist.id)
            )
            return [ScientistWithBugs.model_validate(s) for s in result.scalars().all()]

    async def get_scientist(self, scientist_id: int) -> ScientistWithBugs:
        """
        Raises:
            NotFoundError: no Scientist with this id.
        """
        async with transaction(self._sessions) as db:
            result = await db.execute(
                select(Scientist)
                .options(selectinload(Scientist.bugs))
                .where(Scientist.id == scientist_id)
            )
            scientist = result.scalar_one_or_none()
            if scientist is None:
                raise NotFoundError(resource="scientist", resource_id=scientist_id)
            return ScientistWithBugs.model_validate(scientist)

    async def update(
        self,
        scientist_id: int,
        name: Optional[str],
        email: Optional[str],
        password: Optional[str] = None,
    ) -> ScientistResponse:
        """
        Update name/email and, optionally, the linked User's password.

        A changed email is mirrored onto the linked User so login keeps
        working with the profile's address. All changes commit together.

        Raises:
            ValidationError: name/email missing or malformed, short password.
            NotFoundError: no Scientist with this id.
            ConflictError: the new email belongs to another Scientist or User.
            InvalidStateError: a password was given but no User is linked.
        """
        name = require_text(name, "name")
        email = require_email(email)
        hashed_password = None
        if password is not None:
            require_password(password, self._password_min_length)
            hashed_password = await self._hasher.hash(password)

        async with transaction(self._sessions) as db:
            scientist = await db.get(Scientist, scientist_id)
            if scientist is None:
                raise NotFoundError(resource="scientist", resource_id=scientist_id)

            email_changed = email != scientist.email
            if email_changed:
                if await _email_owned_by_other_scientist(db, email, exclude_id=scientist_id):
                    raise ConflictError("Email already in use", context={"email": email})
                if scientist.user_id is not None:
                    owner = await fetch_user_by_email(db, email)
                    if owner is not None and owner.id != scientist.user_id:
                        raise ConflictError("Email already in use", context={"email": email})

            if hashed_password is not None and scientist.user_id is None:
                raise InvalidStateError(
                    "Cannot set a password for a scientist without a linked user account",
                    context={"scientist_id": scientist_id},
                )

            scientist.name = name
            scientist.email = email

            if scientist.user_id is not None and (email_changed or hashed_password):
                user = await fetch_user_by_id(db, scientist.user_id)
                if email_changed:
                    user.email = email
                if hashed_password is not None:
                    user.hashed_password = hashed_password

            try:
                await db.flush()
            except IntegrityError as e:
                raise ConflictError("Email already in use", details=str(e.orig)) from e

            updated = ScientistResponse.model_validate(scientist)

        logger.info(
            "Scientist %s updated (email_changed=%s, password_changed=%s)",
            scientist_id,
            email_changed,
            hashed_password is not None,
        )
        return updated

    async def delete(self, scientist_id: int) -> ScientistResponse:
        """
        Delete a Scientist, its assignments and its linked User (if any).

        Returns:
            The deleted Scientist as it was before removal.

        Raises:
            NotFoundError: no Scientist with this id.
        """
        async with transaction(self._sessions) as db:
            scientist = await db.get(Scientist, scientist_id)
            if scientist is None:
                raise NotFoundError(resource="scientist", resource_id=scientist_id)
            deleted = ScientistResponse.model_validate(scientist)

            if scientist.user_id is not None:
                # removes the sessions, the assignments and the scientist too
                await purge_user(db, scientist.user_id)
            else:
                await db.execute(delete(ScientistBug).where(ScientistBug.scientist_id == scientist_id))
                await db.execute(delete(Scientist).where(Scientist.id == scientist_id))

        logger.info("Scientist %s deleted (linked user: %s)", scientist_id, deleted.user_id)
        return deleted
