"""
BugLab Backend — Identity Service
==================================

What:  Owns User rows: create, look up by id/email, delete.
How:   Public methods each run inside one `transaction()`. The module-level
       query helpers take an open session so other services can reuse them
       inside their own transaction (registration, login, profile delete).
Who:   ProfileService, SessionAuthenticator, the seed script.
"""

import logging
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from buglab.database import transaction
from buglab.exceptions import ConflictError, NotFoundError
from buglab.models.assignment import ScientistBug
from buglab.models.scientist import Scientist
from buglab.models.session import UserSession
from buglab.models.user import User

logger = logging.getLogger(__name__)


# ── Query helpers (caller owns the transaction) ───────────────────────────
async def fetch_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def fetch_user_by_id(db: AsyncSession, user_id: int) -> Optional[User]:
    return await db.get(User, user_id)


async def insert_user(db: AsyncSession, email: str, hashed_password: str) -> User:
    """
    Insert a User and flush so the id is assigned and the unique index on
    email is checked inside the caller's transaction.

    Raises:
        ConflictError: the email is already taken.
    """
    if await fetch_user_by_email(db, email) is not None:
        raise ConflictError("User with this email already exists", context={"email": email})

    user = User(email=email, hashed_password=hashed_password)
    db.add(user)
    try:
        await db.flush()
    except IntegrityError as e:
        # Another transaction inserted the same email after our check
        raise ConflictError(
            "User with this email already exists",
            details=str(e.orig),
            context={"email": email},
        ) from e
    return user


async def purge_user(db: AsyncSession, user_id: int) -> None:
    """
    Delete a User and everything hanging off it.

    Order: sessions, the linked Scientist's assignments, the linked Scientist,
    then the User row itself.
    """
    await db.execute(delete(UserSession).where(UserSession.user_id == user_id))

    linked = await db.execute(select(Scientist.id).where(Scientist.user_id == user_id))
    scientist_id = linked.scalar_one_or_none()
    if scientist_id is not None:
        await db.execute(delete(ScientistBug).where(ScientistBug.scientist_id == scientist_id))
        await db.execute(delete(Scientist).where(Scientist.id == scientist_id))

    await db.execute(delete(User).where(User.id == user_id))


class IdentityService:
    """
    Login identity management.

    Args:
        session_factory: The shared connection pool; one session per call.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._sessions = session_factory

    async def create_user(self, email: str, hashed_password: str) -> User:
        """
        Create a login identity from an already-hashed secret.

        Raises:
            ConflictError: email already present.
        """
        async with transaction(self._sessions) as db:
            user = await insert_user(db, email, hashed_password)
        logger.info("User created: id=%s", user.id)
        return user

    async def find_by_email(self, email: str) -> Optional[User]:
        async with transaction(self._sessions) as db:
            return await fetch_user_by_email(db, email)

    async def find_by_id(self, user_id: int) -> Optional[User]:
        async with transaction(self._sessions) as db:
            return await fetch_user_by_id(db, user_id)

    async def delete_user(self, user_id: int) -> None:
        """
        Delete a User together with its Scientist profile, that profile's
        assignments and the User's sessions.

        Raises:
            NotFoundError: no User with this id.
        """
        async with transaction(self._sessions) as db:
            if await fetch_user_by_id(db, user_id) is None:
                raise NotFoundError(resource="user", resource_id=user_id)
            await purge_user(db, user_id)
        logger.info("User %s deleted (with linked profile and sessions)", user_id)
