"""
BugLab Backend — Session Authenticator
=======================================

What:  Login, logout and per-request identity resolution.
How:   Server-side sessions: login stores a UserSession row keyed by a random
       token; the HTTP layer carries the token in an HttpOnly cookie.

States:
    Anonymous ──login(ok)──▶ Authenticated(user_id)
    Authenticated ──logout / expiry / user deleted──▶ Anonymous

    resolve() never returns a User for a session whose User is gone or whose
    expiry has passed; such rows are deleted on sight.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from buglab.database import transaction
from buglab.exceptions import InvalidCredentialsError, ValidationError
from buglab.models.scientist import Scientist
from buglab.models.session import UserSession
from buglab.models.user import User
from buglab.schemas.auth import CurrentUserResponse
from buglab.services.credential_service import PasswordHasher
from buglab.services.identity_service import fetch_user_by_email, fetch_user_by_id

logger = logging.getLogger(__name__)


class SessionAuthenticator:
    """
    Args:
        session_factory: The shared connection pool; one session per call.
        hasher: Credential store used to verify login secrets.
        max_age: Session lifetime in seconds.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        hasher: PasswordHasher,
        max_age: int = 86_400,
    ):
        self._sessions = session_factory
        self._hasher = hasher
        self._max_age = max_age

    async def login(self, email: Optional[str], password: Optional[str]) -> Tuple[User, str]:
        """
        Verify credentials and open a new server-side session.

        Returns:
            (user, token); the token goes into the session cookie.

        Raises:
            ValidationError: email or password missing.
            InvalidCredentialsError: unknown email or wrong password
                (indistinguishable to the caller).
        """
        if not email or not password:
            raise ValidationError("Email and password are required")
        email = email.strip()

        async with transaction(self._sessions) as db:
            user = await fetch_user_by_email(db, email)
            if user is None:
                await self._hasher.dummy_verify()
                logger.info("Login failed: unknown email")
                raise InvalidCredentialsError(context={"reason": "unknown_email"})

            if not await self._hasher.verify(password, user.hashed_password):
                logger.info("Login failed: password mismatch for user %s", user.id)
                raise InvalidCredentialsError(context={"reason": "password_mismatch"})

            now = datetime.now(timezone.utc)
            token = secrets.token_urlsafe(32)
            db.add(
                UserSession(
                    token=token,
                    user_id=user.id,
                    created_at=now,
                    expires_at=now + timedelta(seconds=self._max_age),
                )
            )

        logger.info("Login successful for user %s", user.id)
        return user, token

    async def resolve(self, token: Optional[str]) -> Optional[User]:
        """
        Map a session token to its User, or None (Anonymous).

        Expired sessions and sessions whose User no longer exists are deleted.
        """
        if not token:
            return None

        async with transaction(self._sessions) as db:
            stored = await db.get(UserSession, token)
            if stored is None:
                return None

            if stored.expires_at <= datetime.now(timezone.utc):
                await db.delete(stored)
                logger.info("Session for user %s expired; removed", stored.user_id)
                return None

            user = await fetch_user_by_id(db, stored.user_id)
            if user is None:
                await db.delete(stored)
                logger.warning("Session referenced missing user %s; invalidated", stored.user_id)
                return None

            return user

    async def logout(self, token: Optional[str]) -> None:
        """Invalidate the stored session. Unknown or missing tokens are a no-op."""
        if not token:
            return
        async with transaction(self._sessions) as db:
            result = await db.execute(delete(UserSession).where(UserSession.token == token))
        if result.rowcount:
            logger.info("Session invalidated by logout")

    async def current_profile(self, user: User) -> CurrentUserResponse:
        """The /auth/me view: the linked Scientist's name, else the email."""
        async with transaction(self._sessions) as db:
            result = await db.execute(select(Scientist.name).where(Scientist.user_id == user.id))
            name = result.scalar_one_or_none()
        return CurrentUserResponse(id=user.id, name=name or user.email, email=user.email)
