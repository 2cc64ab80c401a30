"""
BugLab Backend — Credential Store
==================================

What:  One-way password hashing and verification.
How:   passlib CryptContext with the bcrypt scheme. bcrypt is CPU-bound, so
       both operations run in Starlette's thread pool to keep the event loop
       free.
Who:   ProfileService (register / password change) and SessionAuthenticator
       (login).
"""

from passlib.context import CryptContext
from starlette.concurrency import run_in_threadpool


class PasswordHasher:
    """
    Opaque hash + verify capability.

    Args:
        rounds: bcrypt cost factor (2**rounds iterations).
    """

    def __init__(self, rounds: int = 10):
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    async def hash(self, plaintext: str) -> str:
        return await run_in_threadpool(self._context.hash, plaintext)

    async def verify(self, plaintext: str, hashed: str) -> bool:
        """
        Check `plaintext` against a stored hash.

        Returns False (never raises) for a malformed or unknown hash format.
        """
        try:
            return await run_in_threadpool(self._context.verify, plaintext, hashed)
        except ValueError:
            return False

    async def dummy_verify(self) -> None:
        """
        Spend the same time a real verify would.

        Called when login finds no user, so response timing does not reveal
        whether an email is registered.
        """
        await run_in_threadpool(self._context.dummy_verify)
