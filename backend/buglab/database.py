"""
BugLab Backend — Database Engine, Pool and Transactions
========================================================

What:  Async SQLAlchemy engine, session factory (the connection pool) and the
       `transaction()` helper every service operation runs inside.
How:   The engine is created once per process from settings. Services receive
       the session factory in their constructor and wrap each logical
       operation in `async with transaction(factory) as db:`.
Who:   Services, the health route, Alembic and the seed script.
When:  Engine at import; one session + one transaction per service call.

Transaction contract:
    1. A session is taken from the factory (connection checked out lazily)
    2. The service body runs its statements
    3. On success: commit
    4. On any other exit (business error, store error, cancellation): rollback
    5. Always: close the session, returning the connection to the pool

    Store failures are translated on the way out:
        IntegrityError   → NotFoundError (foreign key: referenced row deleted)
                         → ConflictError (unique / primary-key races)
        SQLAlchemyError  → DatabaseError (logged with stack trace)
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Optional

from sqlalchemy import DateTime, event
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator

from buglab.config import settings
from buglab.exceptions import BugLabError, ConflictError, DatabaseError, NotFoundError

logger = logging.getLogger(__name__)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models (shared metadata for Alembic)."""
    pass


class UTCDateTime(TypeDecorator):
    """
    Timestamp column that always hands back an aware UTC datetime.

    PostgreSQL returns aware values already; SQLite drops the offset on the
    way in, so values are converted to UTC before binding and marked UTC
    when read back.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value

    def process_result_value(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


# ── Engine Configuration ──────────────────────────────────────────────────
def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine for `database_url`.

    PostgreSQL gets the configured queue pool. SQLite (used by the tests) keeps
    SQLAlchemy's default pool and has foreign key enforcement switched on for
    every new connection, so ON DELETE CASCADE behaves as it does in Postgres.
    """
    if database_url.startswith("sqlite"):
        sqlite_engine = create_async_engine(database_url, echo=echo)

        @event.listens_for(sqlite_engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return sqlite_engine

    return create_async_engine(
        database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_recycle=settings.db_pool_recycle,
        echo=echo,
    )


def create_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Session factory bound to `bind`.

    expire_on_commit=False keeps loaded attributes readable after commit, so
    services can build response schemas once the transaction has closed.
    """
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


engine = build_engine(settings.database_url, echo=settings.log_level == "DEBUG")
async_session_factory = create_session_factory(engine)


def is_foreign_key_violation(error: IntegrityError) -> bool:
    """
    True when `error` comes from a foreign key (a referenced row vanished
    between check and write), as opposed to a unique or primary key.

    PostgreSQL reports SQLSTATE 23503; SQLite only says so in the message.
    """
    orig = error.orig
    if getattr(orig, "sqlstate", None) == "23503" or getattr(orig, "pgcode", None) == "23503":
        return True
    return "foreign key" in str(orig).lower()


# ── Transaction Scope ─────────────────────────────────────────────────────
@asynccontextmanager
async def transaction(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """
    Run one logical operation inside a single database transaction.

    Example:
        async with transaction(self._sessions) as db:
            db.add(bug)
            await db.flush()

    Raises:
        BugLabError subclasses raised by the body, after rollback.
        NotFoundError: a foreign key violation (a referenced row is gone).
        ConflictError: any other constraint violation from the body or commit.
        DatabaseError: any other SQLAlchemy failure.
    """
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except BugLabError:
            await session.rollback()
            raise
        except IntegrityError as e:
            await session.rollback()
            logger.warning("Constraint violation, transaction rolled back: %s", e.orig)
            if is_foreign_key_violation(e):
                raise NotFoundError(resource="referenced record", context={"details": str(e.orig)}) from e
            raise ConflictError(details=str(e.orig)) from e
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error("Database error, transaction rolled back: %s", str(e), exc_info=True)
            raise DatabaseError(details=str(e), context={"error_type": type(e).__name__}) from e
        except BaseException:
            # includes CancelledError from a request timeout
            await session.rollback()
            raise


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def init_models(bind: AsyncEngine) -> None:
    """Create all tables that do not exist yet (dev/test; production uses Alembic)."""
    import buglab.models  # noqa: F401  registers every model with Base.metadata

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    """Close every pooled connection. Called from the lifespan shutdown."""
    await engine.dispose()
