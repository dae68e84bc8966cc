"""Record Store Connection — one async engine per process, request sessions, readiness ping.

Invariants:
    - A request session that raises is rolled back before the error leaves it
    - Driver failures surface as DatabaseError; nothing below SQLAlchemy leaks out
    - Workflow state, approval polling and notifications share one engine

Design Decisions:
    - Module-level db_manager set by init_db in the app lifespan, cleared by
      close_db: importing this module never opens a connection
    - expire_on_commit=False: the workflow reads process rows after commit
    - session_factory exposed for the approval poller and the notification
      dispatcher, which run outside the request session
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import (
    DBAPIError, IntegrityError, OperationalError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)

from arsip.core.errors import DatabaseError

logger = logging.getLogger(__name__)

# most specific first: IntegrityError and OperationalError are DBAPIErrors
_ERROR_MAP: tuple[tuple[type[SQLAlchemyError], str, str], ...] = (
    (IntegrityError, "Record store rejected the write (constraint)", "commit"),
    (OperationalError, "Record store unreachable", "execute"),
    (DBAPIError, "Record store driver failure", "query"),
    (SQLAlchemyError, "Record store operation failed", "unknown"),
)


def translate_error(exc: SQLAlchemyError) -> DatabaseError:
    """DatabaseError for a SQLAlchemy failure (message never carries SQL)."""
    for kind, message, operation in _ERROR_MAP:
        if isinstance(exc, kind):
            return DatabaseError(message, operation)
    return DatabaseError("Record store operation failed", "unknown")


class DatabaseSessionManager:
    """Owns the engine and hands out sessions bound to it."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        self.engine = create_async_engine(
            database_url,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self._session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False,
        )

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        return self._session_factory

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        async with self._session_factory() as db:
            try:
                yield db
            except SQLAlchemyError as e:
                await db.rollback()
                error = translate_error(e)
                logger.error(
                    "%s: %s", error.message, e.__class__.__name__,
                    extra={"error_code": error.code},
                )
                raise error from e

    async def health_check(self) -> bool:
        """True when a trivial statement round-trips."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as e:
            logger.warning("Record store ping failed: %s", e)
            return False
        return True

    async def close(self) -> None:
        await self.engine.dispose()


db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    return db_manager


async def close_db() -> None:
    global db_manager
    if db_manager is not None:
        await db_manager.close()
        db_manager = None


def _require_manager() -> DatabaseSessionManager:
    if db_manager is None:
        raise RuntimeError("Database not initialized")
    return db_manager


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return _require_manager().session_factory


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request."""
    async with _require_manager().session() as db:
        yield db
