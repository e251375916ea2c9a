"""Database Session Manager — async connection pool, atomic units of work, error mapping.

Invariants:
    - Every session auto-rolls-back on exception (no partial commits leak)
    - transaction() is one isolated unit of work: commit on success, rollback otherwise
    - Lock timeouts, deadlocks and serialization failures map to ContentionError (retryable)
    - Every other SQLAlchemy exception maps to StorageError (core/errors.py)

Design Decisions:
    - Singleton db_manager initialized on startup: FastAPI lifespan manages lifecycle
    - expire_on_commit=False: committed rows stay readable after the session closes
    - PostgreSQL: SET LOCAL lock_timeout bounds every row-lock wait inside a unit of work
    - SQLite: the driver's implicit BEGIN is disabled and every transaction starts with
      BEGIN IMMEDIATE, so writers are serialized and read-check-write is linearizable
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.exc import (
    IntegrityError, OperationalError, DBAPIError, SQLAlchemyError,
)

from yard.core.errors import ContentionError, StorageError

logger = logging.getLogger(__name__)

# lock_not_available, deadlock_detected, serialization_failure
_CONTENTION_SQLSTATES = frozenset({"55P03", "40P01", "40001"})
_SQLITE_BUSY_TIMEOUT_SECONDS = 30


def is_contention(exc: DBAPIError) -> bool:
    """True when the driver error means "another transaction holds the rows"."""
    orig = getattr(exc, "orig", None)
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate in _CONTENTION_SQLSTATES:
        return True
    return "database is locked" in str(orig)


def _serialize_sqlite_writers(engine: AsyncEngine) -> None:
    """Make every SQLite transaction take the write lock up front."""

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_engine_for(
    database_url: str, pool_size: int = 20, max_overflow: int = 10,
) -> AsyncEngine:
    """Create the async engine with dialect-appropriate pooling and locking."""
    if database_url.startswith("sqlite"):
        engine = create_async_engine(
            database_url,
            connect_args={"timeout": _SQLITE_BUSY_TIMEOUT_SECONDS},
        )
        _serialize_sqlite_writers(engine)
        return engine
    return create_async_engine(
        database_url,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_pre_ping=True,
        pool_recycle=3600,
    )


class DatabaseSessionManager:
    """Manages async database sessions with pooling, rollback, and health checks."""

    def __init__(
        self,
        database_url: str,
        pool_size: int = 20,
        max_overflow: int = 10,
        lock_timeout_ms: int = 3000,
        contention_retry_after_ms: int = 250,
    ):
        self.engine = create_engine_for(database_url, pool_size, max_overflow)
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        self._lock_timeout_ms = lock_timeout_ms
        self._retry_after_ms = contention_retry_after_ms

    @property
    def is_postgresql(self) -> bool:
        return self.engine.dialect.name == "postgresql"

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide session with auto-rollback on exception."""
        session = self._session_factory()
        try:
            yield session
        except DBAPIError as e:
            await session.rollback()
            if is_contention(e):
                logger.warning(f"DB contention: {e.orig}")
                raise ContentionError(
                    "Rows are locked by a concurrent operation, retry later",
                    self._retry_after_ms,
                )
            if isinstance(e, IntegrityError):
                logger.error(f"DB integrity error: {e}")
                raise StorageError("Integrity constraint violated", "commit")
            if isinstance(e, OperationalError):
                logger.error(f"DB operational error: {e}")
                raise StorageError("Connection or operational error", "execute")
            logger.error(f"DB driver error: {e}")
            raise StorageError("Database driver error", "query")
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"SQLAlchemy error: {e}")
            raise StorageError("Database operation failed", "unknown")
        finally:
            await session.close()

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[AsyncSession, None]:
        """One atomic unit of work. Commits on normal exit, rolls back on any error."""
        async with self.session() as db:
            async with db.begin():
                if self.is_postgresql:
                    await db.execute(text(
                        f"SET LOCAL lock_timeout = {int(self._lock_timeout_ms)}",
                    ))
                yield db

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


# Singleton (initialized on startup)
db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    return db_manager


def get_db_manager() -> DatabaseSessionManager:
    if not db_manager:
        raise RuntimeError("Database not initialized")
    return db_manager


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for read-only database sessions."""
    async with get_db_manager().session() as session:
        yield session
