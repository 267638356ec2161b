"""Shared database handle: one connection, one lock."""

import logging
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from brain_mcp.config import config
from brain_mcp.exceptions import ErrorCode, StorageError
from brain_mcp.models.db_models import create_db_engine, get_session_factory, init_db

logger = logging.getLogger(__name__)

IN_MEMORY_URL = "sqlite://"


class Database:
    """Explicitly constructed storage handle shared by all components.

    Owns a single SQLite connection guarded by one re-entrant lock, so at
    most one storage operation is in flight at a time. Services that need
    a lookup and a write to happen back to back hold ``locked()`` around
    both; repository calls made inside re-enter the same lock.

    Usage:
        with Database("sqlite:///brain.db") as db:
            repo = ResourceRepository(db)
    """

    def __init__(self, url: Optional[str] = None, lock_timeout: Optional[float] = None):
        """Initialize the handle.

        Args:
            url: SQLAlchemy database URL. If None, uses config.get_db_url().
            lock_timeout: Seconds to wait for the lock. If None, uses
                config.lock_timeout. Negative values wait forever.
        """
        self.url = url or config.get_db_url()
        self.lock_timeout = config.lock_timeout if lock_timeout is None else lock_timeout
        self._lock = threading.RLock()
        self._engine: Optional[Engine] = None
        self._session_factory = None

    @classmethod
    def in_memory(cls, lock_timeout: Optional[float] = None) -> "Database":
        """Open a throwaway in-memory database."""
        return cls(IN_MEMORY_URL, lock_timeout=lock_timeout).open()

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise StorageError(
                "Database is not open",
                operation="engine",
                code=ErrorCode.STORAGE_CONNECTION_FAILED,
            )
        return self._engine

    def open(self) -> "Database":
        """Connect, enable foreign keys and bootstrap the schema."""
        with self.locked():
            if self._engine is not None:
                return self
            try:
                engine = create_db_engine(self.url)
                init_db(engine)
            except SQLAlchemyError as e:
                raise StorageError(
                    "Failed to open database",
                    operation="open",
                    code=ErrorCode.STORAGE_CONNECTION_FAILED,
                    original_error=e,
                ) from e
            self._engine = engine
            self._session_factory = get_session_factory(engine)
            logger.info(f"Database opened: {self._display_url()}")
        return self

    def close(self) -> None:
        """Dispose of the connection. Safe to call more than once."""
        with self.locked():
            if self._engine is None:
                return
            self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info(f"Database closed: {self._display_url()}")

    def __enter__(self) -> "Database":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @contextmanager
    def locked(self) -> Iterator[None]:
        """Hold the storage lock for the duration of the block.

        Raises:
            StorageError: If the lock could not be acquired in time.
        """
        timeout = self.lock_timeout if self.lock_timeout >= 0 else -1
        if not self._lock.acquire(timeout=timeout):
            raise StorageError(
                f"Timed out after {self.lock_timeout}s waiting for the storage lock",
                operation="acquire_lock",
                code=ErrorCode.STORAGE_LOCK_TIMEOUT,
            )
        try:
            yield
        finally:
            self._lock.release()

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Open a session under the storage lock.

        Any SQLAlchemy failure is rolled back and surfaced as StorageError;
        domain exceptions raised inside the block pass through unchanged.
        """
        with self.locked():
            if self._session_factory is None:
                raise StorageError(
                    "Database is not open",
                    operation="session",
                    code=ErrorCode.STORAGE_CONNECTION_FAILED,
                )
            session = self._session_factory()
            try:
                yield session
            except SQLAlchemyError as e:
                session.rollback()
                logger.error(f"Database operation failed: {e}")
                raise StorageError(
                    "Database operation failed",
                    operation="session",
                    code=ErrorCode.STORAGE_WRITE_FAILED,
                    original_error=e,
                ) from e
            finally:
                session.close()

    def _display_url(self) -> str:
        return ":memory:" if self.url == IN_MEMORY_URL else self.url
