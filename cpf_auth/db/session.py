from __future__ import annotations

import logging
import threading
from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from cpf_auth.settings import Settings

logger = logging.getLogger(__name__)


class Database:
    """
    Process-wide handle to the customer store.

    The engine (and its connection pool) is created on first use and lives
    until ``dispose()``. Sessions are short-lived: one per lookup. Engine
    creation and disposal are serialized, so concurrent callers share one pool.
    """

    def __init__(self, settings: Settings, engine: Engine | None = None) -> None:
        self._settings = settings
        self._engine = engine
        self._sessionmaker: sessionmaker[Session] | None = None
        self._lock = threading.Lock()

    @property
    def engine(self) -> Engine:
        with self._lock:
            return self._ensure_engine()

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    def _ensure_engine(self) -> Engine:
        # Caller holds the lock.
        if self._engine is None:
            self._engine = _create_engine(self._settings)
            logger.info("Database engine created dialect=%s", self._engine.dialect.name)
        return self._engine

    def _get_sessionmaker(self) -> sessionmaker[Session]:
        with self._lock:
            if self._sessionmaker is None:
                self._sessionmaker = sessionmaker(
                    bind=self._ensure_engine(), autocommit=False, autoflush=False, class_=Session
                )
            return self._sessionmaker

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        db = self._get_sessionmaker()()
        try:
            yield db
        finally:
            db.close()

    def dispose(self) -> None:
        """Close pooled connections. The next ``session()`` starts a new engine."""
        with self._lock:
            if self._engine is None:
                return
            self._engine.dispose()
            self._engine = None
            self._sessionmaker = None
        logger.info("Database engine disposed")


def _create_engine(settings: Settings) -> Engine:
    url = settings.resolved_db_url()
    if str(url).startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(
        url,
        pool_size=settings.db_pool_size,
        max_overflow=0,
        pool_pre_ping=True,
        connect_args={"connect_timeout": settings.db_connect_timeout_seconds},
    )

