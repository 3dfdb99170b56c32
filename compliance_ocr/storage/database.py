"""Engine and session management for the document store."""

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from compliance_ocr.utils.logger import get_logger

from .models import Base

logger = get_logger(__name__)


class Database:
    """Owns the SQLAlchemy engine and hands out sessions.

    Args:
        url: SQLAlchemy database URL.
    """

    def __init__(self, url: str) -> None:
        connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
        self.url = url
        self.engine = create_engine(url, connect_args=connect_args)
        self._session_factory = sessionmaker(
            bind=self.engine, expire_on_commit=False
        )

    def create_all(self) -> None:
        """Create any missing tables."""
        Base.metadata.create_all(bind=self.engine)
        logger.debug("Ensured schema for %s", self.engine.url)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Yield a session that is closed on exit. Callers commit."""
        db = self._session_factory()
        try:
            yield db
        finally:
            db.close()

    def dispose(self) -> None:
        self.engine.dispose()
