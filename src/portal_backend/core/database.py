"""Database connection and session management with connection pooling."""

from contextlib import contextmanager
from typing import Generator, Optional

from fastapi import Request
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool
import structlog

from .base import Base

logger = structlog.get_logger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseManager:
    """Manages database connections with connection pooling.

    One instance lives per process; the application factory and the Celery
    worker each create their own and call ``initialize``/``close`` around
    their lifetime.
    """

    def __init__(self, database_url: str, echo: bool = False) -> None:
        """Initialize database manager.

        Args:
            database_url: SQLAlchemy connection URL
            echo: Whether to log emitted SQL
        """
        self.database_url = database_url
        self.echo = echo
        self.engine: Optional[Engine] = None
        self.SessionLocal: Optional[sessionmaker] = None

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def is_in_memory(self) -> bool:
        """``sqlite://``, ``sqlite:///:memory:`` and ``mode=memory`` URIs."""
        if not self.is_sqlite:
            return False
        url = make_url(self.database_url)
        return not url.database or url.database == ":memory:" or "mode=memory" in self.database_url

    def initialize(self) -> None:
        """Initialize database engine with connection pooling."""
        if self.engine is not None:
            logger.warning("Database engine already initialized")
            return

        if self.is_sqlite:
            options = {"connect_args": {"check_same_thread": False}, "echo": self.echo}
            if self.is_in_memory:
                # A single shared connection keeps in-memory databases alive across threads
                options["poolclass"] = StaticPool
            self.engine = create_engine(self.database_url, **options)
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)
        else:
            self.engine = create_engine(
                self.database_url,
                poolclass=QueuePool,
                pool_size=10,
                max_overflow=20,
                pool_timeout=30,
                pool_recycle=3600,
                pool_pre_ping=True,
                echo=self.echo,
            )

        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=self.engine
        )

        logger.info(
            "Database engine initialized",
            dialect=self.engine.dialect.name,
        )

    def close(self) -> None:
        """Close database engine and dispose of connection pool."""
        if self.engine:
            self.engine.dispose()
            logger.info("Database engine closed")
            self.engine = None
            self.SessionLocal = None

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """Get database session with automatic cleanup.

        Yields:
            Database session

        Raises:
            RuntimeError: If database is not initialized
        """
        if self.SessionLocal is None:
            raise RuntimeError("Database not initialized. Call initialize() first.")

        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def create_tables(self) -> None:
        """Create all database tables."""
        if self.engine is None:
            raise RuntimeError("Database not initialized. Call initialize() first.")

        # Register every model on the metadata before creating
        import portal_backend.models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)
        logger.info("Database tables created")

    def health_check(self) -> bool:
        """Check database connectivity.

        Returns:
            True if database is accessible, False otherwise
        """
        try:
            if self.engine is None:
                return False

            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error("Database health check failed", error=str(e))
            return False


def get_db(request: Request) -> Generator[Session, None, None]:
    """Dependency for FastAPI to get database session.

    Yields:
        Database session bound to the application's database manager
    """
    with request.app.state.services.db.get_session() as session:
        yield session
