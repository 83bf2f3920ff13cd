"""Database migration utilities."""

import os
from pathlib import Path
from typing import Optional

from alembic import command
from alembic.config import Config
import structlog

from .config import Settings
from .database import DatabaseManager

logger = structlog.get_logger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent.parent


class MigrationManager:
    """Manages database migrations using Alembic."""

    def __init__(self, alembic_cfg_path: Optional[str] = None, database_url: Optional[str] = None) -> None:
        """Initialize migration manager.

        Args:
            alembic_cfg_path: Path to alembic.ini configuration file
            database_url: URL to migrate; alembic/env.py falls back to settings
        """
        self.alembic_cfg_path = alembic_cfg_path or str(PROJECT_ROOT / "alembic.ini")
        self.database_url = database_url
        self.config: Optional[Config] = None

    def _get_alembic_config(self) -> Config:
        """Get Alembic configuration.

        Returns:
            Alembic configuration object

        Raises:
            FileNotFoundError: If alembic.ini is not found
        """
        if self.config is None:
            if not os.path.exists(self.alembic_cfg_path):
                raise FileNotFoundError(f"Alembic config file not found: {self.alembic_cfg_path}")

            self.config = Config(self.alembic_cfg_path)

            # Script location is relative to the project root
            script_location = self.config.get_main_option("script_location")
            if script_location:
                self.config.set_main_option("script_location", str(PROJECT_ROOT / script_location))
            if self.database_url:
                self.config.set_main_option("sqlalchemy.url", self.database_url)

        return self.config

    def run_migrations(self) -> None:
        """Run all pending migrations to upgrade database to latest version."""
        try:
            command.upgrade(self._get_alembic_config(), "head")
            logger.info("Database migrations completed successfully")
        except Exception as e:
            logger.error("Failed to run database migrations", error=str(e))
            raise


def init_database(db: DatabaseManager, settings: Settings) -> None:
    """Bring the schema up to date for a freshly initialised database manager.

    Tables are created directly from the models when ``auto_create_tables`` is
    set (tests, local SQLite); otherwise pending Alembic migrations are run.
    """
    logger.info("Initializing database schema", auto_create=settings.auto_create_tables)

    if settings.auto_create_tables:
        db.create_tables()
    else:
        MigrationManager(database_url=db.database_url).run_migrations()

    logger.info("Database initialization completed")
