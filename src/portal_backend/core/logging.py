"""Structured logging configuration."""

import logging
import sys
import time
from typing import Any, Optional
from datetime import datetime, timezone
from contextlib import contextmanager

import structlog
from structlog.stdlib import LoggerFactory

from .config import Settings, settings as default_settings


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure structured logging for the application.

    Args:
        settings: Settings to read the level and environment from; the
            process-wide settings are used when omitted
    """
    settings = settings or default_settings

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if settings.environment == "production"
            else structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()),
        ],
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
    )

    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.log_level.upper() == "DEBUG" else logging.WARNING
    )
    logging.getLogger("celery").setLevel(logging.INFO)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("notifications").setLevel(logging.INFO)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    return structlog.get_logger(name)


class PerformanceLogger:
    """Logger for tracking how long controller operations take."""

    def __init__(self, logger_name: str = "performance"):
        self.logger = get_logger(logger_name)

    @contextmanager
    def log_operation_time(self, operation: str, **context: Any):
        """Context manager to log operation execution time.

        Args:
            operation: Name of the operation being timed
            **context: Additional context for logging
        """
        start_time = time.perf_counter()
        started_at = datetime.now(timezone.utc)

        self.logger.debug("Operation started", operation=operation, **context)

        try:
            yield
        except Exception as e:
            self.logger.warning(
                "Operation failed",
                operation=operation,
                duration_seconds=round(time.perf_counter() - start_time, 3),
                start_time=started_at.isoformat(),
                error=str(e),
                error_type=type(e).__name__,
                **context
            )
            raise

        self.logger.info(
            "Operation completed",
            operation=operation,
            duration_seconds=round(time.perf_counter() - start_time, 3),
            start_time=started_at.isoformat(),
            **context
        )

    def log_processing_metrics(
        self,
        operation: str,
        items_processed: int,
        duration_seconds: float,
        success_count: int = None,
        error_count: int = None,
        **context: Any
    ):
        """Log processing metrics for batch operations such as fan-outs."""
        throughput = items_processed / duration_seconds if duration_seconds > 0 else 0

        self.logger.info(
            "Processing metrics",
            operation=operation,
            items_processed=items_processed,
            duration_seconds=round(duration_seconds, 3),
            throughput_per_second=round(throughput, 2),
            success_count=success_count,
            error_count=error_count,
            **context
        )


# Global logger instances
performance_logger = PerformanceLogger()
