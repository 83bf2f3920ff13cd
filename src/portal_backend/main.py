"""FastAPI application factory for the job portal backend."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
import structlog

from portal_backend.api.applications import router as applications_router
from portal_backend.api.auth import router as auth_router
from portal_backend.api.candidate import router as candidate_router
from portal_backend.api.chat import router as chat_router
from portal_backend.api.companies import router as companies_router
from portal_backend.api.content import router as content_router
from portal_backend.api.employer import router as employer_router
from portal_backend.api.jobs import router as jobs_router
from portal_backend.api.notifications import router as notifications_router
from portal_backend.api.realtime import router as realtime_router
from portal_backend.api.reports import router as reports_router
from portal_backend.api.users import router as users_router
from portal_backend.core.config import Settings, settings as default_settings
from portal_backend.core.error_handling import register_exception_handlers
from portal_backend.core.logging import configure_logging
from portal_backend.core.middleware import RequestContextMiddleware
from portal_backend.core.registry import ServiceRegistry
from portal_backend.notifications.mailer import EmailSender
from portal_backend.notifications.push import PushProvider

logger = structlog.get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    push_provider: Optional[PushProvider] = None,
    email_sender: Optional[EmailSender] = None,
) -> FastAPI:
    """Build the application.

    Args:
        settings: Configuration; the process-wide settings when omitted
        push_provider: Push delivery channel; built from the FCM settings when omitted
        email_sender: Email delivery channel; SMTP from settings when omitted

    Returns:
        Configured FastAPI application
    """
    settings = settings or default_settings
    configure_logging(settings)
    services = ServiceRegistry(settings, push_provider=push_provider, email_sender=email_sender)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await services.startup()
        try:
            yield
        finally:
            await services.shutdown()

    app = FastAPI(
        title="Job Portal API",
        description="Jobs, applications, chat and notifications for candidates, employers and admins",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.services = services

    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    for router in (
        auth_router,
        jobs_router,
        applications_router,
        companies_router,
        candidate_router,
        employer_router,
        chat_router,
        notifications_router,
        users_router,
        reports_router,
        content_router,
        realtime_router,
    ):
        app.include_router(router)

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint."""
        database_ok = request.app.state.services.db.health_check()
        return {
            "success": database_ok,
            "status": "healthy" if database_ok else "degraded",
            "service": "job-portal-backend",
            "realtimeConnections": len(request.app.state.services.hub.connections),
        }

    logger.info("Application created", environment=settings.environment)
    return app


app = create_app()
