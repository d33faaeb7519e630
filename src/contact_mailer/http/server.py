"""FastAPI HTTP server for the contact form, health and metrics endpoints."""

from typing import Any, Optional

import structlog
from fastapi import FastAPI, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from contact_mailer import __version__
from contact_mailer.config import Settings, get_settings
from contact_mailer.http.contact import router as contact_router
from contact_mailer.http.health import router as health_router
from contact_mailer.mail.mailer import Mailer


logger = structlog.get_logger()


def create_app(
    settings: Optional[Settings] = None,
    mailer: Optional[Mailer] = None,
) -> FastAPI:
    """Create FastAPI application.

    The mailer is built here, once, from the settings so a bad SMTP
    configuration fails at startup rather than on the first submission.

    Args:
        settings: Application settings (defaults to the cached environment settings)
        mailer: Pre-built mailer, mainly for tests

    Returns:
        FastAPI application instance

    Raises:
        ConfigurationError: If the mailer configuration is invalid
    """
    if settings is None:
        settings = get_settings()
    if mailer is None:
        mailer = Mailer(settings.mailer_config())

    app = FastAPI(
        title="Contact Mailer",
        description="Contact form relay to SMTP",
        version=__version__,
    )
    app.state.mailer = mailer
    app.state.recipient_email = settings.contact_recipient or mailer.config.sender_email

    app.include_router(contact_router, tags=["contact"])
    app.include_router(health_router, prefix="/health", tags=["health"])

    @app.get("/metrics", tags=["metrics"])
    async def metrics() -> Any:
        """Prometheus metrics endpoint."""
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    logger.info(
        "HTTP app created",
        recipient=app.state.recipient_email,
        smtp_server=mailer.config.smtp_server,
    )

    return app
