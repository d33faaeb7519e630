"""Entry point for the contact mailer service."""

import asyncio
import sys

import structlog
import uvicorn

from contact_mailer import __version__
from contact_mailer.config import get_settings
from contact_mailer.errors import ConfigurationError
from contact_mailer.http.server import create_app
from contact_mailer.logging import setup_logging


logger = structlog.get_logger()


async def main() -> None:
    """Main entry point for the contact mailer."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)

    logger.info(
        "Starting contact mailer",
        version=__version__,
        http_port=settings.http_port,
        smtp_server=settings.smtp_server,
        smtp_port=settings.smtp_port,
    )

    app = create_app(settings)

    config = uvicorn.Config(
        app,
        host=settings.http_host,
        port=settings.http_port,
        log_level="warning",  # Reduce noise, we have our own logging
        access_log=False,
    )
    server = uvicorn.Server(config)

    try:
        await server.serve()
    finally:
        logger.info("Contact mailer stopped")


def run() -> None:
    """Run the application with proper async handling."""
    try:
        asyncio.run(main())
    except ConfigurationError as e:
        logger.error("Invalid configuration", error=str(e))
        sys.exit(1)
    except Exception as e:
        logger.error("Fatal error", error=str(e), exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    run()
