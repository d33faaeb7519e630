"""Error classes for the contact mailer."""

from typing import Optional


class MailerError(Exception):
    """Base class for contact mailer errors."""

    pass


class ConfigurationError(MailerError):
    """Mailer configuration is missing or invalid."""

    pass


class MailDeliveryError(MailerError):
    """Sending a message through the SMTP relay failed.

    Connection, TLS negotiation, authentication and transmission failures
    all surface as this one error kind. ``stage`` names the step that
    failed and ``cause`` keeps the underlying exception for logging.
    """

    def __init__(
        self,
        message: str,
        *,
        stage: str,
        recipient: str,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.stage = stage
        self.recipient = recipient
        self.cause = cause
