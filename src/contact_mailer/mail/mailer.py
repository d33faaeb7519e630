"""SMTP mailer relaying contact form submissions."""

import time
from typing import Optional

import aiosmtplib
import structlog

from contact_mailer.config import MailerConfig
from contact_mailer.errors import ConfigurationError, MailDeliveryError
from contact_mailer.mail.composer import build_message
from contact_mailer.mail.models import ContactSubmission, Err, Ok, SendResult
from contact_mailer.metrics import (
    contact_email_failures_total,
    contact_email_send_duration_seconds,
    contact_emails_total,
)
from contact_mailer.utils.tls import create_client_tls_context


logger = structlog.get_logger()


class Mailer:
    """Sends contact form submissions through an authenticated SMTP relay.

    Every send opens its own connection, upgrades it with STARTTLS before
    authenticating, and closes it again on every exit path. Sends share no
    mutable state, so concurrent calls do not interfere with each other.
    """

    def __init__(self, config: MailerConfig) -> None:
        """Initialize the mailer.

        Args:
            config: Immutable relay configuration

        Raises:
            ConfigurationError: If the TLS trust settings cannot be loaded
        """
        self._config = config
        try:
            self._tls_context = create_client_tls_context(
                verify=config.verify_certs,
                ca_bundle=config.ca_bundle,
            )
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"Invalid TLS configuration: {e}") from e

        logger.info("Mailer initialised", sender_email=config.sender_email)

    @property
    def config(self) -> MailerConfig:
        return self._config

    async def send(self, submission: ContactSubmission) -> bool:
        """Send a submission, returning True only if it was fully delivered."""
        return bool(await self.deliver(submission))

    async def send_email(
        self,
        recipient_email: str,
        subject: str,
        name: str,
        sender_email: str,
        message: str,
    ) -> bool:
        """Send a contact form email built from its raw form fields.

        Args:
            recipient_email: Inbox the notification goes to
            subject: Subject entered by the submitter
            name: Name of the person submitting the form
            sender_email: Email of the person submitting the form
            message: Message content from the form

        Returns:
            True if the email was sent, False otherwise
        """
        submission = ContactSubmission(
            recipient_email=recipient_email,
            subject=subject,
            name=name,
            sender_email=sender_email,
            message=message,
        )
        return await self.send(submission)

    async def deliver(self, submission: ContactSubmission) -> SendResult:
        """Compose and relay one submission.

        Runs connect (with STARTTLS), login, send and QUIT in order. Any
        failure along the way is logged and returned as ``Err``; nothing is
        raised to the caller and nothing is retried.

        Args:
            submission: Contact form submission

        Returns:
            ``Ok`` when every step completed, ``Err`` carrying a
            MailDeliveryError otherwise
        """
        config = self._config
        recipient = submission.recipient_email

        logger.info(
            "Starting email send",
            recipient=recipient,
            subject=submission.subject,
        )

        started = time.perf_counter()
        stage = "compose"
        smtp: Optional[aiosmtplib.SMTP] = None

        try:
            message = build_message(config, submission)

            smtp = aiosmtplib.SMTP(
                hostname=config.smtp_server,
                port=config.smtp_port,
                start_tls=True,
                tls_context=self._tls_context,
            )

            stage = "connect"
            logger.info(
                "Connecting to SMTP server",
                server=config.smtp_server,
                port=config.smtp_port,
            )
            await smtp.connect()

            stage = "authenticate"
            logger.info("Authenticating with SMTP server", username=config.username)
            await smtp.login(config.username, config.password.get_secret_value())

            stage = "send"
            await smtp.send_message(message)
            logger.info("Email sent successfully", recipient=recipient)

            stage = "disconnect"
            await smtp.quit()

        except Exception as e:
            # CancelledError is a BaseException and still reaches the caller
            error = MailDeliveryError(
                f"Failed to send email to {recipient}: {e}",
                stage=stage,
                recipient=recipient,
                cause=e,
            )
            logger.error(
                "Failed to send email",
                recipient=recipient,
                stage=stage,
                error=str(e),
                error_type=type(e).__name__,
            )
            contact_emails_total.labels(status="failed").inc()
            contact_email_failures_total.labels(stage=stage).inc()
            return Err(error)

        finally:
            if smtp is not None and smtp.is_connected:
                smtp.close()
            contact_email_send_duration_seconds.observe(time.perf_counter() - started)

        contact_emails_total.labels(status="sent").inc()
        return Ok(recipient)
