"""Pytest configuration and shared fixtures."""

import socket
import ssl
from datetime import datetime, timedelta, timezone
from email import message_from_bytes
from email import policy
from email.message import EmailMessage
from ipaddress import IPv4Address
from pathlib import Path
from typing import Optional

import pytest
import structlog
from aiosmtpd.controller import Controller
from aiosmtpd.smtp import SMTP as SMTPProtocol
from aiosmtpd.smtp import AuthResult, Envelope, LoginPassword, Session
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

RELAY_USERNAME = "mailer@example.com"
RELAY_PASSWORD = "app-specific-password"


@pytest.fixture(autouse=True)
def reset_structlog():
    """Keep structlog unconfigured between tests so capture_logs works."""
    structlog.reset_defaults()
    yield
    structlog.reset_defaults()


def free_port() -> int:
    """Return a TCP port nothing is listening on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def unused_port() -> int:
    """A local port with nothing listening on it."""
    return free_port()


def generate_self_signed_cert(hostname: str, cert_path: Path, key_path: Path) -> None:
    """Write a self-signed certificate and key for the test relay."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    subject = issuer = x509.Name([
        x509.NameAttribute(NameOID.ORGANIZATION_NAME, "Contact Mailer Test Relay"),
        x509.NameAttribute(NameOID.COMMON_NAME, hostname),
    ])
    now = datetime.now(timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer)
        .public_key(private_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(minutes=5))
        .not_valid_after(now + timedelta(days=1))
        .add_extension(
            x509.SubjectAlternativeName([
                x509.DNSName(hostname),
                x509.DNSName("localhost"),
                x509.IPAddress(IPv4Address("127.0.0.1")),
            ]),
            critical=False,
        )
        .sign(private_key, hashes.SHA256())
    )
    cert_path.write_bytes(cert.public_bytes(serialization.Encoding.PEM))
    key_path.write_bytes(
        private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.TraditionalOpenSSL,
            encryption_algorithm=serialization.NoEncryption(),
        )
    )


class RelayHandler:
    """aiosmtpd handler recording every accepted message."""

    def __init__(self) -> None:
        self.messages: list[EmailMessage] = []
        self.envelopes: list[Envelope] = []
        self.tls_active: list[bool] = []
        self.quit_count = 0

    async def handle_DATA(
        self,
        server: SMTPProtocol,
        session: Session,
        envelope: Envelope,
    ) -> str:
        self.envelopes.append(envelope)
        self.tls_active.append(session.ssl is not None)
        self.messages.append(message_from_bytes(envelope.content, policy=policy.default))
        return "250 Message accepted for delivery"

    async def handle_QUIT(
        self,
        server: SMTPProtocol,
        session: Session,
        envelope: Envelope,
    ) -> str:
        self.quit_count += 1
        return "221 Bye"


class RelayAuthenticator:
    """Accepts exactly one username/password pair."""

    def __init__(self, username: str, password: str) -> None:
        self.username = username.encode()
        self.password = password.encode()
        self.attempts = 0

    def __call__(self, server, session, envelope, mechanism, auth_data) -> AuthResult:
        self.attempts += 1
        if (
            isinstance(auth_data, LoginPassword)
            and auth_data.login == self.username
            and auth_data.password == self.password
        ):
            return AuthResult(success=True)
        return AuthResult(success=False, handled=False)


class Relay:
    """Handle on a running test relay."""

    def __init__(self, controller: Controller, handler: RelayHandler, authenticator) -> None:
        self.controller = controller
        self.handler = handler
        self.authenticator = authenticator
        self.host = "127.0.0.1"
        self.port = controller.port

    @property
    def messages(self) -> list[EmailMessage]:
        return self.handler.messages


@pytest.fixture(scope="session")
def relay_certificate(tmp_path_factory) -> tuple[Path, Path]:
    """Self-signed certificate shared by every relay in the session."""
    directory = tmp_path_factory.mktemp("tls")
    cert_path = directory / "tls.crt"
    key_path = directory / "tls.key"
    generate_self_signed_cert("relay.test", cert_path, key_path)
    return cert_path, key_path


def _start_relay(tls_context: Optional[ssl.SSLContext]) -> Relay:
    handler = RelayHandler()
    authenticator = RelayAuthenticator(RELAY_USERNAME, RELAY_PASSWORD)
    params = {}
    if tls_context is not None:
        params = {
            "tls_context": tls_context,
            "require_starttls": True,
            "auth_require_tls": True,
            "authenticator": authenticator,
        }
    controller = Controller(
        handler,
        hostname="127.0.0.1",
        port=free_port(),
        server_hostname="relay.test",
        **params,
    )
    controller.start()
    return Relay(controller, handler, authenticator)


@pytest.fixture
def smtp_relay(relay_certificate):
    """SMTP relay offering STARTTLS and AUTH (after TLS only)."""
    cert_path, key_path = relay_certificate
    context = ssl.create_default_context(ssl.Purpose.CLIENT_AUTH)
    context.load_cert_chain(certfile=str(cert_path), keyfile=str(key_path))

    relay = _start_relay(context)
    yield relay
    relay.controller.stop()


@pytest.fixture
def plaintext_relay():
    """SMTP relay that never offers STARTTLS."""
    relay = _start_relay(None)
    yield relay
    relay.controller.stop()


@pytest.fixture
def mailer_config():
    """Factory for MailerConfig pointing at a relay."""
    from contact_mailer.config import MailerConfig

    def factory(relay: Optional[Relay] = None, **overrides) -> MailerConfig:
        values = {
            "smtp_server": relay.host if relay else "smtp.example.com",
            "smtp_port": relay.port if relay else 587,
            "sender_name": "Example Website",
            "sender_email": "website@example.com",
            "username": RELAY_USERNAME,
            "password": RELAY_PASSWORD,
            "verify_certs": False,
        }
        values.update(overrides)
        return MailerConfig(**values)

    return factory


@pytest.fixture
def submission():
    """Sample contact form submission."""
    from contact_mailer.mail.models import ContactSubmission

    return ContactSubmission(
        recipient_email="inbox@example.com",
        subject="Question about pricing",
        name="Jane Doe",
        sender_email="jane@example.org",
        message="Hello,\nDo you offer discounts?\nThanks",
    )
