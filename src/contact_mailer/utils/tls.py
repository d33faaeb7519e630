"""TLS utilities for the SMTP client."""

import ssl
from pathlib import Path
from typing import Optional

import structlog


logger = structlog.get_logger()


def create_client_tls_context(
    verify: bool = True,
    ca_bundle: Optional[Path] = None,
) -> ssl.SSLContext:
    """Create the TLS context used when upgrading the relay connection.

    Configures TLS with secure defaults:
    - TLS 1.2+ only (no SSLv2, SSLv3, TLS 1.0, TLS 1.1)
    - System trust store plus an optional extra CA bundle
    - Hostname and certificate verification unless disabled

    Args:
        verify: Whether to verify the relay certificate and hostname
        ca_bundle: Optional PEM bundle of extra trusted CAs

    Returns:
        Configured SSL context

    Raises:
        FileNotFoundError: If the CA bundle does not exist
        ssl.SSLError: If the CA bundle cannot be loaded
    """
    context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)
    context.minimum_version = ssl.TLSVersion.TLSv1_2

    if ca_bundle is not None:
        if not ca_bundle.exists():
            raise FileNotFoundError(f"CA bundle not found: {ca_bundle}")
        context.load_verify_locations(cafile=str(ca_bundle))

    if not verify:
        # check_hostname has to be cleared before verify_mode can be relaxed
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
        logger.warning("Relay certificate verification disabled")

    return context
