"""Contact Mailer.

A small contact form service that relays submissions through an
authenticated, STARTTLS-encrypted SMTP relay.
"""

__version__ = "0.1.0"

# Package metadata
__all__ = ["__version__"]
