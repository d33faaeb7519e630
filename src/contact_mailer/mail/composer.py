"""Rendering of contact form submissions into MIME messages."""

import html
from email.message import EmailMessage
from email.utils import formataddr, formatdate, make_msgid

from contact_mailer.config import MailerConfig
from contact_mailer.mail.models import ContactSubmission

SUBJECT_PREFIX = "[Contact Form] "
LINE_BREAK = "<br/>"
RULE = "-" * 28
FOOTER = "This email was sent from your website contact form."


def format_subject(subject: str) -> str:
    """Prefix the submitter's subject so contact form mail is recognisable."""
    return f"{SUBJECT_PREFIX}{subject}"


def _html_text(value: str) -> str:
    """Escape a form value for HTML and turn newlines into line breaks."""
    escaped = html.escape(value.replace("\r\n", "\n"), quote=False)
    return escaped.replace("\n", LINE_BREAK)


def render_html_body(submission: ContactSubmission) -> str:
    """Render the HTML alternative of the notification."""
    return "\n".join([
        "<h3>New Contact Form Submission</h3>",
        "<hr/>",
        f"<p><strong>From:</strong> {_html_text(submission.name)}</p>",
        f"<p><strong>Email:</strong> {_html_text(submission.sender_email)}</p>",
        f"<p><strong>Subject:</strong> {_html_text(submission.subject)}</p>",
        "<hr/>",
        "<p><strong>Message:</strong></p>",
        f"<p>{_html_text(submission.message)}</p>",
        "<hr/>",
        f"<p><small>{FOOTER}</small></p>",
    ])


def render_text_body(submission: ContactSubmission) -> str:
    """Render the plain-text alternative; the message is kept verbatim."""
    return "\n".join([
        "New Contact Form Submission",
        RULE,
        f"From: {submission.name}",
        f"Email: {submission.sender_email}",
        f"Subject: {submission.subject}",
        RULE,
        "Message:",
        submission.message,
        RULE,
        FOOTER,
    ])


def build_message(config: MailerConfig, submission: ContactSubmission) -> EmailMessage:
    """Compose the outgoing multipart/alternative message.

    From is the configured sender identity, Reply-To is the submitter so a
    reply from the inbox goes straight back to them.

    Args:
        config: Mailer configuration (sender identity)
        submission: Contact form submission

    Returns:
        EmailMessage with text/plain and text/html parts

    Raises:
        ValueError: If a header value cannot be encoded (e.g. embedded newlines)
    """
    message = EmailMessage()
    message["From"] = formataddr((config.sender_name, config.sender_email))
    message["To"] = submission.recipient_email
    message["Reply-To"] = formataddr((submission.name, submission.sender_email))
    message["Subject"] = format_subject(submission.subject)
    message["Date"] = formatdate(localtime=True)

    domain = config.sender_email.rpartition("@")[2] or None
    message["Message-ID"] = make_msgid(domain=domain)

    message.set_content(render_text_body(submission))
    message.add_alternative(render_html_body(submission), subtype="html")
    return message
