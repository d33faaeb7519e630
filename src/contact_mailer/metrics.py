"""Prometheus metrics definitions for the contact mailer."""

from prometheus_client import Counter, Histogram

# Counter metrics
contact_emails_total = Counter(
    "contact_emails_total",
    "Total number of contact form emails handed to the SMTP relay",
    ["status"],  # sent, failed
)

contact_email_failures_total = Counter(
    "contact_email_failures_total",
    "Total number of failed contact form emails by failing stage",
    ["stage"],  # compose, connect, authenticate, send, disconnect
)

contact_form_submissions_total = Counter(
    "contact_form_submissions_total",
    "Total number of contact form submissions received over HTTP",
)

# Histogram metrics
contact_email_send_duration_seconds = Histogram(
    "contact_email_send_duration_seconds",
    "Time spent relaying one contact form email in seconds",
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
)
