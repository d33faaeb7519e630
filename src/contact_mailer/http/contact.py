"""Contact form endpoint."""

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from contact_mailer.mail.mailer import Mailer
from contact_mailer.metrics import contact_form_submissions_total


logger = structlog.get_logger()

router = APIRouter()

FAILURE_NOTICE = "Sorry, your message could not be sent. Please try again later."


class ContactForm(BaseModel):
    """Fields collected by the contact form."""

    name: str
    email: str
    subject: str
    message: str


def get_mailer(request: Request) -> Mailer:
    """Return the mailer built at application startup."""
    return request.app.state.mailer


def get_recipient(request: Request) -> str:
    """Return the inbox that receives contact form submissions."""
    return request.app.state.recipient_email


@router.post("/contact")
async def submit_contact_form(
    form: ContactForm,
    mailer: Mailer = Depends(get_mailer),
    recipient: str = Depends(get_recipient),
) -> JSONResponse:
    """Relay a contact form submission to the configured inbox.

    Failures are reported with a generic notice only; the cause is in the logs.
    """
    contact_form_submissions_total.inc()

    sent = await mailer.send_email(
        recipient,
        form.subject,
        form.name,
        form.email,
        form.message,
    )

    if not sent:
        logger.warning("Contact form submission not delivered", subject=form.subject)
        return JSONResponse(
            status_code=502,
            content={"status": "failed", "detail": FAILURE_NOTICE},
        )

    return JSONResponse(status_code=200, content={"status": "sent"})
