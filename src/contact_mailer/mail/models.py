"""Contact submission and send result types."""

from dataclasses import dataclass
from typing import Union

from pydantic import BaseModel, ConfigDict

from contact_mailer.errors import MailDeliveryError


class ContactSubmission(BaseModel):
    """One contact form submission, alive for the duration of a single send.

    Addresses are not validated here; malformed input is left to the SMTP
    client and relay to reject.
    """

    model_config = ConfigDict(frozen=True)

    recipient_email: str
    subject: str
    name: str
    sender_email: str
    message: str


@dataclass(frozen=True)
class Ok:
    """The message went through connect, auth, send and QUIT."""

    recipient: str

    def __bool__(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    """The message was not delivered; ``error`` carries the cause."""

    error: MailDeliveryError

    def __bool__(self) -> bool:
        return False


SendResult = Union[Ok, Err]
