"""Value object describing an email handed to the mail gateway."""

from dataclasses import dataclass


@dataclass(frozen=True)
class EmailDispatchRequest:
    """Recipient, subject and HTML body of a single outgoing email."""

    to: str
    subject: str
    html: str


__all__ = ["EmailDispatchRequest"]
