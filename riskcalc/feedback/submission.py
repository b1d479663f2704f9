"""Feedback form parsing and validation."""

import re
from dataclasses import dataclass
from typing import Optional

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class FeedbackError(ValueError):
    """Raised for a feedback submission that must be rejected."""


@dataclass(frozen=True)
class FeedbackSubmission:
    message: str
    email: Optional[str] = None
    is_bot: bool = False  # honeypot field was filled in

    @property
    def sender(self) -> str:
        return self.email or "Anonymous"


def validate_feedback(payload: dict) -> FeedbackSubmission:
    """Validate a raw form payload.

    A filled ``website`` field is the honeypot: the submission is
    accepted but flagged as a bot so the caller can drop it quietly.

    Raises:
        FeedbackError: If the message is empty or the email is malformed.
    """
    if payload.get("website"):
        return FeedbackSubmission(message="", is_bot=True)

    message = str(payload.get("message") or "").strip()
    if not message:
        raise FeedbackError("Message is required")

    email = str(payload.get("email") or "").strip()
    if email and not _EMAIL_RE.match(email):
        raise FeedbackError("Invalid email format")

    return FeedbackSubmission(message=message, email=email or None)
