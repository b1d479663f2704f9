"""Feedback delivery — posts submissions to a chat webhook."""

import logging

import httpx

from riskcalc.feedback.submission import FeedbackSubmission

logger = logging.getLogger("riskcalc")


class FeedbackDeliveryError(RuntimeError):
    """Raised when the webhook rejects or cannot receive the feedback."""


class FeedbackNotifier:
    """Send feedback to *webhook_url*; only log it when no URL is set."""

    def __init__(self, webhook_url: str = "", timeout: float = 10.0) -> None:
        self._webhook_url = webhook_url
        self._timeout = timeout

    @property
    def enabled(self) -> bool:
        return bool(self._webhook_url)

    @staticmethod
    def render(submission: FeedbackSubmission) -> str:
        return (
            f"New feedback from {submission.sender}\n\n"
            f"{submission.message}\n\n"
            "---\nSent from the RiskCalc feedback form"
        )

    async def send(self, submission: FeedbackSubmission) -> None:
        """Deliver *submission*.

        Raises:
            FeedbackDeliveryError: If the webhook call fails.
        """
        text = self.render(submission)
        if not self.enabled:
            logger.info("Feedback received (no webhook configured): %s", submission.sender)
            return

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(self._webhook_url, json={"content": text})
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("Feedback delivery failed: %s", exc)
            raise FeedbackDeliveryError(str(exc)) from exc

        logger.info("Feedback from %s delivered", submission.sender)
