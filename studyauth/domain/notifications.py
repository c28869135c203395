"""
Best-effort notifications.

Mail delivery is a side effect whose outcome is observed only for
logging. BestEffortNotifier never raises, so a broken mail server can
neither block OTP issuance nor roll back a password change.
"""

import html
import logging
from dataclasses import dataclass

from .ports import EmailSender

logger = logging.getLogger(__name__)

VERIFICATION_SUBJECT = "Verification Email"
PASSWORD_UPDATED_SUBJECT = "Password Updated"


def verification_email(passcode: str) -> str:
    """HTML body carrying a signup passcode."""
    return (
        "<html><body>"
        "<h2>OTP Verification Email</h2>"
        "<p>Use the following OTP to verify your account:</p>"
        f"<h1>{html.escape(passcode)}</h1>"
        "<p>If you did not request this, you can ignore this email.</p>"
        "</body></html>"
    )


def password_updated_email(email: str, full_name: str) -> str:
    """HTML body confirming a password change."""
    return (
        "<html><body>"
        "<h2>Password Update Confirmation</h2>"
        f"<p>Hey {html.escape(full_name)},</p>"
        f"<p>Your password has been successfully updated for the email "
        f"<strong>{html.escape(email)}</strong>.</p>"
        "<p>If you did not request this change, please contact us immediately.</p>"
        "</body></html>"
    )


@dataclass
class BestEffortNotifier:
    """Fire-and-forget wrapper around an EmailSender."""

    sender: EmailSender

    def notify(self, email: str, subject: str, body: str) -> bool:
        """
        Attempt delivery.

        Returns:
            True if the sender accepted the message, False if it raised
        """
        try:
            self.sender.send(email, subject, body)
        except Exception as exc:
            logger.warning("Mail delivery failed: to=%s subject=%r error=%s", email, subject, exc)
            return False
        return True
