"""
Console email sender adapter - Implements EmailSender protocol.

This module provides a console-based implementation of the domain's
email sender port, logging messages instead of delivering them. Used in
development so OTPs show up in the service log.
"""

import logging

logger = logging.getLogger(__name__)


class ConsoleEmailSender:
    """
    Implements EmailSender protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def send(self, email: str, subject: str, body: str) -> None:
        """
        Log the message at INFO level (simulates email delivery).

        Args:
            email: Recipient email address
            subject: Subject line
            body: HTML body
        """
        logger.info("[MAIL] To: %s Subject: %s Body: %s", email, subject, body)
