"""
SMTP email sender adapter - Implements EmailSender protocol.

Delivers HTML mail over SMTP with STARTTLS (or implicit TLS on port 465).
Failures propagate to the caller; the domain wraps this sender in a
best-effort notifier that only logs them.
"""

import logging
import smtplib
import ssl
from email.mime.text import MIMEText

logger = logging.getLogger(__name__)

IMPLICIT_TLS_PORT = 465


class SmtpEmailSender:
    """Implements EmailSender protocol via smtplib."""

    def __init__(
        self,
        *,
        host: str,
        port: int = 587,
        user: str | None = None,
        password: str | None = None,
        from_name: str = "StudyNotion",
        timeout: float = 10.0,
    ) -> None:
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.from_name = from_name
        self.timeout = timeout

    def send(self, email: str, subject: str, body: str) -> None:
        if not email:
            raise ValueError("No recipient")

        from_email = self.user or f"no-reply@{self.host}"
        msg = MIMEText(body, "html")
        msg["Subject"] = subject
        msg["From"] = f'"{self.from_name}" <{from_email}>'
        msg["To"] = email

        context = ssl.create_default_context()
        if self.port == IMPLICIT_TLS_PORT:
            server = smtplib.SMTP_SSL(self.host, self.port, context=context, timeout=self.timeout)
        else:
            server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)

        with server:
            if self.port != IMPLICIT_TLS_PORT:
                server.starttls(context=context)
            if self.user and self.password:
                server.login(self.user, self.password)
            server.sendmail(from_email, [email], msg.as_string())

        logger.info("Email sent: to=%s subject=%r", email, subject)
