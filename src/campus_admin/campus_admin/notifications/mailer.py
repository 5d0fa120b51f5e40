"""Notification sender.

``send`` never raises: delivery failures are logged and reported as False so
callers can degrade to a no-op.
"""

from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from email.mime.text import MIMEText
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class Mailer(Protocol):
    def send(self, *, recipient: str, subject: str, body: str) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class SmtpMailer:
    host: str
    port: int
    sender: str
    username: Optional[str] = None
    password: Optional[str] = None
    use_tls: bool = True
    timeout: int = 15

    def send(self, *, recipient: str, subject: str, body: str) -> bool:
        msg = MIMEText(body)
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = recipient

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                if self.use_tls:
                    server.starttls()
                if self.username and self.password:
                    server.login(self.username, self.password)
                server.sendmail(self.sender, [recipient], msg.as_string())
        except (smtplib.SMTPException, OSError) as exc:
            logger.warning("Failed to send email to %s: %s", recipient, exc)
            return False
        logger.info("Email '%s' sent to %s", subject, recipient)
        return True


class LoggingMailer:
    """Used when no SMTP host is configured: the message is only logged."""

    def send(self, *, recipient: str, subject: str, body: str) -> bool:
        logger.info("Email delivery disabled; '%s' for %s not sent", subject, recipient)
        return True


def build_mailer(settings) -> Mailer:
    host = getattr(settings, "SMTP_HOST", None)
    if not host:
        return LoggingMailer()
    return SmtpMailer(
        host=str(host),
        port=int(getattr(settings, "SMTP_PORT", 587)),
        sender=str(getattr(settings, "SMTP_SENDER", "no-reply@campus.local")),
        username=getattr(settings, "SMTP_USERNAME", None),
        password=getattr(settings, "SMTP_PASSWORD", None),
        use_tls=bool(getattr(settings, "SMTP_USE_TLS", True)),
        timeout=int(getattr(settings, "SMTP_TIMEOUT", 15)),
    )
