"""
Send guest/admin notifications by email via SMTP (Gmail or any other relay).
Set SMTP_HOST, SMTP_USER, SMTP_PASSWORD in .env. With Gmail use an App Password (not your normal password).

The booking core only knows the Notifier protocol; the process entry point picks the implementation.
"""
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape
from typing import Protocol

from tablebook.config import Settings
from tablebook.core.errors import NotifierUnavailable

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Deliver one rendered message. Raises NotifierUnavailable when delivery fails."""

    def send(self, address: str, subject: str, body: str) -> None:
        ...


class SmtpNotifier:
    def __init__(
        self,
        host: str,
        port: int,
        user: str,
        password: str,
        from_address: str,
        *,
        starttls: bool = True,
        timeout_seconds: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.from_address = from_address
        self.starttls = starttls
        self.timeout_seconds = timeout_seconds

    def send(self, address: str, subject: str, body: str) -> None:
        address = (address or "").strip()
        if not address:
            raise NotifierUnavailable("No recipient address")
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.from_address
        msg["To"] = address
        msg.attach(MIMEText(body, "plain"))
        msg.attach(MIMEText(f"<pre style='font-family:Georgia,serif'>{escape(body)}</pre>", "html"))
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout_seconds) as server:
                if self.starttls:
                    server.starttls()
                if self.user and self.password:
                    server.login(self.user, self.password)
                server.sendmail(self.user or self.from_address, [address], msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            raise NotifierUnavailable(f"SMTP delivery to {address} failed: {e}") from e
        logger.info("Email sent to %s: %s", address, subject)


class LogOnlyNotifier:
    """Used when SMTP is not configured (local dev): messages are logged and count as delivered."""

    def send(self, address: str, subject: str, body: str) -> None:
        logger.info("SMTP not configured; would send to %s: %s\n%s", address, subject, body)


def _from_address(settings: Settings) -> str:
    if settings.notify_from:
        return settings.notify_from
    user = settings.smtp_user
    if user:
        return f"{settings.brand_name} <{user}>"
    return f"{settings.brand_name} <noreply@localhost>"


def build_notifier(settings: Settings) -> Notifier:
    if not settings.smtp_host:
        logger.warning("SMTP_HOST not set; notifications will only be logged")
        return LogOnlyNotifier()
    return SmtpNotifier(
        settings.smtp_host,
        settings.smtp_port,
        settings.smtp_user,
        settings.smtp_password,
        _from_address(settings),
        starttls=settings.smtp_starttls,
        timeout_seconds=settings.smtp_timeout_seconds,
    )
