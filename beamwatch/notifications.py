"""Notification system: console output and SMTP e-mail delivery."""

from __future__ import annotations

import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from beamwatch.config import Settings

logger = structlog.get_logger()


def notify_console(title: str, message: str, website_id: int | None = None) -> None:
    """Log a notification to the console."""
    logger.info(title, detail=message, website_id=website_id)


def notify_discovery_complete(website_id: int, competitors_found: int) -> None:
    notify_console(
        "Discovery Complete",
        f"Found {competitors_found} competitors",
        website_id=website_id,
    )


def notify_error(website_id: int | None, stage: str, error: str) -> None:
    notify_console(f"Error in {stage}", error, website_id=website_id)


class EmailNotifier:
    """Sends HTML e-mail over SMTP.

    ``send`` returns False when SMTP is not configured or delivery fails, so
    callers can record the e-mail status without handling SMTP exceptions.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    @property
    def is_available(self) -> bool:
        return self.settings.smtp_configured

    def send(self, to: str, subject: str, html: str) -> bool:
        if not self.is_available:
            logger.warning("SMTP not configured, skipping e-mail", to=to, subject=subject)
            return False
        if not to:
            logger.warning("No recipient address, skipping e-mail", subject=subject)
            return False

        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.settings.email_from
        msg["To"] = to
        msg.attach(MIMEText(html, "html"))

        try:
            with smtplib.SMTP(
                self.settings.smtp_host, self.settings.smtp_port, timeout=30
            ) as server:
                if self.settings.smtp_use_tls:
                    server.starttls()
                server.login(self.settings.smtp_user, self.settings.smtp_password)
                server.sendmail(self.settings.email_from, [to], msg.as_string())
        except (smtplib.SMTPException, OSError) as exc:
            logger.warning("E-mail delivery failed", to=to, subject=subject, error=str(exc))
            return False

        logger.info("E-mail sent", to=to, subject=subject)
        return True
