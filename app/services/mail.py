"""Outgoing mail (password reset links)."""

import logging
from email.message import EmailMessage

import aiosmtplib

from app.config import get_settings

logger = logging.getLogger("finance_tracker")

RESET_SUBJECT = "Reset your Finance Tracker password"


class MailService:
    """Sends transactional mail over SMTP.

    Runs as a FastAPI background task, so delivery failures are logged
    rather than raised to the request that triggered them.
    """

    def __init__(self) -> None:
        settings = get_settings()
        self.host = settings.SMTP_HOST
        self.port = settings.SMTP_PORT
        self.username = settings.SMTP_USER
        self.password = settings.SMTP_PASSWORD
        self.sender = settings.MAIL_FROM or settings.SMTP_USER
        self.reset_expire_minutes = settings.PASSWORD_RESET_EXPIRE_MINUTES

    @property
    def enabled(self) -> bool:
        return bool(self.host)

    def build_password_reset_message(self, to: str, name: str, reset_url: str) -> EmailMessage:
        """Build the reset email with plain-text and HTML bodies."""
        message = EmailMessage()
        message["From"] = f"Personal Finance Tracker <{self.sender}>"
        message["To"] = to
        message["Subject"] = RESET_SUBJECT
        message.set_content(
            f"Hi {name},\n\n"
            "We received a request to reset your password. Open the link below to choose a new one:\n\n"
            f"{reset_url}\n\n"
            f"The link expires in {self.reset_expire_minutes} minutes. "
            "If you did not request a reset you can ignore this email.\n"
        )
        message.add_alternative(
            f"<p>Hi {name},</p>"
            "<p>We received a request to reset your password.</p>"
            f'<p><a href="{reset_url}">Reset your password</a></p>'
            f"<p>The link expires in {self.reset_expire_minutes} minutes. "
            "If you did not request a reset you can ignore this email.</p>",
            subtype="html",
        )
        return message

    async def send_password_reset_email(self, to: str, name: str, reset_url: str) -> bool:
        """Send a password reset link. Returns True if the message was handed to SMTP."""
        if not self.enabled:
            logger.info("PASSWORD RESET for %s: %s", to, reset_url)
            return False

        message = self.build_password_reset_message(to, name, reset_url)
        try:
            await aiosmtplib.send(
                message,
                hostname=self.host,
                port=self.port,
                username=self.username or None,
                password=self.password or None,
                start_tls=True,
            )
        except aiosmtplib.SMTPException:
            logger.exception("Failed to send password reset email to %s", to)
            return False

        logger.info("Password reset email sent to %s", to)
        return True


_mail_service: MailService | None = None


def get_mail_service() -> MailService:
    """Get singleton mail service instance."""
    global _mail_service
    if _mail_service is None:
        _mail_service = MailService()
    return _mail_service
