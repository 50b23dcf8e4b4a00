"""
Outgoing email for verification codes and password reset links.

A single Mailer is built at application startup and shared through
``app.state``; delivery failures are logged and reported as ``False``
so the calling operation still succeeds.
"""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

from app.core.config import Settings

logger = logging.getLogger(__name__)


VERIFICATION_TEMPLATE = """
<div style="font-family: Arial, sans-serif; padding: 20px;">
  <h2 style="color: #333;">Email Verification</h2>
  <p>Your verification code is:</p>
  <h1 style="color: #007bff;">{code}</h1>
  <p>This code will expire in {minutes} minutes.</p>
  <br/>
  <p style="color: #888;">If you didn't request this, please ignore this email.</p>
</div>
"""

PASSWORD_RESET_TEMPLATE = """
<div style="font-family: Arial, sans-serif; padding: 20px;">
  <h2 style="color: #333;">Password Reset</h2>
  <p>Click the link below to reset your password:</p>
  <p><a href="{link}" style="color:#007bff;">{link}</a></p>
  <p>This link will expire in {minutes} minutes.</p>
  <br/>
  <p style="color: #888;">If you didn't request this, please ignore this email.</p>
</div>
"""


class Mailer:
    """SMTP client for transactional email."""

    def __init__(
        self,
        host: Optional[str],
        port: int = 587,
        username: Optional[str] = None,
        password: Optional[str] = None,
        from_email: Optional[str] = None,
        use_tls: bool = True,
        timeout: int = 20,
        frontend_url: str = "http://localhost:3000",
        verification_minutes: int = 15,
        reset_minutes: int = 60,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_email = from_email or username
        self.use_tls = use_tls
        self.timeout = timeout
        self.frontend_url = frontend_url.rstrip("/")
        self.verification_minutes = verification_minutes
        self.reset_minutes = reset_minutes
        self._closed = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "Mailer":
        return cls(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.SMTP_USER,
            password=settings.SMTP_PASSWORD,
            from_email=settings.EMAILS_FROM_EMAIL,
            use_tls=settings.SMTP_TLS,
            timeout=settings.SMTP_TIMEOUT,
            frontend_url=settings.FRONTEND_URL,
            verification_minutes=settings.VERIFICATION_CODE_EXPIRE_MINUTES,
            reset_minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES,
        )

    @property
    def enabled(self) -> bool:
        return bool(self.host and self.from_email) and not self._closed

    def close(self) -> None:
        """Stop sending; called at application shutdown."""
        self._closed = True

    def _connect(self) -> smtplib.SMTP:
        if self.port == 465:
            return smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout)
        server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        if self.use_tls:
            server.starttls()
        return server

    def send(self, to: str, subject: str, html: str, sender_name: str) -> bool:
        """
        Send an HTML email.

        Returns:
            bool: True when the message was handed to the SMTP server.
        """
        if not self.enabled:
            logger.info("Email delivery disabled, skipping '%s' to %s", subject, to)
            return False

        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f'"{sender_name}" <{self.from_email}>'
        msg["To"] = to
        msg.attach(MIMEText(html, "html"))

        try:
            with self._connect() as server:
                if self.username:
                    server.login(self.username, self.password or "")
                server.sendmail(self.from_email, [to], msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            logger.warning("Failed to send '%s' to %s: %s", subject, to, e)
            return False

        logger.info("Sent '%s' to %s", subject, to)
        return True

    def send_verification_email(self, email: str, code: str) -> bool:
        html = VERIFICATION_TEMPLATE.format(code=code, minutes=self.verification_minutes)
        return self.send(email, "Email Verification Code", html, "Verification Team")

    def send_password_reset_email(self, email: str, token: str) -> bool:
        link = f"{self.frontend_url}/reset-password?token={token}"
        html = PASSWORD_RESET_TEMPLATE.format(link=link, minutes=self.reset_minutes)
        return self.send(email, "Password Reset Request", html, "Support Team")
