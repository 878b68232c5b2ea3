# app/services/email.py
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape
from urllib.parse import quote

logger = logging.getLogger(__name__)


class Notifier:
    """Outbound email. Implementations raise on delivery failure."""

    def send(self, to: str, subject: str, html: str) -> None:
        raise NotImplementedError


class LogNotifier(Notifier):
    """Development fallback used when no SMTP server is configured."""

    def send(self, to: str, subject: str, html: str) -> None:
        logger.info("--- Email not sent (no SMTP configured) ---")
        logger.info("To: %s", to)
        logger.info("Subject: %s", subject)
        logger.info("HTML: %s", html)


class SmtpNotifier(Notifier):
    def __init__(self, host: str, port: int, user: str, password: str, sender: str = "", timeout: float = 10.0):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender = sender or user or "no-reply@example.com"
        self.timeout = timeout

    def _connect(self) -> smtplib.SMTP:
        # 465는 SSL, 나머지는 STARTTLS
        if self.port == 465:
            return smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout)
        server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        server.starttls()
        return server

    def send(self, to: str, subject: str, html: str) -> None:
        msg = MIMEMultipart("alternative")
        msg["From"] = self.sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.attach(MIMEText(html, "html"))

        with self._connect() as server:
            server.login(self.user, self.password)
            server.sendmail(self.sender, to, msg.as_string())
        logger.info("Email sent to %s (%s)", to, subject)


def build_verify_url(backend_url: str, token: str) -> str:
    return f"{backend_url.rstrip('/')}/auth/verify?token={quote(token)}"


def render_verification_email(verify_url: str, first_name: str = "") -> str:
    url = escape(verify_url)
    return f"""
    <p>Hi {escape(first_name or "there")},</p>
    <p>Thanks for creating an account. Please verify your email by clicking the link below:</p>
    <p><a href="{url}">Verify your email</a></p>
    <p>If the link doesn't work, copy and paste this into your browser:</p>
    <pre>{url}</pre>
    <p>This link will expire in 24 hours.</p>
    <p>If you didn't request this, please ignore this email.</p>
    """


def send_verification_email(notifier: Notifier, to: str, token: str, backend_url: str, first_name: str = "") -> None:
    verify_url = build_verify_url(backend_url, token)
    notifier.send(to, "Verify your email", render_verification_email(verify_url, first_name))


def build_notifier(settings) -> Notifier:
    if settings.smtp_configured:
        return SmtpNotifier(
            host=settings.EMAIL_HOST,
            port=settings.EMAIL_PORT,
            user=settings.EMAIL_USER,
            password=settings.EMAIL_PASS,
            sender=settings.EMAIL_FROM,
        )
    logger.warning("SMTP not configured; verification emails will only be logged")
    return LogNotifier()
