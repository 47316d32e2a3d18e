"""
Email service untuk Security Audit API.
Menangani pengiriman recovery code dan daily report.
"""

from datetime import datetime
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional
import asyncio
from functools import partial
from pathlib import Path
import logging

import jinja2

from app.core.config import settings
from app.core.exceptions import DeliveryFailureError
from app.schemas.report import DailyReport

logger = logging.getLogger(__name__)


class EmailService:
    """
    Service class untuk email operations.
    Menangani template rendering dan email sending.
    """

    def __init__(self):
        """Initialize email service dengan template engine."""
        template_dir = Path(__file__).parent.parent / "templates" / "emails"
        self.template_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            autoescape=jinja2.select_autoescape(["html"])
        )

        # Base context untuk semua email
        self.base_context = {
            "app_name": settings.APP_NAME,
            "support_email": settings.EMAIL_FROM_ADDRESS,
            "year": datetime.now().year
        }

    async def send_email(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: Optional[str] = None
    ) -> bool:
        """
        Send email menggunakan SMTP.

        Args:
            to_email: Recipient email
            subject: Email subject
            html_body: HTML content
            text_body: Plain text content (optional)

        Returns:
            True jika email berhasil dikirim

        Raises:
            DeliveryFailureError: Jika SMTP gagal
        """
        # Run in thread pool karena smtplib blocking
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None,
            partial(
                self._send_email_sync,
                to_email=to_email,
                subject=subject,
                html_body=html_body,
                text_body=text_body
            )
        )

    def _send_email_sync(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: Optional[str] = None
    ) -> bool:
        """
        Synchronous email sending implementation.

        Args:
            Same as send_email

        Returns:
            True jika berhasil
        """
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{settings.EMAIL_FROM_NAME} <{settings.EMAIL_FROM_ADDRESS}>"
        msg["To"] = to_email

        if text_body:
            msg.attach(MIMEText(text_body, "plain", "utf-8"))
        msg.attach(MIMEText(html_body, "html", "utf-8"))

        smtp_class = smtplib.SMTP_SSL if settings.SMTP_SSL else smtplib.SMTP

        try:
            with smtp_class(
                settings.SMTP_HOST, settings.SMTP_PORT, timeout=settings.SMTP_TIMEOUT_SECONDS
            ) as server:
                if not settings.SMTP_SSL and settings.SMTP_TLS:
                    server.starttls()
                if settings.SMTP_USER and settings.SMTP_PASSWORD:
                    server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
                server.send_message(msg, to_addrs=[to_email])

        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"SMTP error sending '{subject}': {type(e).__name__}: {e}")
            raise DeliveryFailureError(details={"recipient": to_email}) from e

        logger.info(f"Email '{subject}' sent")
        return True

    def _render(self, template_name: str, context: dict) -> Optional[str]:
        """Render template; None jika template tidak ada."""
        try:
            return self.template_env.get_template(template_name).render(**context)
        except jinja2.TemplateNotFound:
            logger.warning(f"Email template {template_name} not found, using fallback body")
            return None

    async def send_recovery_code_email(
        self,
        email: str,
        username: str,
        code: str,
        expires_minutes: int
    ) -> bool:
        """
        Send recovery code email.

        Args:
            email: Recipient
            username: Username pemilik akun
            code: Recovery code
            expires_minutes: Masa berlaku code

        Returns:
            True jika berhasil
        """
        context = {
            **self.base_context,
            "username": username,
            "code": code,
            "expires_minutes": expires_minutes
        }

        html_body = self._render("recovery_code.html", context)
        text_body = self._render("recovery_code.txt", context)

        if html_body is None:
            html_body = f"""
            <h2>Password recovery</h2>
            <p>Hi {username},</p>
            <p>Your recovery code is <strong>{code}</strong>.</p>
            <p>This code will expire in {expires_minutes} minutes.</p>
            """
        if text_body is None:
            text_body = (
                f"Hi {username},\n\nYour recovery code is {code}.\n"
                f"This code will expire in {expires_minutes} minutes.\n"
            )

        return await self.send_email(
            to_email=email,
            subject=f"{settings.APP_NAME} recovery code",
            html_body=html_body,
            text_body=text_body
        )

    async def send_daily_report_email(self, email: str, report: DailyReport) -> bool:
        """
        Send daily security report.

        Args:
            email: Recipient
            report: Report yang sudah dihitung

        Returns:
            True jika berhasil
        """
        context = {**self.base_context, "report": report}

        html_body = self._render("daily_report.html", context)
        if html_body is None:
            html_body = (
                f"<h2>Daily security report {report.report_date}</h2>"
                f"<p>Total events: {report.total_events}</p>"
                f"<p>Locked accounts: {report.locked_accounts}</p>"
                f"<p>Active accounts: {report.active_accounts}</p>"
            )

        return await self.send_email(
            to_email=email,
            subject=f"{settings.APP_NAME} daily security report {report.report_date}",
            html_body=html_body,
            text_body=self._render("daily_report.txt", context)
        )
