"""
Email Service
Best-effort SMTP delivery for verification codes and welcome mail
"""

import asyncio
import logging
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional

import aiosmtplib

from app.config import settings

logger = logging.getLogger(__name__)


class EmailService:
    """Service for sending emails. Every send returns a bool and never raises."""

    def __init__(self):
        self._background = set()

    @staticmethod
    def is_configured() -> bool:
        return bool(settings.SMTP_HOST and settings.SMTP_USER and settings.SMTP_PASSWORD)

    @staticmethod
    def _build_message(to: str, subject: str, html_body: str, text_body: Optional[str]) -> MIMEMultipart:
        message = MIMEMultipart("alternative")
        message["Subject"] = subject
        message["From"] = f"{settings.APP_NAME} <{settings.EMAIL_FROM}>"
        message["To"] = to
        if text_body:
            message.attach(MIMEText(text_body, "plain"))
        message.attach(MIMEText(html_body, "html"))
        return message

    async def send_email(
        self,
        to: str,
        subject: str,
        html_body: str,
        text_body: Optional[str] = None
    ) -> bool:
        """
        Send one email, bounded by EMAIL_TIMEOUT_SECONDS

        Returns:
            True only if the SMTP server accepted the message
        """
        if not self.is_configured():
            logger.info("SMTP not configured, skipping email to %s (%s)", to, subject)
            return False

        message = self._build_message(to, subject, html_body, text_body)
        try:
            await aiosmtplib.send(
                message,
                hostname=settings.SMTP_HOST,
                port=settings.SMTP_PORT,
                username=settings.SMTP_USER,
                password=settings.SMTP_PASSWORD,
                start_tls=settings.SMTP_PORT == 587,
                timeout=settings.EMAIL_TIMEOUT_SECONDS,
            )
        except aiosmtplib.SMTPTimeoutError:
            logger.warning("Email to %s timed out after %ss", to, settings.EMAIL_TIMEOUT_SECONDS)
            return False
        except Exception as e:
            logger.warning("Email to %s failed: %s", to, e)
            return False

        logger.info("Email sent to %s", to)
        return True

    async def send_verification_code(self, to: str, code: str) -> bool:
        """Send a one-time email verification code"""
        minutes = settings.OTP_TTL_SECONDS // 60
        html_body = f"""
        <div style="font-family:Arial,sans-serif;max-width:480px;margin:0 auto;border:1px solid #e0e0e0;border-radius:16px;overflow:hidden">
          <div style="background:linear-gradient(135deg,#6C5CE7,#A29BFE);padding:32px;text-align:center">
            <h1 style="color:white;margin:0">{settings.APP_NAME}</h1>
            <p style="color:rgba(255,255,255,0.8);margin:8px 0 0">Email Verification</p>
          </div>
          <div style="padding:32px;color:#333">
            <p>Use this code to verify your email:</p>
            <div style="background:#6C5CE7;border-radius:12px;padding:24px;text-align:center">
              <span style="font-size:36px;font-weight:800;letter-spacing:8px;color:white">{code}</span>
            </div>
            <p style="font-size:13px;color:#888">This code expires in <strong>{minutes} minutes</strong>.</p>
            <p style="font-size:13px;color:#888">If you didn't request this, please ignore this email.</p>
          </div>
        </div>
        """
        text_body = f"Your {settings.APP_NAME} verification code is {code}. It expires in {minutes} minutes."
        return await self.send_email(to, f"{settings.APP_NAME} - Verification Code", html_body, text_body)

    async def send_welcome_email(self, to: str, name: str) -> bool:
        """Welcome mail after registration"""
        html_body = f"""
        <div style="font-family:Arial,sans-serif;max-width:480px;margin:0 auto">
          <h2 style="color:#6C5CE7">Welcome to {settings.APP_NAME}!</h2>
          <p>Hi <strong>{name}</strong>,</p>
          <p>Your account is ready. Start exploring clubs and registering for events.</p>
          <p><a href="{settings.APP_URL}">Open {settings.APP_NAME}</a></p>
        </div>
        """
        return await self.send_email(to, f"Welcome to {settings.APP_NAME}!", html_body)

    def dispatch(self, coro) -> asyncio.Task:
        """Run a send in the background (fire and forget)"""
        task = asyncio.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task


# Create singleton instance
email_service = EmailService()
