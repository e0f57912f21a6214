"""
Verification-code delivery.

SMS is simulated by mailing ``<phone>@<sms gateway domain>``, so a single
SMTP account covers both channels.  When no SMTP host is configured the
``LoggingNotifier`` writes codes to the log instead (local development).

``smtplib`` is blocking; sends run in a worker thread so the event loop
keeps serving other requests.
"""

from __future__ import annotations

import asyncio
import logging
import smtplib
from abc import ABC, abstractmethod
from email.message import EmailMessage

from src.config import settings

logger = logging.getLogger(__name__)


class NotificationError(Exception):
    """Raised when a code could not be handed to the delivery channel."""


class Notifier(ABC):
    @abstractmethod
    async def send_sms_code(self, phone_number: str, code: str) -> None: ...

    @abstractmethod
    async def send_email_code(self, email: str, name: str, code: str) -> None: ...


class SmtpNotifier(Notifier):
    def __init__(
        self,
        host: str,
        port: int = 587,
        username: str = "",
        password: str = "",
        use_tls: bool = True,
        sender_name: str = "Ridewave",
        sms_gateway_domain: str = "sms-gateway.com",
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.sender_name = sender_name
        self.sms_gateway_domain = sms_gateway_domain

    def _message(self, to: str, subject: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = f'"{self.sender_name}" <{self.username}>'
        msg["To"] = to
        msg["Subject"] = subject
        return msg

    def _send(self, msg: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=10) as smtp:
            if self.use_tls:
                smtp.starttls()
            if self.username:
                smtp.login(self.username, self.password)
            smtp.send_message(msg)

    async def _deliver(self, msg: EmailMessage) -> None:
        try:
            await asyncio.to_thread(self._send, msg)
        except (smtplib.SMTPException, OSError) as exc:
            raise NotificationError(f"Could not deliver to {msg['To']}") from exc

    async def send_sms_code(self, phone_number: str, code: str) -> None:
        msg = self._message(
            f"{phone_number}@{self.sms_gateway_domain}", "Your OTP Code"
        )
        msg.set_content(f"Your OTP code is {code}")
        await self._deliver(msg)

    async def send_email_code(self, email: str, name: str, code: str) -> None:
        msg = self._message(email, "Verify your email address!")
        msg.set_content(
            f"Hi {name},\n\n"
            f"Your {self.sender_name} verification code is {code}. "
            "If you didn't request this OTP, please ignore this email!\n\n"
            f"Thanks,\n{self.sender_name} Team"
        )
        msg.add_alternative(
            f"<p>Hi {name},</p>"
            f"<p>Your {self.sender_name} verification code is {code}. "
            "If you didn't request this OTP, please ignore this email!</p>"
            f"<p>Thanks,<br>{self.sender_name} Team</p>",
            subtype="html",
        )
        await self._deliver(msg)


class LoggingNotifier(Notifier):
    async def send_sms_code(self, phone_number: str, code: str) -> None:
        logger.info("OTP for %s: %s", phone_number, code)

    async def send_email_code(self, email: str, name: str, code: str) -> None:
        logger.info("Email OTP for %s (%s): %s", email, name, code)


def get_notifier() -> Notifier:
    if not settings.smtp_host:
        return LoggingNotifier()
    return SmtpNotifier(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_user,
        password=settings.smtp_password,
        use_tls=settings.smtp_use_tls,
        sender_name=settings.mail_sender_name,
        sms_gateway_domain=settings.sms_gateway_domain,
    )
