"""
SMTP email sender adapter - Implements EmailSender protocol via fastapi-mail.

The domain calls send_verification_code synchronously from a worker
thread, so each send runs its own event loop and is bounded by a timeout.
Any transport failure, timeout included, surfaces as EmailDeliveryError.
"""

import asyncio
import logging
from typing import Protocol

from fastapi_mail import ConnectionConfig, FastMail, MessageSchema, MessageType

from nutrisnap.config.settings import Settings
from nutrisnap.domain.exceptions import EmailDeliveryError

logger = logging.getLogger(__name__)

VERIFICATION_SUBJECT = "Seu Código de Verificação NutriSnap"


class Mailer(Protocol):
    async def send_message(self, message: MessageSchema) -> None: ...


def render_verification_email(code: str, ttl_minutes: int = 15) -> str:
    return f"""
        <div style="font-family: Arial, sans-serif; padding: 20px; color: #333;">
            <h2 style="color: #00C9FF;">Verificação de Email</h2>
            <p>Olá,</p>
            <p>Use o código abaixo para verificar seu email:</p>
            <div style="background-color: #f4f4f4; padding: 15px; border-radius: 8px; text-align: center; margin: 20px 0;">
                <h1 style="color: #00C9FF; margin: 0; font-size: 32px;">{code}</h1>
            </div>
            <p>Este código é válido por <strong>{ttl_minutes} minutos</strong>.</p>
            <p style="margin-top: 30px; font-size: 12px; color: #777;">Atenciosamente,<br>Equipe NutriSnap</p>
        </div>
    """


class SmtpEmailSender:
    """
    Implements EmailSender protocol over SMTP.

    Selected with EMAIL_BACKEND=smtp.
    """

    def __init__(self, mailer: Mailer, timeout_seconds: float = 10.0, ttl_minutes: int = 15) -> None:
        self._mailer = mailer
        self._timeout = timeout_seconds
        self._ttl_minutes = ttl_minutes

    @classmethod
    def from_settings(cls, settings: Settings) -> "SmtpEmailSender":
        conf = ConnectionConfig(
            MAIL_USERNAME=settings.smtp_username,
            MAIL_PASSWORD=settings.smtp_password,
            MAIL_FROM=settings.mail_from,
            MAIL_FROM_NAME=settings.mail_from_name,
            MAIL_PORT=settings.smtp_port,
            MAIL_SERVER=settings.smtp_host,
            MAIL_STARTTLS=not settings.smtp_use_ssl,
            MAIL_SSL_TLS=settings.smtp_use_ssl,
            USE_CREDENTIALS=bool(settings.smtp_username),
            TIMEOUT=int(settings.email_timeout_seconds),
        )
        return cls(
            FastMail(conf),
            timeout_seconds=settings.email_timeout_seconds,
            ttl_minutes=settings.pending_ttl_minutes,
        )

    def send_verification_code(self, email: str, code: str) -> None:
        message = MessageSchema(
            subject=VERIFICATION_SUBJECT,
            recipients=[email],
            body=render_verification_email(code, self._ttl_minutes),
            subtype=MessageType.html,
        )
        try:
            asyncio.run(asyncio.wait_for(self._mailer.send_message(message), timeout=self._timeout))
        except asyncio.TimeoutError as e:
            logger.error("SMTP delivery to %s timed out after %ss", email, self._timeout)
            raise EmailDeliveryError("email delivery timed out") from e
        except Exception as e:
            logger.error("SMTP delivery to %s failed: %s", email, e)
            raise EmailDeliveryError("email delivery failed") from e

        logger.info("Verification email sent to %s", email)
