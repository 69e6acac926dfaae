from email.message import EmailMessage

import aiosmtplib

from quincy.core.config import settings
from quincy.core.errors import NotifierError


def build_message(to_email: str, subject: str, body: str) -> EmailMessage:
    if not settings.MAIL_FROM:
        raise NotifierError("MAIL_FROM is not configured")

    message = EmailMessage()
    message["From"] = f"Quincy <{settings.MAIL_FROM}>"
    message["To"] = to_email
    message["Subject"] = subject
    message.set_content(body)
    return message


async def send_email(to_email: str, subject: str, body: str):
    message = build_message(to_email, subject, body)
    try:
        await aiosmtplib.send(
            message,
            hostname=settings.MAIL_HOST,
            port=settings.MAIL_PORT,
            start_tls=True,
            username=settings.MAIL_FROM,
            password=settings.MAIL_PASSWORD,
            timeout=settings.MAIL_TIMEOUT_SECONDS,
        )
    except aiosmtplib.SMTPException as e:
        raise NotifierError(f"SMTP delivery failed: {e}", to=to_email) from e
