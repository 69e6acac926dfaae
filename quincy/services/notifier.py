import asyncio
from typing import Callable, Protocol
from uuid import UUID

import httpx
from loguru import logger
from sqlalchemy.orm import Session

from quincy.core.config import settings
from quincy.core.database import SessionLocal
from quincy.core.errors import NotifierError
from quincy.models.interest_db.connection_db import Connection
from quincy.models.user_db.user_db import User
from quincy.models.user_db.user_db_crud import get_user_by_id
from quincy.services.email import send_email

TWILIO_API_BASE = "https://api.twilio.com/2010-04-01"


class ConnectionNotifier(Protocol):
    def notify(self, connection: Connection, recipient_id: UUID) -> None:
        ...


class LoggingNotifier:
    def notify(self, connection: Connection, recipient_id: UUID) -> None:
        logger.info(
            "New connection {} for user {} (event {})",
            connection.id, recipient_id, connection.event_id,
        )


class MatchMessageNotifier:
    """Base for notifiers that tell the recipient who they matched with."""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self.session_factory = session_factory

    def build_body(self, matched_with_name: str | None) -> str:
        name = matched_with_name or "a fellow vinyl lover"
        return (
            f"You matched with {name} on Quincy! 🎉🎶 "
            "Say hi before the meetup and open Quincy to start chatting."
        )

    def load_parties(self, connection: Connection, recipient_id: UUID) -> tuple[User | None, User | None]:
        db = self.session_factory()
        try:
            recipient = get_user_by_id(db, recipient_id)
            other = get_user_by_id(db, connection.other_party(recipient_id))
        finally:
            db.close()
        return recipient, other


class EmailConnectionNotifier(MatchMessageNotifier):
    """Sends "you matched" e-mails through SMTP."""

    subject = "You have a new match on Quincy"

    def notify(self, connection: Connection, recipient_id: UUID) -> None:
        recipient, other = self.load_parties(connection, recipient_id)
        if not recipient or not recipient.email:
            raise NotifierError("Recipient has no e-mail address", recipient_id=str(recipient_id))

        body = self.build_body(other.display_name if other else None)
        asyncio.run(send_email(recipient.email, self.subject, body))


class SmsConnectionNotifier(MatchMessageNotifier):
    """Texts the recipient's phone number through the Twilio Messages API."""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal,
                 transport: httpx.BaseTransport | None = None):
        super().__init__(session_factory)
        self.transport = transport

    def send_sms(self, to: str, body: str) -> dict:
        sid = settings.TWILIO_ACCOUNT_SID
        token = settings.TWILIO_AUTH_TOKEN
        if not sid or not token or not settings.TWILIO_PHONE_NUMBER:
            raise NotifierError("Twilio is not configured")

        url = f"{TWILIO_API_BASE}/Accounts/{sid}/Messages.json"
        try:
            with httpx.Client(timeout=httpx.Timeout(settings.SMS_TIMEOUT_SECONDS), transport=self.transport) as client:
                response = client.post(
                    url,
                    auth=(sid, token),
                    data={"From": settings.TWILIO_PHONE_NUMBER, "To": to, "Body": body},
                )
        except httpx.RequestError as e:
            raise NotifierError(f"SMS request failed: {e.__class__.__name__}", to=to) from e

        if response.is_error:
            raise NotifierError("SMS delivery rejected", to=to, http_status=response.status_code)
        return response.json()

    def notify(self, connection: Connection, recipient_id: UUID) -> None:
        recipient, other = self.load_parties(connection, recipient_id)
        if not recipient or not recipient.phone:
            raise NotifierError("Recipient has no phone number", recipient_id=str(recipient_id))

        self.send_sms(recipient.phone, self.build_body(other.display_name if other else None))


def notify_safely(notifier: ConnectionNotifier | None, connection: Connection, recipient_id: UUID) -> bool:
    """Best-effort delivery: failures are logged and never reach the caller."""
    if notifier is None:
        return False
    try:
        notifier.notify(connection, recipient_id)
        return True
    except Exception as e:
        logger.error(
            "Connection notification failed for {} (connection {}): {}",
            recipient_id, connection.id, e,
        )
        return False


def build_notifier(kind: str) -> ConnectionNotifier:
    if kind == "email":
        return EmailConnectionNotifier()
    if kind == "sms":
        return SmsConnectionNotifier()
    return LoggingNotifier()
