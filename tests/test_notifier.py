import uuid
from urllib.parse import parse_qs

import httpx
import pytest

from quincy.core.config import settings
from quincy.core.errors import NotifierError
from quincy.models.interest_db.interest_crud import upsert_connection
from quincy.services import notifier as notifier_module
from quincy.services.email import build_message
from quincy.services.notifier import (
    EmailConnectionNotifier,
    LoggingNotifier,
    SmsConnectionNotifier,
    build_notifier,
    notify_safely,
)


@pytest.fixture
def connection(db, make_user, active_event):
    alice = make_user(display_name="Alice", email="alice@example.com")
    bob = make_user(display_name="Bob", email="bob@example.com")
    connection, _ = upsert_connection(db, alice.id, bob.id, active_event.id)
    return connection, alice, bob


def test_build_notifier():
    assert isinstance(build_notifier("email"), EmailConnectionNotifier)
    assert isinstance(build_notifier("sms"), SmsConnectionNotifier)
    assert isinstance(build_notifier("log"), LoggingNotifier)
    assert isinstance(build_notifier("anything-else"), LoggingNotifier)


def test_notify_safely_swallows_failures(connection, failing_notifier):
    conn, alice, _ = connection
    assert notify_safely(failing_notifier, conn, alice.id) is False
    assert failing_notifier.attempts == 1


def test_notify_safely_without_notifier(connection):
    conn, alice, _ = connection
    assert notify_safely(None, conn, alice.id) is False


def test_email_notifier_mentions_the_match(connection, session_factory, monkeypatch):
    conn, alice, bob = connection
    sent = []

    async def fake_send_email(to_email, subject, body):
        sent.append((to_email, subject, body))

    monkeypatch.setattr(notifier_module, "send_email", fake_send_email)

    assert notify_safely(EmailConnectionNotifier(session_factory=session_factory), conn, alice.id) is True
    assert sent[0][0] == "alice@example.com"
    assert "You matched with Bob on Quincy!" in sent[0][2]


def test_email_notifier_needs_an_address(connection, session_factory):
    conn, _, _ = connection
    with pytest.raises(NotifierError):
        EmailConnectionNotifier(session_factory=session_factory).notify(conn, uuid.uuid4())


def test_email_body_falls_back_to_generic_name():
    body = EmailConnectionNotifier().build_body(None)
    assert "a fellow vinyl lover" in body


@pytest.fixture
def twilio(monkeypatch):
    monkeypatch.setattr(settings, "TWILIO_ACCOUNT_SID", "AC123")
    monkeypatch.setattr(settings, "TWILIO_AUTH_TOKEN", "secret")
    monkeypatch.setattr(settings, "TWILIO_PHONE_NUMBER", "+15550000000")
    requests = []

    def transport(status_code=201):
        def handler(request):
            requests.append(request)
            return httpx.Response(status_code, json={"sid": "SM1", "status": "queued"})
        return httpx.MockTransport(handler)

    return requests, transport


def test_sms_notifier_texts_the_recipient(db, make_user, active_event, session_factory, twilio):
    requests, transport = twilio
    alice = make_user(display_name="Alice", phone="+15551234567")
    bob = make_user(display_name="Bob")
    conn, _ = upsert_connection(db, alice.id, bob.id, active_event.id)

    sms = SmsConnectionNotifier(session_factory=session_factory, transport=transport())
    assert notify_safely(sms, conn, alice.id) is True

    request = requests[0]
    assert request.url.path == "/2010-04-01/Accounts/AC123/Messages.json"
    form = parse_qs(request.content.decode())
    assert form["To"] == ["+15551234567"]
    assert form["From"] == ["+15550000000"]
    assert "You matched with Bob on Quincy!" in form["Body"][0]


def test_sms_notifier_needs_a_phone(connection, session_factory, twilio):
    conn, alice, _ = connection
    _, transport = twilio
    sms = SmsConnectionNotifier(session_factory=session_factory, transport=transport())
    with pytest.raises(NotifierError):
        sms.notify(conn, alice.id)


def test_sms_rejection_is_a_notifier_error(twilio):
    _, transport = twilio
    sms = SmsConnectionNotifier(transport=transport(status_code=400))
    with pytest.raises(NotifierError):
        sms.send_sms("+15551234567", "hi")


def test_sms_without_twilio_settings(monkeypatch):
    monkeypatch.setattr(settings, "TWILIO_ACCOUNT_SID", None)
    with pytest.raises(NotifierError):
        SmsConnectionNotifier().send_sms("+15551234567", "hi")


def test_email_requires_a_sender_address(monkeypatch):
    monkeypatch.setattr(settings, "MAIL_FROM", None)
    with pytest.raises(NotifierError):
        build_message("alice@example.com", "subject", "body")
