from types import SimpleNamespace

import openai
import pytest

from main import app
from quincy.core.config import settings
from quincy.core.errors import UpstreamServiceError, ValidationError
from quincy.core.security import create_access_token
from quincy.routes.record.record_routers import get_album_summarizer
from quincy.services.album_summary import AlbumSummary, AlbumSummaryService, parse_summary


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.requests = []

    def create(self, **kwargs):
        self.requests.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def fake_client(completions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


def auth_headers(user):
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


SUMMARY_JSON = (
    '{"album_info": "Debut album by Massive Attack.", '
    '"history": "Released in 1991 on Wild Bunch.", '
    '"fun_facts": ["Shaped trip hop", "Features Shara Nelson"]}'
)


def test_parse_plain_json():
    summary = parse_summary(SUMMARY_JSON)
    assert summary.history == "Released in 1991 on Wild Bunch."
    assert len(summary.fun_facts) == 2


def test_parse_fenced_json():
    summary = parse_summary(f"```json\n{SUMMARY_JSON}\n```")
    assert summary.album_info == "Debut album by Massive Attack."


@pytest.mark.parametrize("content", [None, "", "not json", '{"fun_facts": "one"}'])
def test_unparseable_summary_falls_back_to_unknown(content):
    assert parse_summary(content) == AlbumSummary()


def test_summarize_sends_album_and_artist():
    completions = FakeCompletions(content=SUMMARY_JSON)
    service = AlbumSummaryService(client=fake_client(completions))

    summary = service.summarize(" Blue Lines ", "Massive Attack")

    assert summary.fun_facts == ["Shaped trip hop", "Features Shara Nelson"]
    prompt = completions.requests[0]["messages"][1]["content"]
    assert '"Blue Lines" by "Massive Attack"' in prompt


def test_summarize_requires_album_and_artist():
    service = AlbumSummaryService(client=fake_client(FakeCompletions(content=SUMMARY_JSON)))
    with pytest.raises(ValidationError):
        service.summarize("Blue Lines", None)


def test_summarize_without_api_key(monkeypatch):
    monkeypatch.setattr(settings, "OPENAI_API_KEY", None)
    with pytest.raises(UpstreamServiceError):
        AlbumSummaryService().summarize("Blue Lines", "Massive Attack")


def test_openai_failure_is_upstream_error():
    completions = FakeCompletions(error=openai.OpenAIError("boom"))
    service = AlbumSummaryService(client=fake_client(completions))
    with pytest.raises(UpstreamServiceError):
        service.summarize("Blue Lines", "Massive Attack")


def test_summary_endpoint(client, make_user, active_event, attend):
    owner = make_user()
    record = attend(owner, active_event, album="Blue Lines", artist="Massive Attack")
    headers = auth_headers(owner)

    app.dependency_overrides[get_album_summarizer] = lambda: AlbumSummaryService(
        client=fake_client(FakeCompletions(content=SUMMARY_JSON))
    )
    r = client.get(f"/records/{record.id}/summary", headers=headers)
    assert r.status_code == 200
    assert r.json()["album_info"] == "Debut album by Massive Attack."


def test_summary_endpoint_unconfigured(client, make_user, active_event, attend, monkeypatch):
    monkeypatch.setattr(settings, "OPENAI_API_KEY", None)
    owner = make_user()
    record = attend(owner, active_event, album="Blue Lines", artist="Massive Attack")
    headers = auth_headers(owner)

    app.dependency_overrides[get_album_summarizer] = lambda: AlbumSummaryService()
    r = client.get(f"/records/{record.id}/summary", headers=headers)
    assert r.status_code == 503
    assert r.json()["retryable"] is True
