from __future__ import annotations

import json

from fastapi.testclient import TestClient

from api.app import create_app
from call_core.errors import AnalysisFailed, UpstreamUnavailable
from call_core.rubrics import RUBRIC

from tests.conftest import GREETING_TRANSCRIPT, FakeProvider, build_reply

_MP3 = {"audio": ("call.mp3", b"ID3\x03fake-mp3-bytes", "audio/mpeg")}


def _client(provider=None) -> TestClient:
    return TestClient(create_app(provider=provider))


def test_end_to_end_returns_reply_unmodified():
    reply = build_reply()
    provider = FakeProvider(transcript=GREETING_TRANSCRIPT, reply=json.dumps(reply))
    resp = _client(provider).post("/analyze", files=_MP3)
    assert resp.status_code == 200
    assert resp.json() == reply
    assert provider.uploads[0].filename == "call.mp3"
    assert provider.uploads[0].content_type == "audio/mpeg"
    assert GREETING_TRANSCRIPT in provider.prompts[0]


def test_fenced_reply_is_accepted():
    reply = build_reply()
    provider = FakeProvider(reply="```json\n" + json.dumps(reply) + "\n```")
    resp = _client(provider).post("/analyze", files=_MP3)
    assert resp.status_code == 200
    assert resp.json() == reply


def test_missing_file_is_400_without_upstream_calls(fake_provider):
    client = _client(fake_provider)
    resp = client.post("/analyze", files={"recording": ("call.mp3", b"abc", "audio/mpeg")})
    assert resp.status_code == 400
    assert resp.json() == {"error": "No audio file provided"}

    resp_empty = client.post("/analyze")
    assert resp_empty.status_code == 400
    assert resp_empty.json() == {"error": "No audio file provided"}
    assert fake_provider.calls == 0


def test_audio_sent_as_text_field_is_400(fake_provider):
    resp = _client(fake_provider).post("/analyze", data={"audio": "not a file"})
    assert resp.status_code == 400
    assert "error" in resp.json()
    assert fake_provider.calls == 0


def test_wrong_media_type_is_400(fake_provider):
    files = {"audio": ("notes.txt", b"hello", "text/plain")}
    resp = _client(fake_provider).post("/analyze", files=files)
    assert resp.status_code == 400
    assert "Unsupported" in resp.json()["error"]
    assert fake_provider.calls == 0


def test_missing_credential_is_500_without_outbound_calls(no_credentials):
    app = create_app()
    assert app.state.provider is None
    resp = TestClient(app).post("/analyze", files=_MP3)
    assert resp.status_code == 500
    assert resp.json() == {"error": "Groq API key not configured"}


def test_missing_file_checked_before_credential(no_credentials):
    resp = TestClient(create_app()).post("/analyze")
    assert resp.status_code == 400


def test_upstream_failure_is_generic_500():
    provider = FakeProvider(transcribe_error=UpstreamUnavailable("credential rejected (401)"))
    resp = _client(provider).post("/analyze", files=_MP3)
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to process audio file"}
    assert "401" not in resp.text


def test_analysis_failure_detail_stays_server_side(caplog):
    provider = FakeProvider(analyze_error=AnalysisFailed("analysis call failed (429)"))
    with caplog.at_level("ERROR"):
        resp = _client(provider).post("/analyze", files=_MP3)
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to process audio file"}
    assert "stage=analyzing" in caplog.text
    assert "429" in caplog.text and "429" not in resp.text


def test_malformed_reply_is_generic_500(caplog):
    provider = FakeProvider(reply="Overall the agent did well.")
    with caplog.at_level("WARNING"):
        resp = _client(provider).post("/analyze", files=_MP3)
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to process audio file"}
    assert "Overall the agent did well." in caplog.text


def test_unexpected_error_is_generic_500():
    provider = FakeProvider(analyze_error=RuntimeError("kaboom"))
    client = TestClient(create_app(provider=provider), raise_server_exceptions=False)
    resp = client.post("/analyze", files=_MP3)
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to process audio file"}


def test_options_preflight_returns_empty_json(fake_provider):
    resp = _client(fake_provider).options("/analyze")
    assert resp.status_code == 200
    assert resp.json() == {}


def test_browser_preflight_is_answered_by_cors_middleware(fake_provider):
    headers = {"Origin": "http://localhost:3000", "Access-Control-Request-Method": "POST"}
    resp = _client(fake_provider).options("/analyze", headers=headers)
    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] == "*"
    assert "POST" in resp.headers["access-control-allow-methods"]
    assert fake_provider.calls == 0


def test_rubric_endpoint_reads_single_definition(fake_provider):
    resp = _client(fake_provider).get("/rubric")
    assert resp.status_code == 200
    body = resp.json()
    assert [p["key"] for p in body["parameters"]] == list(RUBRIC)
    assert {p["key"]: p["weight"] for p in body["parameters"]} == {k: p.weight for k, p in RUBRIC.items()}
    assert body["maxTotal"] == 100


def test_root_and_health(fake_provider):
    client = _client(fake_provider)
    assert client.get("/").json() == {"status": "ok", "service": "call-audit-api"}
    health = client.get("/health").json()
    assert health["configured"] is True
    assert health["provider"] == "Groq"
