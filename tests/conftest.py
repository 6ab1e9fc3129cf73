from __future__ import annotations

import json
from types import SimpleNamespace
from typing import Any

import pytest

from call_core.rubrics import RUBRIC
from call_core.types import Upload

GREETING_TRANSCRIPT = "Hello, thank you for calling, how can I help you today?"


def build_reply(**overrides: Any) -> dict[str, Any]:
    """A well-formed analysis reply: greeting passed, everything else 0."""

    scores = {key: 0 for key in RUBRIC}
    scores["greeting"] = 5
    scores.update(overrides.pop("scores", {}))
    reply: dict[str, Any] = {
        "scores": scores,
        "overallFeedback": "Agent greeted promptly.",
        "observation": "No upsell attempted.",
    }
    reply.update(overrides)
    return reply


class FakeProvider:
    """Stands in for GroqProvider; records every call it receives."""

    def __init__(self, transcript: str = GREETING_TRANSCRIPT, reply: str | dict | None = None,
                 transcribe_error: Exception | None = None, analyze_error: Exception | None = None) -> None:
        self.transcript = transcript
        self.reply = json.dumps(build_reply()) if reply is None else reply
        if isinstance(self.reply, dict):
            self.reply = json.dumps(self.reply)
        self.transcribe_error = transcribe_error
        self.analyze_error = analyze_error
        self.uploads: list[Upload] = []
        self.prompts: list[str] = []
        self.closed = False

    @property
    def calls(self) -> int:
        return len(self.uploads) + len(self.prompts)

    async def transcribe(self, upload: Upload) -> str:
        self.uploads.append(upload)
        if self.transcribe_error:
            raise self.transcribe_error
        return self.transcript

    async def analyze(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.analyze_error:
            raise self.analyze_error
        return self.reply

    async def aclose(self) -> None:
        self.closed = True


class FakeSDK:
    """Minimal AsyncOpenAI look-alike exposing only what GroqProvider calls."""

    def __init__(self, text: Any = GREETING_TRANSCRIPT, content: Any = "{}", error: Exception | None = None,
                 choices: list | None = None) -> None:
        self.error = error
        self.requests: list[tuple[str, dict[str, Any]]] = []
        self.closed = False
        self._text = text
        self._content = content
        self._choices = choices

        async def _transcribe(**kwargs: Any) -> Any:
            self.requests.append(("transcribe", kwargs))
            if self.error:
                raise self.error
            return SimpleNamespace(text=self._text) if self._text is not None else SimpleNamespace()

        async def _complete(**kwargs: Any) -> Any:
            self.requests.append(("complete", kwargs))
            if self.error:
                raise self.error
            if self._choices is not None:
                return SimpleNamespace(choices=self._choices)
            msg = SimpleNamespace(content=self._content)
            return SimpleNamespace(choices=[SimpleNamespace(message=msg)])

        self.audio = SimpleNamespace(transcriptions=SimpleNamespace(create=_transcribe))
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=_complete))

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def mp3_upload() -> Upload:
    return Upload(filename="call.mp3", content_type="audio/mpeg", data=b"ID3\x03fake-mp3-bytes")


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def no_credentials(monkeypatch, tmp_path):
    monkeypatch.delenv("GROQ_API_KEY", raising=False)
    monkeypatch.delenv("GROQ_BASE_URL", raising=False)
    monkeypatch.chdir(tmp_path)
