from __future__ import annotations
import logging
from typing import Any, Protocol
from openai import APIStatusError, APITimeoutError, AsyncOpenAI, AuthenticationError, OpenAIError, PermissionDeniedError
from . import config
from .errors import AnalysisFailed, ConfigurationError, EmptyResponse, TranscriptionFailed, UpstreamUnavailable
from .prompt import SYSTEM_PROMPT
from .provider_cfg import ProviderSettings, client as make_client, settings
from .types import Upload

log = logging.getLogger(__name__)

class Provider(Protocol):
    async def transcribe(self, upload: Upload) -> str: ...
    async def analyze(self, prompt: str) -> str: ...

def _status(e: OpenAIError) -> Any:
    return e.status_code if isinstance(e, APIStatusError) else type(e).__name__

class GroqProvider:
    """Speech-to-text and chat completion against an OpenAI-compatible API.

    Built once per process from ``ProviderSettings``; the underlying async
    client keeps its own connection pool.  Errors from the SDK are mapped
    onto the pipeline's taxonomy and the SDK message stays on ``__cause__``.
    """

    def __init__(self, s: ProviderSettings, cli: AsyncOpenAI | None = None) -> None:
        self.settings = s
        self._client = cli or make_client(s)

    async def transcribe(self, upload: Upload) -> str:
        log.info("transcribing %s (%d bytes) with %s", upload.filename, upload.size, self.settings.transcribe_model)
        try:
            resp = await self._client.audio.transcriptions.create(
                model=self.settings.transcribe_model,
                file=(upload.filename or "audio", upload.data, upload.content_type or "application/octet-stream"),
            )
        except (AuthenticationError, PermissionDeniedError) as e:
            raise UpstreamUnavailable(f"transcription credential rejected ({_status(e)})") from e
        except APITimeoutError as e:
            raise TranscriptionFailed("transcription timed out") from e
        except OpenAIError as e:
            raise TranscriptionFailed(f"transcription call failed ({_status(e)})") from e
        text = getattr(resp, "text", None)
        if not isinstance(text, str):
            raise TranscriptionFailed("transcription reply carried no text")
        return text

    async def analyze(self, prompt: str) -> str:
        log.info("analyzing transcript with %s (%d prompt chars)", self.settings.analysis_model, len(prompt))
        try:
            resp = await self._client.chat.completions.create(
                model=self.settings.analysis_model,
                messages=[{"role": "system", "content": SYSTEM_PROMPT}, {"role": "user", "content": prompt}],
                temperature=config.ANALYSIS_TEMPERATURE,
            )
        except (AuthenticationError, PermissionDeniedError) as e:
            raise UpstreamUnavailable(f"analysis credential rejected ({_status(e)})") from e
        except APITimeoutError as e:
            raise AnalysisFailed("analysis timed out") from e
        except OpenAIError as e:
            raise AnalysisFailed(f"analysis call failed ({_status(e)})") from e
        choices = getattr(resp, "choices", None) or []
        if not choices:
            raise AnalysisFailed("analysis reply carried no choices")
        content = choices[0].message.content
        if content is None or not content.strip():
            raise EmptyResponse(f"no analysis result received from {self.settings.label}")
        return content

    async def aclose(self) -> None:
        await self._client.close()

def build_provider() -> GroqProvider | None:
    """Provider for the process, or ``None`` while no credential is configured."""
    try:
        s = settings()
    except ConfigurationError as e:
        log.warning("%s; /analyze answers 500 until it is set", e)
        return None
    return GroqProvider(s)
