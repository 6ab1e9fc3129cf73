from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePath
from typing import List, Optional, Tuple

from . import config
from .errors import CallAuditError, ConfigurationError, MalformedResponse, UpstreamTimeout, ValidationError
from .llm_bridge import Provider
from .parser import parse_analysis
from .prompt import build_prompt
from .rubrics import RUBRIC, Rubric
from .types import AnalysisResult, Upload

log = logging.getLogger(__name__)


class Stage(str, Enum):
    AWAITING_UPLOAD = "awaiting_upload"
    TRANSCRIBING = "transcribing"
    BUILDING_PROMPT = "building_prompt"
    ANALYZING = "analyzing"
    PARSING = "parsing"
    DONE = "done"
    FAILED = "failed"


_ORDER: Tuple[Stage, ...] = (
    Stage.AWAITING_UPLOAD,
    Stage.TRANSCRIBING,
    Stage.BUILDING_PROMPT,
    Stage.ANALYZING,
    Stage.PARSING,
    Stage.DONE,
)


@dataclass
class PipelineRun:
    """Tracks one upload through the pipeline; never shared between requests."""

    stage: Stage = Stage.AWAITING_UPLOAD
    failed_at: Optional[Stage] = None
    timings: List[Tuple[str, float]] = field(default_factory=list)
    _t0: float = field(default_factory=time.perf_counter, repr=False)

    def advance(self, nxt: Stage) -> None:
        if self.stage is Stage.FAILED or _ORDER.index(nxt) != _ORDER.index(self.stage) + 1:
            raise RuntimeError(f"illegal transition {self.stage.value} -> {nxt.value}")
        now = time.perf_counter()
        self.timings.append((self.stage.value, round(now - self._t0, 3)))
        self._t0 = now
        self.stage = nxt

    def fail(self) -> None:
        if self.stage is not Stage.FAILED:
            self.failed_at = self.stage
            self.stage = Stage.FAILED


def validate_upload(upload: Optional[Upload], *, max_bytes: int | None = None) -> Upload:
    if upload is None:
        raise ValidationError("No audio file provided")
    if not upload.data:
        raise ValidationError("Audio file is empty")
    limit = config.MAX_UPLOAD_BYTES if max_bytes is None else max_bytes
    if upload.size > limit:
        raise ValidationError(f"Audio file exceeds {limit / (1024 * 1024):.3g} MB limit")
    ctype = (upload.content_type or "").split(";")[0].strip().lower()
    if ctype.startswith("audio/"):
        return upload
    if ctype in config.GENERIC_CONTENT_TYPES and PurePath(upload.filename or "").suffix.lower() in config.AUDIO_SUFFIXES:
        return upload
    raise ValidationError("Unsupported audio type; upload an MP3 or WAV file")


def require_provider(provider: Optional[Provider]) -> Provider:
    if provider is None:
        raise ConfigurationError("no provider credential configured", label=config.PROVIDER_LABEL)
    return provider


async def _run(run: PipelineRun, upload: Upload, provider: Provider, rubric: Rubric) -> AnalysisResult:
    run.advance(Stage.TRANSCRIBING)
    transcript = await provider.transcribe(upload)
    if config.LOG_TRANSCRIPTS:
        log.info("transcription: %s", transcript)
    else:
        log.info("transcription received (%d chars)", len(transcript))

    run.advance(Stage.BUILDING_PROMPT)
    prompt = build_prompt(rubric, transcript)

    run.advance(Stage.ANALYZING)
    raw = await provider.analyze(prompt)

    run.advance(Stage.PARSING)
    result = parse_analysis(raw, rubric)
    run.advance(Stage.DONE)
    return result


async def run_analysis(
    upload: Upload,
    provider: Provider,
    rubric: Rubric = RUBRIC,
    *,
    deadline: float | None = None,
    run: PipelineRun | None = None,
) -> AnalysisResult:
    """Transcribe, score and parse one upload.

    The whole run is bounded by ``deadline`` seconds (``REQUEST_DEADLINE_SEC``
    by default).  The first failure ends the run; the error is re-raised with
    ``err.stage`` set to the stage it happened in.
    """
    run = run or PipelineRun()
    limit = config.REQUEST_DEADLINE_SEC if deadline is None else deadline
    try:
        result = await asyncio.wait_for(_run(run, upload, provider, rubric), timeout=limit)
    except asyncio.TimeoutError as e:
        run.fail()
        err = UpstreamTimeout(f"pipeline exceeded {limit}s deadline")
        err.stage = run.failed_at.value if run.failed_at else None
        raise err from e
    except CallAuditError as e:
        run.fail()
        e.stage = run.failed_at.value if run.failed_at else None
        if isinstance(e, MalformedResponse):
            log.warning("failed to parse analysis reply: %s; raw=%r", e.detail, e.raw)
        raise
    log.info("analysis done: %s", ", ".join(f"{name}={sec}s" for name, sec in run.timings))
    return result
