from __future__ import annotations
import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


SERVICE_NAME: str = "call-audit-api"

PROVIDER_LABEL: str = "Groq"
DEFAULT_BASE_URL: str = "https://api.groq.com/openai/v1"
TRANSCRIBE_MODEL: str = "whisper-large-v3"
ANALYSIS_MODEL: str = "llama-3.3-70b-versatile"
ANALYSIS_TEMPERATURE: float = 0.1

UPSTREAM_TIMEOUT_SEC: float = 60.0
REQUEST_DEADLINE_SEC: float = 150.0

MAX_UPLOAD_MB: int = 25
AUDIO_SUFFIXES: tuple[str, ...] = (".mp3", ".wav")
GENERIC_CONTENT_TYPES: tuple[str, ...] = ("", "application/octet-stream")

SCORE_POLICIES: tuple[str, ...] = ("clamp", "reject")
SCORE_RANGE_POLICY: str = "clamp"

CORS_ALLOW_ORIGINS: tuple[str, ...] = ("*",)
LOG_LEVEL: str = "INFO"
LOG_TRANSCRIPTS: bool = True

# // env overrides for ops; defaults match the hosted Groq setup.
PROVIDER_LABEL = _env_str("PROVIDER_LABEL", PROVIDER_LABEL)
TRANSCRIBE_MODEL = _env_str("TRANSCRIBE_MODEL", TRANSCRIBE_MODEL)
ANALYSIS_MODEL = _env_str("ANALYSIS_MODEL", ANALYSIS_MODEL)
ANALYSIS_TEMPERATURE = _env_float("ANALYSIS_TEMPERATURE", ANALYSIS_TEMPERATURE)
UPSTREAM_TIMEOUT_SEC = _env_float("UPSTREAM_TIMEOUT_SEC", UPSTREAM_TIMEOUT_SEC)
REQUEST_DEADLINE_SEC = _env_float("REQUEST_DEADLINE_SEC", REQUEST_DEADLINE_SEC)
MAX_UPLOAD_MB = _env_int("MAX_UPLOAD_MB", MAX_UPLOAD_MB)
LOG_LEVEL = _env_str("CALL_AUDIT_LOG_LEVEL", LOG_LEVEL).upper()
LOG_TRANSCRIPTS = _env_bool("LOG_TRANSCRIPTS", LOG_TRANSCRIPTS)

SCORE_RANGE_POLICY = _env_str("SCORE_RANGE_POLICY", SCORE_RANGE_POLICY).lower()
if SCORE_RANGE_POLICY not in SCORE_POLICIES:
    SCORE_RANGE_POLICY = "clamp"

_origins = _env_str("CORS_ALLOW_ORIGINS", "")
if _origins:
    CORS_ALLOW_ORIGINS = tuple(o.strip() for o in _origins.split(",") if o.strip())

MAX_UPLOAD_BYTES: int = MAX_UPLOAD_MB * 1024 * 1024
