# call_core/provider_cfg.py
from __future__ import annotations
import os, json, pathlib, logging
from dataclasses import dataclass
from openai import AsyncOpenAI
from . import config
from .errors import ConfigurationError

log = logging.getLogger(__name__)

@dataclass(frozen=True)
class ProviderSettings:
    api_key: str
    base_url: str
    transcribe_model: str
    analysis_model: str
    label: str = config.PROVIDER_LABEL

def _from_env() -> dict[str, str]:
    return {
        "api_key":  os.getenv("GROQ_API_KEY", ""),
        "base_url": os.getenv("GROQ_BASE_URL", ""),
    }

def _from_json(path: str = ".groq_config.json") -> dict[str, str]:
    p = pathlib.Path(path)
    if not p.exists(): return {}
    try:
        j = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        log.warning("ignoring unreadable %s: %s", path, e)
        return {}
    return {
        "api_key":  str(j.get("api_key", "")),
        "base_url": str(j.get("base_url", "")),
    }

def settings() -> ProviderSettings:
    cfg = _from_env()
    if not all(cfg.values()):
        for k, v in _from_json().items():
            if not cfg.get(k): cfg[k] = v
    if not cfg.get("api_key", "").strip():
        raise ConfigurationError(
            f"{config.PROVIDER_LABEL} not configured. Missing: GROQ_API_KEY",
            label=config.PROVIDER_LABEL,
        )
    return ProviderSettings(
        api_key=cfg["api_key"].strip(),
        base_url=(cfg.get("base_url") or config.DEFAULT_BASE_URL).rstrip("/"),
        transcribe_model=config.TRANSCRIBE_MODEL,
        analysis_model=config.ANALYSIS_MODEL,
    )

def client(s: ProviderSettings | None = None) -> AsyncOpenAI:
    s = s or settings()
    return AsyncOpenAI(
        api_key=s.api_key,
        base_url=s.base_url,
        timeout=config.UPSTREAM_TIMEOUT_SEC,
        max_retries=0,
    )

def is_configured() -> bool:
    try:
        settings()
    except ConfigurationError:
        return False
    return True
