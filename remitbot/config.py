"""
Environment configuration for the remittance assistant.

Values come from the process environment (optionally seeded from a .env
file by the app entrypoint). ``load_settings()`` snapshots them into an
immutable ``Settings`` so the engine can be composed with explicit values
in tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_url(name: str) -> Optional[str]:
    raw = (os.getenv(name) or "").strip()
    return raw.rstrip("/") or None


@dataclass(frozen=True)
class Settings:
    recognition_url: Optional[str] = None
    classifier_url: Optional[str] = None
    pattern_cache_minutes: float = 30.0
    http_timeout: float = 5.0
    remote_threshold: float = 0.3
    session_timeout_minutes: int = 30
    clamp_confidence: bool = True


def load_settings() -> Settings:
    """
    Read settings from environment variables, falling back to defaults.
    """
    return Settings(
        recognition_url=_env_url("REMITBOT_RECOGNITION_URL"),
        classifier_url=_env_url("REMITBOT_CLASSIFIER_URL"),
        pattern_cache_minutes=float(os.getenv("REMITBOT_PATTERN_CACHE_MINUTES", "30")),
        http_timeout=float(os.getenv("REMITBOT_HTTP_TIMEOUT", "5.0")),
        remote_threshold=float(os.getenv("REMITBOT_REMOTE_THRESHOLD", "0.3")),
        session_timeout_minutes=int(os.getenv("SESSION_TIMEOUT_MINUTES", "30")),
        clamp_confidence=_env_bool("REMITBOT_CLAMP_CONFIDENCE", True),
    )
