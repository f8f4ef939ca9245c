# remitbot/clients/pattern_source.py
"""
Pattern source clients.

A PatternSource supplies intent/entity pattern sets and accepts
recognition outcome reports:

  - fetch_patterns(kind)  kind in ("intent", "entity")
  - log_outcome(event)    best-effort

LocalPatternSource is the default and never touches the network.
HttpPatternSource talks to the recognition service over httpx.

Environment:
  REMITBOT_RECOGNITION_URL  base URL of the recognition service (no default)
"""

from typing import Any, Dict, List, Optional, Protocol, Sequence
import logging

import httpx

from ..nlu.intent_classifier import RecognitionEvent
from ..nlu.normalizer import normalize_text


logger = logging.getLogger("remitbot.clients")

PATTERN_PATHS = {
    "intent": "/recognition/intent-patterns",
    "entity": "/recognition/entity-patterns",
}
FAILED_RECOGNITION_PATH = "/recognition/log-failed-recognition"
SUCCESSFUL_RECOGNITION_PATH = "/recognition/log-successful-recognition"


class PatternSourceError(RuntimeError):
    """Raised when a pattern set cannot be fetched."""


class PatternSource(Protocol):
    async def fetch_patterns(self, kind: str) -> Sequence[Dict[str, Any]]:
        ...

    async def log_outcome(self, event: RecognitionEvent) -> None:
        ...


class LocalPatternSource:
    """
    Local-only source: no remote patterns, outcome reports go to the log.
    """

    async def fetch_patterns(self, kind: str) -> Sequence[Dict[str, Any]]:
        return []

    async def log_outcome(self, event: RecognitionEvent) -> None:
        logger.debug(
            "Recognition outcome (local): intent=%s confidence=%.3f failure=%s",
            event.intent,
            event.confidence,
            event.is_failure,
        )

    async def close(self) -> None:
        return None


def outcome_payload(event: RecognitionEvent) -> Dict[str, Any]:
    """Request body for the failed/successful recognition endpoints."""
    if event.is_failure:
        return {
            "userInput": event.utterance,
            "attemptedIntent": event.intent,
            "confidence": event.confidence,
        }
    return {
        "query": normalize_text(event.utterance),
        "intentType": event.intent,
        "extractedEntities": event.entities,
    }


class HttpPatternSource:
    """
    httpx-based client for the recognition service.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def fetch_patterns(self, kind: str) -> List[Dict[str, Any]]:
        path = PATTERN_PATHS.get(kind)
        if path is None:
            raise ValueError(f"unknown pattern kind: {kind}")
        url = f"{self.base_url}{path}"
        try:
            resp = await self._client.get(url)
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as e:
            logger.error("Pattern fetch %s -> %s %s", url, e.response.status_code, e.response.text)
            raise PatternSourceError(f"{kind} patterns: HTTP {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Pattern fetch %s failed: %s", url, e)
            raise PatternSourceError(f"{kind} patterns: {e}") from e

        if not isinstance(data, list):
            raise PatternSourceError(f"{kind} patterns: expected a JSON list, got {type(data).__name__}")
        logger.info("Fetched %d %s patterns from %s", len(data), kind, url)
        return data

    async def log_outcome(self, event: RecognitionEvent) -> None:
        path = FAILED_RECOGNITION_PATH if event.is_failure else SUCCESSFUL_RECOGNITION_PATH
        url = f"{self.base_url}{path}"
        try:
            resp = await self._client.post(url, json=outcome_payload(event))
            resp.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("Recognition outcome report to %s failed: %s", url, e)

    async def close(self) -> None:
        try:
            await self._client.aclose()
        except Exception:
            logger.exception("Error closing recognition client")
