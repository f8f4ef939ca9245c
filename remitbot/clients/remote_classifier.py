# remitbot/clients/remote_classifier.py
"""
Remote classification client.

Posts an utterance to the chat service and turns the reply into a
RecognizedIntent. Returns None whenever the service is unreachable or its
reply is unusable, so callers can keep their local result.

Environment:
  REMITBOT_CLASSIFIER_URL  base URL of the chat service (no default)
"""

from typing import Any, Dict, Optional
import logging

import httpx
from pydantic import BaseModel, Field, ValidationError

from ..nlu.entities import RecognizedIntent, entities_from_dict


logger = logging.getLogger("remitbot.clients")

CLASSIFY_PATH = "/chat/message"


class RemoteReply(BaseModel):
    intent: str
    confidence: float = Field(default=0.0, ge=0.0)
    entities: Dict[str, Any] = Field(default_factory=dict)
    text: Optional[str] = None


class RemoteClassifier:
    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def classify(self, utterance: str) -> Optional[RecognizedIntent]:
        url = f"{self.base_url}{CLASSIFY_PATH}"
        try:
            resp = await self._client.post(url, json={"text": utterance})
            resp.raise_for_status()
            reply = RemoteReply.model_validate(resp.json())
        except httpx.HTTPError as e:
            logger.warning("Remote classification via %s failed: %s", url, e)
            return None
        except (ValueError, ValidationError) as e:
            logger.warning("Remote classification returned an unusable reply: %s", e)
            return None

        intent = reply.intent.strip() or "unknown"
        logger.info("Remote classification %r -> %s (%.3f)", utterance, intent, reply.confidence)
        return RecognizedIntent(
            intent=intent,
            confidence=reply.confidence,
            entities=entities_from_dict(intent, reply.entities),
            source="remote",
        )

    async def close(self) -> None:
        try:
            await self._client.aclose()
        except Exception:
            logger.exception("Error closing remote classifier client")
