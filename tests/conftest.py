"""
Shared fixtures for the remitbot test suite.
"""

import os
import tempfile

# Log files go to a throwaway directory; must be set before remitbot.app is imported
os.environ.setdefault("REMITBOT_LOG_DIR", tempfile.mkdtemp(prefix="remitbot-logs-"))

from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock

import pytest

from remitbot.context.state_machine import ConversationStateMachine
from remitbot.nlu.intent_classifier import IntentClassifier
from remitbot.nlu.pattern_library import PatternLibrary


class FakeClock:
    """Manually advanced clock for cache-expiry tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_source(
    intents: Optional[List[Dict[str, Any]]] = None,
    entities: Optional[List[Dict[str, Any]]] = None,
) -> AsyncMock:
    """A PatternSource double serving fixed pattern lists."""
    source = AsyncMock()

    async def fetch(kind: str):
        return list(intents or []) if kind == "intent" else list(entities or [])

    source.fetch_patterns.side_effect = fetch
    return source


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def library() -> PatternLibrary:
    return PatternLibrary()


@pytest.fixture
def classifier(library: PatternLibrary) -> IntentClassifier:
    return IntentClassifier(library=library)


@pytest.fixture
def machine(classifier: IntentClassifier) -> ConversationStateMachine:
    return ConversationStateMachine(classifier=classifier)
