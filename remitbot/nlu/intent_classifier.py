"""
Intent Classification Module
Classifies user utterances into transactional intents
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional
import logging

from .entities import RecognizedIntent, unknown_intent
from .entity_resolver import EntityResolver
from .pattern_library import CompiledPattern, PatternLibrary


logger = logging.getLogger("remitbot.nlu")

# Below this confidence a recognition is reported as failed
LOW_CONFIDENCE = 0.3


@dataclass(frozen=True)
class RecognitionEvent:
    """Outcome of one classification, as reported for pattern tuning."""

    utterance: str
    intent: str
    confidence: float
    entities: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_failure(self) -> bool:
        return self.intent == "unknown" or self.confidence < LOW_CONFIDENCE


def score_match(matched_length: int, utterance_length: int, priority: int) -> float:
    """Coverage of the utterance by the match, weighted by priority / 10."""
    if utterance_length <= 0:
        return 0.0
    return (matched_length / utterance_length) * (priority / 10)


class IntentClassifier:
    """
    Regex-based intent classifier.

    Every active intent pattern is tried against the utterance; the highest
    score wins and the earliest pattern wins an exact tie. Entities are then
    extracted for the winning intent only.

    ``reporter`` (optional) receives a RecognitionEvent per classification.
    It is best-effort: anything it raises is logged and ignored.
    """

    def __init__(
        self,
        library: Optional[PatternLibrary] = None,
        resolver: Optional[EntityResolver] = None,
        reporter: Optional[Callable[[RecognitionEvent], Any]] = None,
        clamp_confidence: bool = True,
    ) -> None:
        self.library = library or PatternLibrary()
        self.resolver = resolver or EntityResolver()
        self.reporter = reporter
        self.clamp_confidence = clamp_confidence

    def classify(self, utterance: str) -> RecognizedIntent:
        if not utterance or not utterance.strip():
            result = unknown_intent()
            self._report(utterance or "", result)
            return result

        patterns = self.library.snapshot()
        best: Optional[CompiledPattern] = None
        best_score = 0.0

        for compiled in patterns.intents:
            match = compiled.regex.search(utterance)
            # An empty match explains nothing and is not counted
            if not match or not match.group(0):
                continue
            score = score_match(len(match.group(0)), len(utterance), compiled.record.priority)
            if best is None or score > best_score:
                best = compiled
                best_score = score

        if best is None:
            logger.info("Classified %r -> unknown", utterance)
            result = unknown_intent()
            self._report(utterance, result)
            return result

        intent = best.record.intent_type  # type: ignore[union-attr]
        confidence = min(best_score, 1.0) if self.clamp_confidence else best_score
        entities = self.resolver.extract_entities(utterance, intent, patterns.entities)
        result = RecognizedIntent(
            intent=intent,
            confidence=confidence,
            entities=entities,
            matched_pattern=best.record.pattern,
        )
        logger.info(
            "Classified %r -> %s (confidence=%.3f pattern_id=%s entities=%s)",
            utterance,
            intent,
            confidence,
            best.record.id,
            entities.as_dict(),
        )
        self._report(utterance, result)
        return result

    def _report(self, utterance: str, result: RecognizedIntent) -> None:
        if self.reporter is None:
            return
        event = RecognitionEvent(
            utterance=utterance,
            intent=result.intent,
            confidence=result.confidence,
            entities=result.entities.as_dict(),
        )
        try:
            self.reporter(event)
        except Exception as exc:
            logger.warning("Recognition reporter failed: %s", exc)
