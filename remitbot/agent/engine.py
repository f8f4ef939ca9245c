"""
agent/engine.py

ConversationEngine composes the recognition pieces for one chat turn:

1. kick off a background pattern refresh when the cache is stale;
2. if the session has a slot pending, feed the raw utterance to it;
   otherwise classify locally and, when the local result is weak,
   reconcile with the remote classifier;
3. apply the result to the session's state machine;
4. render the outcome with the formatter.

Remote refresh, outcome reporting and remote classification are all
fail-open: their failures are logged and the turn continues on local data.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Set
import asyncio
import logging

from ..clients.pattern_source import HttpPatternSource, LocalPatternSource
from ..clients.remote_classifier import RemoteClassifier
from ..config import Settings
from ..context.conversation_state import ConversationState, PendingTransaction
from ..context.session_manager import SessionManager
from ..context.state_machine import (
    ConversationStateMachine,
    Finalized,
    IntentReply,
    Outcome,
    SlotPrompt,
)
from ..nlu.entities import RecognizedIntent
from ..nlu.intent_classifier import IntentClassifier, RecognitionEvent
from ..nlu.pattern_library import PatternLibrary
from .formatter import format_response


logger = logging.getLogger("remitbot.dialogue")


@dataclass(frozen=True)
class TurnResult:
    session_id: str
    response_text: str
    state: ConversationState
    intent: Optional[RecognizedIntent] = None
    pending_transaction: Optional[PendingTransaction] = None
    reprompt: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "response_text": self.response_text,
            "state": self.state.to_dict(),
            "intent": self.intent.to_dict() if self.intent else None,
            "pending_transaction": self.pending_transaction.to_dict() if self.pending_transaction else None,
            "reprompt": self.reprompt,
        }


class ConversationEngine:
    def __init__(
        self,
        library: Optional[PatternLibrary] = None,
        pattern_source: Optional[Any] = None,
        remote_classifier: Optional[RemoteClassifier] = None,
        on_finalize: Optional[Callable[[PendingTransaction], Any]] = None,
        remote_threshold: float = 0.3,
        session_timeout_minutes: int = 30,
        clamp_confidence: bool = True,
    ) -> None:
        self.pattern_source = pattern_source or LocalPatternSource()
        self.library = library or PatternLibrary(source=self.pattern_source)
        self.remote_classifier = remote_classifier
        self.on_finalize = on_finalize
        self.remote_threshold = remote_threshold
        self.classifier = IntentClassifier(
            library=self.library,
            reporter=self._report_outcome,
            clamp_confidence=clamp_confidence,
        )
        self.sessions = SessionManager(
            machine_factory=self._new_machine,
            session_timeout_minutes=session_timeout_minutes,
        )
        self._background: Set[asyncio.Task] = set()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        on_finalize: Optional[Callable[[PendingTransaction], Any]] = None,
    ) -> "ConversationEngine":
        if settings.recognition_url:
            source: Any = HttpPatternSource(settings.recognition_url, timeout=settings.http_timeout)
        else:
            source = LocalPatternSource()
        remote = (
            RemoteClassifier(settings.classifier_url, timeout=settings.http_timeout)
            if settings.classifier_url
            else None
        )
        library = PatternLibrary(source=source, cache_seconds=settings.pattern_cache_minutes * 60)
        return cls(
            library=library,
            pattern_source=source,
            remote_classifier=remote,
            on_finalize=on_finalize,
            remote_threshold=settings.remote_threshold,
            session_timeout_minutes=settings.session_timeout_minutes,
            clamp_confidence=settings.clamp_confidence,
        )

    def _new_machine(self) -> ConversationStateMachine:
        return ConversationStateMachine(classifier=self.classifier, on_finalize=self.on_finalize)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def start(self) -> None:
        """Load remote patterns once before serving; failures keep the built-ins."""
        await self.library.refresh()
        logger.info("Engine started (remote patterns active=%s)", self.library.is_remote)

    async def close(self) -> None:
        await self.library.close()
        for task in list(self._background):
            task.cancel()
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)
        for client in (self.pattern_source, self.remote_classifier):
            close = getattr(client, "close", None)
            if close is not None:
                await close()

    # ------------------------------------------------------------------
    # Turns
    # ------------------------------------------------------------------
    async def handle_turn(self, session_id: str, text: str, source: str = "text") -> TurnResult:
        logger.info("Turn session=%s source=%s text=%r", session_id, source, text)
        self.library.refresh_if_stale()

        machine = self.sessions.ensure_session(session_id).machine
        if machine.expects_slot:
            outcome = machine.answer_slot(text)
        else:
            recognized = await self.classify(text)
            outcome = machine.apply_intent(recognized)
        return self._result(session_id, machine, outcome)

    def cancel(self, session_id: str) -> TurnResult:
        machine = self.sessions.ensure_session(session_id).machine
        return self._result(session_id, machine, machine.cancel())

    def get_state(self, session_id: str) -> Optional[ConversationState]:
        session = self.sessions.get_session(session_id)
        return session.machine.state if session else None

    async def classify(self, text: str) -> RecognizedIntent:
        local = self.classifier.classify(text)
        if self.remote_classifier is None:
            return local
        if not local.is_unknown and local.confidence >= self.remote_threshold:
            return local

        remote = await self.remote_classifier.classify(text)
        if remote is not None and not remote.is_unknown and remote.confidence > local.confidence:
            logger.info(
                "Using remote intent %s (%.3f) over local %s (%.3f)",
                remote.intent,
                remote.confidence,
                local.intent,
                local.confidence,
            )
            return remote
        return local

    def _result(self, session_id: str, machine: ConversationStateMachine, outcome: Outcome) -> TurnResult:
        intent = None
        if isinstance(outcome, (IntentReply, SlotPrompt, Finalized)):
            intent = outcome.recognized
        return TurnResult(
            session_id=session_id,
            response_text=format_response(outcome),
            state=machine.state,
            intent=intent,
            pending_transaction=outcome.transaction if isinstance(outcome, Finalized) else None,
            reprompt=isinstance(outcome, SlotPrompt) and outcome.reprompt,
        )

    # ------------------------------------------------------------------
    # Outcome reporting
    # ------------------------------------------------------------------
    def _report_outcome(self, event: RecognitionEvent) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        task = loop.create_task(self._log_outcome(event))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _log_outcome(self, event: RecognitionEvent) -> None:
        try:
            await self.pattern_source.log_outcome(event)
        except Exception as exc:
            logger.warning("Outcome report failed: %s", exc)
