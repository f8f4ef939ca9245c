"""
Session Management
Keeps one conversation state machine per chat session.

Sessions live in memory and are dropped after a period of inactivity;
an expired session starts over in Idle.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional
import logging

from .state_machine import ConversationStateMachine


logger = logging.getLogger("remitbot.dialogue")


@dataclass
class Session:
    session_id: str
    machine: ConversationStateMachine
    created_at: datetime = field(default_factory=datetime.now)
    last_activity: datetime = field(default_factory=datetime.now)


class SessionManager:
    """
    Maps session ids to their ConversationStateMachine.

    ``machine_factory`` builds the machine for a new session so the caller
    decides which classifier and finalization handler it uses.
    """

    def __init__(
        self,
        machine_factory: Callable[[], ConversationStateMachine],
        session_timeout_minutes: int = 30,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.machine_factory = machine_factory
        self.session_timeout = timedelta(minutes=session_timeout_minutes)
        self._clock = clock
        self.sessions: Dict[str, Session] = {}

    def get_session(self, session_id: str) -> Optional[Session]:
        """
        Get a live session, or None if not found/expired.
        """
        session = self.sessions.get(session_id)
        if session is None:
            return None
        now = self._clock()
        if now - session.last_activity > self.session_timeout:
            logger.info("Session %s expired after inactivity", session_id)
            del self.sessions[session_id]
            return None
        session.last_activity = now
        return session

    def ensure_session(self, session_id: str) -> Session:
        """
        Return the session for ``session_id``, creating it if missing or expired.
        """
        session = self.get_session(session_id)
        if session is None:
            # New sessions sweep out idle ones so the map stays bounded
            self.purge_expired()
            now = self._clock()
            session = Session(
                session_id=session_id,
                machine=self.machine_factory(),
                created_at=now,
                last_activity=now,
            )
            self.sessions[session_id] = session
            logger.info("Session %s created", session_id)
        return session

    def drop_session(self, session_id: str) -> None:
        self.sessions.pop(session_id, None)

    def purge_expired(self) -> int:
        """Remove every expired session; returns how many were dropped."""
        now = self._clock()
        expired = [sid for sid, s in self.sessions.items() if now - s.last_activity > self.session_timeout]
        for sid in expired:
            del self.sessions[sid]
        if expired:
            logger.info("Purged %d expired sessions", len(expired))
        return len(expired)
