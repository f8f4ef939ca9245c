"""
Tests for per-session state machine bookkeeping.
"""

from datetime import datetime, timedelta

from remitbot.context.session_manager import SessionManager
from remitbot.context.state_machine import ConversationStateMachine


class ManualClock:
    def __init__(self) -> None:
        self.now = datetime(2024, 1, 1, 12, 0, 0)

    def __call__(self) -> datetime:
        return self.now


class TestSessionManager:
    def test_ensure_creates_once(self):
        manager = SessionManager(ConversationStateMachine)
        first = manager.ensure_session("s1")
        assert manager.ensure_session("s1") is first
        assert manager.get_session("missing") is None

    def test_idle_session_expires(self):
        clock = ManualClock()
        manager = SessionManager(ConversationStateMachine, session_timeout_minutes=30, clock=clock)
        original = manager.ensure_session("s1")

        clock.now += timedelta(minutes=31)

        assert manager.get_session("s1") is None
        assert manager.ensure_session("s1") is not original

    def test_activity_extends_session(self):
        clock = ManualClock()
        manager = SessionManager(ConversationStateMachine, session_timeout_minutes=30, clock=clock)
        manager.ensure_session("s1")

        clock.now += timedelta(minutes=20)
        assert manager.get_session("s1") is not None
        clock.now += timedelta(minutes=20)
        assert manager.get_session("s1") is not None

    def test_purge_and_drop(self):
        clock = ManualClock()
        manager = SessionManager(ConversationStateMachine, session_timeout_minutes=10, clock=clock)
        manager.ensure_session("old")
        clock.now += timedelta(minutes=6)
        manager.ensure_session("new")
        clock.now += timedelta(minutes=5)

        assert manager.purge_expired() == 1
        assert list(manager.sessions) == ["new"]

        manager.drop_session("new")
        manager.drop_session("never-existed")
        assert manager.sessions == {}

    def test_new_session_sweeps_idle_ones(self):
        clock = ManualClock()
        manager = SessionManager(ConversationStateMachine, session_timeout_minutes=10, clock=clock)
        for sid in ("a", "b", "c"):
            manager.ensure_session(sid)

        clock.now += timedelta(minutes=11)
        manager.ensure_session("d")

        assert list(manager.sessions) == ["d"]
