"""
remitbot/agent

- engine.py: ConversationEngine (one chat turn end to end)
- formatter.py: outcome -> reply text
- helpers.py: amount formatting
"""

from .engine import ConversationEngine, TurnResult  # noqa: F401
from .formatter import format_response  # noqa: F401
