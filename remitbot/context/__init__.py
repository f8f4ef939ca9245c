from .conversation_state import ConversationState, PendingTransaction  # noqa: F401
from .state_machine import ConversationStateMachine  # noqa: F401
