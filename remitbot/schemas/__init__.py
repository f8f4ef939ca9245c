from .api_models import (  # noqa: F401
    CancelRequest,
    ChatRequest,
    ChatResponse,
    RefreshResponse,
    StateResponse,
    VoiceTranscriptRequest,
)
