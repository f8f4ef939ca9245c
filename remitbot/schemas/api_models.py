from typing import Optional, Dict, Any

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    session_id: str
    text: str


class VoiceTranscriptRequest(BaseModel):
    session_id: str
    transcript: str  # speech-to-text happens upstream


class CancelRequest(BaseModel):
    session_id: str


class ChatResponse(BaseModel):
    response_text: str
    session_id: str
    state: Dict[str, Any]
    intent: Optional[Dict[str, Any]] = None
    pending_transaction: Optional[Dict[str, Any]] = None
    reprompt: bool = False


class StateResponse(BaseModel):
    session_id: str
    state: Dict[str, Any]


class RefreshResponse(BaseModel):
    status: str
    remote_active: bool
    intent_patterns: int = Field(ge=0)
    entity_patterns: int = Field(ge=0)
