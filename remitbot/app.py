"""
remitbot/app.py

FastAPI application for the remittance chat assistant.
Exposes the conversation engine over HTTP.
"""

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv, find_dotenv
import logging

# Load environment
load_dotenv(find_dotenv(), override=False)

from .logging_config import setup_logging, get_logger
from .config import load_settings
from .agent.engine import ConversationEngine, TurnResult
from .schemas.api_models import (
    CancelRequest,
    ChatRequest,
    ChatResponse,
    RefreshResponse,
    StateResponse,
    VoiceTranscriptRequest,
)

setup_logging()

logger = get_logger("remitbot.app")


app = FastAPI(title="RemitBot Assistant", version="1.0.0")

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _engine() -> ConversationEngine:
    engine = getattr(app.state, "engine", None)
    if engine is None:
        raise HTTPException(status_code=503, detail="engine not initialized")
    return engine


def _chat_response(result: TurnResult) -> ChatResponse:
    return ChatResponse(**result.to_dict())


@app.on_event("startup")
async def startup_event():
    """
    Startup wiring:
     - Snapshot settings from the environment
     - Build the ConversationEngine and its HTTP clients
     - Load remote patterns once (built-ins stay active on failure)
    """
    settings = load_settings()
    app.state.settings = settings
    app.state.engine = ConversationEngine.from_settings(settings)
    await app.state.engine.start()
    logger.info(
        "RemitBot started. recognition=%s classifier=%s",
        settings.recognition_url or "local",
        settings.classifier_url or "disabled",
    )


@app.on_event("shutdown")
async def shutdown_event():
    engine = getattr(app.state, "engine", None)
    if engine:
        try:
            await engine.close()
            logger.info("Engine clients closed")
        except Exception as e:
            logger.exception("Error closing engine: %s", e)
    logger.info("RemitBot shutdown complete.")


@app.get("/api/health")
async def health_check():
    return {"status": "healthy"}


@app.post("/api/chat/message", response_model=ChatResponse)
async def chat_message(req: ChatRequest) -> ChatResponse:
    logger.info("API Request: POST /api/chat/message | session_id=%s", req.session_id)
    result = await _engine().handle_turn(req.session_id, req.text, source="text")
    return _chat_response(result)


@app.post("/api/chat/voice", response_model=ChatResponse)
async def chat_voice(req: VoiceTranscriptRequest) -> ChatResponse:
    logger.info("API Request: POST /api/chat/voice | session_id=%s", req.session_id)
    if not req.transcript.strip():
        raise HTTPException(status_code=400, detail="transcript is empty")
    result = await _engine().handle_turn(req.session_id, req.transcript, source="voice")
    return _chat_response(result)


@app.post("/api/chat/cancel", response_model=ChatResponse)
async def chat_cancel(req: CancelRequest) -> ChatResponse:
    logger.info("API Request: POST /api/chat/cancel | session_id=%s", req.session_id)
    return _chat_response(_engine().cancel(req.session_id))


@app.get("/api/chat/state", response_model=StateResponse)
async def chat_state(session_id: str) -> StateResponse:
    state = _engine().get_state(session_id)
    if state is None:
        raise HTTPException(status_code=404, detail="session not found")
    return StateResponse(session_id=session_id, state=state.to_dict())


@app.post("/api/recognition/refresh", response_model=RefreshResponse)
async def refresh_patterns() -> RefreshResponse:
    engine = _engine()
    await engine.library.refresh()
    snapshot = engine.library.snapshot()
    return RefreshResponse(
        status="ok",
        remote_active=engine.library.is_remote,
        intent_patterns=len(snapshot.intents),
        entity_patterns=len(snapshot.entities),
    )


if __name__ == "__main__":
    import uvicorn

    logging.getLogger("uvicorn").setLevel(logging.INFO)
    uvicorn.run("remitbot.app:app", host="0.0.0.0", port=8000, reload=False)
