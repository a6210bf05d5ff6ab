import json
import logging
import math
import os
import re
import time
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Body, Depends, FastAPI, File, Form, Request, UploadFile
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.middleware.cors import CORSMiddleware

# Load environment variables from .env if available, but avoid during pytest to keep tests deterministic
from dotenv import load_dotenv

if "PYTEST_CURRENT_TEST" not in os.environ:
    load_dotenv()

from coach_api.analysis.base import AnalysisProvider
from coach_api.analysis.factory import get_analysis_provider
from coach_api.config import load_settings
from coach_api.errors import ApiError, install_error_handlers
from coach_api.mentor.prompts import analysis_summary_message
from coach_api.mentor.responder import MentorResponder
from coach_api.metrics import ANALYSES_TOTAL, HTTP_REQUEST_DURATION_SECONDS, HTTP_REQUESTS_TOTAL
from coach_api.middleware.request_id import RequestIdMiddleware
from coach_api.middleware.routes import route_label
from coach_api.providers.factory import get_chat_client
from coach_api.schemas import (
    AnalyzeVoiceResponse,
    ChatMessage,
    ErrorResponse,
    MentorChatRequest,
    MentorChatResponse,
    Recording,
    Session,
)
from coach_api.store import ConversationStore, SessionStore, epoch_ms, utc_now_iso


settings = load_settings()

logger = logging.getLogger("speech_coach.api")
# Ensure our application logger emits under Uvicorn:
# - honor LOG_LEVEL env (default INFO)
# - attach a StreamHandler if none present
# - disable propagate to avoid duplicate logs with Uvicorn root handlers
_lvl = getattr(logging, settings.log_level, logging.INFO)
logger.setLevel(_lvl)
if not logger.handlers:
    _h = logging.StreamHandler()
    _h.setLevel(_lvl)
    _h.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(_h)
logger.propagate = False


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Settings are re-read on every startup
    cfg = load_settings()
    app.state.settings = cfg
    app.state.sessions = SessionStore()
    app.state.conversations = ConversationStore()
    app.state.analysis_provider = get_analysis_provider(cfg.analysis_provider)
    app.state.responder = MentorResponder(
        app.state.sessions,
        app.state.conversations,
        chat_client=get_chat_client(cfg),
    )
    logger.info(json.dumps({
        "event": "mentor_mode",
        "mode": app.state.responder.mode,
        "provider": cfg.chat_provider,
        "model": cfg.model,
        "baseUrl": cfg.base_url,
    }))
    if not cfg.credentials_present:
        logger.warning(
            "AI mentor in fallback mode (no API key set). "
            "Set DEEPSEEK_API_KEY or OPENAI_API_KEY in .env to enable AI responses."
        )
    yield


app = FastAPI(
    title="Speech Coach API",
    description="Voice recording analysis, session history, and an AI public-speaking mentor.",
    version="0.1.0",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-Id"],
    allow_credentials=False,
)
app.add_middleware(RequestIdMiddleware)
install_error_handlers(app)


# HTTP metrics middleware
@app.middleware("http")
async def _http_metrics_middleware(request: Request, call_next):
    t0 = time.perf_counter()
    method = request.method
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    finally:
        path = route_label(request.scope)
        HTTP_REQUESTS_TOTAL.labels(method=method, path=path, status_class=f"{status_code // 100}xx").inc()
        HTTP_REQUEST_DURATION_SECONDS.labels(method=method, path=path).observe(time.perf_counter() - t0)


def get_sessions(request: Request) -> SessionStore:
    return request.app.state.sessions


def get_conversations(request: Request) -> ConversationStore:
    return request.app.state.conversations


def get_analysis(request: Request) -> AnalysisProvider:
    return request.app.state.analysis_provider


def get_responder(request: Request) -> MentorResponder:
    return request.app.state.responder


_DURATION_RE = re.compile(r"\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def _parse_duration(raw: Optional[str]) -> float:
    # leading numeric prefix, so "45s" reads as 45
    m = _DURATION_RE.match(raw or "")
    if not m:
        return 0.0
    value = float(m.group(0))
    if math.isnan(value) or math.isinf(value):
        return 0.0
    return value or 0.0


@app.get("/api/health", tags=["meta"], description="Liveness endpoint for health checks.")
async def health():
    return {"status": "ok"}


@app.get("/metrics", tags=["meta"], include_in_schema=False)
async def metrics():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.get("/service-metrics", tags=["meta"], description="Lightweight service metrics for observability.")
async def service_metrics(
    sessions: SessionStore = Depends(get_sessions),
    conversations: ConversationStore = Depends(get_conversations),
    responder: MentorResponder = Depends(get_responder),
):
    return {
        "sessionCount": len(sessions),
        "recordingCount": sessions.recording_count(),
        "conversationCount": len(conversations),
        "mentorMode": responder.mode,
    }


@app.post(
    "/api/analyze-voice",
    tags=["analysis"],
    response_model=AnalyzeVoiceResponse,
    responses={400: {"model": ErrorResponse}, 413: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    description="Analyze an uploaded recording and append it to the caller's session.",
)
async def analyze_voice(
    request: Request,
    audio: Optional[UploadFile] = File(None),
    duration: Optional[str] = Form(None),
    session_id: Optional[str] = Form(None, alias="sessionId"),
    sessions: SessionStore = Depends(get_sessions),
    conversations: ConversationStore = Depends(get_conversations),
    provider: AnalysisProvider = Depends(get_analysis),
):
    if audio is None:
        raise ApiError(400, "No audio file provided")
    max_bytes = request.app.state.settings.max_upload_bytes
    data = await audio.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise ApiError(413, "Audio file too large")

    request_id = getattr(request.state, "request_id", None)
    seconds = _parse_duration(duration)
    sid = session_id or f"session-{epoch_ms()}"
    try:
        analysis = provider.analyze(data, seconds)
        if sid not in sessions:
            sessions.get_or_create(sid)
            # a new session starts with an empty conversation, dropping any earlier chat turns
            conversations.reset(sid)
        recording = Recording(id=f"recording-{epoch_ms()}", analysis=analysis, timestamp=utc_now_iso())
        sessions.append(sid, recording)
        conversations.append(sid, [ChatMessage(role="assistant", content=analysis_summary_message(analysis))])
    except Exception:
        logger.exception(json.dumps({"event": "analysis_failed", "requestId": request_id, "sessionId": sid}))
        raise ApiError(500, "Failed to analyze voice recording")

    ANALYSES_TOTAL.labels(provider=provider.provider_name).inc()
    logger.info(json.dumps({
        "event": "analysis_completed",
        "requestId": request_id,
        "sessionId": sid,
        "recordingId": recording.id,
        "bytes": len(data),
        "duration": seconds,
        "confidenceScore": analysis.confidence_score,
    }))
    return AnalyzeVoiceResponse(analysis=analysis, session_id=sid)


@app.get(
    "/api/sessions/{session_id}",
    tags=["sessions"],
    response_model=Session,
    responses={404: {"model": ErrorResponse}},
    description="Fetch one session with its recordings.",
)
async def get_session(session_id: str, request: Request, sessions: SessionStore = Depends(get_sessions)):
    session = sessions.get(session_id)
    if session is None:
        logger.info(json.dumps({
            "event": "session_not_found",
            "requestId": getattr(request.state, "request_id", None),
            "sessionId": session_id,
        }))
        raise ApiError(404, "Session not found")
    return session


@app.get(
    "/api/sessions",
    tags=["sessions"],
    response_model=List[Session],
    description="List all sessions in creation order.",
)
async def list_sessions(sessions: SessionStore = Depends(get_sessions)):
    return sessions.list_all()


@app.post(
    "/api/mentor-chat",
    tags=["mentor"],
    response_model=MentorChatResponse,
    responses={400: {"model": ErrorResponse}},
    description="Ask the public-speaking mentor a question in the context of a session.",
)
async def mentor_chat(
    request: Request,
    body: Optional[MentorChatRequest] = Body(None),
    responder: MentorResponder = Depends(get_responder),
):
    if body is None or not body.message:
        raise ApiError(400, "Message is required")
    reply = await responder.respond(
        body.message,
        body.session_id,
        request_id=getattr(request.state, "request_id", None),
    )
    return MentorChatResponse(response=reply)


def run() -> None:
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
