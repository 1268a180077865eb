"""
Emotion Companion Service - Main FastAPI Application.

Thin HTTP adapter over the session, monitoring, chat and statistics services.
"""
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncGenerator

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .config import Settings, get_settings
from .exceptions import (
    ProviderChainExhaustedError,
    ProviderNotFoundError,
    SessionNotFoundError,
)
from .logging_config import configure_logging
from .models.emotion import EmotionSample, EmotionVector, utcnow
from .models.schemas import (
    ChatRequest,
    CreateSessionRequest,
    CreateUserRequest,
    DetectionRequest,
    EmotionSampleRequest,
    ErrorResponse,
    HealthResponse,
    TestProviderRequest,
)
from .providers.chain import ProviderChain, create_provider_chain
from .services import (
    ChatService,
    InMemoryStorage,
    MonitorService,
    SessionService,
    SessionStatisticsAggregator,
    StorageBackend,
)

logger = structlog.get_logger()


@dataclass
class ServiceContainer:
    """Services wired once at startup and shared by every request."""

    settings: Settings
    storage: StorageBackend
    chain: ProviderChain
    sessions: SessionService
    monitor: MonitorService
    chat: ChatService
    stats: SessionStatisticsAggregator

    async def close(self) -> None:
        await self.monitor.shutdown()
        await self.chain.close()


def build_container(
    settings: Settings,
    storage: StorageBackend | None = None,
    chain: ProviderChain | None = None,
) -> ServiceContainer:
    storage = storage or InMemoryStorage()
    chain = chain or create_provider_chain(settings)
    monitor = MonitorService(storage, settings=settings)
    return ServiceContainer(
        settings=settings,
        storage=storage,
        chain=chain,
        sessions=SessionService(storage),
        monitor=monitor,
        chat=ChatService(storage, chain, monitor),
        stats=SessionStatisticsAggregator(storage),
    )


def _services(request: Request) -> ServiceContainer:
    return request.app.state.services


def _error(status_code: int, error: str, code: str, details: dict[str, Any] | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, code=code, details=details).model_dump(),
    )


def create_app(
    settings: Settings | None = None,
    storage: StorageBackend | None = None,
    chain: ProviderChain | None = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        settings: Defaults to the cached environment settings
        storage: Persistence backend, in-memory when omitted
        chain: Provider chain, built from settings when omitted
    """
    settings = settings or get_settings()
    configure_logging(settings)
    services = build_container(settings, storage=storage, chain=chain)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan manager."""
        logger.info(
            "starting_emotion_companion",
            port=settings.port,
            env=settings.environment,
            providers=services.chain.list_providers(),
        )

        yield

        logger.info("shutting_down_emotion_companion")
        await services.close()

    app = FastAPI(
        title="Emotion Companion Service",
        description="Emotion-aware chat companion with live emotion monitoring",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.services = services

    cors_origins = (
        ["*"]
        if settings.cors_origins == "*"
        else [o.strip() for o in settings.cors_origins.split(",")]
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(SessionNotFoundError)
    async def session_not_found_handler(request: Request, exc: SessionNotFoundError) -> JSONResponse:
        return _error(404, "Session not found", "SESSION_NOT_FOUND", {"session_id": exc.session_id})

    @app.exception_handler(ProviderNotFoundError)
    async def provider_not_found_handler(request: Request, exc: ProviderNotFoundError) -> JSONResponse:
        return _error(404, "Provider not found", "PROVIDER_NOT_FOUND", {"provider": exc.name})

    @app.exception_handler(ProviderChainExhaustedError)
    async def chain_exhausted_handler(
        request: Request, exc: ProviderChainExhaustedError
    ) -> JSONResponse:
        logger.error("chain_exhausted_response", path=request.url.path, error=str(exc))
        return _error(
            500,
            "Failed to generate a reply",
            "PROVIDERS_EXHAUSTED",
            {"message": str(exc)} if settings.debug else None,
        )

    # Health

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check(request: Request) -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(
            status="healthy",
            service=settings.service_name,
            version=__version__,
            timestamp=utcnow().isoformat(),
            providers=_services(request).chain.list_providers(),
        )

    # Users and sessions

    @app.post("/api/users", tags=["Sessions"])
    async def create_user(request: Request, body: CreateUserRequest) -> dict[str, Any]:
        """Get or create a user by name."""
        user = await _services(request).sessions.get_or_create_user(
            name=body.name, email=body.email, age=body.age, gender=body.gender
        )
        return user.to_dict()

    @app.post("/api/sessions", status_code=201, tags=["Sessions"])
    async def create_session(request: Request, body: CreateSessionRequest) -> dict[str, Any]:
        """Start a session, ending the user's previous active one."""
        svc = _services(request)
        if body.user_id is not None and await svc.storage.get_user(body.user_id) is None:
            raise HTTPException(status_code=404, detail="User not found")

        session = await svc.sessions.start_session(body.user_id)
        return session.to_dict()

    @app.get("/api/sessions/{session_id}", tags=["Sessions"])
    async def get_session(request: Request, session_id: str) -> dict[str, Any]:
        session = await _services(request).sessions.get_session(session_id)
        return session.to_dict()

    @app.post("/api/sessions/{session_id}/end", tags=["Sessions"])
    async def end_session(request: Request, session_id: str) -> dict[str, Any]:
        """End a session and stop its live monitoring."""
        svc = _services(request)
        session = await svc.sessions.end_session(session_id)
        await svc.monitor.stop_detection(session_id)
        return session.to_dict()

    # Emotion samples

    @app.post("/api/emotions", status_code=201, tags=["Emotions"])
    async def save_emotion_sample(request: Request, body: EmotionSampleRequest) -> dict[str, Any]:
        """Persist an emotion sample for a session."""
        svc = _services(request)
        await svc.sessions.get_session(body.session_id)

        sample = EmotionSample(
            vector=EmotionVector.from_mapping(body.emotions),
            captured_at=body.captured_at or utcnow(),
            age=body.age,
            gender=body.gender,
        )
        confidence = (
            body.confidence if body.confidence is not None else settings.default_confidence
        )
        stored = await svc.storage.create_emotion_sample(
            body.session_id, sample, confidence=confidence
        )
        return stored.to_dict()

    @app.get("/api/sessions/{session_id}/emotions", tags=["Emotions"])
    async def list_emotion_samples(request: Request, session_id: str) -> list[dict[str, Any]]:
        svc = _services(request)
        await svc.sessions.get_session(session_id)
        samples = await svc.storage.list_emotion_samples(session_id)
        return [s.to_dict() for s in samples]

    @app.post("/api/sessions/{session_id}/detections", tags=["Emotions"])
    async def push_detection(
        request: Request, session_id: str, body: DetectionRequest
    ) -> dict[str, Any]:
        """Push a live detector reading into the session buffer."""
        svc = _services(request)
        await svc.sessions.get_session(session_id)

        sample = svc.monitor.push_detection(
            session_id, body.emotions, age=body.age, gender=body.gender
        )
        return {
            "sample": sample.to_dict(),
            "live": svc.monitor.live_summary(session_id).to_dict(),
        }

    @app.get("/api/sessions/{session_id}/live", tags=["Emotions"])
    async def live_summary(request: Request, session_id: str) -> dict[str, Any]:
        svc = _services(request)
        await svc.sessions.get_session(session_id)
        return svc.monitor.live_summary(session_id).to_dict()

    # Chat

    @app.post(
        "/api/chat",
        responses={
            404: {"model": ErrorResponse, "description": "Unknown session"},
            500: {"model": ErrorResponse, "description": "All providers failed"},
        },
        tags=["Chat"],
    )
    async def chat(request: Request, body: ChatRequest) -> dict[str, Any]:
        """
        Send a message and get an emotion-aware reply.

        The emotion context defaults to the session's live emotion state.
        """
        exchange = await _services(request).chat.reply(
            session_id=body.session_id,
            content=body.content,
            emotion_context=body.emotion_context,
        )
        return exchange.to_dict()

    @app.get("/api/sessions/{session_id}/messages", tags=["Chat"])
    async def list_messages(request: Request, session_id: str) -> list[dict[str, Any]]:
        svc = _services(request)
        await svc.sessions.get_session(session_id)
        messages = await svc.storage.list_messages(session_id)
        return [m.to_dict() for m in messages]

    # Statistics

    @app.get("/api/sessions/{session_id}/stats", tags=["Statistics"])
    async def session_stats(request: Request, session_id: str) -> dict[str, Any]:
        stats = await _services(request).stats.compute(session_id)
        return stats.to_dict()

    # Providers

    @app.get("/api/ai-providers", tags=["Providers"])
    async def list_providers(request: Request) -> dict[str, Any]:
        """Provider status; no provider is invoked."""
        return {"providers": _services(request).chain.list_providers()}

    @app.post("/api/test-ai-provider", tags=["Providers"])
    async def test_provider(request: Request, body: TestProviderRequest) -> dict[str, Any]:
        """Run a single provider, or the full chain with "auto"."""
        result = await _services(request).chain.test_provider(
            body.provider, body.message, body.emotions
        )
        return result.to_dict()

    return app


def run() -> None:
    """Serve the application with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "emotion_companion.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
