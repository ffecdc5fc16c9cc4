"""chatdesk API server - main entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chatdesk import __version__
from chatdesk.api.middleware import RequestLoggingMiddleware
from chatdesk.api.routes import admin, chat, health, messages, sessions, survey
from chatdesk.core.chat_proxy import ChatProxyClient
from chatdesk.core.config import Settings, get_settings
from chatdesk.core.logging import get_logger, log_error, setup_logging
from chatdesk.storage.record_store import RecordStore

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    store: RecordStore = app.state.record_store
    settings: Settings = app.state.settings

    logger.info(
        "Starting chatdesk API server",
        extra={
            "event_type": "startup",
            "environment": settings.environment,
            "data_dir": str(store.base_dir),
        },
    )
    store.initialize()
    logger.info(f"CORS origins: {settings.allowed_origins}")

    yield

    logger.info("Shutting down chatdesk API server", extra={"event_type": "shutdown"})


def create_app(
    settings: Settings | None = None,
    store: RecordStore | None = None,
    chat_proxy: ChatProxyClient | None = None,
) -> FastAPI:
    """Build the application with its record store and upstream client."""
    settings = settings or get_settings()

    app = FastAPI(
        title="chatdesk API",
        description="Customer chat backend with history and survey dashboard",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.record_store = store or RecordStore(
        settings.data_dir,
        strict_reads=settings.strict_reads,
    )
    app.state.chat_proxy = chat_proxy or ChatProxyClient.from_settings(settings)

    # Middleware are processed in REVERSE order of addition
    app.add_middleware(RequestLoggingMiddleware)

    # CORS must be added last so it also wraps error responses
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router, tags=["Health"])
    app.include_router(chat.router, prefix="/api/chat", tags=["Chat"])
    app.include_router(messages.router, prefix="/api/chat/messages", tags=["Chat"])
    app.include_router(sessions.router, prefix="/api/chat/sessions", tags=["Sessions"])
    app.include_router(survey.router, prefix="/api/survey", tags=["Survey"])
    app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])

    app.add_exception_handler(HTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, global_exception_handler)

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint for basic connectivity check."""
        return {"status": "ok", "service": "chatdesk-api"}

    return app


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Return HTTP errors as ``{"detail": ...}``."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unhandled errors (store write failures included) and answer 500."""
    log_error(
        logger,
        "Unhandled exception",
        error=exc,
        extra={
            "path": request.url.path,
            "method": request.method,
            "client_ip": request.client.host if request.client else "unknown",
        },
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


_settings = get_settings()
setup_logging(
    level="DEBUG" if _settings.debug else _settings.log_level,
    json_logs=_settings.environment == "production",
)

app = create_app(_settings)
