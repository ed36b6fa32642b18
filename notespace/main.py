"""FastAPI application factory.

Serve with ``uvicorn --factory notespace.main:create_app``. Importing this
module builds nothing; each call to ``create_app`` wires its own engine.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from notespace.api.v1 import v1_router
from notespace.core.config import DEV_JWT_SECRET, Settings, get_settings
from notespace.core.database import build_engine, build_session_factory, init_db
from notespace.core.errors import AppError
from notespace.core.security import TokenService
from notespace.services.store import NotesStore
from notespace.services.subscription import SubscriptionGate

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # Startup: ensure tables exist
    await init_db(app.state.engine)
    yield
    await app.state.engine.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the app with its store, token service and gate wired in once."""
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    if settings.is_production and settings.jwt_secret_key == DEV_JWT_SECRET:
        raise RuntimeError("JWT_SECRET_KEY must be set in production")

    app = FastAPI(
        title="NoteSpace",
        version="1.0.0",
        description="Multi-tenant notes with per-plan limits",
        lifespan=lifespan,
    )

    engine = build_engine(settings)
    store = NotesStore(build_session_factory(engine))
    app.state.settings = settings
    app.state.engine = engine
    app.state.store = store
    app.state.tokens = TokenService.from_settings(settings)
    app.state.gate = SubscriptionGate(store, free_note_limit=settings.free_note_limit)

    # ── CORS ─────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.allowed_origins.split(",")],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    _register_exception_handlers(app, settings)

    # ── API routes ───────────────────────────────────────────
    app.include_router(v1_router)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict:
        return {"status": "ok"}

    return app


def _register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    """Every failure leaves as a single ``{"error": ...}`` body."""

    @app.exception_handler(AppError)
    async def _app_error(_request: Request, exc: AppError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(RequestValidationError)
    async def _validation_error(_request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        if errors:
            first = errors[0]
            field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
            message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
        else:
            message = "Invalid request"
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        message = "Internal Server Error" if settings.is_production else str(exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": message},
        )

