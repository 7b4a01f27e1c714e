"""FastAPI application — entry point, middleware, and health endpoint.

Creates the NameWizard analysis API with:
- API versioning via router prefix (/api/v1/)
- CORS middleware (origins from settings)
- Request logging middleware (raw ASGI — no response body buffering)
- Global exception handlers (HTTPException, validation, catch-all)
- Health endpoint
- Analysis services: registry, health tracker, providers, invoker

Run with: uvicorn namewizard.main:app --reload
"""

from __future__ import annotations

import logging
import time
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from namewizard.config import Settings, get_settings
from namewizard.schemas import ApiError, ApiResponse

logger = logging.getLogger("namewizard")


# ---------------------------------------------------------------------------
# Request logging middleware (raw ASGI — streaming-safe)
# ---------------------------------------------------------------------------


class RequestLoggingMiddleware:
    """Logs method, path, status code, and duration for every request.

    Uses raw ASGI to avoid response body buffering. Does NOT log
    request/response bodies (file contents), query params, auth headers,
    or client IPs.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        method = scope.get("method", "?")
        path = scope.get("path", "?")
        start = time.monotonic()
        status_code = 0

        async def logging_send(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 0)
            await send(message)

        try:
            await self.app(scope, receive, logging_send)
        finally:
            duration_ms = (time.monotonic() - start) * 1000
            logger.info(
                "%s %s %d %.1fms", method, path, status_code, duration_ms
            )


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------


def _http_exception_response(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Wraps HTTPException in ApiResponse envelope.

    If the detail is already an ApiResponse dict (from deps.py or a
    router), returns it directly. Otherwise wraps in a generic error.
    """
    if isinstance(exc.detail, dict) and "ok" in exc.detail:
        return JSONResponse(status_code=exc.status_code, content=exc.detail)

    return JSONResponse(
        status_code=exc.status_code,
        content=ApiResponse(
            ok=False,
            error=ApiError(code="HTTP_ERROR", message=str(exc.detail)),
        ).model_dump(),
    )


def _validation_error_response(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Wraps Pydantic validation errors in ApiResponse envelope.

    Returns a human-readable summary of the first error only.
    """
    errors = exc.errors()
    if errors:
        first = errors[0]
        loc = " -> ".join(str(part) for part in first.get("loc", []))
        msg = first.get("msg", "Validation error")
        detail = f"{loc}: {msg}" if loc else msg
    else:
        detail = "Request validation failed."

    return JSONResponse(
        status_code=422,
        content=ApiResponse(
            ok=False,
            error=ApiError(code="VALIDATION_ERROR", message=detail),
        ).model_dump(),
    )


def _unhandled_exception_response(request: Request, exc: Exception) -> JSONResponse:
    """Catches all unhandled exceptions — never leaks internals to client.

    Logs the full traceback server-side. Returns a generic 500 response.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)

    return JSONResponse(
        status_code=500,
        content=ApiResponse(
            ok=False,
            error=ApiError(
                code="INTERNAL_ERROR",
                message="An unexpected error occurred.",
            ),
        ).model_dump(),
    )


# ---------------------------------------------------------------------------
# App creation
# ---------------------------------------------------------------------------


def _init_ai_services(settings: Settings) -> None:
    """Initializes analysis service singletons during app startup.

    Builds the registry, creates one provider per provider name in it, and
    starts models "inactive" when their provider has no API key or could
    not be constructed. Logs warnings/errors but never prevents startup.

    Uses local imports to avoid pulling SDK dependencies at module load.
    """
    from namewizard.ai.backend import ProviderBackend
    from namewizard.ai.health import HealthTracker
    from namewizard.ai.invoker import AnalysisInvoker
    from namewizard.ai.prompts import PromptLoader
    from namewizard.ai.selector import ModelSelector
    from namewizard.api import deps
    from namewizard.config import PROMPTS_DIR
    from namewizard.models import CAPABILITY_TEXT, CAPABILITY_VISION, build_default_registry

    registry = build_default_registry()

    # 1. One provider per provider name; unusable providers disable their models
    providers = {}
    unusable: set[str] = set()
    for provider_name in sorted({d.provider for d in registry}):
        if settings.ai_backend == "live" and not deps.get_api_key_for_provider(
            provider_name, settings
        ):
            logger.warning(
                "Missing API key for provider '%s'. Its models start inactive.",
                provider_name,
            )
            unusable.add(provider_name)
            continue
        try:
            providers[provider_name] = deps.create_provider(provider_name, settings)
        except Exception:
            logger.exception(
                "Failed to create AI provider '%s'. Its models start inactive.",
                provider_name,
            )
            unusable.add(provider_name)

    inactive = [d.id for d in registry if d.provider in unusable]
    health = HealthTracker(registry, inactive=inactive)

    # 2. Prompts
    prompt_loader = PromptLoader(PROMPTS_DIR)
    for error in prompt_loader.validate((CAPABILITY_VISION, CAPABILITY_TEXT)):
        logger.error("Prompt check: %s", error)

    # 3. Invoker
    invoker = AnalysisInvoker(
        ModelSelector(registry, health),
        health,
        ProviderBackend(providers, prompt_loader),
        timeout_seconds=settings.analysis_timeout_seconds,
        max_fallbacks=settings.analysis_max_fallbacks,
    )

    deps._registry = registry
    deps._health = health
    deps._invoker = invoker

    logger.info(
        "Analysis services initialized: backend=%s, providers=%s, inactive=%s",
        settings.ai_backend,
        ", ".join(sorted(providers)) or "none",
        ", ".join(inactive) or "none",
    )


def create_app() -> FastAPI:
    """Creates and configures the FastAPI application."""
    settings = get_settings()

    # Configure logging level
    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))

    application = FastAPI(
        title="NameWizard",
        description="AI-assisted file naming and organisation",
        version="0.1.0",
    )

    # -- Middleware (order matters: last added = first executed) --

    # CORS — must be outermost to handle preflight before auth
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request logging — raw ASGI, streaming-safe
    application.add_middleware(RequestLoggingMiddleware)

    # -- Exception handlers --
    application.add_exception_handler(StarletteHTTPException, _http_exception_response)
    application.add_exception_handler(RequestValidationError, _validation_error_response)
    application.add_exception_handler(Exception, _unhandled_exception_response)

    # -- Routers --
    _register_routes(application)

    # -- Analysis services --
    _init_ai_services(settings)

    return application


def _register_routes(application: FastAPI) -> None:
    """Registers all API routers on the application."""
    from fastapi import APIRouter

    v1 = APIRouter(prefix="/api/v1")

    @v1.get("/health")
    async def health() -> dict[str, Any]:
        return ApiResponse(ok=True, data={"status": "healthy"}).model_dump()

    # Sub-routers (BEFORE including v1 into the app):
    from namewizard.api.analysis import router as analysis_router

    v1.include_router(analysis_router, prefix="/analysis", tags=["analysis"])

    from namewizard.api.registry import router as registry_router

    v1.include_router(registry_router, prefix="/models", tags=["models"])

    application.include_router(v1)


app = create_app()
