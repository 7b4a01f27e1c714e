"""Shared FastAPI dependencies — auth, analysis services, provider factory.

Module-level singletons for each service. Route handlers access them via
FastAPI's Depends() system — never by importing the singletons directly.

TEAM: To wire a real auth provider, replace the stub class on the right
side of the _auth_service assignment below. The get_* functions and all
route handlers stay unchanged.

Tier 2 service module: imports from hooks/* , ai/*, models, schemas.

Usage:
    from namewizard.api.deps import get_current_user, get_invoker

    @router.post("/something")
    async def do_thing(
        user: User = Depends(get_current_user),
        invoker: AnalysisInvoker = Depends(get_invoker),
    ): ...
"""

import logging

from fastapi import Depends, Header, HTTPException

from namewizard.ai.health import HealthTracker
from namewizard.ai.invoker import AnalysisInvoker
from namewizard.ai.providers.base import AIProvider
from namewizard.config import Settings
from namewizard.hooks.auth import FakeAuthService
from namewizard.hooks.interfaces import AuthService
from namewizard.models import CapabilityRegistry
from namewizard.schemas import ApiError, ApiResponse, User

logger = logging.getLogger("namewizard")

# ---------------------------------------------------------------------------
# Service singletons — the swap point
# ---------------------------------------------------------------------------

# TEAM: Replace with your real implementation here.
_auth_service: AuthService = FakeAuthService()

# Analysis singletons — set by _init_ai_services() in main.py at startup
_registry: CapabilityRegistry | None = None
_health: HealthTracker | None = None
_invoker: AnalysisInvoker | None = None


def _unavailable(name: str) -> HTTPException:
    return HTTPException(
        status_code=503,
        detail=ApiResponse(
            ok=False,
            error=ApiError(
                code="SERVICE_UNAVAILABLE",
                message=f"{name} is not yet available. Server is starting up.",
            ),
        ).model_dump(),
    )


# ---------------------------------------------------------------------------
# Dependency providers
# ---------------------------------------------------------------------------


def get_auth_service() -> AuthService:
    """Returns the auth service singleton."""
    return _auth_service


def get_registry() -> CapabilityRegistry:
    """Returns the capability registry singleton.

    Raises HTTPException(503) if startup has not completed.
    """
    if _registry is None:
        raise _unavailable("Model registry")
    return _registry


def get_health_tracker() -> HealthTracker:
    """Returns the health tracker singleton.

    Raises HTTPException(503) if startup has not completed.
    """
    if _health is None:
        raise _unavailable("Health tracker")
    return _health


def get_invoker() -> AnalysisInvoker:
    """Returns the analysis invoker singleton.

    Raises HTTPException(503) if startup has not completed.
    """
    if _invoker is None:
        raise _unavailable("Analysis service")
    return _invoker


# ---------------------------------------------------------------------------
# AI provider factory
# ---------------------------------------------------------------------------


def create_provider(provider: str, settings: Settings) -> AIProvider:
    """Routes a provider name to the correct concrete provider instance.

    In mock mode (AI_BACKEND=mock) every provider name gets a MockProvider.

    Args:
        provider: Provider name from a ModelDescriptor.
        settings: Application settings with API keys.

    Returns:
        A concrete AIProvider instance.

    Raises:
        ValueError: If the provider name is not recognized.
    """
    # Local imports to avoid pulling SDK dependencies at module load time.
    if settings.ai_backend == "mock" or provider == "mock":
        from namewizard.ai.providers.mock import MockProvider

        return MockProvider()

    if provider == "gemini":
        from namewizard.ai.providers.gemini import GeminiProvider

        return GeminiProvider(api_key=settings.google_api_key)

    if provider == "anthropic":
        from namewizard.ai.providers.anthropic import AnthropicProvider

        return AnthropicProvider(api_key=settings.anthropic_api_key)

    raise ValueError(
        f"Unknown provider: {provider!r}. "
        f"Expected 'gemini', 'anthropic' or 'mock'."
    )


def get_api_key_for_provider(provider: str, settings: Settings) -> str:
    """Returns the API key for a given provider name.

    Returns an empty string for unknown providers or missing keys.
    """
    if provider == "gemini":
        return settings.google_api_key
    if provider == "anthropic":
        return settings.anthropic_api_key
    return ""


# ---------------------------------------------------------------------------
# Auth dependencies — used by route handlers
# ---------------------------------------------------------------------------


async def get_current_user(
    authorization: str | None = Header(default=None),
    auth_service: AuthService = Depends(get_auth_service),
) -> User:
    """Extracts and validates a Bearer token from the Authorization header.

    Raises:
        HTTPException: 401 with ApiResponse envelope on auth failure.
    """
    if not authorization:
        raise HTTPException(
            status_code=401,
            detail=ApiResponse(
                ok=False,
                error=ApiError(code="UNAUTHORIZED", message="Missing authorization header."),
            ).model_dump(),
        )

    parts = authorization.split(" ", maxsplit=1)
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1].strip():
        raise HTTPException(
            status_code=401,
            detail=ApiResponse(
                ok=False,
                error=ApiError(code="UNAUTHORIZED", message="Invalid authorization header format."),
            ).model_dump(),
        )

    user = await auth_service.validate_token(parts[1].strip())

    if user is None:
        raise HTTPException(
            status_code=401,
            detail=ApiResponse(
                ok=False,
                error=ApiError(code="UNAUTHORIZED", message="Invalid or expired token."),
            ).model_dump(),
        )

    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    """Like get_current_user, but rejects non-admin users with 403."""
    if user.role != "admin":
        raise HTTPException(
            status_code=403,
            detail=ApiResponse(
                ok=False,
                error=ApiError(code="FORBIDDEN", message="Admin role required."),
            ).model_dump(),
        )
    return user
