"""Core data models — shared Pydantic types for the NameWizard API.

Every API response flows through the ApiResponse envelope defined here,
and every analysis outcome leaves the service as an AnalysisOutcome.

This is a Tier 1 leaf module: it imports only from pydantic and the stdlib.

Usage:
    from namewizard.schemas import User, ApiResponse, AnalysisOutcome
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------


class User(BaseModel):
    """Identity model returned by the auth layer.

    Frozen — users are identity objects, no mutation after creation.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    role: Literal["user", "admin"]
    name: str


# ---------------------------------------------------------------------------
# API envelope
# ---------------------------------------------------------------------------


class ApiError(BaseModel):
    """Error detail inside ApiResponse.error.

    code is an uppercase string like "UNKNOWN_MODEL", "VALIDATION_ERROR",
    "FORBIDDEN". Not an enum — error codes grow with the API.
    """

    model_config = ConfigDict(frozen=True)

    code: str
    message: str


class ApiResponse(BaseModel):
    """Universal response envelope — every API endpoint returns this shape."""

    model_config = ConfigDict(frozen=True)

    ok: bool
    data: Any | None = None
    error: ApiError | None = None


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------


class AnalysisOutcome(BaseModel):
    """One analysed file as returned to API clients.

    ``status`` mirrors the core result; ``suggested_name`` is always set —
    a fallback label is used when analysis failed.
    """

    model_config = ConfigDict(frozen=True)

    file_name: str
    capability: str
    status: Literal["succeeded", "failed", "cancelled"]
    suggested_name: str
    fallback: bool
    content: str | None = None
    model_id: str | None = None
    failure: str | None = None
    attempted: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)


class ModelInfo(BaseModel):
    """Registry entry plus live health status, for diagnostics."""

    model_config = ConfigDict(frozen=True)

    id: str
    provider: str
    capabilities: list[str]
    context_window: int
    priority: int
    status: Literal["active", "inactive", "problem"]
