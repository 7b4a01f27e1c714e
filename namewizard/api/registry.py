"""Model registry API routes — listing, health snapshot, admin reset.

- GET  /models                  — every registered model with its status
- GET  /models/health           — model id → status map
- POST /models/{model_id}/reset — admin only: return a model to "active"

A model flagged "problem" after a failed call stays out of rotation until
an admin resets it here or the process restarts.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from namewizard.ai.errors import UnknownModel
from namewizard.ai.health import HealthTracker
from namewizard.api.deps import get_current_user, get_health_tracker, get_registry, require_admin
from namewizard.models import CapabilityRegistry
from namewizard.schemas import ApiError, ApiResponse, ModelInfo, User

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
async def list_models(
    user: User = Depends(get_current_user),
    registry: CapabilityRegistry = Depends(get_registry),
    health: HealthTracker = Depends(get_health_tracker),
) -> dict:
    """Lists every registered model in registration order."""
    snapshot = health.snapshot()
    models = [
        ModelInfo(
            id=d.id,
            provider=d.provider,
            capabilities=d.capabilities(),
            context_window=d.context_window,
            priority=d.priority,
            status=snapshot[d.id],
        ).model_dump()
        for d in registry
    ]
    return ApiResponse(ok=True, data={"models": models}).model_dump()


@router.get("/health")
async def health_snapshot(
    user: User = Depends(get_current_user),
    health: HealthTracker = Depends(get_health_tracker),
) -> dict:
    """Returns the current status of every model."""
    return ApiResponse(ok=True, data={"status": health.snapshot()}).model_dump()


@router.post("/{model_id}/reset")
async def reset_model(
    model_id: str,
    admin: User = Depends(require_admin),
    health: HealthTracker = Depends(get_health_tracker),
) -> dict:
    """Returns a model to "active" after an operator has checked it."""
    try:
        health.reset(model_id)
    except UnknownModel as exc:
        raise HTTPException(
            status_code=404,
            detail=ApiResponse(
                ok=False,
                error=ApiError(code="UNKNOWN_MODEL", message=str(exc)),
            ).model_dump(),
        ) from None

    logger.info("Model %s reset to active by %s", model_id, admin.id)
    return ApiResponse(ok=True, data={"model_id": model_id, "status": "active"}).model_dump()
