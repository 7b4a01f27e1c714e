"""Analysis API routes — suggest names for uploaded files.

Two endpoints:
- POST /analysis        — one file
- POST /analysis/batch  — many files, analysed concurrently

Clients send a file description (name, MIME type, text excerpt and/or
base64 image). The capability is inferred from the MIME type unless given.
When no preferred model is sent, the configured VISION_MODEL / TEXT_MODEL
is preferred. A failed analysis is still a 200 — the outcome carries a
fallback name and the failure details. A request that no model could
analyse (vision without an image, text without an excerpt) is rejected
with 422 before any model is called, so it never affects model health.

All responses use the ApiResponse envelope. Auth is enforced on every
endpoint via get_current_user.
"""

import base64
import binascii
import logging
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from namewizard.ai.errors import InvalidPayload, UnknownModel
from namewizard.ai.interfaces import AnalysisPayload
from namewizard.ai.invoker import AnalysisInvoker, AnalysisRequest, AnalysisResult
from namewizard.api.deps import get_current_user, get_invoker
from namewizard.config import Settings, get_settings
from namewizard.models import CAPABILITY_VISION
from namewizard.naming import RenameOptions, capability_for, suggest_name
from namewizard.schemas import AnalysisOutcome, ApiError, ApiResponse, User

logger = logging.getLogger(__name__)

router = APIRouter()

_MAX_BATCH_SIZE = 100


# ---------------------------------------------------------------------------
# Request bodies (API-boundary types, local to this module)
# ---------------------------------------------------------------------------


class AnalyzeFileRequest(BaseModel):
    """Request body for POST /analysis, and one item of a batch."""

    file_name: str = Field(min_length=1, max_length=255)
    mime_type: str = Field(min_length=1)
    text: str | None = None
    image_base64: str | None = None
    capability: Literal["vision", "text"] | None = None
    preferred_model_id: str | None = None
    options: RenameOptions | None = None


class BatchAnalyzeRequest(BaseModel):
    """Request body for POST /analysis/batch."""

    files: list[AnalyzeFileRequest] = Field(min_length=1, max_length=_MAX_BATCH_SIZE)
    options: RenameOptions | None = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _decode_image(item: AnalyzeFileRequest) -> bytes | None:
    """Decodes image_base64, raising 422 on malformed input."""
    if item.image_base64 is None:
        return None
    try:
        return base64.b64decode(item.image_base64, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(
            status_code=422,
            detail=ApiResponse(
                ok=False,
                error=ApiError(
                    code="VALIDATION_ERROR",
                    message=f"image_base64 for {item.file_name!r} is not valid base64.",
                ),
            ).model_dump(),
        ) from None


def _to_request(item: AnalyzeFileRequest, settings: Settings) -> AnalysisRequest:
    """Builds the core AnalysisRequest for one API item."""
    capability = item.capability or capability_for(item.mime_type)
    preferred = item.preferred_model_id
    if preferred is None:
        preferred = settings.vision_model if capability == CAPABILITY_VISION else settings.text_model
    payload = AnalysisPayload(
        file_name=item.file_name,
        mime_type=item.mime_type,
        text=item.text,
        image=_decode_image(item),
    )
    return AnalysisRequest(capability=capability, payload=payload, preferred_model_id=preferred)


def _to_outcome(
    item: AnalyzeFileRequest,
    result: AnalysisResult,
    options: RenameOptions | None,
) -> AnalysisOutcome:
    """Combines a core result with the caller-side name suggestion."""
    suggestion = suggest_name(item.file_name, result, item.options or options)
    return AnalysisOutcome(
        file_name=item.file_name,
        capability=result.capability,
        status=result.status,
        suggested_name=suggestion.name,
        fallback=suggestion.fallback,
        content=result.content,
        model_id=result.model_id,
        failure=result.failure,
        attempted=list(result.attempted),
        errors=list(result.errors),
    )


def _request_error(exc: UnknownModel | InvalidPayload) -> HTTPException:
    """Maps a rejected request to 404 UNKNOWN_MODEL or 422 VALIDATION_ERROR."""
    if isinstance(exc, UnknownModel):
        status_code, code = 404, "UNKNOWN_MODEL"
    else:
        status_code, code = 422, "VALIDATION_ERROR"
    return HTTPException(
        status_code=status_code,
        detail=ApiResponse(
            ok=False,
            error=ApiError(code=code, message=str(exc)),
        ).model_dump(),
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post("")
async def analyze_file(
    body: AnalyzeFileRequest,
    user: User = Depends(get_current_user),
    invoker: AnalysisInvoker = Depends(get_invoker),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Analyses one file and returns its suggested name."""
    request = _to_request(body, settings)
    try:
        result = await invoker.analyze(
            request.capability,
            request.payload,
            request.preferred_model_id,
        )
    except (UnknownModel, InvalidPayload) as exc:
        raise _request_error(exc) from None

    outcome = _to_outcome(body, result, None)
    return ApiResponse(ok=True, data=outcome.model_dump()).model_dump()


@router.post("/batch")
async def analyze_batch(
    body: BatchAnalyzeRequest,
    user: User = Depends(get_current_user),
    invoker: AnalysisInvoker = Depends(get_invoker),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Analyses every file concurrently; outcomes are in request order."""
    requests = [_to_request(item, settings) for item in body.files]
    try:
        results = await invoker.analyze_batch(requests)
    except (UnknownModel, InvalidPayload) as exc:
        raise _request_error(exc) from None

    outcomes = [
        _to_outcome(item, result, body.options).model_dump()
        for item, result in zip(body.files, results)
    ]
    failed = sum(1 for o in outcomes if o["status"] != "succeeded")
    if failed:
        logger.info("Batch of %d files finished with %d failures", len(outcomes), failed)
    return ApiResponse(ok=True, data={"results": outcomes}).model_dump()
