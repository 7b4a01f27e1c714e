"""Analysis invoker — one model call with bounded automatic fallback.

State machine per request:

  Selecting  → selector.select(capability, preferred)
               NoAvailableModel → Failed(no_available_model)
  Invoking   → backend.invoke(model) under a per-call timeout
               success → Succeeded
               error or timeout → health.mark_problem(model) → Retrying
  Retrying   → selector.select(capability, exclude=tried)
               model found and fallbacks left → Invoking
               otherwise → Failed(all_models_exhausted)

With the default max_fallbacks=1 exactly one fallback is attempted.
Every outcome except UnknownModel and InvalidPayload comes back as an
AnalysisResult, so a caller processing a batch can always move on to the
next file. Both of those are raised before any model is invoked: a
malformed request is the caller's fault and never marks a model "problem".

Cancellation: cancelling the asyncio task propagates CancelledError out of
analyze() without touching the health tracker. A ``cancel_event`` is the
cooperative alternative: it is checked before each Invoking state and
after each backend call, and a set event ends the request with status
"cancelled" (a late backend result is discarded, a late failure is not
recorded).

Tier 3 orchestration — imports from ai.selector, ai.health, ai.interfaces,
ai.errors.
"""

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Literal

from namewizard.ai.errors import InvalidPayload, NoAvailableModel
from namewizard.ai.health import HealthStatus, HealthTracker
from namewizard.ai.interfaces import AnalysisPayload, ModelBackend
from namewizard.ai.selector import ModelSelector

logger = logging.getLogger(__name__)

AnalysisStatus = Literal["succeeded", "failed", "cancelled"]
FailureKind = Literal["no_available_model", "all_models_exhausted"]


@dataclass(frozen=True)
class AnalysisRequest:
    """One unit of work for analyze_batch()."""

    capability: str
    payload: AnalysisPayload
    preferred_model_id: str | None = None


@dataclass(frozen=True)
class AnalysisResult:
    """Outcome of one analysis request.

    ``attempted`` lists every model invoked, in order. ``errors`` holds one
    message per failed attempt. ``content`` and ``model_id`` are set only
    on success; ``failure`` only on failure.
    """

    status: AnalysisStatus
    capability: str
    content: str | None = None
    model_id: str | None = None
    failure: FailureKind | None = None
    attempted: tuple[str, ...] = ()
    errors: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return self.status == "succeeded"


def _is_set(cancel_event: asyncio.Event | None) -> bool:
    return cancel_event is not None and cancel_event.is_set()


class AnalysisInvoker:
    """Runs analysis requests against the selected model with fallback.

    Args:
        selector: Chooses models by capability, preference and health.
        health: Shared health tracker; failed models are marked "problem".
        backend: Performs the actual model call.
        timeout_seconds: Per-invocation timeout. Expiry counts as a backend
            failure. None disables the timeout.
        max_fallbacks: How many Retrying → Invoking cycles are allowed
            after the first failure.
    """

    def __init__(
        self,
        selector: ModelSelector,
        health: HealthTracker,
        backend: ModelBackend,
        timeout_seconds: float | None = 30.0,
        max_fallbacks: int = 1,
    ) -> None:
        if max_fallbacks < 0:
            raise ValueError(f"max_fallbacks must be >= 0, got {max_fallbacks}")
        self._selector = selector
        self._health = health
        self._backend = backend
        self._timeout_seconds = timeout_seconds
        self._max_fallbacks = max_fallbacks

    def _check_request(
        self,
        capability: str,
        payload: AnalysisPayload,
        preferred_model_id: str | None,
    ) -> None:
        """Raises UnknownModel or InvalidPayload for a request no model can serve.

        A capability with no registered model at all is left to Selecting,
        which reports it as a no_available_model failure.
        """
        if preferred_model_id is not None:
            self._selector.registry.get(preferred_model_id)
        if self._selector.registry.list_by_capability(capability):
            self._backend.check_payload(capability, payload)

    async def analyze(
        self,
        capability: str,
        payload: AnalysisPayload,
        preferred_model_id: str | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> AnalysisResult:
        """Analyses one payload, falling back to other models on failure.

        Args:
            capability: Capability tag ("vision" or "text").
            payload: The file to analyse.
            preferred_model_id: Model to try first if usable.
            cancel_event: Optional cooperative cancellation flag.

        Returns:
            A succeeded, failed or cancelled AnalysisResult.

        Raises:
            UnknownModel: If preferred_model_id is not registered.
            InvalidPayload: If the backend rejects the payload for this
                capability.
        """
        self._check_request(capability, payload, preferred_model_id)

        attempted: list[str] = []
        errors: list[str] = []

        def _cancelled() -> AnalysisResult:
            logger.info("Analysis of %s cancelled after %s", payload.file_name, attempted)
            return AnalysisResult(
                status="cancelled",
                capability=capability,
                attempted=tuple(attempted),
                errors=tuple(errors),
            )

        # Selecting
        try:
            descriptor = self._selector.select(capability, preferred_model_id)
        except NoAvailableModel:
            logger.warning("No available %s model for %s", capability, payload.file_name)
            return AnalysisResult(
                status="failed",
                capability=capability,
                failure="no_available_model",
            )

        fallbacks_left = self._max_fallbacks
        while True:
            if _is_set(cancel_event):
                return _cancelled()

            # Invoking
            attempted.append(descriptor.id)
            try:
                async with asyncio.timeout(self._timeout_seconds):
                    content = await self._backend.invoke(descriptor, capability, payload)
            except InvalidPayload:
                raise
            except TimeoutError:
                error = f"{descriptor.id}: timed out after {self._timeout_seconds}s"
            except Exception as exc:
                error = str(exc) or type(exc).__name__
            else:
                if _is_set(cancel_event):
                    return _cancelled()
                return AnalysisResult(
                    status="succeeded",
                    capability=capability,
                    content=content,
                    model_id=descriptor.id,
                    attempted=tuple(attempted),
                    errors=tuple(errors),
                )

            if _is_set(cancel_event):
                return _cancelled()

            errors.append(error)
            logger.warning(
                "Model %s failed analysing %s: %s", descriptor.id, payload.file_name, error
            )
            self._health.mark_problem(descriptor.id)

            # Retrying
            if fallbacks_left == 0:
                break
            fallbacks_left -= 1
            try:
                descriptor = self._selector.select(capability, exclude=attempted)
            except NoAvailableModel:
                break
            logger.info("Retrying %s with fallback model %s", payload.file_name, descriptor.id)

        logger.error(
            "All %s models exhausted for %s (tried %s)",
            capability,
            payload.file_name,
            ", ".join(attempted),
        )
        return AnalysisResult(
            status="failed",
            capability=capability,
            failure="all_models_exhausted",
            attempted=tuple(attempted),
            errors=tuple(errors),
        )

    async def analyze_batch(self, requests: Iterable[AnalysisRequest]) -> list[AnalysisResult]:
        """Runs independent requests concurrently, results in input order.

        Every request is checked up front so that an UnknownModel or
        InvalidPayload surfaces before any backend call is made.

        Raises:
            UnknownModel: If any request names an unregistered preferred model.
            InvalidPayload: If any request carries an unusable payload.
        """
        requests = list(requests)
        for request in requests:
            self._check_request(request.capability, request.payload, request.preferred_model_id)

        return list(
            await asyncio.gather(
                *(
                    self.analyze(r.capability, r.payload, r.preferred_model_id)
                    for r in requests
                )
            )
        )

    def health_snapshot(self) -> dict[str, HealthStatus]:
        """Read-only copy of every model's current status."""
        return self._health.snapshot()
