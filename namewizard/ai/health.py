"""In-memory model health tracking.

One status per registered model: "active", "inactive" or "problem".
Only active models are eligible for selection. A model marked "problem"
stays that way until reset() is called explicitly (admin endpoint) or the
process restarts; there is no recovery timer.

Tier 2 service — imports from models (Tier 1) and ai.errors (Tier 1).

Usage:
    from namewizard.ai.health import HealthTracker

    health = HealthTracker(registry)
    health.mark_problem("gemini-flash")
    health.is_active("gemini-flash")  # False
"""

import logging
import threading
from collections.abc import Iterable
from typing import Literal

from namewizard.ai.errors import UnknownModel
from namewizard.models import CapabilityRegistry

logger = logging.getLogger(__name__)

HealthStatus = Literal["active", "inactive", "problem"]


class HealthTracker:
    """Holds the current status of every model in a registry.

    Every descriptor gets exactly one entry at construction. All reads and
    writes go through a lock, so concurrent callers (threadpool handlers,
    overlapping analyses) can race on mark_problem() safely.

    Args:
        registry: The registry whose models are tracked.
        inactive: Model ids that start "inactive" instead of "active"
            (e.g. models whose provider has no API key configured).

    Raises:
        UnknownModel: If an id in ``inactive`` is not registered.
    """

    def __init__(
        self,
        registry: CapabilityRegistry,
        inactive: Iterable[str] = (),
    ) -> None:
        self._lock = threading.Lock()
        self._status: dict[str, HealthStatus] = {
            model_id: "active" for model_id in registry.ids()
        }
        for model_id in inactive:
            self._require(model_id)
            self._status[model_id] = "inactive"

    def _require(self, model_id: str) -> None:
        if model_id not in self._status:
            raise UnknownModel(model_id)

    def _set(self, model_id: str, status: HealthStatus) -> None:
        with self._lock:
            self._require(model_id)
            previous = self._status[model_id]
            self._status[model_id] = status
        if previous != status:
            log = logger.warning if status == "problem" else logger.info
            log("Model %s: %s -> %s", model_id, previous, status)

    def status(self, model_id: str) -> HealthStatus:
        """Returns the current status of a model.

        Raises:
            UnknownModel: If the model is not tracked.
        """
        with self._lock:
            self._require(model_id)
            return self._status[model_id]

    def is_active(self, model_id: str) -> bool:
        """Returns True if the model is eligible for selection."""
        return self.status(model_id) == "active"

    def mark_problem(self, model_id: str) -> None:
        """Flags a model as failing. Idempotent."""
        self._set(model_id, "problem")

    def mark_inactive(self, model_id: str) -> None:
        """Takes a model out of rotation without flagging it as failing."""
        self._set(model_id, "inactive")

    def reset(self, model_id: str) -> None:
        """Returns a model to "active". Never called automatically."""
        self._set(model_id, "active")

    def snapshot(self) -> dict[str, HealthStatus]:
        """Returns a copy of the status map, in registration order."""
        with self._lock:
            return dict(self._status)
