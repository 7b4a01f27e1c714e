"""Model selection — preferred model first, then priority order.

Given a capability and an optional preferred model, returns the model the
invoker should call next:

  1. Candidates = registry.list_by_capability(capability), priority order.
  2. Preferred model wins if it is a candidate and currently active.
  3. Otherwise the first active candidate.
  4. Nothing qualifies → NoAvailableModel.

A preferred model that exists but lacks the capability is silently ignored.
A preferred id that is not registered at all is a configuration error and
raises UnknownModel.

Tier 2 service — imports from models (Tier 1), ai.errors (Tier 1),
ai.health (Tier 2).
"""

import logging
from collections.abc import Collection

from namewizard.ai.errors import NoAvailableModel
from namewizard.ai.health import HealthTracker
from namewizard.models import CapabilityRegistry, ModelDescriptor

logger = logging.getLogger(__name__)


class ModelSelector:
    """Chooses a model for a capability using registry priority and health.

    Pure with respect to its inputs; never mutates the health tracker.

    Args:
        registry: Static capability registry.
        health: Shared health tracker.
    """

    def __init__(self, registry: CapabilityRegistry, health: HealthTracker) -> None:
        self._registry = registry
        self._health = health

    @property
    def registry(self) -> CapabilityRegistry:
        return self._registry

    def select(
        self,
        capability: str,
        preferred_model_id: str | None = None,
        exclude: Collection[str] = (),
    ) -> ModelDescriptor:
        """Returns the best available model for a capability.

        Args:
            capability: Capability tag, e.g. "vision" or "text".
            preferred_model_id: Model to short-circuit priority order with,
                if it supports the capability and is active.
            exclude: Model ids never to return (already tried by the caller).

        Returns:
            The selected ModelDescriptor.

        Raises:
            UnknownModel: If preferred_model_id is not registered.
            NoAvailableModel: If no candidate is active and not excluded.
        """
        if preferred_model_id is not None:
            # Validates the id even when the preference ends up ignored
            self._registry.get(preferred_model_id)

        candidates = [
            d for d in self._registry.list_by_capability(capability)
            if d.id not in exclude
        ]

        if preferred_model_id is not None:
            for descriptor in candidates:
                if descriptor.id == preferred_model_id and self._health.is_active(descriptor.id):
                    return descriptor
            logger.debug(
                "Preferred model %s not usable for %s, falling back to priority order",
                preferred_model_id,
                capability,
            )

        for descriptor in candidates:
            if self._health.is_active(descriptor.id):
                return descriptor

        raise NoAvailableModel(capability)
