"""Shared test fixtures for the analysis core and API.

Factory-pattern fixtures that return callables accepting **overrides.

Fixtures:
    make_descriptor: Factory for ModelDescriptor instances
    make_payload: Factory for AnalysisPayload instances
    mock_provider: Factory for MockProvider instances
    two_vision_registry: Registry with X (priority 1) and Y (priority 2)
    make_invoker: Builds registry + health + selector + invoker in one go
"""

import asyncio
from dataclasses import dataclass

import pytest

from namewizard.ai.errors import BackendError
from namewizard.ai.health import HealthTracker
from namewizard.ai.interfaces import AnalysisPayload, ModelBackend
from namewizard.ai.invoker import AnalysisInvoker
from namewizard.ai.providers.mock import MockProvider
from namewizard.ai.selector import ModelSelector
from namewizard.models import CapabilityRegistry, ModelDescriptor


# ---------------------------------------------------------------------------
# Scripted backend — per-model outcomes for invoker tests
# ---------------------------------------------------------------------------


class ScriptedBackend(ModelBackend):
    """ModelBackend whose result depends on the model id.

    Args:
        outcomes: model id → content string, or an Exception to raise.
            Models not listed succeed with "<model id> description".
        delays: model id → seconds to sleep before answering.
    """

    def __init__(
        self,
        outcomes: dict[str, str | Exception] | None = None,
        delays: dict[str, float] | None = None,
    ) -> None:
        self.outcomes = outcomes or {}
        self.delays = delays or {}
        self.calls: list[str] = []

    async def invoke(self, descriptor, capability, payload) -> str:
        self.calls.append(descriptor.id)
        delay = self.delays.get(descriptor.id, 0.0)
        if delay:
            await asyncio.sleep(delay)
        outcome = self.outcomes.get(descriptor.id, f"{descriptor.id} description")
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@dataclass
class InvokerBundle:
    """Everything make_invoker builds, for assertions on each piece."""

    registry: CapabilityRegistry
    health: HealthTracker
    selector: ModelSelector
    backend: ScriptedBackend
    invoker: AnalysisInvoker


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_descriptor():
    """Returns a factory for ModelDescriptor instances.

    Defaults produce a vision+text mock model with priority 1.
    """

    def _make(model_id: str = "model-a", **overrides) -> ModelDescriptor:
        defaults = {
            "id": model_id,
            "provider": "mock",
            "api_model_id": f"{model_id}-api",
            "supports_vision": True,
            "supports_text": True,
            "context_window": 8000,
            "priority": 1,
        }
        defaults.update(overrides)
        return ModelDescriptor(**defaults)

    return _make


@pytest.fixture
def make_payload():
    """Returns a factory for AnalysisPayload instances (text by default)."""

    def _make(**overrides) -> AnalysisPayload:
        defaults = {
            "file_name": "scan_001.pdf",
            "mime_type": "application/pdf",
            "text": "Invoice 2024-117 from Acme Ltd for consulting services",
        }
        defaults.update(overrides)
        return AnalysisPayload(**defaults)

    return _make


@pytest.fixture
def mock_provider():
    """Returns a factory function for creating MockProvider instances."""

    def _make(**kwargs) -> MockProvider:
        return MockProvider(**kwargs)

    return _make


@pytest.fixture
def two_vision_registry(make_descriptor) -> CapabilityRegistry:
    """X (priority 1) and Y (priority 2), both vision-only."""
    return CapabilityRegistry([
        make_descriptor("X", supports_text=False, priority=1),
        make_descriptor("Y", supports_text=False, priority=2),
    ])


@pytest.fixture
def make_invoker(two_vision_registry):
    """Returns a factory that wires registry, health, selector and invoker.

    Keyword args:
        registry: Defaults to two_vision_registry.
        inactive: Model ids that start inactive.
        outcomes / delays: Passed to ScriptedBackend.
        timeout_seconds / max_fallbacks: Passed to AnalysisInvoker.
    """

    def _make(
        registry: CapabilityRegistry | None = None,
        inactive: tuple[str, ...] = (),
        outcomes: dict | None = None,
        delays: dict | None = None,
        timeout_seconds: float | None = 5.0,
        max_fallbacks: int = 1,
    ) -> InvokerBundle:
        registry = registry or two_vision_registry
        health = HealthTracker(registry, inactive=inactive)
        selector = ModelSelector(registry, health)
        backend = ScriptedBackend(outcomes=outcomes, delays=delays)
        invoker = AnalysisInvoker(
            selector,
            health,
            backend,
            timeout_seconds=timeout_seconds,
            max_fallbacks=max_fallbacks,
        )
        return InvokerBundle(registry, health, selector, backend, invoker)

    return _make


@pytest.fixture
def backend_error():
    """Returns a factory for BackendError instances."""

    def _make(model_id: str = "X", message: str = "provider exploded") -> BackendError:
        return BackendError(model_id, message)

    return _make
