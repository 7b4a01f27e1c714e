"""Model registry — single source of truth for analysis model identifiers.

Every model the analysis core can route to is declared here, once, as an
immutable ModelDescriptor. The rest of the codebase refers to models by
their registry id — no raw provider model strings anywhere else.

Three-layer abstraction:
  Layer 1: Callers ask for a capability ("vision", "text")
  Layer 2: CapabilityRegistry orders capable descriptors by priority
  Layer 3: Provider model IDs (updated when providers release new versions)

To change which model is tried first: change a priority below.

Tier 1 leaf — imports only stdlib and namewizard.ai.errors (also Tier 1).
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from namewizard.ai.errors import UnknownModel

# ---------------------------------------------------------------------------
# Layer 3: Provider model IDs (update when providers release new versions)
# ---------------------------------------------------------------------------

# --- Claude models ---
CLAUDE_HAIKU: str = "claude-haiku-4-5-20251001"
CLAUDE_SONNET: str = "claude-sonnet-4-6"

# --- Gemini models ---
GEMINI_FLASH_LITE: str = "gemini-flash-lite-latest"
GEMINI_FLASH: str = "gemini-3-flash-preview"
GEMINI_PRO: str = "gemini-3.1-pro-preview"

# Capability tags understood by ModelDescriptor.supports()
CAPABILITY_VISION = "vision"
CAPABILITY_TEXT = "text"
CAPABILITY_BATCH = "batch"
CAPABILITY_STREAMING = "streaming"


# ---------------------------------------------------------------------------
# ModelDescriptor — one invocable backend model
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ModelDescriptor:
    """Declares one backend model and what it can do.

    Immutable for the process lifetime. Lower priority is tried first
    among equally-capable models; context_window is informational.
    """

    id: str
    provider: str          # "gemini", "anthropic" or "mock"
    api_model_id: str      # e.g. "gemini-3-flash-preview"
    supports_vision: bool = False
    supports_text: bool = False
    supports_batch: bool = False
    supports_streaming: bool = False
    context_window: int = 1
    priority: int = 1

    def __post_init__(self) -> None:
        if self.priority < 1:
            raise ValueError(f"Model {self.id!r}: priority must be positive, got {self.priority}")
        if self.context_window < 1:
            raise ValueError(
                f"Model {self.id!r}: context_window must be positive, got {self.context_window}"
            )

    def supports(self, capability: str) -> bool:
        """Returns True if this model declares the given capability tag.

        Unrecognised tags (e.g. "audio") are never supported.
        """
        flags = {
            CAPABILITY_VISION: self.supports_vision,
            CAPABILITY_TEXT: self.supports_text,
            CAPABILITY_BATCH: self.supports_batch,
            CAPABILITY_STREAMING: self.supports_streaming,
        }
        return flags.get(capability, False)

    def capabilities(self) -> list[str]:
        """Lists the capability tags this model supports, in a fixed order."""
        tags = [CAPABILITY_VISION, CAPABILITY_TEXT, CAPABILITY_BATCH, CAPABILITY_STREAMING]
        return [tag for tag in tags if self.supports(tag)]


# ---------------------------------------------------------------------------
# CapabilityRegistry — static lookup, pure data
# ---------------------------------------------------------------------------


class CapabilityRegistry:
    """Static lookup of ModelDescriptors by id and by capability.

    Registration order is preserved and used to break priority ties,
    so list_by_capability() is fully deterministic.

    Args:
        descriptors: The models to register. Ids must be unique.

    Raises:
        ValueError: If two descriptors share an id.
    """

    def __init__(self, descriptors: Iterable[ModelDescriptor]) -> None:
        self._by_id: dict[str, ModelDescriptor] = {}
        for descriptor in descriptors:
            if descriptor.id in self._by_id:
                raise ValueError(f"Duplicate model id in registry: {descriptor.id!r}")
            self._by_id[descriptor.id] = descriptor

    def __iter__(self) -> Iterator[ModelDescriptor]:
        return iter(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, model_id: object) -> bool:
        return model_id in self._by_id

    def ids(self) -> list[str]:
        """Returns all registered model ids in registration order."""
        return list(self._by_id)

    def get(self, model_id: str) -> ModelDescriptor:
        """Looks up a descriptor by id.

        Raises:
            UnknownModel: If no model with this id is registered.
        """
        try:
            return self._by_id[model_id]
        except KeyError:
            raise UnknownModel(model_id) from None

    def list_by_capability(self, capability: str) -> list[ModelDescriptor]:
        """Returns descriptors supporting a capability, lowest priority first.

        sorted() is stable, so equal priorities keep registration order.
        An unknown capability yields an empty list.
        """
        capable = [d for d in self._by_id.values() if d.supports(capability)]
        return sorted(capable, key=lambda d: d.priority)


# ---------------------------------------------------------------------------
# Layer 2: Production model table
# ---------------------------------------------------------------------------
# Flash first for both capabilities — fast, cheap, strong at short
# descriptive output. Sonnet is the cross-provider backup so a Gemini
# outage still leaves a working route.

DEFAULT_MODELS: tuple[ModelDescriptor, ...] = (
    ModelDescriptor(
        id="gemini-flash",
        provider="gemini",
        api_model_id=GEMINI_FLASH,
        supports_vision=True,
        supports_text=True,
        supports_batch=True,
        supports_streaming=True,
        context_window=1_000_000,
        priority=1,
    ),
    ModelDescriptor(
        id="claude-sonnet",
        provider="anthropic",
        api_model_id=CLAUDE_SONNET,
        supports_vision=True,
        supports_text=True,
        supports_batch=True,
        supports_streaming=True,
        context_window=200_000,
        priority=2,
    ),
    ModelDescriptor(
        id="gemini-flash-lite",
        provider="gemini",
        api_model_id=GEMINI_FLASH_LITE,
        supports_vision=True,
        supports_text=True,
        supports_batch=True,
        supports_streaming=True,
        context_window=1_000_000,
        priority=3,
    ),
    ModelDescriptor(
        id="claude-haiku",
        provider="anthropic",
        api_model_id=CLAUDE_HAIKU,
        supports_vision=True,
        supports_text=True,
        supports_batch=True,
        supports_streaming=True,
        context_window=200_000,
        priority=3,
    ),
    ModelDescriptor(
        id="gemini-pro",
        provider="gemini",
        api_model_id=GEMINI_PRO,
        supports_vision=True,
        supports_text=True,
        supports_batch=False,
        supports_streaming=True,
        context_window=1_000_000,
        priority=4,
    ),
)


def build_default_registry() -> CapabilityRegistry:
    """Returns a fresh registry over DEFAULT_MODELS."""
    return CapabilityRegistry(DEFAULT_MODELS)


# ---------------------------------------------------------------------------
# Lookup map — env var value → registry id
# ---------------------------------------------------------------------------
# Keys match the constant names exactly (case-sensitive).
MODEL_MAP: dict[str, str] = {
    "GEMINI_FLASH": "gemini-flash",
    "GEMINI_FLASH_LITE": "gemini-flash-lite",
    "GEMINI_PRO": "gemini-pro",
    "CLAUDE_SONNET": "claude-sonnet",
    "CLAUDE_HAIKU": "claude-haiku",
}
