"""Base AI provider interface and usage types.

Defines the contract that every AI provider implementation (Gemini,
Anthropic, Mock) must satisfy: turn a prompt, optionally with one image,
into a short content description.

Tier 1 leaf — imports only stdlib.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class UsageInfo:
    """Token usage from a completed AI call.

    Used for cost logging via namewizard.ai.usage.
    """

    prompt_tokens: int
    completion_tokens: int


# ---------------------------------------------------------------------------
# AIProvider ABC — the interface every provider implements
# ---------------------------------------------------------------------------


class AIProvider(ABC):
    """Abstract base for AI model providers.

    Concrete implementations (GeminiProvider, AnthropicProvider, MockProvider)
    implement describe() against their respective APIs. Providers raise on
    failure; they never return an error string in place of content.
    """

    @abstractmethod
    async def describe(
        self,
        *,
        system_prompt: str,
        prompt: str,
        model_id: str,
        image: bytes | None = None,
        image_mime_type: str | None = None,
    ) -> tuple[str, UsageInfo]:
        """Returns the model's full response text and usage info.

        Args:
            system_prompt: The system instruction.
            prompt: The user-turn text.
            model_id: Provider API model identifier.
            image: Optional raw image bytes sent alongside the prompt.
            image_mime_type: MIME type of ``image`` (e.g. "image/png").

        Returns:
            Tuple of (full response text, token usage information).
        """
