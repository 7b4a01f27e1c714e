"""Mock AI provider for testing and development.

Deterministic, zero-cost AIProvider implementation that returns a
configurable canned description. Used by:
- The test suite (via conftest.mock_provider fixture)
- Development mode (AI_BACKEND=mock) for team members without API keys
- Reference implementation of the AIProvider contract

Tier 2 service — imports only from base.py (Tier 1).
"""

import asyncio

from namewizard.ai.providers.base import AIProvider, UsageInfo

_DEFAULT_RESPONSE = "mock content description"
_DEFAULT_USAGE = UsageInfo(prompt_tokens=10, completion_tokens=5)


class MockProvider(AIProvider):
    """Deterministic AI provider for testing.

    Args:
        response: Text returned by describe(). Defaults to
            "mock content description".
        usage: Token usage returned by describe(). Defaults to 10/5.
        error: If set, describe() raises this (after any delay).
        failing_models: API model ids that raise ``error`` (or a RuntimeError
            when ``error`` is unset); other models succeed.
        delay: Seconds to sleep before answering, for timeout tests.
    """

    def __init__(
        self,
        response: str = _DEFAULT_RESPONSE,
        usage: UsageInfo | None = None,
        error: Exception | None = None,
        failing_models: set[str] | None = None,
        delay: float = 0.0,
    ) -> None:
        self.response = response
        self.usage = usage or _DEFAULT_USAGE
        self.error = error
        self.failing_models = failing_models
        self.delay = delay
        self.calls: list[dict] = []

    async def describe(
        self,
        *,
        system_prompt: str,
        prompt: str,
        model_id: str,
        image: bytes | None = None,
        image_mime_type: str | None = None,
    ) -> tuple[str, UsageInfo]:
        """Returns the configured response and usage info.

        Records every call in ``calls`` before sleeping or raising.
        """
        self.calls.append(
            {
                "system_prompt": system_prompt,
                "prompt": prompt,
                "model_id": model_id,
                "image": image,
                "image_mime_type": image_mime_type,
            }
        )
        if self.delay:
            await asyncio.sleep(self.delay)

        if self.failing_models is not None:
            if model_id in self.failing_models:
                raise self.error or RuntimeError(f"Mock failure for {model_id}")
        elif self.error is not None:
            raise self.error

        return self.response, self.usage
