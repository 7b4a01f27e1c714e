"""Anthropic Claude AI provider using the anthropic SDK.

Implements the AIProvider contract for Anthropic's Claude model family.
Images are sent as a base64 image content block ahead of the prompt text.
Transient errors are retried with exponential backoff.

Tier 2 service — imports from base.py (Tier 1) + anthropic SDK.
"""

import asyncio
import base64
import logging

import anthropic

from namewizard.ai.providers.base import AIProvider, UsageInfo

logger = logging.getLogger(__name__)

_DEFAULT_TEMPERATURE = 0.2
_DEFAULT_MAX_TOKENS = 256  # A filename description is a few dozen tokens
_MAX_RETRIES = 2  # 3 total attempts
_BACKOFF_BASE = 1.0  # seconds — doubles each retry


def _is_retryable(exc: Exception) -> bool:
    """Checks whether an SDK error is transient and worth retrying.

    Retries on:
    - RateLimitError (429)
    - InternalServerError (500+)

    All other API errors (400, 401, 403, 404) propagate immediately.
    """
    if isinstance(exc, anthropic.RateLimitError):
        return True
    if isinstance(exc, anthropic.InternalServerError):
        return True
    return False


def _build_messages(
    prompt: str,
    image: bytes | None,
    image_mime_type: str | None,
) -> list[dict]:
    """Builds the single user message in Anthropic content-block format."""
    content: list[dict] = []
    if image is not None:
        content.append(
            {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": image_mime_type or "image/jpeg",
                    "data": base64.b64encode(image).decode("ascii"),
                },
            }
        )
    content.append({"type": "text", "text": prompt})
    return [{"role": "user", "content": content}]


class AnthropicProvider(AIProvider):
    """Anthropic Claude provider using the anthropic SDK.

    Args:
        api_key: Anthropic API key for Claude access.
    """

    def __init__(self, api_key: str) -> None:
        self._client = anthropic.AsyncAnthropic(
            api_key=api_key,
            max_retries=0,
        )

    async def describe(
        self,
        *,
        system_prompt: str,
        prompt: str,
        model_id: str,
        image: bytes | None = None,
        image_mime_type: str | None = None,
    ) -> tuple[str, UsageInfo]:
        """Returns the full response text and usage info.

        Retries on transient errors (429, 5xx) with exponential backoff.

        Args:
            system_prompt: The system instruction.
            prompt: The user-turn text.
            model_id: Anthropic API model identifier.
            image: Optional raw image bytes.
            image_mime_type: MIME type of ``image``.

        Returns:
            Tuple of (full response text, token usage information).
        """
        kwargs: dict = {
            "model": model_id,
            "system": system_prompt,
            "messages": _build_messages(prompt, image, image_mime_type),
            "max_tokens": _DEFAULT_MAX_TOKENS,
            "temperature": _DEFAULT_TEMPERATURE,
        }

        last_exc: Exception | None = None
        for attempt in range(_MAX_RETRIES + 1):
            if attempt > 0:
                backoff = _BACKOFF_BASE * (2 ** (attempt - 1))
                logger.warning(
                    "Anthropic retry %d/%d after %.1fs backoff",
                    attempt,
                    _MAX_RETRIES,
                    backoff,
                )
                await asyncio.sleep(backoff)
            try:
                response = await self._client.messages.create(**kwargs)

                parts_text = []
                for block in response.content:
                    if block.type == "text":
                        parts_text.append(block.text)

                usage = UsageInfo(
                    prompt_tokens=response.usage.input_tokens,
                    completion_tokens=response.usage.output_tokens,
                )
                return "".join(parts_text), usage

            except anthropic.APIStatusError as exc:
                if not _is_retryable(exc) or attempt == _MAX_RETRIES:
                    raise
                last_exc = exc

        # Should not reach here, but just in case
        if last_exc is not None:  # pragma: no cover
            raise last_exc
        raise RuntimeError("Unreachable")  # pragma: no cover
