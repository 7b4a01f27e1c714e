"""Google Gemini AI provider using the google-genai SDK.

Implements the AIProvider contract for Google's Gemini model family.
Sends a text prompt, optionally with one inline image, filters thinking
parts out of the response, and retries transient errors with exponential
backoff.

Tier 2 service — imports from base.py (Tier 1) + google-genai SDK.
"""

import asyncio
import logging

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from namewizard.ai.providers.base import AIProvider, UsageInfo

logger = logging.getLogger(__name__)

_DEFAULT_TEMPERATURE = 0.2
_DEFAULT_MAX_OUTPUT_TOKENS = 256
_MAX_RETRIES = 2  # 3 total attempts
_BACKOFF_BASE = 1.0  # seconds — doubles each retry


def _is_retryable(exc: Exception) -> bool:
    """Checks whether an SDK error is transient and worth retrying.

    Retries on:
    - ClientError with code 429 (rate limit)
    - Any ServerError (500, 502, 503, etc.)

    All other errors (400 bad request, 403 auth, etc.) propagate immediately.
    """
    if isinstance(exc, genai_errors.ServerError):
        return True
    if isinstance(exc, genai_errors.ClientError) and exc.code == 429:
        return True
    return False


def _build_contents(
    prompt: str,
    image: bytes | None,
    image_mime_type: str | None,
) -> list[types.Content]:
    """Builds the single user turn: optional image part, then the prompt."""
    parts: list[types.Part] = []
    if image is not None:
        parts.append(
            types.Part.from_bytes(
                data=image,
                mime_type=image_mime_type or "image/jpeg",
            )
        )
    parts.append(types.Part(text=prompt))
    return [types.Content(parts=parts, role="user")]


def _build_config(system_prompt: str) -> types.GenerateContentConfig:
    """Builds the GenerateContentConfig for a Gemini API call."""
    return types.GenerateContentConfig(
        system_instruction=system_prompt,
        temperature=_DEFAULT_TEMPERATURE,
        max_output_tokens=_DEFAULT_MAX_OUTPUT_TOKENS,
        thinking_config=types.ThinkingConfig(thinking_budget=0),
    )


class GeminiProvider(AIProvider):
    """Gemini AI provider using the google-genai SDK.

    SDK-level retries are disabled; this class owns the retry policy so
    that non-transient errors reach the invoker immediately and trigger
    model fallback.

    Args:
        api_key: Google API key for Gemini access.
    """

    def __init__(self, api_key: str) -> None:
        self._client = genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(
                retry_options=types.HttpRetryOptions(attempts=1),
            ),
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
            model_id: Gemini API model identifier.
            image: Optional raw image bytes.
            image_mime_type: MIME type of ``image``.

        Returns:
            Tuple of (full response text, token usage information).
        """
        contents = _build_contents(prompt, image, image_mime_type)
        config = _build_config(system_prompt)

        last_exc: Exception | None = None
        for attempt in range(_MAX_RETRIES + 1):
            if attempt > 0:
                backoff = _BACKOFF_BASE * (2 ** (attempt - 1))
                logger.warning(
                    "Gemini retry %d/%d after %.1fs backoff",
                    attempt,
                    _MAX_RETRIES,
                    backoff,
                )
                await asyncio.sleep(backoff)
            try:
                response = await self._client.aio.models.generate_content(
                    model=model_id,
                    contents=contents,
                    config=config,
                )

                # Extract text from all non-thinking parts
                parts_text = []
                if response.candidates:
                    for candidate in response.candidates:
                        if candidate.content is None or candidate.content.parts is None:
                            continue
                        for part in candidate.content.parts:
                            if getattr(part, "thought", False):
                                continue
                            if part.text is not None:
                                parts_text.append(part.text)

                prompt_tokens = 0
                completion_tokens = 0
                if response.usage_metadata is not None:
                    prompt_tokens = response.usage_metadata.prompt_token_count or 0
                    completion_tokens = (
                        response.usage_metadata.candidates_token_count or 0
                    )

                usage = UsageInfo(
                    prompt_tokens=prompt_tokens,
                    completion_tokens=completion_tokens,
                )
                return "".join(parts_text), usage

            except (genai_errors.ClientError, genai_errors.ServerError) as exc:
                if not _is_retryable(exc) or attempt == _MAX_RETRIES:
                    raise
                last_exc = exc

        # Should not reach here, but just in case
        if last_exc is not None:  # pragma: no cover
            raise last_exc
        raise RuntimeError("Unreachable")  # pragma: no cover
