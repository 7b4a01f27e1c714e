"""Tests for namewizard.ai.providers.gemini — GeminiProvider contract verification.

All tests mock the google-genai SDK client. No real API calls.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from google.genai import errors as genai_errors
from google.genai import types

from namewizard.ai.providers import gemini as gemini_module
from namewizard.ai.providers.base import AIProvider, UsageInfo
from namewizard.ai.providers.gemini import (
    GeminiProvider,
    _DEFAULT_TEMPERATURE,
    _build_config,
    _build_contents,
    _is_retryable,
)

_SYSTEM = "You name files."
_PROMPT = "Original filename: IMG_0042.jpg"
_MODEL = "gemini-test-model"


# ---------------------------------------------------------------------------
# Mock helpers
# ---------------------------------------------------------------------------


def _make_text_part(text: str, thought: bool = False) -> MagicMock:
    """Creates a mock Part with text content."""
    part = MagicMock()
    part.text = text
    part.thought = thought
    return part


def _make_usage(prompt: int = 100, completion: int = 50) -> MagicMock:
    """Creates a mock UsageMetadata."""
    usage = MagicMock()
    usage.prompt_token_count = prompt
    usage.candidates_token_count = completion
    return usage


def _make_response(parts: list | None = None, usage_metadata: MagicMock | None = None) -> MagicMock:
    """Creates a mock GenerateContentResponse with one candidate."""
    content = MagicMock()
    content.parts = parts or []
    candidate = MagicMock()
    candidate.content = content
    response = MagicMock()
    response.candidates = [candidate]
    response.usage_metadata = usage_metadata
    return response


def _make_provider() -> GeminiProvider:
    """Creates a GeminiProvider with a mocked client."""
    with patch("namewizard.ai.providers.gemini.genai.Client"):
        provider = GeminiProvider(api_key="test-key")
    return provider


def _setup_complete(provider: GeminiProvider, response) -> AsyncMock:
    provider._client.aio.models.generate_content = AsyncMock(return_value=response)
    return provider._client.aio.models.generate_content


@pytest.fixture
def no_backoff(monkeypatch) -> None:
    """Makes retry backoff instantaneous."""
    monkeypatch.setattr(gemini_module, "_BACKOFF_BASE", 0.0)


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestConstruction:
    """GeminiProvider is an AIProvider with SDK retries disabled."""

    def test_isinstance(self) -> None:
        assert isinstance(_make_provider(), AIProvider)

    def test_client_built_with_single_attempt(self) -> None:
        with patch("namewizard.ai.providers.gemini.genai.Client") as client_cls:
            GeminiProvider(api_key="secret")
        kwargs = client_cls.call_args.kwargs
        assert kwargs["api_key"] == "secret"
        assert kwargs["http_options"].retry_options.attempts == 1


# ---------------------------------------------------------------------------
# Request building
# ---------------------------------------------------------------------------


class TestBuildContents:
    """_build_contents() produces a single user turn."""

    def test_text_only(self) -> None:
        contents = _build_contents(_PROMPT, None, None)
        assert len(contents) == 1
        assert contents[0].role == "user"
        assert len(contents[0].parts) == 1
        assert contents[0].parts[0].text == _PROMPT

    def test_image_precedes_text(self) -> None:
        contents = _build_contents(_PROMPT, b"\x89PNG", "image/png")
        parts = contents[0].parts
        assert len(parts) == 2
        assert parts[0].inline_data.data == b"\x89PNG"
        assert parts[0].inline_data.mime_type == "image/png"
        assert parts[1].text == _PROMPT

    def test_missing_mime_type_defaults_to_jpeg(self) -> None:
        contents = _build_contents(_PROMPT, b"raw", None)
        assert contents[0].parts[0].inline_data.mime_type == "image/jpeg"


class TestBuildConfig:
    """_build_config() sets the system instruction and disables thinking."""

    def test_config_fields(self) -> None:
        config = _build_config(_SYSTEM)
        assert isinstance(config, types.GenerateContentConfig)
        assert config.system_instruction == _SYSTEM
        assert config.temperature == _DEFAULT_TEMPERATURE
        assert config.thinking_config.thinking_budget == 0


class TestIsRetryable:
    """Only 429 and server errors are retried."""

    def test_rate_limit(self) -> None:
        assert _is_retryable(genai_errors.ClientError(429, {"error": {"message": "slow"}}))

    def test_server_error(self) -> None:
        assert _is_retryable(genai_errors.ServerError(503, {"error": {"message": "down"}}))

    def test_bad_request(self) -> None:
        assert not _is_retryable(genai_errors.ClientError(400, {"error": {"message": "bad"}}))

    def test_other_exception(self) -> None:
        assert not _is_retryable(ValueError("nope"))


# ---------------------------------------------------------------------------
# describe()
# ---------------------------------------------------------------------------


class TestDescribe:
    """describe() returns joined text and usage."""

    @pytest.mark.asyncio
    async def test_returns_text_and_usage(self) -> None:
        provider = _make_provider()
        _setup_complete(
            provider,
            _make_response([_make_text_part("beach "), _make_text_part("sunset")], _make_usage(80, 6)),
        )

        text, usage = await provider.describe(system_prompt=_SYSTEM, prompt=_PROMPT, model_id=_MODEL)

        assert text == "beach sunset"
        assert usage == UsageInfo(prompt_tokens=80, completion_tokens=6)

    @pytest.mark.asyncio
    async def test_thought_parts_skipped(self) -> None:
        provider = _make_provider()
        _setup_complete(
            provider,
            _make_response([_make_text_part("thinking...", thought=True), _make_text_part("visible")]),
        )
        text, _ = await provider.describe(system_prompt=_SYSTEM, prompt=_PROMPT, model_id=_MODEL)
        assert text == "visible"

    @pytest.mark.asyncio
    async def test_missing_usage_is_zero(self) -> None:
        provider = _make_provider()
        _setup_complete(provider, _make_response([_make_text_part("x")], usage_metadata=None))
        _, usage = await provider.describe(system_prompt=_SYSTEM, prompt=_PROMPT, model_id=_MODEL)
        assert usage == UsageInfo(prompt_tokens=0, completion_tokens=0)

    @pytest.mark.asyncio
    async def test_no_candidates_gives_empty_text(self) -> None:
        provider = _make_provider()
        response = _make_response()
        response.candidates = []
        _setup_complete(provider, response)
        text, _ = await provider.describe(system_prompt=_SYSTEM, prompt=_PROMPT, model_id=_MODEL)
        assert text == ""

    @pytest.mark.asyncio
    async def test_sdk_call_arguments(self) -> None:
        provider = _make_provider()
        mock = _setup_complete(provider, _make_response([_make_text_part("ok")]))

        await provider.describe(
            system_prompt=_SYSTEM,
            prompt=_PROMPT,
            model_id=_MODEL,
            image=b"img",
            image_mime_type="image/webp",
        )

        kwargs = mock.call_args.kwargs
        assert kwargs["model"] == _MODEL
        assert kwargs["config"].system_instruction == _SYSTEM
        assert kwargs["contents"][0].parts[0].inline_data.mime_type == "image/webp"


class TestRetries:
    """Transient errors are retried; others propagate immediately."""

    @pytest.mark.asyncio
    async def test_retry_on_429(self, no_backoff) -> None:
        provider = _make_provider()
        response = _make_response([_make_text_part("ok")], _make_usage())
        provider._client.aio.models.generate_content = AsyncMock(
            side_effect=[
                genai_errors.ClientError(429, {"error": {"message": "rate limit"}}),
                response,
            ]
        )

        text, _ = await provider.describe(system_prompt=_SYSTEM, prompt=_PROMPT, model_id=_MODEL)

        assert text == "ok"
        assert provider._client.aio.models.generate_content.call_count == 2

    @pytest.mark.asyncio
    async def test_server_error_exhausts_retries(self, no_backoff) -> None:
        provider = _make_provider()
        provider._client.aio.models.generate_content = AsyncMock(
            side_effect=genai_errors.ServerError(500, {"error": {"message": "internal"}})
        )

        with pytest.raises(genai_errors.ServerError):
            await provider.describe(system_prompt=_SYSTEM, prompt=_PROMPT, model_id=_MODEL)

        assert provider._client.aio.models.generate_content.call_count == 3

    @pytest.mark.asyncio
    async def test_non_retryable_error_propagates(self) -> None:
        provider = _make_provider()
        provider._client.aio.models.generate_content = AsyncMock(
            side_effect=genai_errors.ClientError(403, {"error": {"message": "forbidden"}})
        )

        with pytest.raises(genai_errors.ClientError) as exc_info:
            await provider.describe(system_prompt=_SYSTEM, prompt=_PROMPT, model_id=_MODEL)

        assert exc_info.value.code == 403
        assert provider._client.aio.models.generate_content.call_count == 1
