"""Provider-backed ModelBackend — routes a descriptor to its AI provider.

Turns (descriptor, capability, payload) into a provider describe() call:
picks the provider by ``descriptor.provider``, loads the system prompt,
builds the user prompt, and normalises every provider failure into
BackendError so the invoker sees one error type regardless of SDK.
Malformed requests are rejected by check_payload() as InvalidPayload,
which the invoker raises before any model is called.

Tier 2 service — imports from ai.interfaces, ai.prompts, ai.providers.base,
ai.usage, ai.errors and models.
"""

import logging
import time

from namewizard.ai.errors import BackendError, InvalidPayload
from namewizard.ai.interfaces import AnalysisPayload, ModelBackend
from namewizard.ai.prompts import PromptLoader, build_user_prompt
from namewizard.ai.providers.base import AIProvider
from namewizard.ai.usage import log_model_call
from namewizard.models import CAPABILITY_TEXT, CAPABILITY_VISION, ModelDescriptor

logger = logging.getLogger(__name__)


class ProviderBackend(ModelBackend):
    """ModelBackend over a set of named AIProviders.

    Args:
        providers: Provider name ("gemini", "anthropic", "mock") → instance.
            Descriptors whose provider is missing fail with BackendError.
        prompt_loader: Source of per-capability system prompts.
    """

    def __init__(self, providers: dict[str, AIProvider], prompt_loader: PromptLoader) -> None:
        self._providers = providers
        self._prompt_loader = prompt_loader

    def check_payload(self, capability: str, payload: AnalysisPayload) -> None:
        """Rejects payloads that carry nothing the capability can analyse.

        Only vision and text requests can be sent to a provider; the other
        capability tags describe models, not requests.

        Raises:
            InvalidPayload: On a missing image or text excerpt, or a
                capability that cannot be invoked.
        """
        if capability not in (CAPABILITY_VISION, CAPABILITY_TEXT):
            raise InvalidPayload(capability, "this capability cannot be invoked")
        if capability == CAPABILITY_VISION and not payload.image:
            raise InvalidPayload(capability, "vision analysis requires image bytes")
        if capability == CAPABILITY_TEXT and payload.text is None:
            raise InvalidPayload(capability, "text analysis requires a text excerpt")

    async def invoke(
        self,
        descriptor: ModelDescriptor,
        capability: str,
        payload: AnalysisPayload,
    ) -> str:
        """Calls the descriptor's provider and returns the stripped response.

        Raises:
            InvalidPayload: If the payload is unusable for the capability.
            BackendError: On missing provider or prompt, provider exception,
                or an empty response.
        """
        provider = self._providers.get(descriptor.provider)
        if provider is None:
            raise BackendError(descriptor.id, f"no provider configured for {descriptor.provider!r}")

        self.check_payload(capability, payload)

        system_prompt = self._prompt_loader.load_system_prompt(capability, descriptor.provider)
        if system_prompt is None:
            raise BackendError(descriptor.id, f"no system prompt for capability {capability!r}")

        prompt = build_user_prompt(capability, payload)
        image = payload.image if capability == CAPABILITY_VISION else None

        start = time.monotonic()
        try:
            text, usage = await provider.describe(
                system_prompt=system_prompt,
                prompt=prompt,
                model_id=descriptor.api_model_id,
                image=image,
                image_mime_type=payload.mime_type if image is not None else None,
            )
        except Exception as exc:
            log_model_call(
                model_id=descriptor.id,
                capability=capability,
                prompt_tokens=0,
                completion_tokens=0,
                latency_ms=(time.monotonic() - start) * 1000,
                outcome="error",
            )
            raise BackendError(descriptor.id, f"{type(exc).__name__}: {exc}") from exc

        log_model_call(
            model_id=descriptor.id,
            capability=capability,
            prompt_tokens=usage.prompt_tokens,
            completion_tokens=usage.completion_tokens,
            latency_ms=(time.monotonic() - start) * 1000,
            outcome="success",
        )

        content = text.strip()
        if not content:
            raise BackendError(descriptor.id, "empty response")
        return content
