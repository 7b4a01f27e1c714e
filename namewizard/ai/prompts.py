"""Prompt loading from disk with provider-specific fallback and caching.

Analysis system prompts live in the prompts/ directory, one per capability:
``vision_base.md`` and ``text_base.md``, with optional provider overrides
(``vision_gemini.md``, ``text_claude.md``, ...). The loader tries the
provider-specific file first, falls back to base, and caches the result
keyed by (capability, provider).

Consumed by:
- ProviderBackend — system prompt for every model call
- Startup checks — validates every capability has a prompt
"""

from __future__ import annotations

import logging
from pathlib import Path

from namewizard.ai.interfaces import AnalysisPayload
from namewizard.models import CAPABILITY_VISION

logger = logging.getLogger(__name__)

# Provider name → file suffix mapping.
# Unknown providers fall back to base files only.
_PROVIDER_SUFFIX: dict[str, str] = {
    "anthropic": "claude",
    "gemini": "gemini",
}

# Only the first 2000 characters of a document are sent to the model.
TEXT_EXCERPT_LIMIT = 2000


class PromptLoader:
    """Loads and caches analysis system prompts from disk.

    Args:
        prompts_dir: Directory holding the ``<capability>_<variant>.md`` files.
    """

    def __init__(self, prompts_dir: Path) -> None:
        self._prompts_dir = prompts_dir
        self._cache: dict[tuple[str, str], str | None] = {}

    def load_system_prompt(self, capability: str, provider: str) -> str | None:
        """Loads the system prompt for a capability, provider override first.

        Empty or whitespace-only files are treated as absent.

        Args:
            capability: Capability tag ("vision" or "text").
            provider: Provider name (e.g. "gemini", "anthropic").

        Returns:
            The prompt text, or None if neither variant exists.
        """
        cache_key = (capability, provider)
        if cache_key in self._cache:
            return self._cache[cache_key]

        content = None
        suffix = _PROVIDER_SUFFIX.get(provider)
        if suffix is not None:
            content = self._read(f"{capability}_{suffix}.md")
        if content is None:
            content = self._read(f"{capability}_base.md")

        self._cache[cache_key] = content
        return content

    def _read(self, filename: str) -> str | None:
        path = self._prompts_dir / filename
        if not path.is_file():
            return None
        text = path.read_text(encoding="utf-8").strip()
        if not text:
            logger.debug("Prompt file %s is empty, treating as absent", path)
            return None
        return text

    def validate(self, capabilities: tuple[str, ...]) -> list[str]:
        """Returns human-readable errors for capabilities lacking a base prompt."""
        errors = []
        for capability in capabilities:
            if self._read(f"{capability}_base.md") is None:
                errors.append(
                    f"Missing prompt file {capability}_base.md in {self._prompts_dir}"
                )
        return errors


def build_user_prompt(capability: str, payload: AnalysisPayload) -> str:
    """Builds the user-turn text describing the file to analyse.

    Text payloads are cut to TEXT_EXCERPT_LIMIT characters.
    """
    lines = [
        f"Original filename: {payload.file_name}",
        f"File type: {payload.mime_type}",
    ]
    if capability == CAPABILITY_VISION:
        lines.append("")
        lines.append("Describe the attached image.")
    else:
        excerpt = (payload.text or "")[:TEXT_EXCERPT_LIMIT]
        lines.append("")
        lines.append("File content excerpt:")
        lines.append(excerpt)
    return "\n".join(lines)
