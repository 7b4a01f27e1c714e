"""Structured usage logging for model calls.

Emits one structured log line per backend invocation with all fields
needed for cost and reliability analysis. Machine-parseable via the
``extra`` dict — standard JSON log formatters (e.g., python-json-logger)
pick these up automatically.

Logger name: ``namewizard.ai.usage``

Tier 2 service: imports only stdlib.
"""

import logging

logger = logging.getLogger("namewizard.ai.usage")


def log_model_call(
    *,
    model_id: str,
    capability: str,
    prompt_tokens: int,
    completion_tokens: int,
    latency_ms: float,
    outcome: str,
) -> None:
    """Emits a structured INFO log for a model call.

    Args:
        model_id: Registry id of the model invoked.
        capability: Capability tag the call served ("vision" or "text").
        prompt_tokens: Number of input tokens consumed (0 on failure).
        completion_tokens: Number of output tokens generated (0 on failure).
        latency_ms: Wall-clock duration of the call in milliseconds.
        outcome: "success" or "error".
    """
    logger.info(
        "Model call: %s %s %s tokens_in=%d tokens_out=%d latency=%.0fms",
        capability,
        model_id,
        outcome,
        prompt_tokens,
        completion_tokens,
        latency_ms,
        extra={
            "model_id": model_id,
            "capability": capability,
            "prompt_tokens": prompt_tokens,
            "completion_tokens": completion_tokens,
            "latency_ms": latency_ms,
            "outcome": outcome,
        },
    )
