"""Analysis error taxonomy.

UnknownModel (a configuration error) and InvalidPayload (a malformed
request) are raised to the caller before any model is invoked.
NoAvailableModel and BackendError are caught by the invoker and turned
into structured AnalysisResult failures, so they never abort a batch.

Tier 1 leaf — stdlib only.
"""


class AnalysisError(Exception):
    """Base class for every error raised by the analysis core."""


class UnknownModel(AnalysisError, LookupError):
    """A model id is not present in the capability registry."""

    def __init__(self, model_id: str) -> None:
        super().__init__(f"Unknown model: {model_id!r}")
        self.model_id = model_id


class NoAvailableModel(AnalysisError):
    """No registered model for the capability is currently active."""

    def __init__(self, capability: str) -> None:
        super().__init__(f"No available model for capability {capability!r}")
        self.capability = capability


class BackendError(AnalysisError):
    """A model backend invocation failed (provider error or empty response)."""

    def __init__(self, model_id: str, message: str) -> None:
        super().__init__(f"{model_id}: {message}")
        self.model_id = model_id
        self.message = message


class InvalidPayload(AnalysisError, ValueError):
    """The request cannot be analysed whichever model is chosen.

    Raised before any model is invoked, so it never affects model health.
    """

    def __init__(self, capability: str, message: str) -> None:
        super().__init__(f"Invalid {capability} request: {message}")
        self.capability = capability
        self.message = message
