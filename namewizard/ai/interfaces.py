"""Model backend interface — the seam between routing and real inference.

The invoker never talks to an SDK directly. It hands a selected
ModelDescriptor and an AnalysisPayload to a ModelBackend and gets back a
content description string, or an exception.

TEAM: ProviderBackend (namewizard.ai.backend) is the production
implementation. Tests substitute small ModelBackend subclasses that fail
on demand.

Tier 1 leaf module: imports only stdlib and namewizard.models (also Tier 1).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from namewizard.models import ModelDescriptor


@dataclass(frozen=True)
class AnalysisPayload:
    """Description of one uploaded file, as consumed by the analysis core.

    ``text`` carries an extracted excerpt for text analysis; ``image``
    carries raw image bytes for vision analysis. Either may be absent.
    """

    file_name: str
    mime_type: str
    text: str | None = None
    image: bytes | None = None


class ModelBackend(ABC):
    """Invokes one model on one payload."""

    def check_payload(self, capability: str, payload: AnalysisPayload) -> None:
        """Rejects payloads no model could analyse for this capability.

        Called by the invoker before any model is selected for invocation.
        The default accepts everything.

        Raises:
            InvalidPayload: If the payload is unusable for the capability.
        """

    @abstractmethod
    async def invoke(
        self,
        descriptor: ModelDescriptor,
        capability: str,
        payload: AnalysisPayload,
    ) -> str:
        """Returns the model's content description for the payload.

        Args:
            descriptor: The model chosen by the selector.
            capability: Capability tag the request was made for.
            payload: The file to analyse.

        Returns:
            An opaque content description string.

        Raises:
            Exception: Any failure. The invoker treats every exception
                as a backend failure and falls back to another model.
        """
