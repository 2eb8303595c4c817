from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class GenerationRequest:
    model: str
    instruction: str
    response_schema: dict[str, Any] | None = None


class GenerationClient(ABC):
    """One non-streaming call to a text-generation service.

    Implementations return the raw response text and raise
    ``ServiceBlockedError``, ``EmptyResponseError`` or ``TransportFailureError``
    instead of returning partial output. They never retry.
    """

    @abstractmethod
    async def generate(self, request: GenerationRequest) -> str: ...
