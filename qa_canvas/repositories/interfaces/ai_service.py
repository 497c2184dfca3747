from abc import ABC, abstractmethod
from typing import Optional, Type, TypeVar

from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)


class IAIService(ABC):
    """Interface for structured generation with a generative model"""

    provider: str = "unknown"

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Identifier of the model requests are sent to"""
        pass

    @abstractmethod
    def is_configured(self) -> bool:
        """Whether credentials for the provider are available"""
        pass

    @abstractmethod
    async def generate_object(
        self,
        schema: Type[T],
        prompt: str,
        *,
        system: Optional[str] = None,
        temperature: float = 0.3,
        max_tokens: int = 4000,
    ) -> T:
        """Generate an instance of ``schema`` from the prompt.

        Raises ``GenerationError`` (or a subclass) when the provider fails or
        its output does not validate against ``schema``.
        """
        pass
