"""
Base LLM Service for AmountEx

Common contract for the model clients used by the LLM strategies:
text prompt in, text response out. Retries and JSON parsing are
handled by the caller.
"""

from abc import ABC, abstractmethod
from typing import Optional


class BaseLLMService(ABC):
    """Base class for LLM services"""

    provider = 'base'

    def __init__(self, model: str):
        self.model = model

    @abstractmethod
    async def generate_completion(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.1,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> str:
        """
        Generate a text completion

        Args:
            prompt: User prompt
            system_prompt: Optional system prompt
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate

        Returns:
            Generated text
        """
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(model={self.model!r})"
