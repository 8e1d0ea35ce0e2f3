"""
OpenAI LLM Service

OpenAI chat-completions client for the amount extraction strategies.
"""

import logging
from typing import Optional
from openai import AsyncOpenAI

from amountex.processors.llm.base_llm_service import BaseLLMService

logger = logging.getLogger(__name__)


class OpenAILLMService(BaseLLMService):
    """OpenAI LLM service"""

    provider = 'openai'

    def __init__(self, api_key: str, model: str = "gpt-4o-mini", timeout: float = 120.0):
        """
        Initialize OpenAI LLM service

        Args:
            api_key: OpenAI API key
            model: Model to use (default: gpt-4o-mini)
            timeout: Request timeout in seconds
        """
        super().__init__(model)
        self.client = AsyncOpenAI(api_key=api_key, timeout=timeout)

    async def generate_completion(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.1,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> str:
        """
        Generate text completion using OpenAI

        Args:
            prompt: User prompt
            system_prompt: Optional system prompt
            temperature: Sampling temperature (default: 0.1)
            max_tokens: Maximum tokens to generate
            **kwargs: Additional parameters for OpenAI API

        Returns:
            Generated text completion
        """
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        logger.debug(f"🤖 Calling OpenAI model {self.model}")
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
            **kwargs
        )

        return response.choices[0].message.content or ""
