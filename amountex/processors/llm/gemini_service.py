"""
Gemini LLM Service

Google Gemini client for the amount extraction strategies.
"""

import logging
from typing import Optional

import google.generativeai as genai

from amountex.processors.llm.base_llm_service import BaseLLMService

logger = logging.getLogger(__name__)


class GeminiLLMService(BaseLLMService):
    """Gemini LLM service"""

    provider = 'gemini'

    def __init__(self, api_key: str, model: str = "gemini-2.0-flash"):
        """
        Initialize Gemini LLM service

        Args:
            api_key: Google AI Studio API key
            model: Model to use (default: gemini-2.0-flash)
        """
        super().__init__(model)
        genai.configure(api_key=api_key)
        self.client = genai.GenerativeModel(model)

    async def generate_completion(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.1,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> str:
        """
        Generate text completion using Gemini

        The system prompt is prepended to the user prompt.
        """
        full_prompt = f"{system_prompt}\n\n{prompt}" if system_prompt else prompt

        generation_config = {"temperature": temperature}
        if max_tokens:
            generation_config["max_output_tokens"] = max_tokens

        logger.debug(f"🤖 Calling Gemini model {self.model}")
        response = await self.client.generate_content_async(
            full_prompt,
            generation_config=generation_config
        )
        return response.text or ""
