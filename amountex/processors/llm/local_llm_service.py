"""
Local LLM Service (Ollama)

Local LLM service for the amount extraction strategies using Ollama.

Usage:
    service = LocalLLMService(base_url='http://127.0.0.1:11434', model='llama3.2')
    text = await service.generate_completion("Your prompt here")
"""

import logging
import httpx
from typing import Any, Dict, Optional

from amountex.processors.llm.base_llm_service import BaseLLMService

logger = logging.getLogger(__name__)


class LocalLLMService(BaseLLMService):
    """Local LLM service using Ollama's REST API"""

    provider = 'ollama'

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:11434",
        model: str = "llama3.2",
        timeout: float = 120.0
    ):
        """
        Initialize Local LLM service

        Args:
            base_url: Ollama server URL
            model: Model to use (default: llama3.2)
            timeout: Request timeout in seconds
        """
        super().__init__(model)
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    async def _make_request(self, endpoint: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Make HTTP request to Ollama API"""
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(f"{self.base_url}/{endpoint}", json=data)
            if response.status_code != 200:
                raise RuntimeError(f"Ollama API error: {response.status_code} {response.text}")
            return response.json()

    async def generate_completion(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.1,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> str:
        """
        Generate text completion using local LLM

        Args:
            prompt: User prompt
            system_prompt: Optional system prompt
            temperature: Sampling temperature (0.0 to 1.0)
            max_tokens: Maximum tokens to generate (sent as num_predict)

        Returns:
            Generated text completion
        """
        options: Dict[str, Any] = {"temperature": temperature}
        if max_tokens:
            options["num_predict"] = max_tokens

        data = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "format": "json",
            "options": options,
        }
        if system_prompt:
            data["system"] = system_prompt

        logger.debug(f"🤖 Calling Ollama model {self.model} at {self.base_url}")
        result = await self._make_request("api/generate", data)
        return result.get("response", "") or ""

    async def is_available(self) -> bool:
        """Check whether the Ollama server is reachable"""
        try:
            async with httpx.AsyncClient(timeout=10.0) as client:
                response = await client.get(f"{self.base_url}/api/tags")
                return response.status_code == 200
        except httpx.HTTPError as e:
            logger.error(f"Failed to reach Ollama at {self.base_url}: {e}")
            return False
