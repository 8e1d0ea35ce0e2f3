"""
LLM Service Factory

Builds the configured model client, or None when no provider is set
(heuristic strategies only).
"""

import logging
from typing import Any, Dict, Optional

from amountex.exceptions import ConfigurationError
from amountex.processors.llm.base_llm_service import BaseLLMService

logger = logging.getLogger(__name__)

DEFAULT_MODELS = {
    'openai': 'gpt-4o-mini',
    'gemini': 'gemini-2.0-flash',
    'ollama': 'llama3.2',
}


def create_llm_service(llm_config: Optional[Dict[str, Any]] = None) -> Optional[BaseLLMService]:
    """
    Create an LLM service from the ``llm`` configuration section.

    Args:
        llm_config: Dictionary with provider, model, api_key, base_url, timeout

    Returns:
        A service instance, or None for provider 'none'

    Raises:
        ConfigurationError: For unknown providers or missing API keys
    """
    llm_config = llm_config or {}
    provider = str(llm_config.get('provider') or 'none').lower()

    if provider == 'none':
        logger.info("No LLM provider configured, using heuristic strategies only")
        return None

    if provider not in DEFAULT_MODELS:
        raise ConfigurationError(f"Unsupported LLM provider: {provider}")

    model = llm_config.get('model') or DEFAULT_MODELS[provider]
    timeout = float(llm_config.get('timeout') or 120)

    if provider == 'ollama':
        from amountex.processors.llm.local_llm_service import LocalLLMService
        return LocalLLMService(
            base_url=llm_config.get('base_url') or 'http://127.0.0.1:11434',
            model=model,
            timeout=timeout
        )

    api_key = llm_config.get('api_key')
    if not api_key:
        raise ConfigurationError(
            f"{provider} API key is required. Set 'llm.api_key' in config or the provider's environment variable."
        )

    if provider == 'openai':
        from amountex.processors.llm.openai_service import OpenAILLMService
        return OpenAILLMService(api_key=api_key, model=model, timeout=timeout)

    from amountex.processors.llm.gemini_service import GeminiLLMService
    return GeminiLLMService(api_key=api_key, model=model)
