"""
LLM services for AmountEx

This module provides the model clients used by the LLM strategies of the
token-extraction and classification stages.
"""

from .base_llm_service import BaseLLMService
from .prompt_manager import PromptManager, get_prompt_manager
from .response_parser import clean_json_response, parse_llm_json
from .factory import create_llm_service

__all__ = [
    'BaseLLMService',
    'PromptManager',
    'get_prompt_manager',
    'clean_json_response',
    'parse_llm_json',
    'create_llm_service',
]
