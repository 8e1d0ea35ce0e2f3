"""
Shared fixtures for AmountEx tests
"""

import json
from typing import List, Optional, Union
from unittest.mock import AsyncMock, patch

import pytest

from amountex.config.amountex_config import AmountExConfig, ENV_OVERRIDES
from amountex.jobs.retry import RetryExecutor, LinearBackoff
from amountex.processors.llm.base_llm_service import BaseLLMService


class FakeLLMService(BaseLLMService):
    """LLM service returning canned responses in order (exceptions are raised)"""

    provider = 'fake'

    def __init__(self, responses: List[Union[str, dict, Exception]]):
        super().__init__('fake-model')
        self.responses = list(responses)
        self.calls = []

    async def generate_completion(self, prompt, system_prompt=None, temperature=0.1, max_tokens=None, **kwargs):
        self.calls.append({'prompt': prompt, 'system_prompt': system_prompt})
        if not self.responses:
            raise RuntimeError("No more fake responses")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, dict):
            return json.dumps(response)
        return response


BILL_TEXT = "Total Bill Amount Rs.1200, Paid Rs.1000, Due Rs.200"


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Fresh configuration singleton with no user file or environment overrides"""
    monkeypatch.setenv('HOME', str(tmp_path))
    for env_name in list(ENV_OVERRIDES) + ['OPENAI_API_KEY', 'GEMINI_API_KEY']:
        monkeypatch.delenv(env_name, raising=False)
    AmountExConfig.reset()
    yield
    AmountExConfig.reset()


@pytest.fixture
def no_sleep():
    """Patch the retry backoff sleep"""
    with patch('amountex.jobs.retry.asyncio.sleep', new_callable=AsyncMock) as mock_sleep:
        yield mock_sleep


@pytest.fixture
def fast_retry():
    """Retry executor without delays"""
    return RetryExecutor(LinearBackoff(delay=0))


@pytest.fixture
def make_llm():
    def _make(*responses) -> FakeLLMService:
        return FakeLLMService(list(responses))
    return _make


@pytest.fixture
def bill_text() -> str:
    return BILL_TEXT


@pytest.fixture
def pipeline_config():
    """Builds pipeline settings for tests: no delays, optional fake model"""
    def _build(llm_service: Optional[BaseLLMService] = None, **overrides) -> dict:
        config = {
            'llm_service': llm_service,
            'retry_executor': RetryExecutor(LinearBackoff(delay=0)),
            'max_attempts': 3,
        }
        config.update(overrides)
        return config
    return _build
