"""
Tests for LLM services, the service factory, prompts and response parsing
"""

import tempfile
from pathlib import Path
from unittest.mock import AsyncMock, Mock, patch

import pytest
import yaml

from amountex.exceptions import ConfigurationError, LLMResponseParseError
from amountex.processors.llm import (
    PromptManager,
    clean_json_response,
    create_llm_service,
    get_prompt_manager,
    parse_llm_json,
)
from amountex.processors.amounts.extractor import TokenExtractor
from amountex.processors.llm.local_llm_service import LocalLLMService
from amountex.processors.llm.openai_service import OpenAILLMService


class TestPromptManager:
    """Tests for PromptManager"""

    def test_render_token_prompt(self):
        system_prompt, prompt = PromptManager().render('raw_token_extraction', text='Paid Rs.50')

        assert 'Text: "Paid Rs.50"' in prompt
        assert 'no_amounts_found' in prompt
        assert system_prompt

    def test_render_classification_prompt(self):
        _, prompt = get_prompt_manager().render(
            'amount_classification', text='Total 10', amounts=['10', '2.5']
        )
        assert 'Normalized amounts: [10, 2.5]' in prompt

    def test_load_prompt_from_custom_dir(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with open(Path(tmpdir) / 'custom.yaml', 'w') as f:
                yaml.dump({'system_prompt': 'sys', 'user_prompt_template': 'Hi {{ name }}'}, f)

            manager = PromptManager(tmpdir)
            assert manager.render('custom', name='there') == ('sys', 'Hi there')

    def test_missing_prompt_file_raises(self, tmp_path):
        manager = PromptManager(tmp_path)

        with pytest.raises(ConfigurationError, match='Prompt file not found'):
            manager.render('raw_token_extraction', text='Total 100')

    def test_prompt_without_template_raises(self, tmp_path):
        (tmp_path / 'broken.yaml').write_text('system_prompt: only this\n', encoding='utf-8')

        with pytest.raises(ConfigurationError, match='user_prompt_template'):
            PromptManager(tmp_path).load_prompt('broken')

    def test_undefined_variable_raises(self):
        with pytest.raises(ConfigurationError):
            PromptManager().render('amount_classification', text='Total 10')

    def test_prompt_caching(self):
        manager = PromptManager()
        assert manager.load_prompt('raw_token_extraction') is manager.load_prompt('raw_token_extraction')

    @pytest.mark.asyncio
    async def test_missing_prompt_falls_back_to_heuristics(self, tmp_path, make_llm):
        llm = make_llm({'raw_tokens': ['1'], 'currency_hint': 'INR', 'confidence': 0.9})
        extractor = TokenExtractor({'llm_service': llm, 'prompt_manager': PromptManager(tmp_path)})

        result = await extractor.extract_raw_tokens('Total Rs.100')

        assert result.tokens == ['100']
        assert llm.calls == []



class TestResponseParser:
    """Tests for JSON extraction from model responses"""

    def test_raw_json(self):
        assert parse_llm_json('{"a": 1}') == {'a': 1}

    def test_fenced_json(self):
        assert parse_llm_json('```json\n{"a": 1}\n```') == {'a': 1}

    def test_json_with_chatter(self):
        assert parse_llm_json('Here you go: {"a": [1, 2]} hope it helps') == {'a': [1, 2]}

    def test_clean_plain_fence(self):
        assert clean_json_response('```\n{"b": 2}\n```') == '{"b": 2}'

    @pytest.mark.parametrize('response', ['', '   ', 'no json here', '[1, 2, 3]'])
    def test_unparseable(self, response):
        with pytest.raises(LLMResponseParseError):
            parse_llm_json(response)


class TestOpenAILLMService:
    """Tests for OpenAILLMService"""

    @pytest.mark.asyncio
    async def test_generate_completion(self):
        mock_response = Mock()
        mock_response.choices = [Mock()]
        mock_response.choices[0].message = Mock()
        mock_response.choices[0].message.content = '{"raw_tokens": []}'

        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(return_value=mock_response)

        service = OpenAILLMService(api_key='test-key', model='gpt-4o-mini')
        service.client = mock_client

        result = await service.generate_completion("Prompt", system_prompt="System", temperature=0.0)

        assert result == '{"raw_tokens": []}'
        call_kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert call_kwargs['model'] == 'gpt-4o-mini'
        assert call_kwargs['messages'][0] == {'role': 'system', 'content': 'System'}
        assert call_kwargs['messages'][1] == {'role': 'user', 'content': 'Prompt'}


class TestLocalLLMService:
    """Tests for LocalLLMService (Ollama)"""

    @pytest.mark.asyncio
    async def test_generate_completion(self):
        service = LocalLLMService(base_url='http://ollama:11434/', model='llama3.2')

        with patch.object(service, '_make_request', new_callable=AsyncMock) as make_request:
            make_request.return_value = {'response': '{"ok": true}'}
            result = await service.generate_completion("Prompt", system_prompt="System", max_tokens=50)

        assert result == '{"ok": true}'
        endpoint, data = make_request.call_args.args
        assert endpoint == 'api/generate'
        assert data['system'] == 'System'
        assert data['stream'] is False
        assert data['options']['num_predict'] == 50
        assert service.base_url == 'http://ollama:11434'


class TestGeminiLLMService:
    """Tests for GeminiLLMService"""

    @pytest.mark.asyncio
    async def test_generate_completion(self):
        with patch('amountex.processors.llm.gemini_service.genai') as genai:
            model = Mock()
            model.generate_content_async = AsyncMock(return_value=Mock(text='{"amounts": []}'))
            genai.GenerativeModel.return_value = model

            from amountex.processors.llm.gemini_service import GeminiLLMService
            service = GeminiLLMService(api_key='key', model='gemini-2.0-flash')
            result = await service.generate_completion("Prompt", system_prompt="System")

        assert result == '{"amounts": []}'
        genai.configure.assert_called_once_with(api_key='key')
        prompt = model.generate_content_async.call_args.args[0]
        assert prompt == "System\n\nPrompt"


class TestCreateLLMService:
    """Tests for the service factory"""

    def test_none_provider(self):
        assert create_llm_service({'provider': 'none'}) is None
        assert create_llm_service(None) is None

    def test_ollama(self):
        service = create_llm_service({'provider': 'ollama', 'base_url': 'http://host:1'})
        assert isinstance(service, LocalLLMService)
        assert service.model == 'llama3.2'

    def test_openai(self):
        service = create_llm_service({'provider': 'openai', 'api_key': 'k', 'model': 'gpt-4o'})
        assert isinstance(service, OpenAILLMService)
        assert service.model == 'gpt-4o'

    def test_missing_api_key(self):
        with pytest.raises(ConfigurationError):
            create_llm_service({'provider': 'gemini'})

    def test_unknown_provider(self):
        with pytest.raises(ConfigurationError):
            create_llm_service({'provider': 'claude'})
