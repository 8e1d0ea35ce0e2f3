"""
Stage strategies

Stages 1 and 3 each run an ordered chain of strategies: the LLM strategy
first, then a deterministic heuristic. The first strategy that returns a
result wins; any exception moves the chain on to the next strategy.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple

from amountex.exceptions import StageExecutionError, StrategyUnavailableError
from amountex.jobs.retry import RetryExecutor
from amountex.processors.llm.base_llm_service import BaseLLMService
from amountex.processors.llm.prompt_manager import PromptManager, get_prompt_manager
from amountex.processors.llm.response_parser import parse_llm_json

logger = logging.getLogger(__name__)


class StageStrategy(ABC):
    """Base class for a stage strategy"""

    name = 'base'

    def is_available(self) -> bool:
        """Whether this strategy can run in the current configuration"""
        return True

    @abstractmethod
    async def run(self, *args, **kwargs) -> Any:
        """Produce the stage result or raise"""
        pass


class LLMStrategy(StageStrategy):
    """
    Strategy backed by a model call.

    Renders a prompt from ``amountex/prompts``, calls the model through the
    retry executor and decodes the JSON object in the response.
    """

    name = 'llm'
    prompt_name: str = ''

    def __init__(
        self,
        llm_service: Optional[BaseLLMService],
        retry_executor: Optional[RetryExecutor] = None,
        prompt_manager: Optional[PromptManager] = None,
        max_attempts: int = 3,
        temperature: float = 0.1,
        max_tokens: Optional[int] = None,
        max_prompt_chars: int = 10000
    ):
        self.llm_service = llm_service
        self.retry_executor = retry_executor or RetryExecutor()
        self.prompt_manager = prompt_manager or get_prompt_manager()
        self.max_attempts = max_attempts
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.max_prompt_chars = max_prompt_chars

    def is_available(self) -> bool:
        return self.llm_service is not None

    async def _complete_json(self, **variables) -> Dict[str, Any]:
        """Render the prompt, call the model with retries, parse the JSON reply"""
        if self.llm_service is None:
            raise StrategyUnavailableError("No LLM service configured")

        text = variables.get('text')
        if isinstance(text, str) and len(text) > self.max_prompt_chars:
            variables['text'] = text[:self.max_prompt_chars]

        system_prompt, user_prompt = self.prompt_manager.render(self.prompt_name, **variables)

        response = await self.retry_executor.execute(
            lambda: self.llm_service.generate_completion(
                user_prompt,
                system_prompt=system_prompt or None,
                temperature=self.temperature,
                max_tokens=self.max_tokens
            ),
            self.max_attempts
        )
        logger.debug(f"🤖 LLM response for {self.prompt_name}: {response[:500]}")
        return parse_llm_json(response)


class StrategyChain:
    """Runs strategies in order until one succeeds"""

    def __init__(self, stage: str, strategies: Sequence[StageStrategy]):
        self.stage = stage
        self.strategies: List[StageStrategy] = list(strategies)

    async def run(self, *args, **kwargs) -> Tuple[Any, str]:
        """
        Run the chain.

        Returns:
            Tuple of (result, name of the strategy that produced it)

        Raises:
            StageExecutionError: If no strategy produced a result
        """
        errors: List[Tuple[str, BaseException]] = []

        for strategy in self.strategies:
            if not strategy.is_available():
                logger.debug(f"Strategy {strategy.name} unavailable for {self.stage}, skipping")
                continue
            try:
                result = await strategy.run(*args, **kwargs)
            except Exception as e:
                logger.warning(f"⚠️ {self.stage}: strategy {strategy.name} failed, falling back: {e}")
                errors.append((strategy.name, e))
                continue
            logger.info(f"✅ {self.stage} completed via {strategy.name}")
            return result, strategy.name

        raise StageExecutionError(self.stage, errors)
