from .base import StageStrategy, LLMStrategy, StrategyChain

__all__ = ['StageStrategy', 'LLMStrategy', 'StrategyChain']
