"""
Raw Token Extractor (Stage 1)

Finds the numeric tokens in bill text that may be monetary amounts and
detects the currency. The LLM strategy runs first when a model is
configured; the regex strategy is the deterministic fallback.
"""

import logging
import re
from typing import Any, Dict, List, Optional, Union

from amountex.exceptions import LLMResponseParseError
from amountex.models.amounts import DEFAULT_CURRENCY, NoAmountsFound, RawTokenSet
from amountex.processors.base import LLMStrategy, StageStrategy, StrategyChain

logger = logging.getLogger(__name__)

TokenResult = Union[RawTokenSet, NoAmountsFound]

NOISY_TEXT_REASON = "document too noisy or no numeric values found"
EMPTY_TEXT_REASON = "no text provided"

# Spans that look numeric but are never amounts
PAGE_REF_PATTERN = re.compile(
    r'\b(?:page|pg\.?|p\.)\s*\d+(?:\s*(?:of|/)\s*\d+)?',
    re.IGNORECASE
)
DATE_PATTERNS = [
    re.compile(r'\b\d{4}-\d{1,2}-\d{1,2}\b'),
    re.compile(r'\b\d{1,2}[/-]\d{1,2}[/-]\d{2,4}\b'),
]
PHONE_PATTERN = re.compile(r'(?<![\d.])(?:\+\d{1,3}[\s-]?)?\d{10,}(?![\d.])')

# Thousands-grouped numbers stay whole so "4,000.00" is one token
NUMERIC_TOKEN_PATTERN = re.compile(r'\d{1,3}(?:,\d{3})+(?:\.\d+)?%?|\d+(?:\.\d+)?%?')

CURRENCY_PATTERNS = [
    (re.compile(r"(?<![A-Za-z])(?:INR|Rs\.?)(?![A-Za-z])|₹", re.IGNORECASE), 'INR'),
    (re.compile(r'\$'), 'USD'),
    (re.compile(r'€'), 'EUR'),
    (re.compile(r'£'), 'GBP'),
]


def _blank(match: re.Match) -> str:
    return ' ' * len(match.group(0))


def strip_non_monetary(text: str) -> str:
    """Blank page references, dates and phone numbers, keeping offsets"""
    text = PAGE_REF_PATTERN.sub(_blank, text)
    for pattern in DATE_PATTERNS:
        text = pattern.sub(_blank, text)
    return PHONE_PATTERN.sub(_blank, text)


def detect_currency(text: str, default: str = DEFAULT_CURRENCY) -> str:
    """First matching currency in fixed priority order, ``default`` when none match"""
    for pattern, currency in CURRENCY_PATTERNS:
        if pattern.search(text):
            return currency
    return default


def _token_value(token: str) -> float:
    return float(token.rstrip('%').replace(',', ''))


class RegexTokenStrategy(StageStrategy):
    """Deterministic token scan; never raises"""

    name = 'regex'

    def __init__(self, default_currency: str = DEFAULT_CURRENCY):
        self.default_currency = default_currency

    async def run(self, text: str) -> TokenResult:
        return self.extract(text)

    def extract(self, text: str) -> TokenResult:
        cleaned = strip_non_monetary(text)
        tokens: List[str] = [
            token for token in NUMERIC_TOKEN_PATTERN.findall(cleaned)
            if _token_value(token) >= 1
        ]

        if not tokens:
            return NoAmountsFound(reason=NOISY_TEXT_REASON)

        return RawTokenSet(
            tokens=tokens,
            currency_hint=detect_currency(text, self.default_currency),
            confidence=min(0.9, 0.5 + 0.1 * len(tokens))
        )


class LLMTokenStrategy(LLMStrategy):
    """Asks the model for monetary tokens and a currency hint"""

    name = 'llm'
    prompt_name = 'raw_token_extraction'

    async def run(self, text: str) -> TokenResult:
        data = await self._complete_json(text=text)
        return self.parse_response(data)

    @staticmethod
    def parse_response(data: Dict[str, Any]) -> TokenResult:
        """Validate the model reply as either a guardrail signal or a token set"""
        if data.get('status') == 'no_amounts_found':
            return NoAmountsFound.model_validate(data)

        if 'raw_tokens' not in data:
            raise LLMResponseParseError("LLM response is missing 'raw_tokens'", str(data)[:1000])

        token_set = RawTokenSet.model_validate(data)
        if not token_set.tokens:
            return NoAmountsFound()
        return token_set


class TokenExtractor:
    """
    Stage 1: raw numeric token discovery with currency detection.

    Usage:
        extractor = TokenExtractor({'llm_service': service})
        result = await extractor.extract_raw_tokens(text)
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        config = config or {}
        self.llm_strategy = LLMTokenStrategy(
            config.get('llm_service'),
            retry_executor=config.get('retry_executor'),
            prompt_manager=config.get('prompt_manager'),
            max_attempts=config.get('max_attempts', 3),
            temperature=config.get('temperature', 0.1),
            max_tokens=config.get('max_tokens'),
            max_prompt_chars=config.get('max_prompt_chars', 10000)
        )
        self.regex_strategy = RegexTokenStrategy(config.get('default_currency', DEFAULT_CURRENCY))
        self.chain = StrategyChain('raw token extraction', [self.llm_strategy, self.regex_strategy])

    async def extract_raw_tokens(self, text: str) -> TokenResult:
        """
        Extract candidate tokens from text.

        Returns:
            RawTokenSet, or NoAmountsFound when the text holds nothing usable
        """
        if not text or not text.strip():
            return NoAmountsFound(reason=EMPTY_TEXT_REASON)

        logger.info("🔍 Stage 1: extracting raw tokens...")
        result, strategy = await self.chain.run(text)

        if isinstance(result, NoAmountsFound):
            logger.info(f"🛑 Stage 1 guardrail ({strategy}): {result.reason}")
        else:
            logger.info(f"✅ Stage 1 found {len(result.tokens)} tokens via {strategy}, currency {result.currency_hint}")
        return result
