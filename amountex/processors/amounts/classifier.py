"""
Context Classifier (Stage 3)

Assigns each normalized amount a category (total_bill, paid, due, ...)
from the text around its first occurrence. The LLM strategy runs first
when a model is configured; keyword matching is the fallback.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from amountex.exceptions import LLMResponseParseError
from amountex.models.amounts import (
    AmountCategory,
    ClassificationResult,
    ClassifiedAmount,
    sort_by_priority,
)
from amountex.processors.amounts.text_utils import find_amount, format_amount
from amountex.processors.base import LLMStrategy, StageStrategy, StrategyChain

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE = 0.3

# Group precedence is list order; a phrase must not touch other letters but may touch digits
KEYWORD_GROUPS: List[Tuple[AmountCategory, float, Tuple[str, ...]]] = [
    (AmountCategory.TOTAL_BILL, 0.9,
     ('total', 'grand total', 'bill total', 'amount due', 'final amount', 'net amount')),
    (AmountCategory.PAID, 0.9, ('paid', 'payment', 'received')),
    (AmountCategory.DUE, 0.9, ('due', 'balance', 'outstanding', 'remaining', 'pending')),
    (AmountCategory.DISCOUNT, 0.8, ('discount', 'disc', 'off', 'reduction')),
    (AmountCategory.TAX, 0.8, ('tax', 'gst', 'cgst', 'sgst', 'vat', 'service tax')),
    (AmountCategory.SUBTOTAL, 0.8, ('subtotal', 'sub total', 'base amount')),
]

# Markers that sit between a label and its number ("Paid Rs. 1000", "Tax: $12")
TRAILING_MARKERS = re.compile(r"(?:[\s:\-₹$€£¥]|(?<![A-Za-z])(?:Rs\.?|INR)(?![A-Za-z]))+$", re.IGNORECASE)
TRAILING_LABEL = re.compile(r'[A-Za-z](?:[A-Za-z ]*[A-Za-z])?$')


def _group_pattern(phrases: Sequence[str]) -> re.Pattern:
    ordered = sorted(phrases, key=len, reverse=True)
    alternatives = '|'.join(r'\s+'.join(re.escape(word) for word in p.split()) for p in ordered)
    return re.compile(rf"(?<![A-Za-z])(?:{alternatives})(?![A-Za-z])", re.IGNORECASE)


_GROUP_PATTERNS = [
    (category, confidence, _group_pattern(phrases))
    for category, confidence, phrases in KEYWORD_GROUPS
]


@dataclass
class KeywordMatch:
    """A keyword occurrence in the text"""
    category: AmountCategory
    confidence: float
    start: int
    end: int
    precedence: int


def find_keywords(text: str) -> List[KeywordMatch]:
    """
    All keyword occurrences, by position.

    A match lying inside a longer match of another group is dropped, so
    "sub total" counts as subtotal and "amount due" as total_bill.
    """
    matches = [
        KeywordMatch(category, confidence, m.start(), m.end(), precedence)
        for precedence, (category, confidence, pattern) in enumerate(_GROUP_PATTERNS)
        for m in pattern.finditer(text)
    ]
    kept = [
        match for match in matches
        if not any(
            other is not match
            and other.start <= match.start
            and match.end <= other.end
            and (other.end - other.start) > (match.end - match.start)
            for other in matches
        )
    ]
    return sorted(kept, key=lambda m: (m.start, m.precedence))


def extract_entity(text: str, index: int, radius: int = 50) -> Optional[str]:
    """Label written immediately before the number at ``index``, if any"""
    prefix = text[max(0, index - radius):index]
    prefix = TRAILING_MARKERS.sub('', prefix)
    match = TRAILING_LABEL.search(prefix)
    if not match:
        return None
    label = ' '.join(match.group(0).split())
    return label or None


class KeywordClassificationStrategy(StageStrategy):
    """Keyword proximity classification; never raises for well-formed input"""

    name = 'keyword'

    def __init__(self, context_window: int = 100, entity_radius: int = 50):
        self.context_window = context_window
        self.entity_radius = entity_radius

    async def run(self, text: str, values: Sequence[float]) -> ClassificationResult:
        return self.classify(text, values)

    def classify(self, text: str, values: Sequence[float]) -> ClassificationResult:
        keywords = find_keywords(text)
        amounts = [self.classify_value(text, value, keywords) for value in values]

        confidence = (
            sum(amount.confidence for amount in amounts) / len(amounts)
            if amounts else 0.0
        )
        return ClassificationResult(amounts=sort_by_priority(amounts), confidence=confidence)

    def classify_value(
        self,
        text: str,
        value: float,
        keywords: Optional[List[KeywordMatch]] = None
    ) -> ClassifiedAmount:
        """Classify one value from the keywords around its first occurrence"""
        if keywords is None:
            keywords = find_keywords(text)

        span = find_amount(text, value)
        if span is None:
            return ClassifiedAmount(
                category=AmountCategory.OTHER,
                value=value,
                entity=AmountCategory.OTHER.value,
                confidence=DEFAULT_CONFIDENCE
            )

        start, end = span
        best = self._best_keyword(keywords, start, end)
        category = best.category if best else AmountCategory.OTHER
        confidence = best.confidence if best else DEFAULT_CONFIDENCE
        entity = extract_entity(text, start, self.entity_radius) or category.value

        return ClassifiedAmount(category=category, value=value, entity=entity, confidence=confidence)

    def _best_keyword(self, keywords: List[KeywordMatch], start: int, end: int) -> Optional[KeywordMatch]:
        """
        Highest-confidence keyword within the window. Equal confidences
        prefer a keyword before the number, then the closer one, then
        group precedence.
        """
        best_key = None
        best = None

        for keyword in keywords:
            if keyword.end <= start:
                follows, distance = 0, start - keyword.end
            elif keyword.start >= end:
                follows, distance = 1, keyword.start - end
            else:
                follows, distance = 0, 0

            if distance >= self.context_window:
                continue

            key = (-keyword.confidence, follows, distance, keyword.precedence)
            if best_key is None or key < best_key:
                best_key, best = key, keyword

        return best


class LLMClassificationStrategy(LLMStrategy):
    """Asks the model for a category and entity label per amount"""

    name = 'llm'
    prompt_name = 'amount_classification'

    async def run(self, text: str, values: Sequence[float]) -> ClassificationResult:
        data = await self._complete_json(
            text=text,
            amounts=[format_amount(value) for value in values]
        )
        return self.parse_response(data)

    @staticmethod
    def parse_response(data: Dict[str, Any]) -> ClassificationResult:
        if not isinstance(data.get('amounts'), list):
            raise LLMResponseParseError("LLM response is missing an 'amounts' list", str(data)[:1000])

        result = ClassificationResult.model_validate(data)
        return ClassificationResult(amounts=sort_by_priority(result.amounts), confidence=result.confidence)


class ContextClassifier:
    """
    Stage 3: context-based classification of normalized amounts.

    Usage:
        classifier = ContextClassifier({'llm_service': service})
        result = await classifier.classify_amounts(text, [1200.0, 1000.0])
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        config = config or {}
        self.llm_strategy = LLMClassificationStrategy(
            config.get('llm_service'),
            retry_executor=config.get('retry_executor'),
            prompt_manager=config.get('prompt_manager'),
            max_attempts=config.get('max_attempts', 3),
            temperature=config.get('temperature', 0.1),
            max_tokens=config.get('max_tokens'),
            max_prompt_chars=config.get('max_prompt_chars', 10000)
        )
        self.keyword_strategy = KeywordClassificationStrategy(
            context_window=config.get('context_window', 100),
            entity_radius=config.get('snippet_radius', 50)
        )
        self.chain = StrategyChain('classification', [self.llm_strategy, self.keyword_strategy])

    async def classify_amounts(self, text: str, values: Sequence[float]) -> ClassificationResult:
        """Classify values by their context, sorted by category priority"""
        values = list(values)
        if not values:
            return ClassificationResult(amounts=[], confidence=0.0)

        logger.info(f"🏷️ Stage 3: classifying {len(values)} amounts...")
        result, strategy = await self.chain.run(text, values)
        logger.info(f"✅ Stage 3 classified {len(result.amounts)} amounts via {strategy}")
        return result
