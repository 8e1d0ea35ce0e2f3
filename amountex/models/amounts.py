"""
Amount Extraction Data Models with Pydantic Validation

Request-scoped result types for the four extraction stages. Every model is
frozen once constructed; wire names (``raw_tokens``, ``type``, ...) are kept as
aliases so results serialize to the shape HTTP consumers expect.
"""

import math
from enum import Enum
from typing import Any, Dict, Iterable, List, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AmountCategory(str, Enum):
    """Semantic category of a monetary amount"""
    TOTAL_BILL = "total_bill"
    PAID = "paid"
    DUE = "due"
    DISCOUNT = "discount"
    TAX = "tax"
    SUBTOTAL = "subtotal"
    OTHER = "other"


class PipelineStatus(str, Enum):
    """Final pipeline status"""
    OK = "ok"
    ERROR = "error"


DEFAULT_CURRENCY = "INR"

CATEGORY_PRIORITY: Dict[str, int] = {
    AmountCategory.TOTAL_BILL.value: 0,
    AmountCategory.PAID.value: 1,
    AmountCategory.DUE.value: 2,
    AmountCategory.TAX.value: 3,
}
UNLISTED_PRIORITY = 100

T = TypeVar('T')


def category_priority(category: Any) -> int:
    """Sort priority of a category; unlisted categories share priority 100"""
    key = category.value if isinstance(category, Enum) else str(category)
    return CATEGORY_PRIORITY.get(key, UNLISTED_PRIORITY)


def sort_by_priority(items: Iterable[T]) -> List[T]:
    """
    Stable sort of classified/final amounts by category priority.

    Used by both classification and final assembly so the two orderings
    cannot drift apart.
    """
    return sorted(items, key=lambda item: category_priority(item.category))


def clamp_confidence(value: Any) -> float:
    """Coerce a confidence value into [0, 1]"""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number):
        return 0.0
    return max(0.0, min(1.0, number))


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using wire field names"""
        return self.model_dump(mode='json', by_alias=True)


class NoAmountsFound(_FrozenModel):
    """Guardrail signal: the text holds no monetary-looking content"""
    status: Literal["no_amounts_found"] = "no_amounts_found"
    reason: str = "no monetary amounts detected"


class RawTokenSet(_FrozenModel):
    """Stage 1 output: candidate numeric tokens in source order"""
    tokens: List[str] = Field(default_factory=list, alias='raw_tokens')
    currency_hint: str = DEFAULT_CURRENCY
    confidence: float = 0.0

    @field_validator('tokens', mode='before')
    @classmethod
    def stringify_tokens(cls, v: Any) -> List[str]:
        """Models sometimes return bare numbers instead of strings"""
        if v is None:
            return []
        if not isinstance(v, (list, tuple)):
            raise ValueError("raw_tokens must be a list")
        return [str(token).strip() for token in v if token is not None and str(token).strip()]

    @field_validator('currency_hint', mode='before')
    @classmethod
    def normalize_currency(cls, v: Any) -> str:
        if v is None or not str(v).strip():
            return DEFAULT_CURRENCY
        return str(v).strip().upper()

    @field_validator('confidence', mode='before')
    @classmethod
    def bound_confidence(cls, v: Any) -> float:
        return clamp_confidence(v)


class NormalizedAmounts(_FrozenModel):
    """Stage 2 output: numeric values of the tokens that survived correction"""
    values: List[float] = Field(default_factory=list, alias='normalized_amounts')
    confidence: float = Field(0.0, alias='normalization_confidence')

    @field_validator('confidence', mode='before')
    @classmethod
    def bound_confidence(cls, v: Any) -> float:
        return clamp_confidence(v)


class ClassifiedAmount(_FrozenModel):
    """A normalized amount with its semantic category"""
    category: AmountCategory = Field(AmountCategory.OTHER, alias='type')
    value: float
    entity: Optional[str] = None
    confidence: Optional[float] = Field(None, exclude=True)

    @field_validator('category', mode='before')
    @classmethod
    def parse_category(cls, v: Any) -> AmountCategory:
        """Unknown categories are kept as 'other' rather than rejected"""
        if isinstance(v, AmountCategory):
            return v
        try:
            return AmountCategory(str(v).strip().lower())
        except ValueError:
            return AmountCategory.OTHER

    @field_validator('value', mode='before')
    @classmethod
    def parse_value(cls, v: Any) -> float:
        if isinstance(v, str):
            v = v.replace(',', '').strip()
        number = float(v)
        if not math.isfinite(number):
            raise ValueError("value must be finite")
        return number

    @field_validator('entity', mode='before')
    @classmethod
    def clean_entity(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @field_validator('confidence', mode='before')
    @classmethod
    def bound_confidence(cls, v: Any) -> Optional[float]:
        if v is None:
            return None
        return clamp_confidence(v)


class ClassificationResult(_FrozenModel):
    """Stage 3 output"""
    amounts: List[ClassifiedAmount] = Field(default_factory=list)
    confidence: float = 0.0

    @field_validator('confidence', mode='before')
    @classmethod
    def bound_confidence(cls, v: Any) -> float:
        return clamp_confidence(v)


class FinalAmount(_FrozenModel):
    """Stage 4 amount with provenance"""
    category: AmountCategory = Field(alias='type')
    value: float
    source: str


class PipelineResult(_FrozenModel):
    """Final pipeline output: ``{currency, amounts: [{type, value, source}], status}``"""
    currency: str = DEFAULT_CURRENCY
    amounts: List[FinalAmount] = Field(default_factory=list)
    status: PipelineStatus = PipelineStatus.OK

    @classmethod
    def error(cls) -> 'PipelineResult':
        """Fixed error result; the currency is a default, not a detection"""
        return cls(currency=DEFAULT_CURRENCY, amounts=[], status=PipelineStatus.ERROR)

    @property
    def ok(self) -> bool:
        return self.status == PipelineStatus.OK


class StageInspection(_FrozenModel):
    """
    Result of running the pipeline up to one stage.

    Carries every intermediate produced so far; ``guardrail`` is set when
    Stage 1 stopped the run.
    """
    stage: int
    status: str = "ok"
    raw_tokens: Optional[RawTokenSet] = None
    guardrail: Optional[NoAmountsFound] = None
    normalized_amounts: Optional[NormalizedAmounts] = None
    classified_amounts: Optional[ClassificationResult] = None
    final_result: Optional[PipelineResult] = None
