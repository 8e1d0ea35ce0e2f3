from .amounts import (
    AmountCategory,
    PipelineStatus,
    NoAmountsFound,
    RawTokenSet,
    NormalizedAmounts,
    ClassifiedAmount,
    ClassificationResult,
    FinalAmount,
    PipelineResult,
    StageInspection,
    DEFAULT_CURRENCY,
    category_priority,
    sort_by_priority,
    clamp_confidence,
)

__all__ = [
    'AmountCategory',
    'PipelineStatus',
    'NoAmountsFound',
    'RawTokenSet',
    'NormalizedAmounts',
    'ClassifiedAmount',
    'ClassificationResult',
    'FinalAmount',
    'PipelineResult',
    'StageInspection',
    'DEFAULT_CURRENCY',
    'category_priority',
    'sort_by_priority',
    'clamp_confidence',
]
