"""
Amount extraction processors

Four stages over bill text:
1. TokenExtractor - raw numeric tokens and currency hint
2. AmountNormalizer - OCR-corrected numeric values
3. ContextClassifier - category per amount
4. ResultAssembler - final result with source snippets
"""

from .extractor import TokenExtractor, LLMTokenStrategy, RegexTokenStrategy
from .normalizer import AmountNormalizer, normalize_token
from .classifier import ContextClassifier, LLMClassificationStrategy, KeywordClassificationStrategy
from .assembler import ResultAssembler
from .ocr_text import OCRResult, OCRTextBox, build_ocr_result
from .pipeline import AmountPipeline, PipelineStage, build_pipeline_config, process_text

__all__ = [
    'TokenExtractor',
    'LLMTokenStrategy',
    'RegexTokenStrategy',
    'AmountNormalizer',
    'normalize_token',
    'ContextClassifier',
    'LLMClassificationStrategy',
    'KeywordClassificationStrategy',
    'ResultAssembler',
    'OCRResult',
    'OCRTextBox',
    'build_ocr_result',
    'AmountPipeline',
    'PipelineStage',
    'build_pipeline_config',
    'process_text',
]
