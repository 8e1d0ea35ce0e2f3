"""
Amount Extraction Pipeline

End-to-end pipeline for monetary amounts in bill text:
extract tokens -> normalize -> classify -> assemble

Stage 1 can stop the run with a guardrail signal when the text holds no
monetary content. ``execute_full_pipeline`` never raises: every failure
becomes the fixed error result.
"""

import logging
import time
from enum import IntEnum
from typing import Any, Dict, Iterable, Optional, Sequence

from amountex.config import AmountExConfig
from amountex.jobs.retry import create_retry_executor
from amountex.models.amounts import (
    ClassificationResult,
    ClassifiedAmount,
    DEFAULT_CURRENCY,
    NoAmountsFound,
    NormalizedAmounts,
    PipelineResult,
    PipelineStatus,
    StageInspection,
)
from amountex.processors.amounts.assembler import ResultAssembler
from amountex.processors.amounts.classifier import ContextClassifier
from amountex.processors.amounts.extractor import TokenExtractor, TokenResult
from amountex.processors.amounts.normalizer import AmountNormalizer
from amountex.processors.amounts.ocr_text import build_ocr_result
from amountex.processors.llm.factory import create_llm_service

logger = logging.getLogger(__name__)


class PipelineStage(IntEnum):
    """Pipeline stages, numbered in execution order"""
    EXTRACT = 1
    NORMALIZE = 2
    CLASSIFY = 3
    ASSEMBLE = 4


def build_pipeline_config(config: Optional[AmountExConfig] = None) -> Dict[str, Any]:
    """
    Assemble the pipeline settings from AmountExConfig.

    Builds the LLM service (None when no provider is configured) and the
    retry executor.
    """
    config = config or AmountExConfig()
    llm_config = config.get_llm_config()
    retry_config = config.get_retry_config()
    pipeline_config = config.get_pipeline_config()

    return {
        'llm_service': create_llm_service(llm_config),
        'retry_executor': create_retry_executor(retry_config),
        'max_attempts': retry_config.get('max_attempts', 3),
        'temperature': llm_config.get('temperature', 0.1),
        'max_tokens': llm_config.get('max_tokens'),
        'max_prompt_chars': pipeline_config.get('max_prompt_chars', 10000),
        'default_currency': pipeline_config.get('default_currency', DEFAULT_CURRENCY),
        'context_window': pipeline_config.get('context_window', 100),
        'snippet_radius': pipeline_config.get('snippet_radius', 50),
    }


class AmountPipeline:
    """
    Four-stage amount extraction pipeline.

    Usage:
        pipeline = AmountPipeline({'llm_service': service})
        result = await pipeline.execute_full_pipeline(text)

    With no config the settings come from AmountExConfig.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config if config is not None else build_pipeline_config()

        self.extractor = TokenExtractor(self.config)
        self.normalizer = AmountNormalizer()
        self.classifier = ContextClassifier(self.config)
        self.assembler = ResultAssembler(snippet_radius=self.config.get('snippet_radius', 50))

    async def extract_raw_tokens(self, text: str) -> TokenResult:
        """Stage 1"""
        return await self.extractor.extract_raw_tokens(text)

    def normalize_amounts(self, tokens: Iterable[str]) -> NormalizedAmounts:
        """Stage 2"""
        return self.normalizer.normalize_amounts(tokens)

    async def classify_amounts(self, text: str, values: Sequence[float]) -> ClassificationResult:
        """Stage 3"""
        return await self.classifier.classify_amounts(text, values)

    def generate_final_output(
        self,
        text: str,
        currency: str,
        amounts: Iterable[ClassifiedAmount]
    ) -> PipelineResult:
        """Stage 4"""
        return self.assembler.generate_final_output(text, currency, amounts)

    async def execute_full_pipeline(self, text: str) -> PipelineResult:
        """
        Run all four stages.

        Returns:
            The final result; ``PipelineResult.error()`` on the guardrail
            or on any failure
        """
        start_time = time.time()
        stage_times: Dict[str, int] = {}

        try:
            stage_start = time.time()
            tokens = await self.extract_raw_tokens(text)
            stage_times['extract'] = int((time.time() - stage_start) * 1000)

            if isinstance(tokens, NoAmountsFound):
                logger.info(f"🛑 Pipeline stopped by guardrail: {tokens.reason}")
                return PipelineResult.error()

            stage_start = time.time()
            normalized = self.normalize_amounts(tokens.tokens)
            stage_times['normalize'] = int((time.time() - stage_start) * 1000)

            stage_start = time.time()
            classified = await self.classify_amounts(text, normalized.values)
            stage_times['classify'] = int((time.time() - stage_start) * 1000)

            stage_start = time.time()
            result = self.generate_final_output(text, tokens.currency_hint, classified.amounts)
            stage_times['assemble'] = int((time.time() - stage_start) * 1000)

        except Exception as e:
            logger.exception(f"Pipeline failed: {e}")
            return PipelineResult.error()

        total_time_ms = int((time.time() - start_time) * 1000)
        logger.debug(f"Pipeline stage_times={stage_times} total_time_ms={total_time_ms}")
        logger.info(f"🎉 Pipeline completed: {len(result.amounts)} amounts, status {result.status.value}")
        return result

    async def execute_from_ocr(self, raw_ocr_result: Dict[str, Any]) -> PipelineResult:
        """Run the full pipeline on the text of a raw OCR engine result"""
        try:
            ocr_result = build_ocr_result(raw_ocr_result)
        except Exception as e:
            logger.exception(f"Invalid OCR result: {e}")
            return PipelineResult.error()

        logger.info(f"📄 OCR text: {ocr_result.total_boxes} boxes, average confidence {ocr_result.average_confidence:.2f}")
        return await self.execute_full_pipeline(ocr_result.full_text)

    async def inspect_stage(self, text: str, stage: int) -> StageInspection:
        """
        Run the pipeline from scratch up to ``stage`` (1-4) and return
        every intermediate produced along the way.

        A stage failure ends the run with ``status="error"`` and the
        intermediates produced before it.

        Raises:
            ValueError: If ``stage`` is not 1-4
        """
        try:
            stage = PipelineStage(stage)
        except ValueError:
            raise ValueError(f"Stage must be between 1 and 4, got {stage}")

        produced: Dict[str, Any] = {}
        try:
            tokens = await self.extract_raw_tokens(text)
            if isinstance(tokens, NoAmountsFound):
                return StageInspection(stage=int(stage), status=tokens.status, guardrail=tokens)
            produced['raw_tokens'] = tokens
            if stage == PipelineStage.EXTRACT:
                return StageInspection(stage=int(stage), **produced)

            produced['normalized_amounts'] = self.normalize_amounts(tokens.tokens)
            if stage == PipelineStage.NORMALIZE:
                return StageInspection(stage=int(stage), **produced)

            produced['classified_amounts'] = await self.classify_amounts(
                text, produced['normalized_amounts'].values
            )
            if stage == PipelineStage.CLASSIFY:
                return StageInspection(stage=int(stage), **produced)

            final = self.generate_final_output(
                text, tokens.currency_hint, produced['classified_amounts'].amounts
            )
        except Exception as e:
            logger.exception(f"Stage inspection failed at stage {int(stage)}: {e}")
            return StageInspection(stage=int(stage), status=PipelineStatus.ERROR.value, **produced)

        return StageInspection(stage=int(stage), status=final.status.value, final_result=final, **produced)


async def process_text(text: str, config: Optional[Dict[str, Any]] = None) -> PipelineResult:
    """Run the full pipeline on ``text`` with a one-off AmountPipeline"""
    pipeline = AmountPipeline(config)
    return await pipeline.execute_full_pipeline(text)
