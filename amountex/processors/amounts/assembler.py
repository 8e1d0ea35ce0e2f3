"""
Result Assembler (Stage 4)

Attaches provenance to each classified amount and produces the final,
priority-ordered result.
"""

import logging
from typing import Iterable, List

from amountex.models.amounts import (
    ClassifiedAmount,
    FinalAmount,
    PipelineResult,
    PipelineStatus,
    sort_by_priority,
)
from amountex.processors.amounts.text_utils import format_amount, source_snippet

logger = logging.getLogger(__name__)


class ResultAssembler:
    """Stage 4: final assembly with source snippets"""

    def __init__(self, snippet_radius: int = 50):
        self.snippet_radius = snippet_radius

    def build_source(self, text: str, value: float) -> str:
        """``text: '<snippet>'`` around the value, or ``value: <n>`` when absent"""
        snippet = source_snippet(text, value, self.snippet_radius)
        if snippet is None:
            return f"value: {format_amount(value)}"
        return f"text: '{snippet}'"

    def generate_final_output(
        self,
        text: str,
        currency: str,
        amounts: Iterable[ClassifiedAmount]
    ) -> PipelineResult:
        """
        Build the final result.

        Never raises: any failure yields ``PipelineResult.error()``.
        """
        try:
            final_amounts: List[FinalAmount] = [
                FinalAmount(
                    category=amount.category,
                    value=amount.value,
                    source=self.build_source(text, amount.value)
                )
                for amount in amounts
            ]
            result = PipelineResult(
                currency=currency,
                amounts=sort_by_priority(final_amounts),
                status=PipelineStatus.OK
            )
        except Exception as e:
            logger.exception(f"❌ Stage 4 failed: {e}")
            return PipelineResult.error()

        logger.info(f"✅ Stage 4 assembled {len(result.amounts)} amounts")
        return result
