"""
AmountEx - Monetary Amount Extraction

Extracts structured monetary amounts from bill and invoice text through a
four-stage pipeline: raw token discovery, OCR-error normalization, context
classification and final assembly with source snippets.

Basic usage:
    from amountex import AmountPipeline

    pipeline = AmountPipeline()
    result = await pipeline.execute_full_pipeline(
        "Total Bill Amount Rs.1200, Paid Rs.1000, Due Rs.200"
    )
    print(result.to_dict())
"""

__version__ = "0.1.0"

from amountex.config import AmountExConfig
from amountex.processors.amounts.pipeline import AmountPipeline, process_text

__all__ = ['AmountExConfig', 'AmountPipeline', 'process_text', '__version__']
