"""
Amount Normalizer (Stage 2)

Turns raw tokens into numeric values, correcting the character
confusions OCR engines commonly make in digits.
"""

import logging
import math
import re
from typing import Iterable, List, Optional

from amountex.models.amounts import NormalizedAmounts

logger = logging.getLogger(__name__)

OCR_CORRECTIONS = {
    'O': '0', 'o': '0',
    'l': '1', 'I': '1',
    'S': '5', 's': '5',
    'G': '6', 'g': '6',
    'T': '7', 't': '7',
    'B': '8', 'b': '8',
    'q': '9', 'Q': '9',
}
_CORRECTION_TABLE = str.maketrans(OCR_CORRECTIONS)

CURRENCY_SYMBOLS = re.compile(r'[$₹€£¥,]')
CURRENCY_PREFIX = re.compile(r'^\s*(?:Rs\.?|INR|USD|EUR|GBP)\s*', re.IGNORECASE)

# Leading number, read the way parseFloat reads it ("1200/-", "450.00 INR")
LEADING_NUMBER = re.compile(r'\d+(?:\.\d+)?|\.\d+')

SUCCESS_WEIGHT = 0.9
FAILURE_WEIGHT = 0.3


def normalize_token(token: str) -> Optional[float]:
    """
    Convert one raw token to a value.

    Returns:
        The value of the number the token starts with, or None when it
        does not start with a non-negative number even after OCR correction
    """
    cleaned = CURRENCY_PREFIX.sub('', str(token))
    cleaned = CURRENCY_SYMBOLS.sub('', cleaned).strip()
    if cleaned.endswith('%'):
        cleaned = cleaned[:-1]

    corrected = cleaned.translate(_CORRECTION_TABLE)
    match = LEADING_NUMBER.match(corrected)
    if not match:
        return None

    value = float(match.group(0))

    if not math.isfinite(value) or value < 0:
        return None
    return value


class AmountNormalizer:
    """Stage 2: OCR-error normalization of tokens into numeric values"""

    def normalize_amounts(self, tokens: Iterable[str]) -> NormalizedAmounts:
        """
        Normalize tokens in order, dropping the ones that fail.

        Confidence averages 0.9 per accepted and 0.3 per rejected token
        over the number of input tokens (0.0 for no tokens).
        """
        tokens = list(tokens)
        values: List[float] = []
        total = 0.0

        for token in tokens:
            value = normalize_token(token)
            if value is None:
                logger.debug(f"Dropped token {token!r}: not a number after OCR correction")
                total += FAILURE_WEIGHT
                continue
            values.append(value)
            total += SUCCESS_WEIGHT

        confidence = total / len(tokens) if tokens else 0.0

        logger.info(f"🔧 Stage 2 normalized {len(values)}/{len(tokens)} tokens")
        return NormalizedAmounts(values=values, confidence=confidence)
