"""
Text helpers shared by classification and final assembly
"""

import math
import re
from typing import Optional, Tuple

NUMBER_PATTERN = re.compile(r'(?<!\d)(?<!\d[.,])(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d+)?(?![\d,]\d)')


def format_amount(value: float) -> str:
    """
    Shortest decimal form of a value as it would appear in a bill.

    >>> format_amount(1200.0)
    '1200'
    >>> format_amount(12.5)
    '12.5'
    """
    value = float(value)
    if math.isfinite(value) and value.is_integer():
        return str(int(value))
    return repr(value)


def _char_at(text: str, index: int) -> str:
    if 0 <= index < len(text):
        return text[index]
    return ''


def find_amount(text: str, value: float) -> Optional[Tuple[int, int]]:
    """
    Span of the first occurrence of ``value`` in ``text``, or None.

    The shortest decimal form is searched first. Occurrences embedded in a
    longer number are skipped, so 200 is not found inside 1200, 0.200 or
    200.50; a decimal point only joins two numbers when a digit sits on
    its other side ("Rs.200" still matches). When that form is absent the
    numbers in the text are compared by value ("45.50", "1,200").
    """
    needle = format_amount(value)
    index = text.find(needle)
    while index != -1:
        end = index + len(needle)
        before = _char_at(text, index - 1)
        after = _char_at(text, end)

        embedded_before = before.isdigit() or (before == '.' and _char_at(text, index - 2).isdigit())
        embedded_after = after.isdigit() or (after == '.' and _char_at(text, end + 1).isdigit())

        if not embedded_before and not embedded_after:
            return index, end
        index = text.find(needle, index + 1)

    target = float(value)
    for match in NUMBER_PATTERN.finditer(text):
        if float(match.group(0).replace(',', '')) == target:
            return match.span()
    return None


def locate_amount(text: str, value: float) -> int:
    """Index of the first occurrence of ``value`` in ``text``, or -1"""
    span = find_amount(text, value)
    return span[0] if span else -1


def context_window(text: str, index: int, length: int, radius: int = 50) -> str:
    """Text from ``radius`` characters before to ``radius`` after a match"""
    start = max(0, index - radius)
    end = min(len(text), index + length + radius)
    return text[start:end]


def source_snippet(text: str, value: float, radius: int = 50) -> Optional[str]:
    """Stripped context window around the first occurrence of a value"""
    span = find_amount(text, value)
    if span is None:
        return None
    start, end = span
    return context_window(text, start, end - start, radius).strip()
