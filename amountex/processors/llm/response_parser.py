"""
LLM response parsing

Models return JSON either raw, fenced in a markdown code block, or
surrounded by explanatory text. These helpers extract the JSON object.
"""

import json
import re
from typing import Any, Dict

from amountex.exceptions import LLMResponseParseError

_FENCE_RE = re.compile(r'```(?:json|JSON)?\s*([\s\S]*?)\s*```')
_OBJECT_RE = re.compile(r'\{[\s\S]*\}')


def clean_json_response(content: str) -> str:
    """Remove markdown code fences around a JSON payload"""
    content = content.strip()
    match = _FENCE_RE.search(content)
    if match:
        return match.group(1).strip()
    return content


def parse_llm_json(response: str) -> Dict[str, Any]:
    """
    Parse a model response into a JSON object.

    Tries, in order: the raw response, the first fenced code block,
    and the outermost ``{...}`` span.

    Raises:
        LLMResponseParseError: If no JSON object can be decoded
    """
    if not response or not response.strip():
        raise LLMResponseParseError("Empty LLM response", response)

    candidates = [response.strip(), clean_json_response(response)]
    object_match = _OBJECT_RE.search(response)
    if object_match:
        candidates.append(object_match.group(0))

    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, dict):
            return parsed

    raise LLMResponseParseError("No valid JSON object found in LLM response", response[:1000])
