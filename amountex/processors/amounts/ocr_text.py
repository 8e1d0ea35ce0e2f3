"""
OCR text assembly

Normalizes the raw output of an OCR engine into plain text plus text
boxes. Three result shapes are accepted:

- grouped boxes: ``{"boxes": [[{"text", "box": {x, y, width, height}, "confidence"}, ...]]}``
- parallel arrays: ``{"texts": [...], "boxes": [[[x, y], ...]], "confidences": [...]}``
- plain text: ``{"text": "..."}``
"""

import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

EMPTY_COORDINATES = [[0.0, 0.0], [0.0, 0.0], [0.0, 0.0], [0.0, 0.0]]


class BoundingBox(BaseModel):
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0


class OCRTextBox(BaseModel):
    """A recognized text region"""
    text: str
    bounding_box: BoundingBox = Field(default_factory=BoundingBox)
    confidence: float = 0.0
    coordinates: List[List[float]] = Field(default_factory=lambda: [list(p) for p in EMPTY_COORDINATES])


class OCRResult(BaseModel):
    """Normalized OCR output"""
    full_text: str = ""
    text_boxes: List[OCRTextBox] = Field(default_factory=list)
    total_boxes: int = 0
    average_confidence: float = 0.0
    processing_time: float = 0.0


def _box_from_object(item: Dict[str, Any]) -> OCRTextBox:
    box = item.get('box') or {}
    x, y = float(box.get('x', 0)), float(box.get('y', 0))
    width, height = float(box.get('width', 0)), float(box.get('height', 0))
    return OCRTextBox(
        text=str(item['text']).strip(),
        bounding_box=BoundingBox(x=x, y=y, width=width, height=height),
        confidence=float(item.get('confidence') or 0),
        coordinates=[[x, y], [x + width, y], [x + width, y + height], [x, y + height]]
    )


def _box_from_arrays(text: str, points: Optional[List[List[float]]], confidence: float) -> OCRTextBox:
    if not points:
        return OCRTextBox(text=text.strip(), confidence=confidence)
    return OCRTextBox(
        text=text.strip(),
        bounding_box=BoundingBox(
            x=points[0][0],
            y=points[0][1],
            width=points[2][0] - points[0][0],
            height=points[2][1] - points[0][1]
        ),
        confidence=confidence,
        coordinates=[list(point) for point in points]
    )


def build_ocr_result(raw: Dict[str, Any]) -> OCRResult:
    """
    Convert a raw OCR engine result into an OCRResult.

    Empty regions are skipped; region texts are joined with single spaces.
    """
    raw = raw or {}
    boxes: List[OCRTextBox] = []

    grouped = raw.get('boxes')
    texts = raw.get('texts')

    if texts:
        confidences = raw.get('confidences') or []
        points = grouped or []
        for i, text in enumerate(texts):
            if not text or not str(text).strip():
                continue
            box_points = points[i] if i < len(points) else None
            confidence = float(confidences[i]) if i < len(confidences) else 0.0
            boxes.append(_box_from_arrays(str(text), box_points, confidence))
    elif isinstance(grouped, list):
        for group in grouped:
            if not isinstance(group, list):
                continue
            for item in group:
                if isinstance(item, dict) and item.get('text') and str(item['text']).strip():
                    boxes.append(_box_from_object(item))
    elif raw.get('text'):
        boxes.append(OCRTextBox(text=str(raw['text']), confidence=1.0))

    full_text = ' '.join(box.text for box in boxes).strip()
    average = sum(box.confidence for box in boxes) / len(boxes) if boxes else 0.0

    logger.debug(f"OCR result: {len(boxes)} boxes, average confidence {average:.2f}")
    return OCRResult(
        full_text=full_text,
        text_boxes=boxes,
        total_boxes=len(boxes),
        average_confidence=average,
        processing_time=float(raw.get('processingTime', raw.get('processing_time', 0)) or 0)
    )
