"""Annotation classifier: assign a semantic role to one drawn shape.

Rules are an explicit ordered list; the first rule whose predicate matches
decides the role. The classifier looks at nothing but the shape itself.

  arrow                         → placement_indicator 0.90
  ellipse                       → emphasis            0.85
  text, instruction pattern     → instruction         0.90
  text, measurement pattern     → measurement         0.85
  text, constraint pattern      → constraint          0.80
  text, shorter than 20 chars   → reference           0.60
  text, anything else           → instruction         0.50
  rectangle, area > threshold   → constraint          0.70
  rectangle                     → emphasis            0.60
  anything else                 → unknown             0.30
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, NamedTuple

from promptcanvas.engine.config import DEFAULT_CONFIG, AnnotationConfig
from promptcanvas.models.canvas import CanvasElement, ShapeKind
from promptcanvas.models.semantic import AnnotationRole
from promptcanvas.utils.geometry import box_area


class Classification(NamedTuple):
    role: AnnotationRole
    confidence: float


@dataclass(frozen=True)
class TextRule:
    name: str
    patterns: tuple[re.Pattern[str], ...]
    role: AnnotationRole
    confidence: float

    def matches(self, text: str) -> bool:
        return any(p.search(text) for p in self.patterns)


# Substring matches on lower-cased text: "instead" hits "here", "another" hits "not".
TEXT_RULES: tuple[TextRule, ...] = (
    TextRule(
        name="instruction",
        patterns=(
            re.compile(r"place|put|position|move"),
            re.compile(r"should|must|need"),
            re.compile(r"here|there"),
            re.compile(r"center|left|right|top|bottom"),
        ),
        role=AnnotationRole.INSTRUCTION,
        confidence=0.9,
    ),
    TextRule(
        name="measurement",
        patterns=(
            re.compile(r"\d+\s*(cm|mm|m|in|ft|px)"),
            re.compile(r"size|dimension|scale"),
            re.compile(r"x\d+|\d+x\d+"),
        ),
        role=AnnotationRole.MEASUREMENT,
        confidence=0.85,
    ),
    TextRule(
        name="constraint",
        patterns=(
            re.compile(r"not|don't|avoid|never"),
            re.compile(r"within|inside|outside"),
            re.compile(r"limit|boundary|edge"),
        ),
        role=AnnotationRole.CONSTRAINT,
        confidence=0.8,
    ),
)

# Short uncategorized text is a label; longer text is probably an instruction.
_REFERENCE_MAX_LEN = 20
_REFERENCE = Classification(AnnotationRole.REFERENCE, 0.6)
_LONG_TEXT = Classification(AnnotationRole.INSTRUCTION, 0.5)


def classify_text(text: str) -> Classification:
    """Role for a piece of annotation text."""
    lowered = text.lower()
    for rule in TEXT_RULES:
        if rule.matches(lowered):
            return Classification(rule.role, rule.confidence)
    if len(lowered) < _REFERENCE_MAX_LEN:
        return _REFERENCE
    return _LONG_TEXT


@dataclass(frozen=True)
class ShapeRule:
    name: str
    applies: Callable[[CanvasElement], bool]
    classify: Callable[[CanvasElement, AnnotationConfig], Classification]


def _rectangle(element: CanvasElement, config: AnnotationConfig) -> Classification:
    if box_area(element.box) > config.rectangle_constraint_area:
        return Classification(AnnotationRole.CONSTRAINT, 0.7)
    return Classification(AnnotationRole.EMPHASIS, 0.6)


SHAPE_RULES: tuple[ShapeRule, ...] = (
    ShapeRule(
        name="arrow",
        applies=lambda el: el.kind is ShapeKind.ARROW,
        classify=lambda el, cfg: Classification(AnnotationRole.PLACEMENT_INDICATOR, 0.9),
    ),
    ShapeRule(
        name="ellipse",
        applies=lambda el: el.kind is ShapeKind.ELLIPSE,
        classify=lambda el, cfg: Classification(AnnotationRole.EMPHASIS, 0.85),
    ),
    ShapeRule(
        name="text",
        applies=lambda el: el.kind is ShapeKind.TEXT,
        classify=lambda el, cfg: classify_text(el.text or ""),
    ),
    ShapeRule(
        name="rectangle",
        applies=lambda el: el.kind is ShapeKind.RECTANGLE,
        classify=_rectangle,
    ),
)

_UNKNOWN = Classification(AnnotationRole.UNKNOWN, 0.3)


def classify_annotation_role(
    element: CanvasElement,
    config: AnnotationConfig = DEFAULT_CONFIG,
) -> Classification:
    """Classify one shape. Pure and deterministic."""
    for rule in SHAPE_RULES:
        if rule.applies(element):
            return rule.classify(element, config)
    return _UNKNOWN
