"""Semantic annotation model: what the engine derives from drawn shapes."""

from __future__ import annotations

import enum

from pydantic import Field

from promptcanvas.models.base import CamelModel


class AnnotationRole(str, enum.Enum):
    PLACEMENT_INDICATOR = "placement_indicator"  # arrow pointing at a placement
    EMPHASIS = "emphasis"  # circle or small box highlighting an area
    INSTRUCTION = "instruction"
    MEASUREMENT = "measurement"
    REFERENCE = "reference"  # short generic label
    CONSTRAINT = "constraint"  # boundary or limit
    UNKNOWN = "unknown"


class SpatialRelation(str, enum.Enum):
    POINTS_TO = "points_to"
    ENCIRCLES = "encircles"
    ADJACENT_TO = "adjacent_to"
    OVERLAPS = "overlaps"
    NEAR = "near"
    ABOVE = "above"
    BELOW = "below"
    LEFT_OF = "left_of"
    RIGHT_OF = "right_of"

    @property
    def phrase(self) -> str:
        return self.value.replace("_", " ")


class Position(CamelModel):
    x: float
    y: float


class AnnotationMetadata(CamelModel):
    color: str | None = None
    size: float | None = None  # bbox diagonal
    is_highlighted: bool | None = None


class SemanticAnnotation(CamelModel):
    id: str
    type: str  # source shape kind
    role: AnnotationRole
    content: str | None = None
    position: Position  # always the source shape's bbox centroid
    target_image_id: str | None = None
    confidence: float = Field(ge=0.0, le=1.0)
    metadata: AnnotationMetadata = Field(default_factory=AnnotationMetadata)


class AnnotationImageRelation(CamelModel):
    annotation_id: str
    image_id: str
    relation: SpatialRelation
    confidence: float = Field(ge=0.0, le=1.0)


class ExtractionResult(CamelModel):
    annotations: list[SemanticAnnotation] = Field(default_factory=list)
    relations: list[AnnotationImageRelation] = Field(default_factory=list)
