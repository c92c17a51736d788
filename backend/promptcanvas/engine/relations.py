"""Spatial relations between annotations and images.

determine_spatial_relation walks RELATION_RULES in order; the first rule that
returns a result wins. Only the arrow-tip and ellipse-radius checks are gated
on the annotation's shape kind.

  1. arrow tip inside image bbox                 → points_to   0.95
  2. ellipse contains image centroid and is
     larger than the image                       → encircles   0.90
  3. bbox overlap ratio > threshold              → overlaps    0.80
  4. centroid distance < directional cutoff      → right_of | below | left_of | above  0.70
  5. otherwise                                   → near        0.50
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, NamedTuple

from promptcanvas.engine.annotations import parse_annotations
from promptcanvas.engine.config import DEFAULT_CONFIG, AnnotationConfig
from promptcanvas.models.canvas import CanvasElement, ImageMetadata, ShapeKind
from promptcanvas.models.semantic import (
    AnnotationImageRelation,
    AnnotationRole,
    ExtractionResult,
    SemanticAnnotation,
    SpatialRelation,
)
from promptcanvas.utils.geometry import (
    angle_degrees,
    box_center,
    box_radius,
    distance,
    overlap_ratio,
    point_in_box,
)

logger = logging.getLogger(__name__)


class Resolution(NamedTuple):
    relation: SpatialRelation
    confidence: float


RuleFn = Callable[
    [SemanticAnnotation, CanvasElement, CanvasElement, AnnotationConfig],
    "Resolution | None",
]


@dataclass(frozen=True)
class RelationRule:
    name: str
    evaluate: RuleFn


def _arrow_points_to(
    annotation: SemanticAnnotation,
    annotation_el: CanvasElement,
    image_el: CanvasElement,
    config: AnnotationConfig,
) -> Resolution | None:
    if annotation.type != ShapeKind.ARROW.value:
        return None
    # Terminal point in the element's own x/y + width/height convention
    tip = (annotation_el.x + annotation_el.width, annotation_el.y + annotation_el.height)
    if point_in_box(tip, image_el.box):
        return Resolution(SpatialRelation.POINTS_TO, 0.95)
    return None


def _ellipse_encircles(
    annotation: SemanticAnnotation,
    annotation_el: CanvasElement,
    image_el: CanvasElement,
    config: AnnotationConfig,
) -> Resolution | None:
    if annotation.type != ShapeKind.ELLIPSE.value:
        return None
    centre_gap = distance((annotation.position.x, annotation.position.y), image_el.center)
    annotation_radius = box_radius(annotation_el.box)
    image_radius = box_radius(image_el.box)
    if centre_gap < annotation_radius and image_radius < annotation_radius:
        return Resolution(SpatialRelation.ENCIRCLES, 0.9)
    return None


def _boxes_overlap(
    annotation: SemanticAnnotation,
    annotation_el: CanvasElement,
    image_el: CanvasElement,
    config: AnnotationConfig,
) -> Resolution | None:
    if overlap_ratio(annotation_el.box, image_el.box) > config.overlap_threshold:
        return Resolution(SpatialRelation.OVERLAPS, 0.8)
    return None


def direction_from_angle(angle: float) -> SpatialRelation:
    """Four 90° sectors centred on the axes. Screen space, so +90° is below."""
    if -45 <= angle < 45:
        return SpatialRelation.RIGHT_OF
    if 45 <= angle < 135:
        return SpatialRelation.BELOW
    if angle >= 135 or angle < -135:
        return SpatialRelation.LEFT_OF
    return SpatialRelation.ABOVE


def _directional(
    annotation: SemanticAnnotation,
    annotation_el: CanvasElement,
    image_el: CanvasElement,
    config: AnnotationConfig,
) -> Resolution | None:
    image_centre = box_center(image_el.box)
    position = (annotation.position.x, annotation.position.y)
    if distance(image_centre, position) < config.directional_cutoff:
        return Resolution(direction_from_angle(angle_degrees(image_centre, position)), 0.7)
    return None


def _near(
    annotation: SemanticAnnotation,
    annotation_el: CanvasElement,
    image_el: CanvasElement,
    config: AnnotationConfig,
) -> Resolution | None:
    return Resolution(SpatialRelation.NEAR, 0.5)


RELATION_RULES: tuple[RelationRule, ...] = (
    RelationRule("points_to", _arrow_points_to),
    RelationRule("encircles", _ellipse_encircles),
    RelationRule("overlaps", _boxes_overlap),
    RelationRule("directional", _directional),
    RelationRule("near", _near),
)


def determine_spatial_relation(
    annotation: SemanticAnnotation,
    annotation_element: CanvasElement,
    image_element: CanvasElement,
    config: AnnotationConfig = DEFAULT_CONFIG,
) -> Resolution:
    """Relation of one annotation to one image. Always returns a result."""
    for rule in RELATION_RULES:
        result = rule.evaluate(annotation, annotation_element, image_element, config)
        if result is not None:
            return result
    # _near is unconditional; unreachable unless the rule list is edited
    return Resolution(SpatialRelation.NEAR, 0.5)


def analyze_annotation_relations(
    annotations: list[SemanticAnnotation],
    images: list[ImageMetadata],
    elements: list[CanvasElement],
    config: AnnotationConfig = DEFAULT_CONFIG,
) -> list[AnnotationImageRelation]:
    """Relations for every annotation.

    Targeted annotations get exactly one relation against their target.
    Untargeted ones are scored against every image and keep each relation
    above the retention threshold, in image order, so ambiguity survives.
    """
    elements_by_id = {el.id: el for el in elements}
    images_by_id = {img.id: img for img in images}
    relations: list[AnnotationImageRelation] = []

    for annotation in annotations:
        annotation_el = elements_by_id.get(annotation.id)
        if annotation_el is None:
            continue

        if annotation.target_image_id:
            image = images_by_id.get(annotation.target_image_id)
            if image is None:
                continue
            image_el = elements_by_id.get(image.excalidraw_element_id)
            if image_el is None:
                continue
            relation, confidence = determine_spatial_relation(
                annotation, annotation_el, image_el, config
            )
            relations.append(
                AnnotationImageRelation(
                    annotation_id=annotation.id,
                    image_id=image.id,
                    relation=relation,
                    confidence=confidence,
                )
            )
            continue

        for image in images:
            image_el = elements_by_id.get(image.excalidraw_element_id)
            if image_el is None:
                continue
            relation, confidence = determine_spatial_relation(
                annotation, annotation_el, image_el, config
            )
            if confidence > config.relation_retention_threshold:
                relations.append(
                    AnnotationImageRelation(
                        annotation_id=annotation.id,
                        image_id=image.id,
                        relation=relation,
                        confidence=confidence,
                    )
                )

    return relations


def extract_semantic_annotations(
    elements: list[CanvasElement],
    images: list[ImageMetadata],
    config: AnnotationConfig = DEFAULT_CONFIG,
) -> ExtractionResult:
    """Full pass: classify + target every annotation, then resolve relations."""
    annotations = parse_annotations(elements, images, config)
    relations = analyze_annotation_relations(annotations, images, elements, config)
    logger.info(
        "Extracted %d annotations, %d relations against %d images",
        len(annotations),
        len(relations),
        len(images),
    )
    return ExtractionResult(annotations=annotations, relations=relations)


def annotations_to_text(
    annotations: list[SemanticAnnotation],
    relations: list[AnnotationImageRelation],
) -> str:
    """One plain-language line per meaningful annotation.

    Only the first relation of an annotation is described; relations keep
    the order analyze_annotation_relations produced them in.
    """
    lines: list[str] = []

    for annotation in annotations:
        related = [r for r in relations if r.annotation_id == annotation.id]
        role = annotation.role

        if role is AnnotationRole.INSTRUCTION and annotation.content:
            lines.append(f'User instruction: "{annotation.content}"')
        elif role is AnnotationRole.PLACEMENT_INDICATOR and related:
            lines.append(f"Placement arrow {related[0].relation.phrase} product")
        elif role is AnnotationRole.EMPHASIS and related:
            lines.append("Area of emphasis marked on image")
        elif role is AnnotationRole.MEASUREMENT and annotation.content:
            lines.append(f'Measurement note: "{annotation.content}"')
        elif role is AnnotationRole.CONSTRAINT and annotation.content:
            lines.append(f'Constraint: "{annotation.content}"')

    return "\n".join(lines)
