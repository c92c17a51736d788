"""Annotation extraction: turn raw canvas elements into semantic annotations.

Each non-container element is classified, positioned at its bbox centroid,
and linked to a target image when one can be found:

  1. an explicit bound element that is a known image
  2. for arrows, the start/end binding endpoints
  3. the nearest image centroid within the cutoff distance
"""

from __future__ import annotations

import logging

import numpy as np

from promptcanvas.engine.classifier import classify_annotation_role
from promptcanvas.engine.config import DEFAULT_CONFIG, AnnotationConfig
from promptcanvas.models.canvas import CONTAINER_KINDS, CanvasElement, ImageMetadata, ShapeKind
from promptcanvas.models.semantic import AnnotationMetadata, Position, SemanticAnnotation
from promptcanvas.utils.geometry import box_diagonal, distances_from

logger = logging.getLogger(__name__)


def is_annotation_element(element: CanvasElement) -> bool:
    return not element.is_deleted and element.kind not in CONTAINER_KINDS


def _image_for_element_id(element_id: str, images: list[ImageMetadata]) -> ImageMetadata | None:
    for image in images:
        if image.excalidraw_element_id == element_id:
            return image
    return None


def _find_explicitly_bound_image(
    element: CanvasElement,
    images: list[ImageMetadata],
) -> str | None:
    for binding in element.bound_elements or []:
        if binding is None:
            continue
        image = _image_for_element_id(binding.id, images)
        if image:
            return image.id
    return None


def _find_arrow_endpoint_image(
    element: CanvasElement,
    images: list[ImageMetadata],
) -> str | None:
    for binding in (element.start_binding, element.end_binding):
        if binding is None or not binding.element_id:
            continue
        image = _image_for_element_id(binding.element_id, images)
        if image:
            return image.id
    return None


def find_nearest_image(
    element: CanvasElement,
    images: list[ImageMetadata],
    elements_by_id: dict[str, CanvasElement],
    config: AnnotationConfig = DEFAULT_CONFIG,
) -> str | None:
    """Closest image (centroid to centroid) strictly under the cutoff, or None.

    Images whose element is not on the canvas are skipped. Equal distances
    keep the earlier image.
    """
    candidates: list[ImageMetadata] = []
    centers: list[tuple[float, float]] = []
    for image in images:
        image_element = elements_by_id.get(image.excalidraw_element_id)
        if image_element is None:
            continue
        candidates.append(image)
        centers.append(image_element.center)

    if not candidates:
        return None

    dists = distances_from(element.center, np.asarray(centers, dtype=np.float64))
    best = int(np.argmin(dists))
    if dists[best] < config.nearest_image_cutoff:
        return candidates[best].id
    return None


def find_bound_image(
    element: CanvasElement,
    images: list[ImageMetadata],
    elements_by_id: dict[str, CanvasElement],
    config: AnnotationConfig = DEFAULT_CONFIG,
) -> str | None:
    """Resolve the target image of an annotation element, or None."""
    image_id = _find_explicitly_bound_image(element, images)
    if image_id:
        return image_id

    if element.kind is ShapeKind.ARROW:
        image_id = _find_arrow_endpoint_image(element, images)
        if image_id:
            return image_id

    return find_nearest_image(element, images, elements_by_id, config)


def parse_annotations(
    elements: list[CanvasElement],
    images: list[ImageMetadata],
    config: AnnotationConfig = DEFAULT_CONFIG,
) -> list[SemanticAnnotation]:
    """Build one SemanticAnnotation per annotation element, in canvas order."""
    elements_by_id = {el.id: el for el in elements}
    annotations: list[SemanticAnnotation] = []

    for element in elements:
        if not is_annotation_element(element):
            continue

        role, confidence = classify_annotation_role(element, config)
        cx, cy = element.center

        annotation = SemanticAnnotation(
            id=element.id,
            type=element.type,
            role=role,
            position=Position(x=cx, y=cy),
            confidence=confidence,
            metadata=AnnotationMetadata(
                color=element.stroke_color,
                size=box_diagonal(element.box),
            ),
        )

        if element.kind is ShapeKind.TEXT:
            annotation.content = element.text

        annotation.target_image_id = find_bound_image(element, images, elements_by_id, config)
        annotations.append(annotation)

    logger.debug("Parsed %d annotations from %d elements", len(annotations), len(elements))
    return annotations
