"""Annotation engine configuration: the canvas-unit thresholds the heuristics use.

Values are tuned for the drawing surface's default coordinate scale (roughly
screen pixels at 100% zoom). Override per call rather than editing in place.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AnnotationConfig:
    """Thresholds for classification, target search and relation resolution."""

    # Rectangles larger than this (units²) read as boundaries, smaller as highlights
    rectangle_constraint_area: float = 100_000.0

    # Nearest-image fallback: images farther than this are never a target
    nearest_image_cutoff: float = 500.0

    # Directional labels (above/below/left/right) only within this distance
    directional_cutoff: float = 200.0

    # Intersection / smaller-area ratio above which boxes "overlap"
    overlap_threshold: float = 0.1

    # Unbound annotations keep only relations scoring strictly above this
    relation_retention_threshold: float = 0.5


DEFAULT_CONFIG = AnnotationConfig()
