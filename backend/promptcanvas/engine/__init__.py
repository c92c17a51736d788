"""Canvas annotation engine: classify drawn shapes and relate them to images."""

from promptcanvas.engine.annotations import find_bound_image, parse_annotations
from promptcanvas.engine.classifier import classify_annotation_role
from promptcanvas.engine.config import AnnotationConfig
from promptcanvas.engine.relations import (
    analyze_annotation_relations,
    annotations_to_text,
    determine_spatial_relation,
    extract_semantic_annotations,
)

__all__ = [
    "AnnotationConfig",
    "classify_annotation_role",
    "parse_annotations",
    "find_bound_image",
    "determine_spatial_relation",
    "analyze_annotation_relations",
    "extract_semantic_annotations",
    "annotations_to_text",
]
