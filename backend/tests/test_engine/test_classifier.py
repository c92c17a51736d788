"""Tests for the annotation role classifier."""

import pytest

from promptcanvas.engine.classifier import classify_annotation_role, classify_text
from promptcanvas.engine.config import AnnotationConfig
from promptcanvas.models.semantic import AnnotationRole
from tests.conftest import element


@pytest.mark.parametrize("w,h", [(10, 10), (0, 0), (5000, 2000), (-30, 40)])
def test_arrow_is_always_placement_indicator(w, h):
    role, confidence = classify_annotation_role(element("a", "arrow", 0, 0, w, h))
    assert role is AnnotationRole.PLACEMENT_INDICATOR
    assert confidence == 0.9


def test_ellipse_is_emphasis():
    assert classify_annotation_role(element("e", "ellipse", 0, 0, 50, 50)) == (
        AnnotationRole.EMPHASIS,
        0.85,
    )


@pytest.mark.parametrize("text", ["sofa 200cm", "12 mm gap", "about 3ft", "width 40 in", "1920 px"])
def test_numeric_unit_text_is_measurement(text):
    assert classify_text(text) == (AnnotationRole.MEASUREMENT, 0.85)


def test_instruction_wins_over_measurement():
    role, confidence = classify_text("place it 10cm from the wall")
    assert role is AnnotationRole.INSTRUCTION
    assert confidence == 0.9


def test_measurement_wins_over_constraint():
    # measurement rules are checked before constraint rules
    assert classify_text("not wider than 10cm") == (AnnotationRole.MEASUREMENT, 0.85)


def test_constraint_text():
    assert classify_text("avoid the window") == (AnnotationRole.CONSTRAINT, 0.8)


def test_dimensions_pattern():
    assert classify_text("1920x1080") == (AnnotationRole.MEASUREMENT, 0.85)


def test_matching_is_case_insensitive():
    assert classify_text("PUT IT THERE")[0] is AnnotationRole.INSTRUCTION


def test_short_text_is_reference():
    assert classify_text("Lamp") == (AnnotationRole.REFERENCE, 0.6)


def test_long_uncategorized_text_defaults_to_instruction():
    assert classify_text("a lovely vintage armchair with floral fabric") == (
        AnnotationRole.INSTRUCTION,
        0.5,
    )


def test_text_element_without_text_is_reference():
    assert classify_annotation_role(element("t", "text", 0, 0, 10, 10)) == (
        AnnotationRole.REFERENCE,
        0.6,
    )


def test_rectangle_area_threshold():
    small = element("r1", "rectangle", 0, 0, 100, 100)
    large = element("r2", "rectangle", 0, 0, 400, 300)
    assert classify_annotation_role(small) == (AnnotationRole.EMPHASIS, 0.6)
    assert classify_annotation_role(large) == (AnnotationRole.CONSTRAINT, 0.7)


def test_rectangle_threshold_is_strict():
    exactly = element("r", "rectangle", 0, 0, 1000, 100)
    assert classify_annotation_role(exactly)[0] is AnnotationRole.EMPHASIS


def test_rectangle_threshold_is_configurable():
    rect = element("r", "rectangle", 0, 0, 100, 100)
    config = AnnotationConfig(rectangle_constraint_area=5_000)
    assert classify_annotation_role(rect, config)[0] is AnnotationRole.CONSTRAINT


@pytest.mark.parametrize("kind", ["line", "freedraw", "diamond", "something-new"])
def test_other_shapes_are_unknown(kind):
    assert classify_annotation_role(element("x", kind, 0, 0, 10, 10)) == (
        AnnotationRole.UNKNOWN,
        0.3,
    )


def test_missing_geometry_is_zero_size():
    el = element("r", "rectangle", None, None, None, None)
    assert el.box == (0.0, 0.0, 0.0, 0.0)
    assert classify_annotation_role(el)[0] is AnnotationRole.EMPHASIS
