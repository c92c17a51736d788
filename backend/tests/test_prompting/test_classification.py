"""Tests for free-text classification."""

import asyncio

import pytest

from promptcanvas.errors import AllProvidersFailedError, ClassificationParseError
from promptcanvas.models.prompt import TextClassificationRequest
from promptcanvas.prompting.classification import (
    build_classification_prompt,
    classify_text,
    parse_classification,
)
from promptcanvas.providers.types import ProviderType
from tests.conftest import FakeProvider, registry_of

FENCED = """Here is the result:
```json
{"productMetadata": {"category": "furniture", "colors": ["navy"], "materials": ["velvet"]},
 "refinedText": "A navy velvet sofa",
 "confidence": {"overall": 0.8, "category": 0.9}}
```"""


# == Prompt ==


def test_product_prompt():
    prompt = build_classification_prompt("navy velvet sofa", "product")
    assert 'User\'s text: "navy velvet sofa"' in prompt
    assert "Context: This text describes a product." in prompt
    assert '"productMetadata"' in prompt


def test_existing_metadata_is_serialized():
    prompt = build_classification_prompt("sofa", "product", {"category": "furniture"})
    assert 'Existing metadata: {"category": "furniture"}' in prompt


@pytest.mark.parametrize(
    "context,marker",
    [
        ("environment", '"environmentContext"'),
        ("instruction", "Clear, actionable instruction"),
        ("style", "Enhance the text with additional detail"),
        (None, "Enhance the text with additional detail"),
    ],
)
def test_schema_per_context(context, marker):
    assert marker in build_classification_prompt("x", context)


def test_no_context_line_without_context():
    assert "Context:" not in build_classification_prompt("x")


# == Parsing ==


def test_parse_fenced_json():
    result = parse_classification(FENCED)
    assert result.product_metadata.category == "furniture"
    assert result.product_metadata.materials == ["velvet"]
    assert result.refined_text == "A navy velvet sofa"
    assert result.confidence.category == 0.9


def test_parse_bare_json_in_prose():
    raw = (
        'Sure! {"environmentContext": {"type": "loft", "timeOfDay": "evening"}, '
        '"entities": [{"type": "constraint", "value": "no rugs", "confidence": 0.7}]} Done.'
    )
    result = parse_classification(raw)
    assert result.environment_context.time_of_day == "evening"
    assert result.entities[0].type == "constraint"


def test_unparseable_answer_keeps_raw_text(caplog):
    with pytest.raises(ClassificationParseError) as excinfo:
        parse_classification("I cannot help with that")
    assert excinfo.value.raw_response == "I cannot help with that"
    assert "Failed to parse classification response" in caplog.text


def test_wrong_shape_is_a_parse_error():
    with pytest.raises(ClassificationParseError):
        parse_classification('{"confidence": "high"}')


# == classify_text ==


def test_classify_uses_low_temperature():
    gemini = FakeProvider(ProviderType.GEMINI, text=FENCED)
    request = TextClassificationRequest(text="navy velvet sofa", context="product")

    result = asyncio.run(classify_text(request, registry=registry_of(gemini)))

    assert result.product_metadata.colors == ["navy"]
    (sent,) = gemini.requests
    assert sent.temperature == 0.3
    assert sent.max_tokens == 1024
    assert '"navy velvet sofa"' in sent.prompt


def test_classify_falls_back_to_next_provider():
    gemini = FakeProvider(ProviderType.GEMINI, fail_with=RuntimeError("quota"))
    openai = FakeProvider(ProviderType.OPENAI, text=FENCED)
    request = TextClassificationRequest(text="sofa")

    result = asyncio.run(classify_text(request, registry=registry_of(gemini, openai)))
    assert result.refined_text == "A navy velvet sofa"
    assert openai.calls == ["generate_text"]


def test_classify_all_failing():
    registry = registry_of(
        FakeProvider(ProviderType.GEMINI, fail_with=RuntimeError("quota")),
        FakeProvider(ProviderType.OPENAI, configured=False),
        FakeProvider(ProviderType.REPLICATE, configured=False),
    )
    with pytest.raises(AllProvidersFailedError, match="- gemini: quota"):
        asyncio.run(classify_text(TextClassificationRequest(text="sofa"), registry=registry))
