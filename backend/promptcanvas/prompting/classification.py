"""Free text -> structured product / environment metadata via a text model."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from promptcanvas.errors import ClassificationParseError
from promptcanvas.models.prompt import ClassificationContext, TextClassificationRequest, TextClassificationResponse
from promptcanvas.providers.base import BaseProvider
from promptcanvas.providers.fallback import execute_with_fallback
from promptcanvas.providers.registry import ProviderRegistry
from promptcanvas.providers.types import GenerateTextRequest, ProviderType

logger = logging.getLogger(__name__)

CLASSIFICATION_TEMPERATURE = 0.3  # low for consistent extraction
CLASSIFICATION_MAX_TOKENS = 1024

_FENCED_JSON = re.compile(r"```json\n?([\s\S]*?)\n?```")
_BARE_JSON = re.compile(r"\{[\s\S]*\}")

_BASE_PROMPT = """You are an expert at extracting structured information from natural language descriptions.

User's text: "{text}"

{context_line}

{metadata_line}

Extract structured information and return a JSON object with the following structure:"""

_PRODUCT_SCHEMA = """

{
  "productMetadata": {
    "category": "main category (e.g., furniture, electronics, decor, lighting, textiles)",
    "subcategory": "specific type (e.g., sofa, laptop, vase)",
    "materials": ["array", "of", "materials"],
    "colors": ["array", "of", "colors"],
    "style": "design style (e.g., modern, vintage, minimalist, industrial)",
    "features": ["notable", "features"],
    "tags": ["relevant", "tags"]
  },
  "refinedText": "A refined, detailed description of the product",
  "confidence": {
    "overall": 0.0-1.0,
    "category": 0.0-1.0,
    "style": 0.0-1.0,
    "materials": 0.0-1.0
  },
  "entities": [
    {
      "type": "color|material|style|object",
      "value": "extracted value",
      "confidence": 0.0-1.0
    }
  ]
}

Guidelines:
- Extract all color names mentioned
- Identify materials (wood, metal, fabric, glass, leather, etc.)
- Determine the design style
- List key features that make the product unique
- Provide confidence scores based on how explicit the information is
- refined text should be a clear, detailed description suitable for image generation"""

_ENVIRONMENT_SCHEMA = """

{
  "environmentContext": {
    "type": "environment type (e.g., living room, bedroom, office, outdoor, studio)",
    "lighting": "lighting description",
    "ambiance": "mood/feeling (e.g., cozy, professional, dramatic, peaceful)",
    "timeOfDay": "morning|afternoon|evening|night|golden hour",
    "weather": "sunny|cloudy|rainy|stormy (if outdoor)"
  },
  "refinedText": "A refined, detailed description of the environment",
  "confidence": {
    "overall": 0.0-1.0
  },
  "entities": [
    {
      "type": "location|lighting|mood",
      "value": "extracted value",
      "confidence": 0.0-1.0
    }
  ]
}

Guidelines:
- Identify the type of space or location
- Extract lighting conditions and time of day
- Determine the mood and atmosphere
- For outdoor scenes, note weather conditions
- Refined text should create a vivid mental image"""

_INSTRUCTION_SCHEMA = """

{
  "refinedText": "Clear, actionable instruction for image generation",
  "confidence": {
    "overall": 0.0-1.0
  },
  "entities": [
    {
      "type": "object|location|constraint",
      "value": "extracted value",
      "confidence": 0.0-1.0
    }
  ]
}

Guidelines:
- Convert casual instructions into clear directives
- Extract spatial relationships (left, right, center, foreground, background)
- Identify constraints (don't, avoid, must not)
- Note specific placement requirements
- Refined text should be unambiguous and actionable"""

_GENERAL_SCHEMA = """

{
  "refinedText": "Enhanced version of the input text with more detail and clarity",
  "confidence": {
    "overall": 0.0-1.0
  },
  "entities": [
    {
      "type": "color|material|style|location|object|lighting|mood",
      "value": "extracted value",
      "confidence": 0.0-1.0
    }
  ]
}

Guidelines:
- Extract any relevant entities (colors, materials, objects, locations, moods)
- Enhance the text with additional detail while preserving intent
- Provide confidence scores
- Refined text should be clear and detailed"""

_SCHEMAS: dict[str, str] = {
    "product": _PRODUCT_SCHEMA,
    "environment": _ENVIRONMENT_SCHEMA,
    "instruction": _INSTRUCTION_SCHEMA,
}


def build_classification_prompt(
    text: str,
    context: ClassificationContext | None = None,
    existing_metadata: dict[str, Any] | None = None,
) -> str:
    base = _BASE_PROMPT.format(
        text=text,
        context_line=f"Context: This text describes a {context}." if context else "",
        metadata_line=f"Existing metadata: {json.dumps(existing_metadata)}" if existing_metadata else "",
    )
    return base + _SCHEMAS.get(context or "", _GENERAL_SCHEMA)


def parse_classification(raw: str) -> TextClassificationResponse:
    """Pull the JSON object out of a model answer (fenced or bare) and validate it."""
    match = _FENCED_JSON.search(raw) or _BARE_JSON.search(raw)
    if match is None:
        payload = raw
    else:
        payload = match.group(1) if match.re is _FENCED_JSON else match.group(0)

    try:
        return TextClassificationResponse.model_validate(json.loads(payload))
    except (json.JSONDecodeError, ValidationError) as exc:
        logger.error("Failed to parse classification response: %s", exc)
        raise ClassificationParseError(raw) from exc


async def classify_text(
    request: TextClassificationRequest,
    preferred: ProviderType | str | None = None,
    registry: ProviderRegistry | None = None,
) -> TextClassificationResponse:
    prompt = build_classification_prompt(request.text, request.context, request.existing_metadata)

    async def _ask(provider: BaseProvider):
        return await provider.generate_text(
            GenerateTextRequest(
                prompt=prompt,
                temperature=CLASSIFICATION_TEMPERATURE,
                max_tokens=CLASSIFICATION_MAX_TOKENS,
            )
        )

    response = await execute_with_fallback(_ask, preferred=preferred, registry=registry)
    return parse_classification(response.text)
