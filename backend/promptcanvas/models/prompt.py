"""Prompt builder models: presets, templates, builder input/output, text classification."""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from promptcanvas.models.base import CamelModel
from promptcanvas.models.canvas import (
    CanvasElement,
    EnvironmentContext,
    ImageMetadata,
    ProductMetadata,
)
from promptcanvas.models.semantic import AnnotationImageRelation, SemanticAnnotation

# Template variable name -> rendered value. The ten standard names are listed in
# prompting.builder.VARIABLE_NAMES; custom keys are allowed.
PromptVariables = dict[str, str]

UserIntent = Literal["compose", "improve", "create_environment", "create_asset"]


class LightingPreset(CamelModel):
    id: str
    name: str
    description: str
    prompt: str
    keywords: list[str] = Field(default_factory=list)


class StylePreset(CamelModel):
    id: str
    name: str
    description: str
    prompt: str
    keywords: list[str] = Field(default_factory=list)
    category: Literal["photography", "artistic", "commercial", "technical"]


class PromptTemplate(CamelModel):
    id: str
    name: str
    description: str
    template: str
    category: Literal["environment", "product", "composition", "improvement", "custom"]
    variables: list[str] = Field(default_factory=list)
    defaults: dict[str, str] = Field(default_factory=dict)


class PromptBuilderInput(CamelModel):
    user_description: str = ""
    user_intent: UserIntent | None = None

    canvas_elements: list[CanvasElement] | None = None

    environment_image: ImageMetadata | None = None
    product_images: list[ImageMetadata] | None = None
    target_image: ImageMetadata | None = None

    annotations: list[SemanticAnnotation] | None = None
    annotation_relations: list[AnnotationImageRelation] | None = None

    environment_context: EnvironmentContext | None = None
    lighting_preset: LightingPreset | None = None
    style_preset: StylePreset | None = None

    model: str | None = None
    quality: str | None = None
    aspect_ratio: str | None = None

    template_id: str | None = None


class PromptComponents(CamelModel):
    scene_description: str = ""
    placement_instructions: str = ""
    technical_details: str = ""
    style_guidance: str = ""


class PromptBuilderOutput(CamelModel):
    enhanced_prompt: str
    variables: PromptVariables
    template: PromptTemplate
    confidence: float = Field(ge=0.0, le=1.0)
    used_annotations: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)
    components: PromptComponents = Field(default_factory=PromptComponents)


class ValidationResult(CamelModel):
    valid: bool
    errors: list[str] = Field(default_factory=list)


ClassificationContext = Literal["product", "environment", "instruction", "style"]


class TextClassificationRequest(CamelModel):
    text: str
    context: ClassificationContext | None = None
    existing_metadata: dict[str, object] | None = None


class ClassificationConfidence(CamelModel):
    overall: float = 0.0
    category: float | None = None
    style: float | None = None
    materials: float | None = None


class ExtractedEntity(CamelModel):
    # color, material, style, location, object, lighting, mood; models also emit "constraint"
    type: str
    value: str
    confidence: float = 0.0


class TextClassificationResponse(CamelModel):
    product_metadata: ProductMetadata | None = None
    environment_context: EnvironmentContext | None = None
    refined_text: str = ""
    confidence: ClassificationConfidence = Field(default_factory=ClassificationConfidence)
    entities: list[ExtractedEntity] = Field(default_factory=list)
