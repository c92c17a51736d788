"""Prompt builder: UI state -> template variables -> rendered prompt.

Variables are extracted independently from the builder input, the chosen
template is filled, and a confidence score plus suggestions describe how
much structured input went into the result.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable

from promptcanvas.engine.relations import annotations_to_text, extract_semantic_annotations
from promptcanvas.models.prompt import (
    PromptBuilderInput,
    PromptBuilderOutput,
    PromptComponents,
    PromptTemplate,
    PromptVariables,
    UserIntent,
    ValidationResult,
)
from promptcanvas.prompting.presets import DEFAULT_PROMPT_TEMPLATES, find_template

logger = logging.getLogger(__name__)

_INTENT_TEMPLATES: dict[str, str] = {
    "compose": "product_composition",
    "improve": "image_improvement",
    "create_environment": "environment_generation",
}

DEFAULT_PLACEMENTS: dict[str, str] = {
    "furniture": "Position on the floor or against appropriate surfaces with realistic shadows",
    "electronics": "Place on suitable surfaces (desk, table, shelf) with proper perspective",
    "decor": "Position at appropriate height and location for the item type",
    "lighting": "Mount or place according to fixture type with realistic light emission",
    "art": "Hang on wall or place on easel at appropriate viewing height",
    "plants": "Position on floor or elevated surface with natural lighting",
}

FALLBACK_PLACEMENT = "Place the product naturally in the scene with proper integration"
FALLBACK_LIGHTING = "Natural ambient lighting with soft shadows"
FALLBACK_STYLE = "Photorealistic, professional quality"
FALLBACK_PALETTE = "Natural, balanced color palette"

BASE_COMPOSITION_RULES = (
    "Maintain realistic perspective and scale",
    "Ensure proper shadow and reflection integration",
    "Match lighting direction and color temperature",
)

_EXCESS_NEWLINES = re.compile(r"\n{3,}")


# == Template engine ==


def render_template(template: str, variables: PromptVariables) -> str:
    """Substitute ``{name}`` placeholders, drop whitespace-only lines, collapse blank runs."""
    rendered = template
    for key, value in variables.items():
        rendered = rendered.replace("{" + key + "}", value or "")

    lines = [line for line in rendered.split("\n") if line.strip() or line == ""]
    return _EXCESS_NEWLINES.sub("\n\n", "\n".join(lines)).strip()


def get_template(template_id: str | None = None, intent: UserIntent | None = None) -> PromptTemplate:
    """Explicit id first, then intent, then the first built-in template."""
    if template_id:
        template = find_template(template_id)
        if template is not None:
            return template

    if intent in _INTENT_TEMPLATES:
        template = find_template(_INTENT_TEMPLATES[intent])
        if template is not None:
            return template

    return DEFAULT_PROMPT_TEMPLATES[0]


# == Variable extraction ==


def _products(data: PromptBuilderInput):
    for product in data.product_images or []:
        if product.product_metadata is not None:
            yield product.product_metadata


def extract_scene_description(data: PromptBuilderInput) -> str:
    parts: list[str] = []
    if data.user_description:
        parts.append(data.user_description)

    ctx = data.environment_context
    if ctx is not None:
        if ctx.type:
            parts.append(f"Setting: {ctx.type}")
        if ctx.ambiance:
            parts.append(f"Ambiance: {ctx.ambiance}")
        if ctx.time_of_day:
            parts.append(f"Time: {ctx.time_of_day}")
        if ctx.weather:
            parts.append(f"Weather: {ctx.weather}")

    return ". ".join(parts)


def default_placement(category: str) -> str:
    return DEFAULT_PLACEMENTS.get(category.lower(), "")


def extract_placement_instructions(data: PromptBuilderInput) -> str:
    instructions: list[str] = []

    if data.annotations is not None and data.annotation_relations is not None:
        text = annotations_to_text(data.annotations, data.annotation_relations)
        if text:
            instructions.append(text)

    for meta in _products(data):
        if meta.category:
            placement = default_placement(meta.category)
            if placement:
                instructions.append(placement)

    if not instructions:
        instructions.append(FALLBACK_PLACEMENT)
    return ". ".join(instructions)


def extract_lighting_style(data: PromptBuilderInput) -> str:
    if data.lighting_preset is not None:
        return data.lighting_preset.prompt
    if data.environment_context is not None and data.environment_context.lighting:
        return data.environment_context.lighting
    return FALLBACK_LIGHTING


def extract_product_style(data: PromptBuilderInput) -> str:
    styles: list[str] = []
    if data.style_preset is not None:
        styles.append(data.style_preset.prompt)
    for meta in _products(data):
        if meta.style:
            styles.append(f"{meta.style} aesthetic")
    return ", ".join(styles or [FALLBACK_STYLE])


def extract_environment_details(data: PromptBuilderInput) -> str:
    details: list[str] = []
    env = data.environment_image
    if env is not None and env.product_metadata is not None:
        details.extend(env.product_metadata.features)

    ctx = data.environment_context
    if ctx is not None:
        if ctx.type:
            details.append(ctx.type)
        if ctx.ambiance:
            details.append(f"{ctx.ambiance} atmosphere")
    return ", ".join(details)


def extract_composition_rules(data: PromptBuilderInput) -> str:
    rules = list(BASE_COMPOSITION_RULES)
    if data.style_preset is not None:
        if data.style_preset.category == "commercial":
            rules.append("Clean, professional composition suitable for marketing")
        elif data.style_preset.category == "artistic":
            rules.append("Creative composition with artistic intent")
    return ". ".join(rules)


def extract_atmosphere(data: PromptBuilderInput) -> str:
    elements: list[str] = []
    if data.environment_context is not None and data.environment_context.ambiance:
        elements.append(data.environment_context.ambiance)
    if data.style_preset is not None:
        elements.append(data.style_preset.description)
    return ", ".join(elements)


def extract_technical_specs(data: PromptBuilderInput) -> str:
    specs = ["High-resolution output", "Sharp focus and detail"]

    if data.quality == "2K":
        specs.append("2048px base resolution")
    elif data.quality == "4K":
        specs.append("4096px base resolution")

    if data.model and "gemini-3-pro" in data.model:
        specs.append("Professional-grade output quality")

    if data.style_preset is not None and data.style_preset.category == "commercial":
        specs.append("Commercial photography standards")

    return ", ".join(specs)


def extract_color_palette(data: PromptBuilderInput) -> str:
    colors = [color for meta in _products(data) for color in meta.colors]
    if colors:
        return f"Color palette: {', '.join(colors)}"
    return FALLBACK_PALETTE


def extract_materials(data: PromptBuilderInput) -> str:
    # dict keeps first-seen order while deduplicating
    materials = dict.fromkeys(m for meta in _products(data) for m in meta.materials)
    if materials:
        return f"Materials: {', '.join(materials)}"
    return ""


_EXTRACTORS: dict[str, Callable[[PromptBuilderInput], str]] = {
    "scene_description": extract_scene_description,
    "placement_instructions": extract_placement_instructions,
    "lighting_style": extract_lighting_style,
    "product_style": extract_product_style,
    "environment_details": extract_environment_details,
    "composition_rules": extract_composition_rules,
    "atmosphere": extract_atmosphere,
    "technical_specs": extract_technical_specs,
    "color_palette": extract_color_palette,
    "materials": extract_materials,
}

VARIABLE_NAMES = tuple(_EXTRACTORS)


def build_prompt_variables(data: PromptBuilderInput) -> PromptVariables:
    return {name: extract(data) for name, extract in _EXTRACTORS.items()}


# == Quality assessment ==

CONFIDENCE_BASE = 0.5

ConfidenceSignal = tuple[float, Callable[[PromptBuilderInput], bool]]

CONFIDENCE_SIGNALS: tuple[ConfidenceSignal, ...] = (
    (0.2, lambda d: len(d.user_description or "") > 10),
    (0.1, lambda d: bool(d.annotations)),
    (0.1, lambda d: any(p.product_metadata is not None for p in d.product_images or [])),
    (0.05, lambda d: d.lighting_preset is not None),
    (0.05, lambda d: d.style_preset is not None),
)


def calculate_confidence(
    data: PromptBuilderInput,
    signals: tuple[ConfidenceSignal, ...] = CONFIDENCE_SIGNALS,
) -> float:
    """Base score plus a fixed increment per signal present, clamped to [0, 1]."""
    score = CONFIDENCE_BASE + sum(weight for weight, present in signals if present(data))
    return max(0.0, min(score, 1.0))


def generate_suggestions(data: PromptBuilderInput) -> list[str]:
    suggestions: list[str] = []

    has_context_lighting = data.environment_context is not None and data.environment_context.lighting
    if data.lighting_preset is None and not has_context_lighting:
        suggestions.append("Consider selecting a lighting preset for more consistent results")

    if data.style_preset is None:
        suggestions.append("Add a style preset to better define the visual aesthetic")

    if data.product_images is not None and not any(
        p.product_metadata is not None for p in data.product_images
    ):
        suggestions.append("Add product metadata (category, materials, style) for better integration")

    if not data.annotations:
        suggestions.append("Use arrows and text annotations to specify exact placement locations")

    if len(data.user_description or "") < 20:
        suggestions.append("Provide a more detailed scene description for better results")

    return suggestions


# == Builder ==


def build_semantic_prompt(data: PromptBuilderInput) -> PromptBuilderOutput:
    annotations = data.annotations
    relations = data.annotation_relations

    # Canvas shapes are only analysed when the caller did not already do it
    if data.canvas_elements is not None and data.product_images is not None and annotations is None:
        images = ([data.environment_image] if data.environment_image else []) + data.product_images
        extracted = extract_semantic_annotations(data.canvas_elements, images)
        annotations = extracted.annotations
        relations = extracted.relations

    enriched = data.model_copy(update={"annotations": annotations, "annotation_relations": relations})

    template = get_template(data.template_id, data.user_intent)
    variables = build_prompt_variables(enriched)

    for key, value in template.defaults.items():
        if not variables.get(key, "").strip():
            variables[key] = value

    prompt = render_template(template.template, variables)
    confidence = calculate_confidence(enriched)
    logger.debug("Built prompt with template %s, confidence %.2f", template.id, confidence)

    return PromptBuilderOutput(
        enhanced_prompt=prompt,
        variables=variables,
        template=template,
        confidence=confidence,
        used_annotations=[a.id for a in annotations or []],
        suggestions=generate_suggestions(enriched),
        components=PromptComponents(
            scene_description=variables["scene_description"],
            placement_instructions=variables["placement_instructions"],
            technical_details=f"{variables['technical_specs']}\n{variables['composition_rules']}",
            style_guidance=(
                f"{variables['product_style']}\n{variables['lighting_style']}\n{variables['atmosphere']}"
            ),
        ),
    )


# == Utilities ==


def create_simple_prompt(description: str) -> str:
    return (
        f"Composite the product(s) into the environment scene. {description}. "
        "Ensure realistic lighting, shadows, reflections, and perspective matching."
    )


def validate_prompt_input(data: PromptBuilderInput) -> ValidationResult:
    errors: list[str] = []

    if not (data.user_description or "").strip():
        errors.append("User description is required")

    if data.user_intent == "compose":
        if data.environment_image is None:
            errors.append("Environment image is required for composition")
        if not data.product_images:
            errors.append("At least one product image is required for composition")

    return ValidationResult(valid=not errors, errors=errors)
