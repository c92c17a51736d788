"""Lighting presets, style presets and the built-in prompt templates."""

from __future__ import annotations

from promptcanvas.models.prompt import LightingPreset, PromptTemplate, StylePreset

LIGHTING_PRESETS: list[LightingPreset] = [
    LightingPreset(
        id="natural_daylight",
        name="Natural Daylight",
        description="Soft natural light from windows",
        prompt="natural daylight streaming through windows, soft ambient lighting, gentle shadows",
        keywords=["natural", "daylight", "window light", "ambient"],
    ),
    LightingPreset(
        id="golden_hour",
        name="Golden Hour",
        description="Warm sunset lighting",
        prompt="golden hour lighting, warm sunset tones, long soft shadows, glowing atmosphere",
        keywords=["golden hour", "sunset", "warm", "glowing"],
    ),
    LightingPreset(
        id="studio_lighting",
        name="Studio Lighting",
        description="Professional studio setup",
        prompt="professional studio lighting, three-point light setup, even illumination, controlled shadows",
        keywords=["studio", "professional", "three-point", "controlled"],
    ),
    LightingPreset(
        id="dramatic_contrast",
        name="Dramatic Contrast",
        description="High contrast chiaroscuro",
        prompt="dramatic chiaroscuro lighting, deep shadows, high contrast, single key light source",
        keywords=["dramatic", "chiaroscuro", "contrast", "moody"],
    ),
    LightingPreset(
        id="soft_diffused",
        name="Soft Diffused",
        description="Gentle shadowless lighting",
        prompt="soft diffused lighting, overcast sky, minimal shadows, even illumination",
        keywords=["soft", "diffused", "gentle", "even"],
    ),
    LightingPreset(
        id="rim_lighting",
        name="Rim Lighting",
        description="Backlit edge highlights",
        prompt="rim lighting, backlit subject, glowing edges, dramatic separation from background",
        keywords=["rim", "backlit", "edge", "separation"],
    ),
]

STYLE_PRESETS: list[StylePreset] = [
    StylePreset(
        id="photorealistic",
        name="Photorealistic",
        description="Ultra-realistic photography",
        prompt="photorealistic, high-resolution, professional photography, sharp details, accurate colors",
        keywords=["realistic", "photography", "detailed", "accurate"],
        category="photography",
    ),
    StylePreset(
        id="commercial_product",
        name="Commercial Product",
        description="Commercial catalog style",
        prompt="commercial product photography, clean composition, marketing-ready, professional presentation",
        keywords=["commercial", "catalog", "marketing", "clean"],
        category="commercial",
    ),
    StylePreset(
        id="lifestyle",
        name="Lifestyle",
        description="Natural lifestyle context",
        prompt="lifestyle photography, natural setting, lived-in feel, authentic atmosphere",
        keywords=["lifestyle", "natural", "authentic", "casual"],
        category="commercial",
    ),
    StylePreset(
        id="architectural",
        name="Architectural",
        description="Architectural photography",
        prompt="architectural photography, geometric composition, clean lines, perspective control",
        keywords=["architectural", "geometric", "lines", "structure"],
        category="photography",
    ),
    StylePreset(
        id="minimalist",
        name="Minimalist",
        description="Clean minimalist aesthetic",
        prompt="minimalist aesthetic, clean composition, negative space, simple elegance",
        keywords=["minimalist", "clean", "simple", "negative space"],
        category="artistic",
    ),
    StylePreset(
        id="cinematic",
        name="Cinematic",
        description="Film-like quality",
        prompt="cinematic quality, film-like aesthetic, color grading, atmospheric depth",
        keywords=["cinematic", "film", "atmospheric", "graded"],
        category="artistic",
    ),
]

_PRODUCT_COMPOSITION = """Composite the product into this environment scene with the following specifications:

Scene: {scene_description}

Product Placement: {placement_instructions}

Lighting: {lighting_style}

Style & Atmosphere: {product_style}
{atmosphere}

Technical Requirements: {technical_specs}

Composition: {composition_rules}

Ensure the product integrates naturally into the scene with proper lighting, shadows, reflections, and perspective matching."""

_ENVIRONMENT_GENERATION = """Create a photorealistic environment scene:

Scene Description: {scene_description}

Environment Details: {environment_details}

Lighting: {lighting_style}

Atmosphere & Mood: {atmosphere}

Color Palette: {color_palette}

Technical Specifications: {technical_specs}"""

_IMAGE_IMPROVEMENT = """Improve this image with the following modifications:

{scene_description}

Maintain: Keep the overall composition and subject positioning

Enhance: {product_style}

Lighting Adjustment: {lighting_style}

Additional Details: {environment_details}"""

# The first entry is the fallback when neither id nor intent picks one
DEFAULT_PROMPT_TEMPLATES: list[PromptTemplate] = [
    PromptTemplate(
        id="product_composition",
        name="Product Composition",
        description="Compose products into environment scenes",
        category="composition",
        template=_PRODUCT_COMPOSITION,
        variables=[
            "scene_description",
            "placement_instructions",
            "lighting_style",
            "product_style",
            "atmosphere",
            "technical_specs",
            "composition_rules",
        ],
    ),
    PromptTemplate(
        id="environment_generation",
        name="Environment Generation",
        description="Create new environment from description",
        category="environment",
        template=_ENVIRONMENT_GENERATION,
        variables=[
            "scene_description",
            "environment_details",
            "lighting_style",
            "atmosphere",
            "color_palette",
            "technical_specs",
        ],
        defaults={
            "technical_specs": "High-resolution, sharp focus, professional photography quality",
        },
    ),
    PromptTemplate(
        id="image_improvement",
        name="Image Improvement",
        description="Iterate and improve existing images",
        category="improvement",
        template=_IMAGE_IMPROVEMENT,
        variables=["scene_description", "product_style", "lighting_style", "environment_details"],
    ),
]


def get_lighting_preset(preset_id: str) -> LightingPreset | None:
    return next((p for p in LIGHTING_PRESETS if p.id == preset_id), None)


def get_style_preset(preset_id: str) -> StylePreset | None:
    return next((p for p in STYLE_PRESETS if p.id == preset_id), None)


def find_template(template_id: str) -> PromptTemplate | None:
    return next((t for t in DEFAULT_PROMPT_TEMPLATES if t.id == template_id), None)
