"""Rewrite a short scene or asset description into a detailed photorealistic prompt."""

from __future__ import annotations

import logging
from typing import Literal

from promptcanvas.errors import PromptCanvasError
from promptcanvas.providers.base import BaseProvider
from promptcanvas.providers.fallback import execute_with_fallback
from promptcanvas.providers.registry import ProviderRegistry
from promptcanvas.providers.types import GenerateTextRequest, ProviderType

logger = logging.getLogger(__name__)

ENHANCEMENT_PROMPT = """You are an expert photographer and prompt engineer specializing in creating ultra-realistic, photorealistic image generation prompts.

The user wants to generate an environment/scene image and provided this basic description:
"{prompt}"

Transform this into a highly detailed, photorealistic prompt following these guidelines:

1. **Subject & Setting**: Expand the description with specific details about the scene, objects, and environment
2. **Lighting**: Describe the lighting in detail (golden hour, soft natural light, dramatic shadows, specific light sources, etc.)
3. **Camera/Lens Details**: Include photography terms like focal length (e.g., "85mm portrait lens", "24mm wide-angle", "50mm prime"), depth of field, bokeh effects
4. **Textures & Materials**: Describe surfaces, materials, and textures in detail
5. **Atmosphere & Mood**: Set the emotional tone and atmosphere
6. **Composition**: Mention composition elements (rule of thirds, leading lines, etc.) suited for widescreen format
7. **Color Palette**: If relevant, describe the color scheme
8. **Quality**: Emphasize high resolution, sharp detail, and maximum quality

Important:
- Start with "A photorealistic, high-resolution" or similar
- Be extremely descriptive and specific
- Use professional photography terminology
- Focus on realism, not artistic or stylized interpretations
- Keep the core intent of the user's original prompt
- Output ONLY the enhanced prompt, no explanations

Example of a good photorealistic prompt:
"A photorealistic, high-resolution image of an elderly Japanese ceramicist with deep, sun-etched wrinkles and a warm, knowing smile. He is carefully inspecting a freshly glazed tea bowl. The setting is his rustic, sun-drenched workshop with pottery wheels and shelves of clay pots in the background. The scene is illuminated by soft, golden hour light streaming through a window, highlighting the fine texture of the clay and the fabric of his apron. Captured with an 85mm portrait lens at f/2.8, resulting in a soft, blurred background (bokeh). The overall mood is serene and masterful. Ultra-sharp details, professional photography quality."

Now create an enhanced photorealistic prompt based on the user's description:"""

ASSET_ENHANCEMENT_PROMPT = """You are an expert product photographer and prompt engineer specializing in creating ultra-realistic, photorealistic image generation prompts for objects, products, and assets.

The user wants to generate an asset/object/product image and provided this basic description:
"{prompt}"

Transform this into a highly detailed, photorealistic prompt following these guidelines:

1. **Subject & Details**: Expand the description with specific details about the object, product, or asset
2. **Lighting**: Describe the lighting in detail (studio lighting, product photography lighting, soft natural light, specific light sources, etc.)
3. **Camera/Lens Details**: Include photography terms like focal length (e.g., "85mm portrait lens", "50mm macro", "100mm"), depth of field, bokeh effects
4. **Textures & Materials**: Describe surfaces, materials, and textures in detail (metal finish, fabric texture, glass reflections, etc.)
5. **Background**: Specify background type (transparent, white, neutral, or specific setting if appropriate)
6. **Angle & Perspective**: Mention viewing angle (front view, side view, 3/4 view, top-down, etc.)
7. **Color Palette**: If relevant, describe the color scheme and accuracy
8. **Quality**: Emphasize high resolution, sharp detail, and maximum quality

Important:
- Start with "A photorealistic, high-resolution" or similar
- Be extremely descriptive and specific
- Use professional product photography terminology
- Focus on realism and accurate representation
- Keep the core intent of the user's original prompt
- Output ONLY the enhanced prompt, no explanations

Example of a good photorealistic asset prompt:
"A photorealistic, high-resolution image of a sleek red sports car in side view. The car features glossy metallic red paint with sharp reflections, chrome accents, and detailed alloy wheels. The lighting is professional studio setup with key light from the left creating subtle highlights on the curved body panels, and fill light softening shadows. Clean white background. Captured with a 50mm lens at f/8 for sharp detail throughout. Ultra-sharp details showing every curve, panel gap, and reflection. Professional product photography quality."

Now create an enhanced photorealistic prompt based on the user's description:"""

EnhancementKind = Literal["environment", "asset"]

_TEMPLATES: dict[str, str] = {
    "environment": ENHANCEMENT_PROMPT,
    "asset": ASSET_ENHANCEMENT_PROMPT,
}


async def enhance_prompt(
    prompt: str,
    kind: EnhancementKind = "environment",
    preferred: ProviderType | str | None = None,
    registry: ProviderRegistry | None = None,
) -> str:
    """Enhanced prompt, or ``prompt`` unchanged if no provider could produce one."""
    request = GenerateTextRequest(prompt=_TEMPLATES[kind].format(prompt=prompt))

    async def _rewrite(provider: BaseProvider):
        return await provider.generate_text(request)

    try:
        response = await execute_with_fallback(_rewrite, preferred=preferred, registry=registry)
    except PromptCanvasError as exc:
        logger.warning("Failed to enhance prompt, using original: %s", exc)
        return prompt

    return response.text.strip() or prompt
