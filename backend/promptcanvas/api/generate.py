"""Image generation endpoints. Every call goes through the fallback orchestrator."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from promptcanvas.dependencies import get_provider_registry
from promptcanvas.errors import InvalidRequestError
from promptcanvas.models.requests import (
    GenerateCombinationRequest,
    GenerateImageRequest,
    GenerateImprovementRequest,
    ProviderOptions,
)
from promptcanvas.models.responses import EditedImageResponse, GeneratedImageResponse
from promptcanvas.prompting.enhancer import EnhancementKind, enhance_prompt
from promptcanvas.prompting.instructions import build_composition_prompt, build_refinement_prompt
from promptcanvas.providers import types as ptypes
from promptcanvas.providers.base import BaseProvider
from promptcanvas.providers.fallback import execute_with_fallback
from promptcanvas.providers.registry import ProviderRegistry

logger = logging.getLogger(__name__)

router = APIRouter()


def _image_config(opts: ProviderOptions) -> ptypes.ImageGenerationConfig:
    return ptypes.ImageGenerationConfig(
        model=opts.model, quality=opts.quality, aspect_ratio=opts.aspect_ratio
    )


async def _enhance_and_generate(
    req: GenerateImageRequest, kind: EnhancementKind, registry: ProviderRegistry
) -> GeneratedImageResponse:
    if not req.prompt:
        raise InvalidRequestError("Missing prompt")

    enhanced = await enhance_prompt(req.prompt, kind, preferred=req.provider, registry=registry)
    request = ptypes.GenerateImageRequest(prompt=enhanced, config=_image_config(req))

    async def _generate(provider: BaseProvider):
        return await provider.generate_environment(request)

    result = await execute_with_fallback(_generate, preferred=req.provider, registry=registry)
    return GeneratedImageResponse(image_url=result.image_data, enhanced_prompt=enhanced)


@router.post("/generate-environment", response_model=GeneratedImageResponse)
async def generate_environment(
    req: GenerateImageRequest,
    registry: ProviderRegistry = Depends(get_provider_registry),
) -> GeneratedImageResponse:
    return await _enhance_and_generate(req, "environment", registry)


@router.post("/generate-asset", response_model=GeneratedImageResponse)
async def generate_asset(
    req: GenerateImageRequest,
    registry: ProviderRegistry = Depends(get_provider_registry),
) -> GeneratedImageResponse:
    return await _enhance_and_generate(req, "asset", registry)


@router.post("/generate-combination", response_model=EditedImageResponse)
async def generate_combination(
    req: GenerateCombinationRequest,
    registry: ProviderRegistry = Depends(get_provider_registry),
) -> EditedImageResponse:
    if not req.sketch_image or not req.environment_image or not req.prompt:
        raise InvalidRequestError(
            "Missing required parameters (sketchImage, environmentImage, or prompt)"
        )

    # Product references are only sent on the first pass; later passes edit the result
    products = req.product_images if req.is_first_iteration else []
    request = ptypes.ComposeImageRequest(
        prompt=build_composition_prompt(req.prompt, len(products)),
        sketch_image=req.sketch_image,
        environment_image=req.environment_image,
        product_images=products,
        config=_image_config(req),
        is_first_iteration=req.is_first_iteration,
    )

    async def _compose(provider: BaseProvider):
        return await provider.compose_product(request)

    result = await execute_with_fallback(_compose, preferred=req.provider, registry=registry)
    logger.info("Composition produced %s", result.format or "image")
    return EditedImageResponse(generated_image=result.image_data)


@router.post("/generate-improvement", response_model=EditedImageResponse)
async def generate_improvement(
    req: GenerateImprovementRequest,
    registry: ProviderRegistry = Depends(get_provider_registry),
) -> EditedImageResponse:
    if not req.image or not req.prompt:
        raise InvalidRequestError("Missing required parameters (image or prompt)")

    request = ptypes.RefineImageRequest(
        prompt=build_refinement_prompt(req.prompt),
        source_image=req.image,
        config=_image_config(req),
    )

    async def _refine(provider: BaseProvider):
        return await provider.refine_image(request)

    result = await execute_with_fallback(_refine, preferred=req.provider, registry=registry)
    return EditedImageResponse(generated_image=result.image_data)
