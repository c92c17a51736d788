"""Google Gemini backend (google-genai SDK)."""

from __future__ import annotations

import logging

from promptcanvas.config import settings
from promptcanvas.providers.base import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_MIME_TYPE,
    DEFAULT_TEMPERATURE,
    BaseProvider,
    decode_data_url,
    get_mime_type,
    to_data_url,
)
from promptcanvas.providers.types import (
    ComposeImageRequest,
    GenerateImageRequest,
    GenerateTextRequest,
    GenerateTextResponse,
    ImageGenerationConfig,
    ImageResponse,
    ModelInfo,
    OperationEstimates,
    ProviderMetadata,
    ProviderType,
    RefineImageRequest,
    Resolution,
    ResolutionOption,
    TokenUsage,
)

logger = logging.getLogger(__name__)

TEXT_MODEL = "gemini-2.0-flash-exp"
DEFAULT_IMAGE_MODEL = "gemini-2.5-flash-image"
PRO_IMAGE_MODEL = "gemini-3-pro-image-preview"

_ALL_RATIOS = ["1:1", "16:9", "9:16", "4:3", "3:4"]


class GeminiProvider(BaseProvider):
    provider_type = ProviderType.GEMINI
    metadata = ProviderMetadata(
        name=ProviderType.GEMINI,
        display_name="Google Gemini",
        description="Google's multimodal AI with advanced image generation capabilities",
        cost_estimate=OperationEstimates(
            text_generation="$0.00015/1K input tokens, $0.00060/1K output tokens",
            image_generation="$0.02-$0.10/image (varies by resolution)",
            image_editing="$0.03-$0.12/image (varies by resolution)",
        ),
        latency_estimate=OperationEstimates(
            text_generation="1-3s",
            image_generation="5-15s",
            image_editing="8-20s",
        ),
        env_variable_name="GEMINI_API_KEY",
    )
    models = (
        ModelInfo(
            id=TEXT_MODEL,
            name="Gemini 2.0 Flash",
            description="Fast text generation for prompt enhancement",
        ),
        ModelInfo(
            id=DEFAULT_IMAGE_MODEL,
            name="Gemini 2.5 Flash Image",
            description="Fast image generation at 1024px resolution",
            supports_image_generation=True,
            supports_image_editing=True,
            supports_composition=True,
            supported_qualities=["1K"],
            supported_aspect_ratios=_ALL_RATIOS,
            max_resolution=Resolution(width=1024, height=1024),
        ),
        ModelInfo(
            id=PRO_IMAGE_MODEL,
            name="Gemini 3 Pro Image",
            description="High-quality image generation with up to 4K resolution",
            supports_image_generation=True,
            supports_image_editing=True,
            supports_composition=True,
            supported_qualities=["1K", "2K", "4K"],
            supported_aspect_ratios=_ALL_RATIOS,
            max_resolution=Resolution(width=4096, height=4096),
        ),
    )
    resolutions = (
        ResolutionOption(label="1K (1024×1024)", width=1024, height=1024, aspect_ratio="1:1"),
        ResolutionOption(label="2K (2048×2048)", width=2048, height=2048, aspect_ratio="1:1"),
        ResolutionOption(label="4K (4096×4096)", width=4096, height=4096, aspect_ratio="1:1"),
        ResolutionOption(label="16:9 HD", width=1920, height=1080, aspect_ratio="16:9"),
        ResolutionOption(label="16:9 4K", width=3840, height=2160, aspect_ratio="16:9"),
    )

    def __init__(self, api_key: str | None = None) -> None:
        super().__init__(api_key if api_key is not None else settings.gemini_api_key)
        self._client = None

    @property
    def client(self):
        if self._client is None:
            from google import genai

            self._client = genai.Client(api_key=self.ensure_api_key())
        return self._client

    async def generate_text(self, request: GenerateTextRequest) -> GenerateTextResponse:
        self.ensure_api_key()
        from google.genai import types

        with self.failure_context("text generation failed"):
            response = await self.client.aio.models.generate_content(
                model=TEXT_MODEL,
                contents=[types.Content(role="user", parts=[types.Part.from_text(text=request.prompt)])],
                config=types.GenerateContentConfig(
                    system_instruction=request.system_prompt,
                    temperature=(
                        request.temperature
                        if request.temperature is not None
                        else DEFAULT_TEMPERATURE
                    ),
                    max_output_tokens=request.max_tokens or DEFAULT_MAX_TOKENS,
                ),
            )
            usage = response.usage_metadata
            return GenerateTextResponse(
                text=response.text or "",
                usage=TokenUsage(
                    input_tokens=(usage.prompt_token_count or 0) if usage else 0,
                    output_tokens=(usage.candidates_token_count or 0) if usage else 0,
                ),
            )

    async def generate_environment(self, request: GenerateImageRequest) -> ImageResponse:
        self.ensure_api_key()
        from google.genai import types

        with self.failure_context("environment generation failed"):
            return await self._generate_image(
                [types.Part.from_text(text=request.prompt)], request.config
            )

    async def compose_product(self, request: ComposeImageRequest) -> ImageResponse:
        self.ensure_api_key()
        from google.genai import types

        with self.failure_context("product composition failed"):
            parts = [types.Part.from_text(text=request.prompt)]
            # Sketch, then environment, then products
            for image in (request.sketch_image, request.environment_image, *request.product_images):
                if image:
                    parts.append(_inline_part(image))
            return await self._generate_image(parts, request.config)

    async def refine_image(self, request: RefineImageRequest) -> ImageResponse:
        self.ensure_api_key()
        from google.genai import types

        with self.failure_context("image refinement failed"):
            parts = [types.Part.from_text(text=request.prompt), _inline_part(request.source_image)]
            return await self._generate_image(parts, request.config)

    async def _generate_image(self, parts: list, config: ImageGenerationConfig) -> ImageResponse:
        from google.genai import types

        model = config.model or DEFAULT_IMAGE_MODEL
        aspect_ratio = config.aspect_ratio or "1:1"

        image_config: dict[str, str] = {}
        # Only the pro model takes a size tier
        if model == PRO_IMAGE_MODEL:
            image_config["image_size"] = config.quality or "1K"
        if aspect_ratio != "1:1":
            image_config["aspect_ratio"] = aspect_ratio

        logger.debug("Gemini image call model=%s image_config=%s parts=%d", model, image_config, len(parts))
        response = await self.client.aio.models.generate_content(
            model=model,
            contents=[types.Content(role="user", parts=parts)],
            config=types.GenerateContentConfig(
                response_modalities=["IMAGE"],
                image_config=types.ImageConfig(**image_config) if image_config else None,
            ),
        )
        return _first_inline_image(response)


def _inline_part(data_url: str):
    from google.genai import types

    return types.Part(
        inline_data=types.Blob(mime_type=get_mime_type(data_url), data=decode_data_url(data_url))
    )


def _first_inline_image(response) -> ImageResponse:
    for candidate in response.candidates or []:
        if candidate.content is None:
            continue
        for part in candidate.content.parts or []:
            if part.inline_data is not None and part.inline_data.data:
                mime_type = part.inline_data.mime_type or DEFAULT_MIME_TYPE
                return ImageResponse(
                    image_data=to_data_url(part.inline_data.data, mime_type),
                    format=mime_type,
                )
        # Only the first candidate is considered
        break
    raise ValueError("No image data in response")
