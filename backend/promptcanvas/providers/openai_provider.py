"""OpenAI backend: GPT-4o for text, DALL-E 3 for generation, DALL-E 2 edits."""

from __future__ import annotations

import io
import logging

from PIL import Image

from promptcanvas.config import settings
from promptcanvas.providers.base import (
    DEFAULT_MAX_TOKENS,
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

TEXT_MODEL = "gpt-4o"
GENERATION_MODEL = "dall-e-3"
EDIT_MODEL = "dall-e-2"
EDIT_SIZE = 1024

# dall-e-3 only; every other model is square
_DALLE3_SIZES = {"16:9": "1792x1024", "9:16": "1024x1792"}


def transparent_mask(width: int = EDIT_SIZE, height: int = EDIT_SIZE) -> bytes:
    """Fully transparent RGBA PNG. A transparent mask lets the edit touch every pixel."""
    buf = io.BytesIO()
    Image.new("RGBA", (width, height), (0, 0, 0, 0)).save(buf, format="PNG")
    return buf.getvalue()


def dalle_size(model: str, aspect_ratio: str | None) -> str:
    if model == GENERATION_MODEL:
        return _DALLE3_SIZES.get(aspect_ratio or "1:1", "1024x1024")
    return "1024x1024"


class OpenAIProvider(BaseProvider):
    provider_type = ProviderType.OPENAI
    metadata = ProviderMetadata(
        name=ProviderType.OPENAI,
        display_name="OpenAI",
        description="OpenAI's GPT for text and DALL-E for image generation",
        cost_estimate=OperationEstimates(
            text_generation="$0.15/1M input tokens, $0.60/1M output tokens (GPT-4o)",
            image_generation="$0.040/image (DALL-E 3 standard), $0.080/image (HD)",
            image_editing="$0.020/image (DALL-E 2 edits)",
        ),
        latency_estimate=OperationEstimates(
            text_generation="2-4s",
            image_generation="10-30s",
            image_editing="15-40s",
        ),
        env_variable_name="OPENAI_API_KEY",
    )
    models = (
        ModelInfo(
            id=TEXT_MODEL,
            name="GPT-4o",
            description="Advanced text generation with vision capabilities",
        ),
        ModelInfo(
            id=GENERATION_MODEL,
            name="DALL-E 3",
            description="Latest image generation model with high quality output",
            supports_image_generation=True,
            supported_qualities=["standard", "hd"],
            supported_aspect_ratios=["1:1", "16:9", "9:16"],
            max_resolution=Resolution(width=1024, height=1792),
        ),
        ModelInfo(
            id=EDIT_MODEL,
            name="DALL-E 2",
            description="Previous generation with image editing support",
            supports_image_generation=True,
            supports_image_editing=True,
            supports_composition=True,
            supported_qualities=["standard"],
            supported_aspect_ratios=["1:1"],
            max_resolution=Resolution(width=1024, height=1024),
        ),
    )
    resolutions = (
        ResolutionOption(label="Square (1024×1024)", width=1024, height=1024, aspect_ratio="1:1"),
        ResolutionOption(label="Landscape (1792×1024)", width=1792, height=1024, aspect_ratio="16:9"),
        ResolutionOption(label="Portrait (1024×1792)", width=1024, height=1792, aspect_ratio="9:16"),
    )

    def __init__(self, api_key: str | None = None) -> None:
        super().__init__(api_key if api_key is not None else settings.openai_api_key)
        self._client = None

    @property
    def client(self):
        if self._client is None:
            from openai import AsyncOpenAI

            self._client = AsyncOpenAI(api_key=self.ensure_api_key())
        return self._client

    async def generate_text(self, request: GenerateTextRequest) -> GenerateTextResponse:
        self.ensure_api_key()

        with self.failure_context("text generation failed"):
            messages: list[dict[str, str]] = []
            if request.system_prompt:
                messages.append({"role": "system", "content": request.system_prompt})
            messages.append({"role": "user", "content": request.prompt})

            response = await self.client.chat.completions.create(
                model=TEXT_MODEL,
                messages=messages,
                temperature=(
                    request.temperature if request.temperature is not None else DEFAULT_TEMPERATURE
                ),
                max_tokens=request.max_tokens or DEFAULT_MAX_TOKENS,
            )
            text = response.choices[0].message.content if response.choices else None
            return GenerateTextResponse(
                text=text or "",
                usage=TokenUsage(
                    input_tokens=response.usage.prompt_tokens if response.usage else 0,
                    output_tokens=response.usage.completion_tokens if response.usage else 0,
                ),
            )

    async def generate_environment(self, request: GenerateImageRequest) -> ImageResponse:
        self.ensure_api_key()

        with self.failure_context("environment generation failed"):
            model = request.config.model or GENERATION_MODEL
            kwargs = {}
            if model == GENERATION_MODEL:
                kwargs["quality"] = "hd" if request.config.quality == "hd" else "standard"

            response = await self.client.images.generate(
                model=model,
                prompt=request.prompt,
                n=1,
                size=dalle_size(model, request.config.aspect_ratio),
                response_format="b64_json",
                **kwargs,
            )
            return _first_b64_image(response)

    async def compose_product(self, request: ComposeImageRequest) -> ImageResponse:
        self.ensure_api_key()

        with self.failure_context("product composition failed"):
            if not request.environment_image:
                raise ValueError("Environment image is required for composition with OpenAI")
            return await self._edit(request.prompt, request.environment_image)

    async def refine_image(self, request: RefineImageRequest) -> ImageResponse:
        self.ensure_api_key()

        with self.failure_context("image refinement failed"):
            return await self._edit(request.prompt, request.source_image)

    async def _edit(self, prompt: str, data_url: str) -> ImageResponse:
        mime_type = get_mime_type(data_url)
        extension = mime_type.split("/")[-1]
        response = await self.client.images.edit(
            model=EDIT_MODEL,
            image=(f"image.{extension}", decode_data_url(data_url), mime_type),
            mask=("mask.png", transparent_mask(), "image/png"),
            prompt=prompt,
            n=1,
            size=f"{EDIT_SIZE}x{EDIT_SIZE}",
            response_format="b64_json",
        )
        return _first_b64_image(response)


def _first_b64_image(response) -> ImageResponse:
    b64 = response.data[0].b64_json if response.data else None
    if not b64:
        raise ValueError("No image data in response")
    return ImageResponse(image_data=to_data_url(b64), format="image/png")
