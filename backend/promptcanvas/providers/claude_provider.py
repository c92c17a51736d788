"""Anthropic Claude backend (langchain-anthropic). Text only.

Image operations never produce an image. Composition and refinement still
ask Claude to describe how the edit should be done and hand that guidance
back inside the CapabilityError, so the caller can show it or fall back.
"""

from __future__ import annotations

import logging

from promptcanvas.config import settings
from promptcanvas.errors import CapabilityError
from promptcanvas.providers.base import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    BaseProvider,
    extract_base64,
    get_mime_type,
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
    TokenUsage,
)

logger = logging.getLogger(__name__)

TEXT_MODEL = "claude-3-5-sonnet-20241022"
GUIDANCE_MAX_TOKENS = 2048

COMPOSE_GUIDANCE_PROMPT = """Analyze these images and provide a detailed prompt for composing the product into the environment.

Base request: {prompt}

Please provide a detailed, technical prompt that describes:
1. The lighting conditions and how the product should match
2. Perspective and camera angle
3. Shadows and reflections
4. Color grading and tone matching
5. Integration details (placement, scale, orientation)"""

REFINE_GUIDANCE_PROMPT = """Analyze this image and provide detailed guidance for the following modification:

{prompt}

Provide specific, technical instructions for:
1. What should be changed
2. How to maintain consistency with the original
3. Lighting and color adjustments needed
4. Any technical considerations"""


class ClaudeProvider(BaseProvider):
    provider_type = ProviderType.CLAUDE
    metadata = ProviderMetadata(
        name=ProviderType.CLAUDE,
        display_name="Anthropic Claude",
        description="Claude with advanced vision and image understanding capabilities",
        cost_estimate=OperationEstimates(
            text_generation="$3.00/1M input tokens, $15.00/1M output tokens (Sonnet)",
            image_generation="Not directly supported - uses vision for image analysis",
            image_editing="Not directly supported - uses vision for guidance",
        ),
        latency_estimate=OperationEstimates(
            text_generation="2-5s",
            image_generation="N/A",
            image_editing="N/A",
        ),
        env_variable_name="ANTHROPIC_API_KEY",
    )
    models = (
        ModelInfo(
            id=TEXT_MODEL,
            name="Claude 3.5 Sonnet",
            description="Advanced vision model for image analysis and guidance",
        ),
        ModelInfo(
            id="claude-3-opus-20240229",
            name="Claude 3 Opus",
            description="Most capable model for complex vision tasks",
        ),
    )
    resolutions = ()

    def __init__(self, api_key: str | None = None) -> None:
        super().__init__(api_key if api_key is not None else settings.anthropic_api_key)

    def _chat(self, max_tokens: int, temperature: float | None = None):
        from langchain_anthropic import ChatAnthropic

        kwargs = {}
        if temperature is not None:
            kwargs["temperature"] = temperature
        return ChatAnthropic(
            model=TEXT_MODEL,
            api_key=self.ensure_api_key(),
            max_tokens=max_tokens,
            **kwargs,
        )

    async def generate_text(self, request: GenerateTextRequest) -> GenerateTextResponse:
        self.ensure_api_key()
        from langchain_core.messages import HumanMessage, SystemMessage

        with self.failure_context("text generation failed"):
            llm = self._chat(
                request.max_tokens or DEFAULT_MAX_TOKENS,
                request.temperature if request.temperature is not None else DEFAULT_TEMPERATURE,
            )
            messages: list = []
            if request.system_prompt:
                messages.append(SystemMessage(content=request.system_prompt))
            messages.append(HumanMessage(content=request.prompt))

            response = await llm.ainvoke(messages)
            usage = response.usage_metadata or {}
            return GenerateTextResponse(
                text=_text_of(response.content),
                usage=TokenUsage(
                    input_tokens=usage.get("input_tokens", 0),
                    output_tokens=usage.get("output_tokens", 0),
                ),
            )

    async def generate_environment(self, request: GenerateImageRequest) -> ImageResponse:
        raise CapabilityError(
            "Claude does not natively support image generation. "
            "Consider using Gemini, OpenAI, or Replicate for image generation tasks.",
            {"provider": self.provider_type.value},
        )

    async def compose_product(self, request: ComposeImageRequest) -> ImageResponse:
        self.ensure_api_key()

        with self.failure_context("image analysis failed"):
            images = [
                img
                for img in (request.sketch_image, request.environment_image, *request.product_images)
                if img
            ]
            guidance = await self._guidance(COMPOSE_GUIDANCE_PROMPT.format(prompt=request.prompt), images)
            raise CapabilityError(
                f"Claude analyzed the images and provided guidance:\n\n{guidance}\n\n"
                "However, Claude cannot generate images directly. "
                "Please use Gemini, OpenAI, or Replicate as your provider for image composition.",
                {"guidance": guidance},
            )

    async def refine_image(self, request: RefineImageRequest) -> ImageResponse:
        self.ensure_api_key()

        with self.failure_context("image analysis failed"):
            guidance = await self._guidance(
                REFINE_GUIDANCE_PROMPT.format(prompt=request.prompt), [request.source_image]
            )
            raise CapabilityError(
                f"Claude analyzed the image and provided guidance:\n\n{guidance}\n\n"
                "However, Claude cannot edit images directly. "
                "Please use Gemini, OpenAI, or Replicate as your provider for image editing.",
                {"guidance": guidance},
            )

    async def _guidance(self, text: str, images: list[str]) -> str:
        from langchain_core.messages import HumanMessage

        content: list[dict] = [{"type": "text", "text": text}]
        for image in images:
            content.append(
                {
                    "type": "image",
                    "source": {
                        "type": "base64",
                        "media_type": get_mime_type(image),
                        "data": extract_base64(image),
                    },
                }
            )
        response = await self._chat(GUIDANCE_MAX_TOKENS).ainvoke([HumanMessage(content=content)])
        logger.debug("Claude guidance received (%d images analysed)", len(images))
        return _text_of(response.content)


def _text_of(content) -> str:
    """First text block of a message, or the content itself when it is a string."""
    if isinstance(content, str):
        return content
    for block in content:
        if isinstance(block, dict) and block.get("type") == "text":
            return block.get("text", "")
        if isinstance(block, str):
            return block
    return ""
