"""Provider-facing types: request/response shapes and capability descriptors."""

from __future__ import annotations

import enum
from typing import Literal

from pydantic import Field

from promptcanvas.models.base import CamelModel


class ProviderType(str, enum.Enum):
    GEMINI = "gemini"
    CLAUDE = "claude"
    OPENAI = "openai"
    REPLICATE = "replicate"


class Operation(str, enum.Enum):
    GENERATE_TEXT = "generate_text"
    GENERATE_ENVIRONMENT = "generate_environment"
    COMPOSE_PRODUCT = "compose_product"
    REFINE_IMAGE = "refine_image"


ImageQuality = Literal["1K", "2K", "4K", "standard", "hd"]
AspectRatio = Literal["1:1", "16:9", "9:16", "4:3", "3:4"]


class ImageGenerationConfig(CamelModel):
    quality: ImageQuality | None = None
    aspect_ratio: AspectRatio | None = None
    model: str | None = None


class TokenUsage(CamelModel):
    input_tokens: int = 0
    output_tokens: int = 0


class GenerateTextRequest(CamelModel):
    prompt: str
    system_prompt: str | None = None
    temperature: float | None = None
    max_tokens: int | None = None


class GenerateTextResponse(CamelModel):
    text: str
    usage: TokenUsage | None = None


class GenerateImageRequest(CamelModel):
    prompt: str
    config: ImageGenerationConfig = Field(default_factory=ImageGenerationConfig)


class ComposeImageRequest(CamelModel):
    prompt: str
    sketch_image: str | None = None  # data URL
    environment_image: str | None = None  # data URL
    product_images: list[str] = Field(default_factory=list)
    config: ImageGenerationConfig = Field(default_factory=ImageGenerationConfig)
    is_first_iteration: bool | None = None


class RefineImageRequest(CamelModel):
    prompt: str
    source_image: str  # data URL
    config: ImageGenerationConfig = Field(default_factory=ImageGenerationConfig)


class ImageResponse(CamelModel):
    """Result of every image operation."""

    image_data: str  # base64 data URL
    format: str | None = None  # mime type


class Resolution(CamelModel):
    width: int
    height: int


class ResolutionOption(CamelModel):
    label: str
    width: int
    height: int
    aspect_ratio: AspectRatio


class ModelInfo(CamelModel):
    id: str
    name: str
    description: str
    supports_image_generation: bool = False
    supports_image_editing: bool = False
    supports_composition: bool = False
    supported_qualities: list[ImageQuality] = Field(default_factory=list)
    supported_aspect_ratios: list[AspectRatio] = Field(default_factory=list)
    max_resolution: Resolution | None = None


class OperationEstimates(CamelModel):
    text_generation: str | None = None
    image_generation: str | None = None
    image_editing: str | None = None


class ProviderMetadata(CamelModel):
    name: ProviderType
    display_name: str
    description: str
    cost_estimate: OperationEstimates
    latency_estimate: OperationEstimates
    requires_api_key: bool = True
    env_variable_name: str
