"""API request models. Fields arrive camelCase; required text is checked in the handlers."""

from __future__ import annotations

from pydantic import Field

from promptcanvas.models.base import CamelModel
from promptcanvas.models.canvas import CanvasElement, ImageMetadata
from promptcanvas.models.prompt import ClassificationContext
from promptcanvas.providers.types import AspectRatio, ImageQuality


class ExtractAnnotationsRequest(CamelModel):
    elements: list[CanvasElement] = Field(default_factory=list, description="Canvas scene elements")
    images: list[ImageMetadata] = Field(default_factory=list, description="Images placed on the canvas")


class ProviderOptions(CamelModel):
    provider: str | None = Field(default=None, description="Preferred provider; others are fallbacks")
    model: str | None = None
    quality: ImageQuality | None = None
    aspect_ratio: AspectRatio | None = None


class ClassifyTextRequest(CamelModel):
    text: str = ""
    context: ClassificationContext | None = None
    existing_metadata: dict[str, object] | None = None
    provider: str | None = None


class GenerateImageRequest(ProviderOptions):
    """Body of generate-environment and generate-asset."""

    prompt: str = ""


class GenerateCombinationRequest(ProviderOptions):
    prompt: str = ""
    sketch_image: str | None = None
    environment_image: str | None = None
    product_images: list[str] = Field(default_factory=list)
    is_first_iteration: bool = False


class GenerateImprovementRequest(ProviderOptions):
    prompt: str = ""
    image: str | None = None
