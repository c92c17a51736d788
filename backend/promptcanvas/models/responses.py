"""API response models."""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from promptcanvas import __version__
from promptcanvas.models.base import CamelModel
from promptcanvas.models.prompt import TextClassificationResponse
from promptcanvas.models.semantic import AnnotationImageRelation, SemanticAnnotation
from promptcanvas.providers.types import ModelInfo, ProviderMetadata, ResolutionOption


class HealthResponse(CamelModel):
    status: str = "ok"
    version: str = __version__
    configured_providers: list[str] = Field(default_factory=list)


class ProviderInfo(CamelModel):
    type: str
    metadata: ProviderMetadata
    models: list[ModelInfo]
    resolutions: list[ResolutionOption]
    configured: bool
    operations: dict[str, bool] = Field(default_factory=dict)


class ProvidersResponse(CamelModel):
    providers: list[ProviderInfo]
    default_provider: str | None = None


class ExtractAnnotationsResponse(CamelModel):
    annotations: list[SemanticAnnotation]
    relations: list[AnnotationImageRelation]
    summary: str = ""


class ClassifyTextResponse(CamelModel):
    status: Literal["success"] = "success"
    classification: TextClassificationResponse


class GeneratedImageResponse(CamelModel):
    """generate-environment / generate-asset."""

    status: Literal["success"] = "success"
    image_url: str
    enhanced_prompt: str


class EditedImageResponse(CamelModel):
    """generate-combination / generate-improvement."""

    status: Literal["success"] = "success"
    generated_image: str


class ErrorResponse(CamelModel):
    status: Literal["error"] = "error"
    message: str
    suggestion: str | None = None
    raw_response: str | None = None
