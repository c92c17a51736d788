"""Uniform provider interface plus the helpers every backend shares.

A provider is built with an optional credential. No credential means
``is_configured()`` is False; nothing is raised until an operation runs.
"""

from __future__ import annotations

import abc
import base64
import re
from collections.abc import Iterator
from contextlib import contextmanager

from promptcanvas.errors import CapabilityError, ProviderNotConfiguredError, ProviderOperationError
from promptcanvas.providers.types import (
    ComposeImageRequest,
    GenerateImageRequest,
    GenerateTextRequest,
    GenerateTextResponse,
    ImageResponse,
    ModelInfo,
    Operation,
    ProviderMetadata,
    ProviderType,
    RefineImageRequest,
    Resolution,
    ResolutionOption,
)

DEFAULT_MIME_TYPE = "image/png"
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 1024

_MIME_RE = re.compile(r"data:([^;]+);")
_BASE64_RE = re.compile(r"base64,(.+)", re.DOTALL)

# Width/height multipliers per aspect ratio, applied to the quality base size
_RATIO_FACTORS: dict[str, tuple[float, float, float, float]] = {
    # (width numerator, width divisor, height numerator, height divisor)
    "16:9": (1.33, 1.0, 1.33, 1.778),
    "9:16": (1.0, 1.778, 1.33, 1.0),
    "4:3": (1.15, 1.0, 1.15, 1.333),
    "3:4": (1.0, 1.333, 1.15, 1.0),
}


# ---------------------------------------------------------------------------
# Data URL helpers
# ---------------------------------------------------------------------------


def normalize_data_url(data_url: str) -> str:
    """Return a data URL; raw base64 is assumed to be PNG."""
    if not data_url:
        raise ValueError("Data URL is required")
    if data_url.startswith("data:"):
        return data_url
    return f"data:{DEFAULT_MIME_TYPE};base64,{data_url}"


def extract_base64(data_url: str) -> str:
    if data_url.startswith("data:"):
        match = _BASE64_RE.search(data_url)
        return match.group(1) if match else data_url
    return data_url


def get_mime_type(data_url: str) -> str:
    match = _MIME_RE.search(data_url)
    return match.group(1) if match else DEFAULT_MIME_TYPE


def decode_data_url(data_url: str) -> bytes:
    return base64.b64decode(extract_base64(data_url))


def to_data_url(payload: bytes | str, mime_type: str = DEFAULT_MIME_TYPE) -> str:
    """Build a data URL from raw bytes or an already-encoded base64 string."""
    if isinstance(payload, bytes):
        payload = base64.b64encode(payload).decode("ascii")
    return f"data:{mime_type};base64,{payload}"


def calculate_resolution(aspect_ratio: str | None, quality: str | None) -> Resolution:
    """Pixel dimensions for an aspect ratio at a quality tier.

    Base size is 3840 for 4K, 2048 for 2K and 1024 otherwise. Unknown ratios
    fall back to square.
    """
    base = 3840 if quality == "4K" else 2048 if quality == "2K" else 1024
    factors = _RATIO_FACTORS.get(aspect_ratio or "1:1")
    if factors is None:
        return Resolution(width=base, height=base)
    wn, wd, hn, hd = factors
    return Resolution(width=round(base * wn / wd), height=round(base * hn / hd))


# ---------------------------------------------------------------------------
# Provider interface
# ---------------------------------------------------------------------------


class BaseProvider(abc.ABC):
    """One AI backend: static capability catalogue + four async operations."""

    provider_type: ProviderType
    metadata: ProviderMetadata
    models: tuple[ModelInfo, ...] = ()
    resolutions: tuple[ResolutionOption, ...] = ()

    def __init__(self, api_key: str | None = None) -> None:
        self.api_key = api_key or None

    # -- capability model ---------------------------------------------------

    def get_metadata(self) -> ProviderMetadata:
        return self.metadata

    def get_available_models(self) -> list[ModelInfo]:
        return list(self.models)

    def get_supported_resolutions(self) -> list[ResolutionOption]:
        return list(self.resolutions)

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def supports(self, operation: Operation) -> bool:
        """True if any model carries the flag for ``operation``. Text is always supported."""
        if operation is Operation.GENERATE_TEXT:
            return True
        if operation is Operation.GENERATE_ENVIRONMENT:
            return any(m.supports_image_generation for m in self.models)
        if operation is Operation.COMPOSE_PRODUCT:
            return any(m.supports_composition for m in self.models)
        if operation is Operation.REFINE_IMAGE:
            return any(m.supports_image_editing for m in self.models)
        return False

    # -- operations ---------------------------------------------------------

    @abc.abstractmethod
    async def generate_text(self, request: GenerateTextRequest) -> GenerateTextResponse: ...

    @abc.abstractmethod
    async def generate_environment(self, request: GenerateImageRequest) -> ImageResponse: ...

    @abc.abstractmethod
    async def compose_product(self, request: ComposeImageRequest) -> ImageResponse: ...

    @abc.abstractmethod
    async def refine_image(self, request: RefineImageRequest) -> ImageResponse: ...

    # -- shared helpers -----------------------------------------------------

    def ensure_api_key(self) -> str:
        if not self.api_key:
            raise ProviderNotConfiguredError(
                self.metadata.display_name, self.metadata.env_variable_name
            )
        return self.api_key

    @contextmanager
    def failure_context(self, context: str) -> Iterator[None]:
        """Prefix any failure inside the block with the provider name and ``context``.

        Capability errors keep their class so callers can tell them apart.
        """
        try:
            yield
        except CapabilityError as exc:
            raise CapabilityError(
                f"{self.metadata.display_name} {context}: {exc}",
                {**exc.details, "provider": self.provider_type.value},
            ) from exc
        except Exception as exc:
            raise ProviderOperationError(
                f"{self.metadata.display_name} {context}: {str(exc) or 'Unknown error'}",
                {"provider": self.provider_type.value},
            ) from exc
