"""Shared test fixtures."""

from __future__ import annotations

import pytest

from promptcanvas.models.canvas import CanvasElement, ImageMetadata, ProductMetadata
from promptcanvas.providers.base import BaseProvider
from promptcanvas.providers.registry import ProviderRegistry
from promptcanvas.providers.types import (
    GenerateTextResponse,
    ImageResponse,
    ModelInfo,
    OperationEstimates,
    ProviderMetadata,
    ProviderType,
    TokenUsage,
)

PNG_DATA_URL = "data:image/png;base64,iVBORw0KGgo="


def element(id: str, type: str, x: float, y: float, w: float, h: float, **kw) -> CanvasElement:
    return CanvasElement(id=id, type=type, x=x, y=y, width=w, height=h, **kw)


def image_pair(image_id: str, x: float, y: float, w: float = 100, h: float = 100, **meta):
    """Canvas image element plus the ImageMetadata that points at it."""
    el = element(f"el-{image_id}", "image", x, y, w, h)
    img = ImageMetadata(id=image_id, excalidraw_element_id=el.id, **meta)
    return el, img


class FakeProvider(BaseProvider):
    """In-memory provider. Records every operation it is asked to run."""

    def __init__(
        self,
        provider_type: ProviderType,
        configured: bool = True,
        fail_with: Exception | None = None,
        text: str = "fake text",
        image_only: bool = False,
    ) -> None:
        super().__init__("test-key" if configured else None)
        self.provider_type = provider_type
        self.metadata = ProviderMetadata(
            name=provider_type,
            display_name=f"Fake {provider_type.value}",
            description="test double",
            cost_estimate=OperationEstimates(),
            latency_estimate=OperationEstimates(),
            env_variable_name=f"{provider_type.value.upper()}_TEST_KEY",
        )
        self.models = (
            ModelInfo(
                id=f"{provider_type.value}-image",
                name="image",
                description="",
                supports_image_generation=True,
                supports_image_editing=not image_only,
                supports_composition=not image_only,
            ),
        )
        self.fail_with = fail_with
        self.text = text
        self.calls: list[str] = []
        self.requests: list = []

    def _maybe_fail(self, op: str, request) -> None:
        self.calls.append(op)
        self.requests.append(request)
        if self.fail_with is not None:
            raise self.fail_with

    async def generate_text(self, request):
        self._maybe_fail("generate_text", request)
        return GenerateTextResponse(text=self.text, usage=TokenUsage(input_tokens=3, output_tokens=5))

    async def generate_environment(self, request):
        self._maybe_fail("generate_environment", request)
        return ImageResponse(image_data=PNG_DATA_URL, format="image/png")

    async def compose_product(self, request):
        self._maybe_fail("compose_product", request)
        return ImageResponse(image_data=PNG_DATA_URL, format="image/png")

    async def refine_image(self, request):
        self._maybe_fail("refine_image", request)
        return ImageResponse(image_data=PNG_DATA_URL, format="image/png")


def registry_of(*providers: FakeProvider, default_provider: str = "gemini") -> ProviderRegistry:
    return ProviderRegistry(
        factories={p.provider_type: (lambda p=p: p) for p in providers},
        default_provider=default_provider,
    )


@pytest.fixture
def living_room_canvas():
    """Environment image, one product, an arrow bound to the product and a note."""
    env_el, env = image_pair("env", 0, 0, 800, 600, type="environment")
    sofa_el, sofa = image_pair(
        "sofa",
        900,
        100,
        200,
        120,
        product_metadata=ProductMetadata(
            category="furniture", materials=["leather", "oak"], colors=["navy blue"], style="modern"
        ),
    )
    arrow = element(
        "arrow-1",
        "arrow",
        700,
        50,
        250,
        100,
        start_binding=None,
        end_binding={"elementId": sofa_el.id},
    )
    note = element("note-1", "text", 940, 240, 150, 20, text="centered under light")
    return [env_el, sofa_el, arrow, note], [env, sofa]


@pytest.fixture
def fake_providers():
    gemini = FakeProvider(ProviderType.GEMINI)
    claude = FakeProvider(ProviderType.CLAUDE, configured=False)
    openai = FakeProvider(ProviderType.OPENAI)
    replicate = FakeProvider(ProviderType.REPLICATE)
    return gemini, claude, openai, replicate
