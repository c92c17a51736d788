"""Tests for the concrete backends that need no network access."""

import asyncio
import io

import pytest
from PIL import Image

from promptcanvas.errors import CapabilityError, ProviderNotConfiguredError, ProviderOperationError
from promptcanvas.providers.claude_provider import ClaudeProvider
from promptcanvas.providers.gemini_provider import GeminiProvider
from promptcanvas.providers.openai_provider import OpenAIProvider, dalle_size, transparent_mask
from promptcanvas.providers.replicate_provider import (
    API_BASE,
    ReplicateProvider,
    prediction_endpoint,
)
from promptcanvas.providers.types import (
    ComposeImageRequest,
    GenerateImageRequest,
    Operation,
    RefineImageRequest,
)
from tests.conftest import PNG_DATA_URL

ALL = (GeminiProvider, ClaudeProvider, OpenAIProvider, ReplicateProvider)


@pytest.mark.parametrize("cls", ALL)
def test_explicit_empty_key_is_unconfigured(cls):
    assert not cls(api_key="").is_configured()
    assert cls(api_key="k").is_configured()


@pytest.mark.parametrize(
    "cls,env_var",
    [
        (GeminiProvider, "GEMINI_API_KEY"),
        (ClaudeProvider, "ANTHROPIC_API_KEY"),
        (OpenAIProvider, "OPENAI_API_KEY"),
        (ReplicateProvider, "REPLICATE_API_TOKEN"),
    ],
)
def test_metadata_env_vars(cls, env_var):
    assert cls(api_key="").get_metadata().env_variable_name == env_var


@pytest.mark.parametrize(
    "cls,environment,compose,refine",
    [
        (GeminiProvider, True, True, True),
        (ClaudeProvider, False, False, False),
        (OpenAIProvider, True, True, True),
        (ReplicateProvider, True, False, True),
    ],
)
def test_capability_catalogue(cls, environment, compose, refine):
    provider = cls(api_key="k")
    assert provider.supports(Operation.GENERATE_TEXT)
    assert provider.supports(Operation.GENERATE_ENVIRONMENT) is environment
    assert provider.supports(Operation.COMPOSE_PRODUCT) is compose
    assert provider.supports(Operation.REFINE_IMAGE) is refine


def test_unconfigured_operation_raises_before_any_call():
    with pytest.raises(ProviderNotConfiguredError, match="GEMINI_API_KEY"):
        asyncio.run(GeminiProvider(api_key="").generate_environment(GenerateImageRequest(prompt="x")))


# == Claude ==


def test_claude_cannot_generate_images():
    with pytest.raises(CapabilityError, match="does not natively support image generation"):
        asyncio.run(ClaudeProvider(api_key="k").generate_environment(GenerateImageRequest(prompt="x")))


def test_claude_refine_hands_back_guidance(monkeypatch):
    provider = ClaudeProvider(api_key="k")

    async def _guidance(text, images):
        assert images == [PNG_DATA_URL]
        return "use warm light"

    monkeypatch.setattr(provider, "_guidance", _guidance)
    with pytest.raises(CapabilityError, match="cannot edit images directly") as excinfo:
        asyncio.run(
            provider.refine_image(RefineImageRequest(prompt="warmer", source_image=PNG_DATA_URL))
        )
    assert excinfo.value.details == {"guidance": "use warm light", "provider": "claude"}


# == OpenAI ==


@pytest.mark.parametrize(
    "model,ratio,size",
    [
        ("dall-e-3", "16:9", "1792x1024"),
        ("dall-e-3", "9:16", "1024x1792"),
        ("dall-e-3", "4:3", "1024x1024"),
        ("dall-e-3", None, "1024x1024"),
        ("dall-e-2", "16:9", "1024x1024"),
    ],
)
def test_dalle_size(model, ratio, size):
    assert dalle_size(model, ratio) == size


def test_transparent_mask_is_clear_rgba_png():
    image = Image.open(io.BytesIO(transparent_mask(8, 4)))
    assert image.format == "PNG"
    assert image.mode == "RGBA"
    assert image.size == (8, 4)
    assert image.getextrema()[3] == (0, 0)


def test_openai_composition_requires_environment():
    request = ComposeImageRequest(prompt="x", sketch_image=PNG_DATA_URL)
    with pytest.raises(ProviderOperationError) as excinfo:
        asyncio.run(OpenAIProvider(api_key="k").compose_product(request))
    assert str(excinfo.value) == (
        "OpenAI product composition failed: "
        "Environment image is required for composition with OpenAI"
    )


# == Replicate ==


def test_versioned_model_uses_generic_endpoint():
    url, body = prediction_endpoint("owner/model:abc123")
    assert url == f"{API_BASE}/predictions"
    assert body == {"version": "abc123"}


def test_bare_model_uses_model_endpoint():
    url, body = prediction_endpoint("meta/meta-llama-3-70b-instruct")
    assert url == f"{API_BASE}/models/meta/meta-llama-3-70b-instruct/predictions"
    assert body == {}


def test_replicate_composition_requires_environment():
    with pytest.raises(ProviderOperationError, match="Environment image is required"):
        asyncio.run(ReplicateProvider(api_key="k").compose_product(ComposeImageRequest(prompt="x")))


def test_replicate_refine_is_not_configured_without_token():
    request = RefineImageRequest(prompt="x", source_image=PNG_DATA_URL)
    with pytest.raises(ProviderNotConfiguredError, match="REPLICATE_API_TOKEN"):
        asyncio.run(ReplicateProvider(api_key="").refine_image(request))


# == Replicate over a mocked transport ==


def _replicate_transport(routes, seen):
    import httpx

    def handler(request):
        seen.append(request)
        status, body = routes[(request.method, str(request.url))].pop(0)
        if isinstance(body, bytes):
            return httpx.Response(status, content=body)
        return httpx.Response(status, json=body)

    return httpx.MockTransport(handler)


@pytest.fixture
def replicate_http(monkeypatch):
    import httpx

    from promptcanvas.providers import replicate_provider

    real_client = httpx.AsyncClient
    seen: list = []
    routes: dict = {}
    monkeypatch.setattr(replicate_provider, "POLL_INTERVAL_S", 0)
    monkeypatch.setattr(
        replicate_provider.httpx,
        "AsyncClient",
        lambda **kw: real_client(transport=_replicate_transport(routes, seen), **kw),
    )
    return routes, seen


def test_replicate_generation_polls_and_downloads(replicate_http):
    import json

    routes, seen = replicate_http
    poll_url = f"{API_BASE}/predictions/p1"
    routes[("POST", f"{API_BASE}/predictions")] = [
        (201, {"id": "p1", "status": "processing", "urls": {"get": poll_url}})
    ]
    routes[("GET", poll_url)] = [
        (200, {"id": "p1", "status": "succeeded", "output": ["https://cdn.example/out.png"]})
    ]
    routes[("GET", "https://cdn.example/out.png")] = [(200, b"png-bytes")]

    request = GenerateImageRequest(prompt="a loft", config={"aspectRatio": "16:9"})
    result = asyncio.run(ReplicateProvider(api_key="r8_test").generate_environment(request))

    assert result.image_data == "data:image/png;base64,cG5nLWJ5dGVz"
    create = seen[0]
    assert create.headers["Authorization"] == "Bearer r8_test"
    assert create.headers["Prefer"] == "wait"
    body = json.loads(create.content)
    assert body["input"]["width"] == 1362
    assert body["input"]["height"] == 766


def test_replicate_failed_prediction(replicate_http):
    routes, _ = replicate_http
    routes[("POST", f"{API_BASE}/predictions")] = [
        (201, {"id": "p2", "status": "failed", "error": "NSFW content detected"})
    ]
    with pytest.raises(ProviderOperationError) as excinfo:
        asyncio.run(
            ReplicateProvider(api_key="r8_test").generate_environment(GenerateImageRequest(prompt="x"))
        )
    assert str(excinfo.value) == "Replicate environment generation failed: NSFW content detected"
