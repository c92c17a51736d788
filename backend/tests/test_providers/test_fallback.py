"""Tests for the ordered multi-provider fallback."""

import asyncio
import logging

import pytest

from promptcanvas.errors import (
    AllProvidersFailedError,
    NoProvidersConfiguredError,
)
from promptcanvas.providers.fallback import (
    DEFAULT_FALLBACK_ORDER,
    build_fallback_chain,
    execute_with_fallback,
)
from promptcanvas.providers.types import GenerateTextRequest, ProviderType
from tests.conftest import FakeProvider, registry_of

G, C, O, R = ProviderType.GEMINI, ProviderType.CLAUDE, ProviderType.OPENAI, ProviderType.REPLICATE


async def _text(provider):
    return await provider.generate_text(GenerateTextRequest(prompt="hi"))


async def _which(provider):
    await provider.generate_text(GenerateTextRequest(prompt="hi"))
    return provider.provider_type


# == Chain ==


def test_default_chain_leaves_out_claude():
    assert build_fallback_chain(None) == [G, O, R]
    assert C not in DEFAULT_FALLBACK_ORDER


def test_preferred_goes_first_without_duplicates():
    assert build_fallback_chain("openai") == [O, G, R]
    assert build_fallback_chain(ProviderType.REPLICATE) == [R, G, O]


def test_preferred_outside_default_order_is_prepended():
    assert build_fallback_chain("claude") == [C, G, O, R]


def test_unknown_preferred_is_kept_by_name():
    assert build_fallback_chain("dalle") == ["dalle", G, O, R]


# == Execution ==


def test_first_success_wins(fake_providers):
    gemini, claude, openai, replicate = fake_providers
    registry = registry_of(*fake_providers)

    assert asyncio.run(execute_with_fallback(_which, registry=registry)) is G
    assert gemini.calls == ["generate_text"]
    assert openai.calls == []
    assert replicate.calls == []


def test_failures_are_skipped_in_order(caplog):
    gemini = FakeProvider(G, fail_with=RuntimeError("quota"))
    openai = FakeProvider(O, fail_with=RuntimeError("timeout"))
    replicate = FakeProvider(R)
    registry = registry_of(gemini, openai, replicate)

    with caplog.at_level(logging.INFO, logger="promptcanvas.providers.fallback"):
        assert asyncio.run(execute_with_fallback(_which, registry=registry)) is R

    assert "Provider gemini failed: quota" in caplog.text
    assert "Provider openai failed: timeout" in caplog.text
    assert "Provider replicate succeeded after 3 attempt(s)" in caplog.text


def test_unconfigured_providers_are_not_attempted(fake_providers):
    gemini, claude, openai, replicate = fake_providers
    registry = registry_of(*fake_providers)

    assert asyncio.run(execute_with_fallback(_which, preferred="claude", registry=registry)) is G
    assert claude.calls == []


def test_preferred_is_tried_first(fake_providers):
    gemini, claude, openai, replicate = fake_providers
    registry = registry_of(*fake_providers)

    assert asyncio.run(execute_with_fallback(_which, preferred="openai", registry=registry)) is O
    assert gemini.calls == []


def test_every_configured_provider_failing_aggregates_in_attempt_order():
    registry = registry_of(
        FakeProvider(G, fail_with=RuntimeError("quota")),
        FakeProvider(C, configured=False),
        FakeProvider(O, fail_with=ValueError("bad size")),
        FakeProvider(R, fail_with=RuntimeError("")),
    )
    with pytest.raises(AllProvidersFailedError) as excinfo:
        asyncio.run(execute_with_fallback(_text, preferred="openai", registry=registry))

    err = excinfo.value
    assert [f.provider for f in err.failures] == ["openai", "gemini", "replicate"]
    assert str(err) == "All providers failed. Errors:\n- openai: bad size\n- gemini: quota\n- replicate: "


def test_nothing_configured_names_the_env_vars():
    registry = registry_of(
        FakeProvider(G, configured=False),
        FakeProvider(O, configured=False),
        FakeProvider(R, configured=False),
    )
    with pytest.raises(NoProvidersConfiguredError) as excinfo:
        asyncio.run(execute_with_fallback(_text, registry=registry))
    assert excinfo.value.env_vars == ["GEMINI_TEST_KEY", "OPENAI_TEST_KEY", "REPLICATE_TEST_KEY"]


def test_provider_that_cannot_be_built_counts_as_failure():
    registry = registry_of(FakeProvider(G, fail_with=RuntimeError("quota")))
    with pytest.raises(AllProvidersFailedError) as excinfo:
        asyncio.run(execute_with_fallback(_text, registry=registry))
    assert [f.provider for f in excinfo.value.failures] == ["gemini", "openai", "replicate"]


def test_result_is_returned_unchanged(fake_providers):
    registry = registry_of(FakeProvider(G, text="a bright loft"))
    response = asyncio.run(execute_with_fallback(_text, registry=registry))
    assert response.text == "a bright loft"
    assert response.usage.output_tokens == 5


def test_custom_default_order(fake_providers):
    registry = registry_of(*fake_providers)
    result = asyncio.run(
        execute_with_fallback(_which, registry=registry, default_order=(R, O))
    )
    assert result is R


def test_unknown_preferred_falls_back_to_defaults(caplog):
    registry = registry_of(FakeProvider(G))

    with caplog.at_level(logging.WARNING, logger="promptcanvas.providers.fallback"):
        assert asyncio.run(execute_with_fallback(_which, preferred="dalle", registry=registry)) is G

    assert "Provider dalle could not be created: Unknown provider type: dalle" in caplog.text


def test_unknown_preferred_is_first_in_the_aggregate():
    registry = registry_of(
        FakeProvider(G, fail_with=RuntimeError("quota")),
        FakeProvider(O, fail_with=RuntimeError("rate limited")),
        FakeProvider(R, fail_with=RuntimeError("timeout")),
    )
    with pytest.raises(AllProvidersFailedError) as excinfo:
        asyncio.run(execute_with_fallback(_text, preferred="dalle", registry=registry))

    assert [f.provider for f in excinfo.value.failures] == ["dalle", "gemini", "openai", "replicate"]
    assert str(excinfo.value).startswith(
        "All providers failed. Errors:\n- dalle: Unknown provider type: dalle\n- gemini: quota"
    )


def test_skip_then_fail_then_succeed():
    claude = FakeProvider(C, configured=False)
    gemini = FakeProvider(G, fail_with=RuntimeError("quota"))
    openai = FakeProvider(O)
    replicate = FakeProvider(R)
    registry = registry_of(claude, gemini, openai, replicate)

    result = asyncio.run(execute_with_fallback(_which, registry=registry, default_order=(C, G, O)))

    assert result is O
    assert claude.calls == []
    assert gemini.calls == ["generate_text"]
    assert openai.calls == ["generate_text"]
    assert replicate.calls == []
