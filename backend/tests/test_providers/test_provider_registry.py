"""Tests for the provider registry."""

import threading
import time

import pytest

from promptcanvas.config import settings
from promptcanvas.errors import NoProvidersConfiguredError, UnknownProviderError
from promptcanvas.providers.registry import (
    ProviderRegistry,
    get_registry,
    parse_provider_type,
)
from promptcanvas.providers.types import Operation, ProviderType
from tests.conftest import FakeProvider, registry_of


def test_parse_provider_type():
    assert parse_provider_type("openai") is ProviderType.OPENAI
    assert parse_provider_type(ProviderType.CLAUDE) is ProviderType.CLAUDE
    with pytest.raises(UnknownProviderError, match="Unknown provider type: midjourney"):
        parse_provider_type("midjourney")


def test_instances_are_cached():
    built = []

    def factory():
        built.append(1)
        return FakeProvider(ProviderType.GEMINI)

    registry = ProviderRegistry(factories={ProviderType.GEMINI: factory})
    assert registry.get_provider("gemini") is registry.get_provider(ProviderType.GEMINI)
    assert len(built) == 1


def test_concurrent_first_lookup_builds_once():
    built = []

    def slow_factory():
        built.append(1)
        time.sleep(0.01)
        return FakeProvider(ProviderType.OPENAI)

    registry = ProviderRegistry(factories={ProviderType.OPENAI: slow_factory})
    results = []
    threads = [
        threading.Thread(target=lambda: results.append(registry.get_provider("openai")))
        for _ in range(8)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(built) == 1
    assert all(p is results[0] for p in results)


def test_reset_rebuilds():
    registry = ProviderRegistry(
        factories={ProviderType.GEMINI: lambda: FakeProvider(ProviderType.GEMINI)}
    )
    first = registry.get_provider("gemini")
    registry.reset()
    assert registry.get_provider("gemini") is not first


def test_type_without_factory_is_unknown():
    registry = registry_of(FakeProvider(ProviderType.GEMINI))
    with pytest.raises(UnknownProviderError):
        registry.get_provider("replicate")


def test_configured_providers_in_declaration_order(fake_providers):
    gemini, claude, openai, replicate = fake_providers
    registry = registry_of(gemini, claude, openai, replicate)
    assert registry.configured_providers() == [gemini, openai, replicate]
    assert registry.provider_types == [
        ProviderType.GEMINI,
        ProviderType.CLAUDE,
        ProviderType.OPENAI,
        ProviderType.REPLICATE,
    ]


def test_env_variable_names(fake_providers):
    registry = registry_of(*fake_providers)
    assert registry.env_variable_names() == [
        "GEMINI_TEST_KEY",
        "CLAUDE_TEST_KEY",
        "OPENAI_TEST_KEY",
        "REPLICATE_TEST_KEY",
    ]


# == Default provider ==


def test_default_provider_when_configured(fake_providers):
    registry = registry_of(*fake_providers, default_provider="openai")
    assert registry.default_provider() is fake_providers[2]


def test_unconfigured_default_falls_back_to_first_configured(fake_providers):
    registry = registry_of(*fake_providers, default_provider="claude")
    assert registry.default_provider() is fake_providers[0]


def test_no_configured_provider_raises():
    registry = registry_of(
        FakeProvider(ProviderType.GEMINI, configured=False),
        FakeProvider(ProviderType.OPENAI, configured=False),
    )
    with pytest.raises(NoProvidersConfiguredError) as excinfo:
        registry.default_provider()
    assert excinfo.value.env_vars == ["GEMINI_TEST_KEY", "OPENAI_TEST_KEY"]
    assert "GEMINI_TEST_KEY, OPENAI_TEST_KEY" in str(excinfo.value)


def test_default_comes_from_settings(fake_providers, monkeypatch):
    monkeypatch.setattr(settings, "default_ai_provider", "replicate")
    registry = ProviderRegistry(factories={p.provider_type: (lambda p=p: p) for p in fake_providers})
    assert registry.default_provider() is fake_providers[3]


# == Capabilities ==


def test_operation_support_with_real_catalogues():
    registry = ProviderRegistry()
    assert registry.providers_for_operation(Operation.GENERATE_TEXT) == list(ProviderType)
    assert registry.providers_for_operation(Operation.GENERATE_ENVIRONMENT) == [
        ProviderType.GEMINI,
        ProviderType.OPENAI,
        ProviderType.REPLICATE,
    ]
    assert registry.providers_for_operation(Operation.COMPOSE_PRODUCT) == [
        ProviderType.GEMINI,
        ProviderType.OPENAI,
    ]
    assert not registry.supports_operation("claude", Operation.REFINE_IMAGE)
    assert registry.supports_operation("replicate", "refine_image")


def test_module_registry_is_shared():
    assert get_registry() is get_registry()


def test_module_get_provider(fake_providers, monkeypatch):
    from promptcanvas.providers import registry as registry_module

    monkeypatch.setattr(registry_module, "_registry", registry_of(*fake_providers, default_provider="claude"))
    assert registry_module.get_provider("openai") is fake_providers[2]
    assert registry_module.get_provider() is fake_providers[0]
