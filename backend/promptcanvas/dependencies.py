"""FastAPI dependency injection."""

from __future__ import annotations

from promptcanvas.providers.registry import ProviderRegistry, get_registry


def get_provider_registry() -> ProviderRegistry:
    return get_registry()
