"""AI provider backends, their registry and the fallback orchestrator."""

from promptcanvas.providers.base import BaseProvider, calculate_resolution
from promptcanvas.providers.fallback import (
    DEFAULT_FALLBACK_ORDER,
    ProviderFailure,
    build_fallback_chain,
    execute_with_fallback,
)
from promptcanvas.providers.registry import ProviderRegistry, get_provider, get_registry
from promptcanvas.providers.types import Operation, ProviderType

__all__ = [
    "BaseProvider",
    "calculate_resolution",
    "DEFAULT_FALLBACK_ORDER",
    "ProviderFailure",
    "build_fallback_chain",
    "execute_with_fallback",
    "ProviderRegistry",
    "get_provider",
    "get_registry",
    "Operation",
    "ProviderType",
]
