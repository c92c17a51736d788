"""Provider registry: lazily built, cached provider instances keyed by type.

Usage:
    registry = get_registry()
    provider = registry.get_provider(ProviderType.GEMINI)
    if registry.supports_operation("openai", Operation.COMPOSE_PRODUCT): ...

Tests swap in their own factories and call ``reset()`` between cases.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping

from promptcanvas.errors import NoProvidersConfiguredError, UnknownProviderError
from promptcanvas.providers.base import BaseProvider
from promptcanvas.providers.claude_provider import ClaudeProvider
from promptcanvas.providers.gemini_provider import GeminiProvider
from promptcanvas.providers.openai_provider import OpenAIProvider
from promptcanvas.providers.replicate_provider import ReplicateProvider
from promptcanvas.providers.types import Operation, ProviderType

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[], BaseProvider]

# Declaration order; also the order configured_providers() reports in
DEFAULT_FACTORIES: dict[ProviderType, ProviderFactory] = {
    ProviderType.GEMINI: GeminiProvider,
    ProviderType.CLAUDE: ClaudeProvider,
    ProviderType.OPENAI: OpenAIProvider,
    ProviderType.REPLICATE: ReplicateProvider,
}


def parse_provider_type(value: ProviderType | str) -> ProviderType:
    try:
        return ProviderType(value)
    except ValueError:
        raise UnknownProviderError(str(value)) from None


class ProviderRegistry:
    """Process-wide cache of provider instances, one per type."""

    def __init__(
        self,
        factories: Mapping[ProviderType, ProviderFactory] | None = None,
        default_provider: str | None = None,
    ) -> None:
        self._factories = dict(factories if factories is not None else DEFAULT_FACTORIES)
        self._default_provider = default_provider
        self._providers: dict[ProviderType, BaseProvider] = {}
        self._lock = threading.Lock()

    @property
    def provider_types(self) -> list[ProviderType]:
        return list(self._factories)

    def get_provider(self, provider_type: ProviderType | str) -> BaseProvider:
        ptype = parse_provider_type(provider_type)
        provider = self._providers.get(ptype)
        if provider is not None:
            return provider

        with self._lock:
            # Another thread may have built it while we waited
            provider = self._providers.get(ptype)
            if provider is None:
                factory = self._factories.get(ptype)
                if factory is None:
                    raise UnknownProviderError(ptype.value)
                provider = factory()
                self._providers[ptype] = provider
                logger.debug(
                    "Created provider %s (configured=%s)", ptype.value, provider.is_configured()
                )
        return provider

    def configured_providers(self) -> list[BaseProvider]:
        providers = [self.get_provider(t) for t in self._factories]
        return [p for p in providers if p.is_configured()]

    def env_variable_names(self) -> list[str]:
        return [self.get_provider(t).metadata.env_variable_name for t in self._factories]

    def default_provider(self) -> BaseProvider:
        """The configured default provider, else the first configured one."""
        if self._default_provider is None:
            from promptcanvas.config import settings

            default_name = settings.default_ai_provider or ProviderType.GEMINI.value
        else:
            default_name = self._default_provider

        provider = self.get_provider(default_name)
        if provider.is_configured():
            return provider

        configured = self.configured_providers()
        if not configured:
            raise NoProvidersConfiguredError(self.env_variable_names())
        return configured[0]

    def supports_operation(self, provider_type: ProviderType | str, operation: Operation) -> bool:
        return self.get_provider(provider_type).supports(Operation(operation))

    def providers_for_operation(self, operation: Operation) -> list[ProviderType]:
        return [t for t in self._factories if self.supports_operation(t, operation)]

    def reset(self) -> None:
        """Drop every cached instance; the next lookup rebuilds from the factories."""
        with self._lock:
            self._providers.clear()


_registry = ProviderRegistry()


def get_registry() -> ProviderRegistry:
    return _registry


def get_provider(provider_type: ProviderType | str | None = None) -> BaseProvider:
    """A specific provider, or the default one when no type is given."""
    if provider_type:
        return _registry.get_provider(provider_type)
    return _registry.default_provider()
