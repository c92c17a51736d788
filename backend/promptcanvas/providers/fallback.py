"""Ordered multi-provider fallback.

Providers in the chain are tried one at a time, never concurrently. The
first success returns; each failure is logged and recorded; unconfigured
providers are skipped without counting as failures.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import TypeVar

from promptcanvas.errors import (
    AllProvidersFailedError,
    NoProvidersConfiguredError,
    UnknownProviderError,
)
from promptcanvas.providers.base import BaseProvider
from promptcanvas.providers.registry import ProviderRegistry, get_registry, parse_provider_type
from promptcanvas.providers.types import ProviderType

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Claude is absent on purpose: it is only tried when explicitly preferred
DEFAULT_FALLBACK_ORDER: tuple[ProviderType, ...] = (
    ProviderType.GEMINI,
    ProviderType.OPENAI,
    ProviderType.REPLICATE,
)


@dataclass(frozen=True)
class ProviderFailure:
    provider: str
    message: str


def build_fallback_chain(
    preferred: ProviderType | str | None,
    default_order: Sequence[ProviderType] = DEFAULT_FALLBACK_ORDER,
) -> list[ProviderType | str]:
    """Preferred first, then the default order minus the preferred entry.

    An unrecognised preferred name is kept as the raw string so the
    executor can record it as a failure and carry on with the defaults.
    """
    if not preferred:
        return list(default_order)
    try:
        first: ProviderType | str = parse_provider_type(preferred)
    except UnknownProviderError:
        first = str(preferred)
    return [first, *(t for t in default_order if t != first)]


def _name(ptype: ProviderType | str) -> str:
    return ptype.value if isinstance(ptype, ProviderType) else ptype


async def execute_with_fallback(
    operation: Callable[[BaseProvider], Awaitable[T]],
    preferred: ProviderType | str | None = None,
    registry: ProviderRegistry | None = None,
    default_order: Sequence[ProviderType] = DEFAULT_FALLBACK_ORDER,
) -> T:
    """Run ``operation`` against the first provider in the chain that succeeds.

    Raises NoProvidersConfiguredError when nothing in the chain has a
    credential, and AllProvidersFailedError (with every failure, in attempt
    order) when each configured provider failed.
    """
    registry = registry or get_registry()
    chain = build_fallback_chain(preferred, default_order)
    failures: list[ProviderFailure] = []
    attempted = 0

    for ptype in chain:
        try:
            provider = registry.get_provider(ptype)
        except Exception as exc:
            logger.warning("Provider %s could not be created: %s", _name(ptype), exc)
            failures.append(ProviderFailure(_name(ptype), str(exc)))
            continue

        if not provider.is_configured():
            logger.debug("Skipping unconfigured provider %s", ptype.value)
            continue

        attempted += 1
        try:
            result = await operation(provider)
        except Exception as exc:
            logger.warning("Provider %s failed: %s", ptype.value, exc)
            failures.append(ProviderFailure(ptype.value, str(exc)))
            continue

        logger.info("Provider %s succeeded after %d attempt(s)", ptype.value, attempted)
        return result

    if not failures:
        env_vars = [registry.get_provider(t).metadata.env_variable_name for t in chain]
        raise NoProvidersConfiguredError(env_vars)
    raise AllProvidersFailedError(failures)
