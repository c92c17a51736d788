"""Exception hierarchy.

Configuration problems are surfaced to the caller as-is and never retried.
Per-provider failures are collected by the fallback orchestrator and only
escape wrapped in an AllProvidersFailedError.
"""

from __future__ import annotations

from typing import Any


class PromptCanvasError(Exception):
    """Base exception for all promptcanvas errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


# Configuration


class ConfigurationError(PromptCanvasError):
    """Something about the process environment prevents the request."""


class NoProvidersConfiguredError(ConfigurationError):
    """Not a single provider in the chain has a credential."""

    def __init__(self, env_vars: list[str]) -> None:
        super().__init__(
            "No AI providers are configured. Please set at least one API key "
            f"in your environment variables ({', '.join(env_vars)}).",
            {"env_vars": env_vars},
        )
        self.env_vars = env_vars


class ProviderNotConfiguredError(ConfigurationError):
    """An operation was invoked on a provider without a credential."""

    def __init__(self, display_name: str, env_var: str) -> None:
        super().__init__(
            f"{display_name} API key not configured. "
            f"Please set {env_var} in your environment variables.",
            {"env_var": env_var},
        )
        self.env_var = env_var


class UnknownProviderError(ConfigurationError):
    def __init__(self, provider: str) -> None:
        super().__init__(f"Unknown provider type: {provider}", {"provider": provider})
        self.provider = provider


# Provider calls


class ProviderError(PromptCanvasError):
    """Base for failures raised while talking to a provider."""


class ProviderOperationError(ProviderError):
    """A provider call failed (network, API error, empty response)."""


class CapabilityError(ProviderError):
    """The provider cannot perform the requested operation at all."""


class AllProvidersFailedError(ProviderError):
    """Every configured provider in the fallback chain failed."""

    def __init__(self, failures: list[Any]) -> None:
        lines = "\n".join(f"- {f.provider}: {f.message}" for f in failures)
        super().__init__(
            f"All providers failed. Errors:\n{lines}",
            {"failures": [(f.provider, f.message) for f in failures]},
        )
        self.failures = failures


# Prompting


class ClassificationParseError(PromptCanvasError):
    """The model's classification answer could not be parsed as JSON."""

    def __init__(self, raw_response: str) -> None:
        super().__init__(
            "Failed to parse classification response",
            {"raw_response": raw_response},
        )
        self.raw_response = raw_response


# Requests


class InvalidRequestError(PromptCanvasError):
    """Required input is missing or empty."""
