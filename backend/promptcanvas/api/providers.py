"""GET /api/providers: capability catalogue of every backend."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from promptcanvas.dependencies import get_provider_registry
from promptcanvas.errors import NoProvidersConfiguredError
from promptcanvas.models.responses import ProviderInfo, ProvidersResponse
from promptcanvas.providers.registry import ProviderRegistry
from promptcanvas.providers.types import Operation

router = APIRouter()


@router.get("/providers", response_model=ProvidersResponse)
async def list_providers(
    registry: ProviderRegistry = Depends(get_provider_registry),
) -> ProvidersResponse:
    providers = []
    for ptype in registry.provider_types:
        provider = registry.get_provider(ptype)
        providers.append(
            ProviderInfo(
                type=ptype.value,
                metadata=provider.get_metadata(),
                models=provider.get_available_models(),
                resolutions=provider.get_supported_resolutions(),
                configured=provider.is_configured(),
                operations={op.value: registry.supports_operation(ptype, op) for op in Operation},
            )
        )

    try:
        default = registry.default_provider().provider_type.value
    except NoProvidersConfiguredError:
        default = None

    return ProvidersResponse(providers=providers, default_provider=default)
