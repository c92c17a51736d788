"""Health check."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from promptcanvas.dependencies import get_provider_registry
from promptcanvas.models.responses import HealthResponse
from promptcanvas.providers.registry import ProviderRegistry

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(registry: ProviderRegistry = Depends(get_provider_registry)) -> HealthResponse:
    return HealthResponse(
        status="ok",
        configured_providers=[p.provider_type.value for p in registry.configured_providers()],
    )
