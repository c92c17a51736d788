"""Master API router: mounts all endpoint routers."""

from __future__ import annotations

from fastapi import APIRouter

from promptcanvas.api import annotations, classify, generate, health, prompts, providers

api_router = APIRouter(prefix="/api")

api_router.include_router(health.router)
api_router.include_router(providers.router)
api_router.include_router(annotations.router)
api_router.include_router(prompts.router)
api_router.include_router(classify.router)
api_router.include_router(generate.router)
