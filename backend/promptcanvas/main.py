"""FastAPI app factory."""

from __future__ import annotations

import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from promptcanvas import __version__
from promptcanvas.config import settings

load_dotenv()

logging.basicConfig(
    level=getattr(logging, settings.promptcanvas_log_level.upper(), logging.INFO),
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)


def create_app() -> FastAPI:
    app = FastAPI(
        title="PromptCanvas",
        description="Canvas annotations to image-generation prompts, dispatched across AI providers",
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from promptcanvas.api.errors import register_error_handlers
    from promptcanvas.api.router import api_router

    register_error_handlers(app)
    app.include_router(api_router)

    return app


app = create_app()
