"""Prompt builder endpoints and the preset/template catalogue."""

from __future__ import annotations

from fastapi import APIRouter

from promptcanvas.errors import InvalidRequestError
from promptcanvas.models.prompt import PromptBuilderInput, PromptBuilderOutput
from promptcanvas.prompting.builder import build_semantic_prompt, validate_prompt_input
from promptcanvas.prompting.presets import DEFAULT_PROMPT_TEMPLATES, LIGHTING_PRESETS, STYLE_PRESETS

router = APIRouter()


@router.post("/prompt/build", response_model=PromptBuilderOutput)
async def build_prompt(req: PromptBuilderInput) -> PromptBuilderOutput:
    validation = validate_prompt_input(req)
    if not validation.valid:
        raise InvalidRequestError("; ".join(validation.errors), {"errors": validation.errors})
    return build_semantic_prompt(req)


@router.get("/prompt/presets")
async def presets() -> dict[str, list]:
    return {
        "lightingPresets": [p.model_dump(by_alias=True) for p in LIGHTING_PRESETS],
        "stylePresets": [p.model_dump(by_alias=True) for p in STYLE_PRESETS],
        "templates": [t.model_dump(by_alias=True) for t in DEFAULT_PROMPT_TEMPLATES],
    }
