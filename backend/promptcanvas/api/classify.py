"""POST /api/classify-text: free text -> structured metadata."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from promptcanvas.dependencies import get_provider_registry
from promptcanvas.errors import InvalidRequestError
from promptcanvas.models.prompt import TextClassificationRequest
from promptcanvas.models.requests import ClassifyTextRequest
from promptcanvas.models.responses import ClassifyTextResponse
from promptcanvas.prompting.classification import classify_text
from promptcanvas.providers.registry import ProviderRegistry

router = APIRouter()


@router.post("/classify-text", response_model=ClassifyTextResponse)
async def classify(
    req: ClassifyTextRequest,
    registry: ProviderRegistry = Depends(get_provider_registry),
) -> ClassifyTextResponse:
    if not req.text.strip():
        raise InvalidRequestError("Text is required")

    classification = await classify_text(
        TextClassificationRequest(
            text=req.text, context=req.context, existing_metadata=req.existing_metadata
        ),
        preferred=req.provider,
        registry=registry,
    )
    return ClassifyTextResponse(classification=classification)
