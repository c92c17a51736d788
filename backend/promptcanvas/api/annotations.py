"""POST /api/annotations/extract: canvas shapes -> semantic annotations."""

from __future__ import annotations

from fastapi import APIRouter

from promptcanvas.engine.relations import annotations_to_text, extract_semantic_annotations
from promptcanvas.models.requests import ExtractAnnotationsRequest
from promptcanvas.models.responses import ExtractAnnotationsResponse

router = APIRouter()


@router.post("/annotations/extract", response_model=ExtractAnnotationsResponse)
async def extract(req: ExtractAnnotationsRequest) -> ExtractAnnotationsResponse:
    result = extract_semantic_annotations(req.elements, req.images)
    return ExtractAnnotationsResponse(
        annotations=result.annotations,
        relations=result.relations,
        summary=annotations_to_text(result.annotations, result.relations),
    )
