"""API router exposing the segmentation and document-processing endpoints."""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from statement_segmenter.errors import InvalidInputError
from statement_segmenter.segmentation import SegmentationPipeline, SegmentationResult

LOGGER = logging.getLogger(__name__)

router = APIRouter(tags=["segmentation"])


class StatsResponse(BaseModel):
    """Document-level statistics for one segmentation run."""

    total_chunks: int
    total_chars: int
    avg_chunk_size: int
    tables_detected: int


class SegmentResponse(BaseModel):
    """Successful segmentation result."""

    ok: bool = True
    bank_name: str
    stats: StatsResponse
    chunks: list[dict[str, Any]] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    ok: bool = False
    error: str


@lru_cache(maxsize=1)
def get_pipeline() -> SegmentationPipeline:
    return SegmentationPipeline()


def _to_response(result: SegmentationResult) -> SegmentResponse:
    return SegmentResponse(
        bank_name=result.bank_name,
        stats=StatsResponse(**result.stats.to_dict()),
        chunks=[chunk.to_dict() for chunk in result.chunks],
    )


def _error(exc: InvalidInputError, *, wrap: bool) -> JSONResponse:
    LOGGER.info("Rejected payload: %s", exc)
    body = ErrorResponse(error=str(exc)).model_dump()
    return JSONResponse(status_code=exc.status_code, content=[body] if wrap else body)


@router.post("/segment", response_model=list[SegmentResponse])
def segment(
    payload: Any = Body(...),
    pipeline: SegmentationPipeline = Depends(get_pipeline),
) -> Any:
    """Segment HTML, plain text or a parsed document into bounded chunks."""

    try:
        result = pipeline.segment(payload)
    except InvalidInputError as exc:
        return _error(exc, wrap=True)
    return [_to_response(result)]


@router.post("/process", response_model=SegmentResponse)
def process(
    payload: Any = Body(...),
    pipeline: SegmentationPipeline = Depends(get_pipeline),
) -> Any:
    """Chunk a parsed document's source chunks and extract transactions."""

    try:
        result = pipeline.process(payload)
    except InvalidInputError as exc:
        return _error(exc, wrap=False)
    return _to_response(result)
