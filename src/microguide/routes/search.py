"""Catalog search endpoint."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from microguide.dependencies import get_search_service
from microguide.errors import ValidationFailure
from microguide.schemas.paths import Difficulty
from microguide.schemas.search import DurationRange, SearchFilters, SearchResult
from microguide.services.search import SearchService

router = APIRouter()


@router.get("", response_model=SearchResult)
async def search(
    q: str = Query(..., min_length=1, max_length=500),
    topic: Optional[str] = Query(None),
    difficulty: Optional[Difficulty] = Query(None),
    min_duration: Optional[int] = Query(None, ge=0),
    max_duration: Optional[int] = Query(None, ge=0),
    service: SearchService = Depends(get_search_service),
) -> SearchResult:
    """Relevance-ranked public paths for a free-text query."""
    duration = None
    if min_duration is not None or max_duration is not None:
        low = min_duration or 0
        high = max_duration if max_duration is not None else 10_000
        if low > high:
            raise ValidationFailure(
                "min_duration must not exceed max_duration",
                details={"min_duration": low, "max_duration": high},
            )
        duration = DurationRange(min=low, max=high)

    filters = SearchFilters(topic=topic, difficulty=difficulty, duration=duration)
    return await service.search(q, filters)
