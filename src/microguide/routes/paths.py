"""Learning path endpoints."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi import status as http_status

from microguide.auth import get_current_user, get_optional_user
from microguide.dependencies import get_path_generator, get_path_service
from microguide.schemas.common import ErrorResponse
from microguide.schemas.paths import (
    DeleteAccepted,
    Difficulty,
    GeneratePathRequest,
    LearningNode,
    LearningPath,
    NodeBatchCreate,
    PathAnalytics,
    PathCreate,
    PathFilters,
    PathList,
    PathWithNodes,
)
from microguide.services.paths import PathService
from microguide.services.synthesis import PathGenerator

router = APIRouter()


@router.post("/generate", response_model=LearningPath, status_code=201)
async def generate_path(
    request: GeneratePathRequest,
    generator: PathGenerator = Depends(get_path_generator),
    service: PathService = Depends(get_path_service),
    user_id: UUID = Depends(get_current_user),
) -> LearningPath:
    """Synthesize a curriculum for a free-text request and save it."""
    document = await generator.generate(request)
    path = await service.save_generated_path(document, user_id)
    return LearningPath.model_validate(path)


@router.get("", response_model=PathList)
async def list_paths(
    topic: Optional[str] = Query(None),
    difficulty: Optional[Difficulty] = Query(None),
    mine: bool = Query(False, description="Only paths created by the caller"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    service: PathService = Depends(get_path_service),
    user_id: Optional[UUID] = Depends(get_optional_user),
) -> PathList:
    """List public paths, or the caller's own paths with ``mine=true``."""
    filters = PathFilters(topic=topic, difficulty=difficulty, limit=limit, offset=offset)
    if mine and user_id is not None:
        filters.created_by = user_id
    else:
        filters.is_public = True

    paths = await service.list_paths(filters)
    return PathList(items=[LearningPath.model_validate(p) for p in paths])


@router.post("", response_model=LearningPath, status_code=201)
async def create_path(
    data: PathCreate,
    service: PathService = Depends(get_path_service),
    user_id: UUID = Depends(get_current_user),
) -> LearningPath:
    path = await service.create_path(data, user_id)
    return LearningPath.model_validate(path)


@router.get(
    "/{path_id}",
    response_model=PathWithNodes,
    responses={404: {"model": ErrorResponse}},
)
async def get_path(
    path_id: UUID,
    service: PathService = Depends(get_path_service),
    user_id: Optional[UUID] = Depends(get_optional_user),
) -> PathWithNodes:
    return await service.get_path_with_nodes(path_id, user_id)


@router.delete(
    "/{path_id}",
    response_model=DeleteAccepted,
    status_code=http_status.HTTP_202_ACCEPTED,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete_path(
    path_id: UUID,
    service: PathService = Depends(get_path_service),
    user_id: UUID = Depends(get_current_user),
) -> DeleteAccepted:
    """Owner-only delete; the response means accepted, re-read to confirm."""
    await service.delete_path(path_id, user_id)
    return DeleteAccepted(id=path_id)


@router.post("/{path_id}/nodes", response_model=List[LearningNode], status_code=201)
async def add_nodes(
    path_id: UUID,
    batch: NodeBatchCreate,
    service: PathService = Depends(get_path_service),
    user_id: UUID = Depends(get_current_user),
) -> List[LearningNode]:
    nodes = await service.batch_create_nodes(path_id, batch.nodes, user_id)
    return [LearningNode.model_validate(n) for n in nodes]


@router.get("/{path_id}/similar", response_model=PathList)
async def similar_paths(
    path_id: UUID,
    service: PathService = Depends(get_path_service),
    user_id: Optional[UUID] = Depends(get_optional_user),
) -> PathList:
    """Public paths on the same topic that share title keywords."""
    path = await service.get_path_with_nodes(path_id, user_id)
    paths = await service.find_similar_paths(path.title, path.topic)
    return PathList(
        items=[LearningPath.model_validate(p) for p in paths if p.id != path_id]
    )


@router.get("/{path_id}/analytics", response_model=PathAnalytics)
async def path_analytics(
    path_id: UUID,
    service: PathService = Depends(get_path_service),
    user_id: Optional[UUID] = Depends(get_optional_user),
) -> PathAnalytics:
    await service.get_path_with_nodes(path_id, user_id)
    return await service.get_path_analytics(path_id)
