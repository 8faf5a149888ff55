"""Learner progress endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends

from microguide.auth import get_current_user
from microguide.dependencies import get_progress_service
from microguide.schemas.progress import ProgressList, ProgressUpdate, UserProgress
from microguide.services.progress import ProgressService

router = APIRouter()


@router.post("", response_model=UserProgress)
async def update_progress(
    update: ProgressUpdate,
    service: ProgressService = Depends(get_progress_service),
    user_id: UUID = Depends(get_current_user),
) -> UserProgress:
    """Record the caller's progress on one node."""
    record = await service.update_progress(user_id, update)
    return UserProgress.model_validate(record)


@router.get("/{path_id}", response_model=ProgressList)
async def get_progress(
    path_id: UUID,
    service: ProgressService = Depends(get_progress_service),
    user_id: UUID = Depends(get_current_user),
) -> ProgressList:
    return ProgressList(items=await service.get_user_progress(user_id, path_id))
