"""Cache maintenance endpoint."""

from uuid import UUID

import structlog
from fastapi import APIRouter, Depends

from microguide.auth import get_current_user
from microguide.dependencies import get_path_service
from microguide.services.paths import PathService

router = APIRouter()
logger = structlog.get_logger(__name__)


@router.post("/refresh", status_code=204)
async def force_refresh(
    service: PathService = Depends(get_path_service),
    user_id: UUID = Depends(get_current_user),
) -> None:
    """Drop every cached view so the next reads hit the store."""
    logger.info("cache_refresh_requested", user_id=str(user_id))
    await service.force_refresh()
