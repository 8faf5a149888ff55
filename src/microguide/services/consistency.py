"""Caller-side view of the path catalog with optimistic delete and verification.

A `PathService.delete_path` call that resolves only means the delete was
accepted. The view drops the path from its own listing before the call
resolves, then re-reads the store after a delay. If the path is still
listed, the outcome is `DeletionVerificationFailed` and the view is
resynchronized from what the store returned.
"""

import asyncio
from typing import Annotated, Awaitable, Callable, Dict, List, Literal, Optional, Union
from uuid import UUID

import structlog
from pydantic import BaseModel, Field

from microguide.config import get_settings
from microguide.schemas.paths import LearningPath, PathFilters

logger = structlog.get_logger(__name__)

DeleteFn = Callable[[UUID, UUID], Awaitable[None]]
ListFn = Callable[[PathFilters], Awaitable[List]]
RefreshFn = Callable[[], Awaitable[None]]


class DeletionVerified(BaseModel):
    kind: Literal["verified"] = "verified"
    path_id: UUID


class DeletionVerificationFailed(BaseModel):
    kind: Literal["verification_failed"] = "verification_failed"
    path_id: UUID
    message: str


DeletionOutcome = Annotated[
    Union[DeletionVerified, DeletionVerificationFailed], Field(discriminator="kind")
]


class PathCatalogView:
    """Locally held listing of paths for one filter set."""

    def __init__(
        self,
        list_paths: ListFn,
        delete_path: DeleteFn,
        force_refresh: RefreshFn,
        filters: Optional[PathFilters] = None,
        verify_delay: Optional[float] = None,
    ):
        self._list_paths = list_paths
        self._delete_path = delete_path
        self._force_refresh = force_refresh
        self.filters = filters or PathFilters()
        self.verify_delay = (
            get_settings().verify_delay_seconds if verify_delay is None else verify_delay
        )
        self._paths: Dict[UUID, LearningPath] = {}

    @property
    def paths(self) -> List[LearningPath]:
        return list(self._paths.values())

    def __contains__(self, path_id: UUID) -> bool:
        return path_id in self._paths

    async def refresh(self) -> List[LearningPath]:
        rows = await self._list_paths(self.filters)
        self._paths = {
            row.id: LearningPath.model_validate(row) for row in rows
        }
        return self.paths

    async def delete(self, path_id: UUID, user_id: UUID) -> DeletionOutcome:
        """Optimistically remove, delete, then verify with a delayed re-read."""
        removed = self._paths.pop(path_id, None)
        log = logger.bind(path_id=str(path_id))
        log.info("optimistic_delete", was_listed=removed is not None)

        try:
            await self._delete_path(path_id, user_id)
        except Exception:
            log.warning("delete_rejected_resyncing")
            await self.refresh()
            raise

        return await self.verify_deletion(path_id)

    async def verify_deletion(self, path_id: UUID) -> DeletionOutcome:
        if self.verify_delay > 0:
            await asyncio.sleep(self.verify_delay)
        await self._force_refresh()
        rows = await self._list_paths(self.filters)

        if any(row.id == path_id for row in rows):
            logger.warning("delete_verification_failed", path_id=str(path_id))
            self._paths = {row.id: LearningPath.model_validate(row) for row in rows}
            return DeletionVerificationFailed(
                path_id=path_id,
                message="Path still present after delete; view resynchronized",
            )

        logger.info("delete_verified", path_id=str(path_id))
        return DeletionVerified(path_id=path_id)
