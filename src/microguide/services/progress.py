"""Per-user progress tracking on learning nodes."""

from datetime import datetime
from typing import List, Union
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from microguide.errors import NotFound, UpstreamFailure
from microguide.models import LearningNode, LearningPath, ProgressStatus, UserProgress
from microguide.schemas.progress import ProgressUpdate
from microguide.schemas.progress import UserProgress as UserProgressOut
from microguide.services.cache import QueryCache, RedisQueryCache
from microguide.services.paths import ensure_visible

logger = structlog.get_logger(__name__)


class ProgressService:
    def __init__(self, db: AsyncSession, cache: Union[QueryCache, RedisQueryCache]):
        self.db = db
        self.cache = cache

    async def update_progress(
        self, user_id: UUID, update: ProgressUpdate
    ) -> UserProgress:
        """Upsert the (user, node) record and evict the user's cached progress."""
        path = await self.db.get(LearningPath, update.path_id)
        if path is None:
            raise NotFound(
                "Learning path not found", details={"path_id": str(update.path_id)}
            )
        ensure_visible(path, user_id)

        node = await self.db.get(LearningNode, update.node_id)
        if node is None or node.path_id != update.path_id:
            raise NotFound(
                "Learning node not found on this path",
                details={"path_id": str(update.path_id), "node_id": str(update.node_id)},
            )

        now = datetime.utcnow()
        try:
            result = await self.db.execute(
                select(UserProgress).where(
                    UserProgress.user_id == user_id,
                    UserProgress.node_id == update.node_id,
                )
            )
            record = result.scalar_one_or_none()
            if record is None:
                record = UserProgress(
                    user_id=user_id,
                    path_id=update.path_id,
                    node_id=update.node_id,
                    started_at=now,
                )
                self.db.add(record)

            record.status = update.status
            record.progress_percentage = update.progress_percentage
            record.time_spent = update.time_spent
            record.notes = update.notes
            record.updated_at = now
            if update.status == ProgressStatus.completed:
                record.completed_at = now

            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            raise UpstreamFailure(
                f"Failed to update progress: {exc}",
                details={"operation": "update_progress", "node_id": str(update.node_id)},
            ) from exc

        await self.db.refresh(record)
        await self.cache.evict_pattern(f"progress-{user_id}")
        logger.info(
            "progress_updated",
            user_id=str(user_id),
            node_id=str(update.node_id),
            status=update.status.value,
        )
        return record

    async def get_user_progress(
        self, user_id: UUID, path_id: UUID
    ) -> List[UserProgressOut]:
        key = f"progress-{user_id}-{path_id}"
        cached = await self.cache.get(key)
        if cached is not None:
            return [UserProgressOut.model_validate(item) for item in cached]

        result = await self.db.execute(
            select(UserProgress)
            .join(LearningNode, UserProgress.node_id == LearningNode.id)
            .where(UserProgress.user_id == user_id, UserProgress.path_id == path_id)
            .order_by(LearningNode.order_index)
        )
        records = [UserProgressOut.model_validate(row) for row in result.scalars().all()]
        await self.cache.set(key, records)
        return records
