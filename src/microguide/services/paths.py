"""Learning path persistence, retrieval and the delete protocol."""

from __future__ import annotations

import asyncio
from collections import Counter
from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

import structlog
from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from microguide.config import get_settings
from microguide.errors import NotAuthorized, NotFound, UpstreamFailure, ValidationFailure
from microguide.models import LearningNode, LearningPath, ProgressStatus, UserProgress
from microguide.schemas.paths import (
    NodeDraft,
    PathAnalytics,
    PathCreate,
    PathDocument,
    PathFilters,
    PathWithNodes,
    PopularNode,
)
from microguide.services.cache import QueryCache, RedisQueryCache
from microguide.services.intent import extract_keywords

logger = structlog.get_logger(__name__)

SIMILAR_PATH_LIMIT = 5
POPULAR_NODE_LIMIT = 5


class PathService:
    """Operations on stored learning paths and their nodes."""

    def __init__(
        self,
        db: AsyncSession,
        cache: QueryCache | RedisQueryCache,
        settle_delay: Optional[float] = None,
    ):
        self.db = db
        self.cache = cache
        self.settings = get_settings()
        self.settle_delay = (
            self.settings.settle_delay_seconds if settle_delay is None else settle_delay
        )

    async def save_generated_path(
        self, document: PathDocument, user_id: UUID
    ) -> LearningPath:
        """Persist a synthesized path and its nodes in one transaction."""
        return await self._insert_path(
            user_id=user_id,
            title=document.title,
            description=document.description,
            topic=document.topic,
            difficulty_level=document.difficulty_level,
            estimated_duration=document.estimated_duration,
            is_public=True,
            tags=document.tags,
            nodes=document.nodes,
            require_nodes=True,
            operation="save_generated_path",
        )

    async def create_path(self, data: PathCreate, user_id: UUID) -> LearningPath:
        """Persist a directly authored path (nodes optional)."""
        return await self._insert_path(
            user_id=user_id,
            title=data.title,
            description=data.description,
            topic=data.topic,
            difficulty_level=data.difficulty_level,
            estimated_duration=data.estimated_duration,
            is_public=data.is_public,
            tags=data.tags,
            nodes=data.nodes,
            require_nodes=False,
            operation="create_path",
        )

    async def _insert_path(
        self,
        *,
        user_id: UUID,
        title: str,
        description: str,
        topic: str,
        difficulty_level: str,
        estimated_duration: int,
        is_public: bool,
        tags: List[str],
        nodes: List[NodeDraft],
        require_nodes: bool,
        operation: str,
    ) -> LearningPath:
        if require_nodes and not nodes:
            raise ValidationFailure(
                "Cannot create path without learning modules",
                details={"operation": operation},
            )

        path = LearningPath(
            title=title,
            description=description,
            topic=topic,
            difficulty_level=difficulty_level,
            estimated_duration=estimated_duration,
            created_by=user_id,
            is_public=is_public,
            total_nodes=0,
            completion_rate=0.0,
            tags=list(tags),
        )
        try:
            self.db.add(path)
            await self.db.flush()
            self.db.add_all(self._node_rows(path.id, nodes, start=1))
            path.total_nodes = len(nodes)
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.error("path_insert_failed", operation=operation, error=str(exc))
            raise UpstreamFailure(
                f"Failed to save learning path: {exc}",
                details={"operation": operation},
            ) from exc

        await self.db.refresh(path)
        await self.cache.clear()
        logger.info(
            "path_created",
            path_id=str(path.id),
            operation=operation,
            total_nodes=path.total_nodes,
        )
        return path

    @staticmethod
    def _node_rows(
        path_id: UUID, nodes: List[NodeDraft], start: int
    ) -> List[LearningNode]:
        # Renumber so order_index stays 1-based and contiguous whatever the drafts say
        ordered = sorted(nodes, key=lambda node: node.order_index)
        return [
            LearningNode(
                path_id=path_id,
                title=node.title,
                description=node.description,
                content_type=node.content_type,
                resource_url=node.resource_url,
                estimated_duration=node.estimated_duration,
                order_index=index,
                prerequisites=[str(p) for p in node.prerequisites],
                is_required=node.is_required,
            )
            for index, node in enumerate(ordered, start)
        ]

    async def batch_create_nodes(
        self, path_id: UUID, nodes: List[NodeDraft], user_id: UUID
    ) -> List[LearningNode]:
        """Append nodes after the existing ones and restate `total_nodes`."""
        path = await self._get_owned_path(path_id, user_id)

        try:
            result = await self.db.execute(
                select(func.coalesce(func.max(LearningNode.order_index), 0)).where(
                    LearningNode.path_id == path_id
                )
            )
            last_index = result.scalar_one()
            rows = self._node_rows(path_id, nodes, start=last_index + 1)
            self.db.add_all(rows)
            await self.db.flush()

            count = await self.db.execute(
                select(func.count(LearningNode.id)).where(
                    LearningNode.path_id == path_id
                )
            )
            path.total_nodes = count.scalar_one()
            path.updated_at = datetime.utcnow()
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            raise UpstreamFailure(
                f"Failed to add learning nodes: {exc}",
                details={"operation": "batch_create_nodes", "path_id": str(path_id)},
            ) from exc

        for row in rows:
            await self.db.refresh(row)
        await self.cache.clear()
        return rows

    async def get_path_with_nodes(
        self, path_id: UUID, user_id: Optional[UUID] = None
    ) -> PathWithNodes:
        """Path header plus nodes in `order_index` order (cached).

        Private paths are only visible to their owner; anyone else gets NotFound.
        """
        key = f"path-nodes-{path_id}"
        cached = await self.cache.get(key)
        if cached is not None:
            if isinstance(cached, dict):
                cached = PathWithNodes.model_validate(cached)
            ensure_visible(cached, user_id)
            return cached

        path = await self.db.get(LearningPath, path_id)
        if path is None:
            raise NotFound("Learning path not found", details={"path_id": str(path_id)})
        ensure_visible(path, user_id)

        result = await self.db.execute(
            select(LearningNode)
            .where(LearningNode.path_id == path_id)
            .order_by(LearningNode.order_index)
        )
        nodes = list(result.scalars().all())

        payload = PathWithNodes.model_validate(
            {**_path_fields(path), "nodes": nodes}, from_attributes=True
        )
        await self.cache.set(key, payload)
        return payload

    async def list_paths(self, filters: PathFilters) -> List[LearningPath]:
        """Filtered catalog listing, read straight from the store."""
        query = select(LearningPath)
        if filters.topic:
            query = query.where(LearningPath.topic == filters.topic)
        if filters.difficulty:
            query = query.where(LearningPath.difficulty_level == filters.difficulty)
        if filters.is_public is not None:
            query = query.where(LearningPath.is_public == filters.is_public)
        if filters.created_by:
            query = query.where(LearningPath.created_by == filters.created_by)

        query = (
            query.order_by(
                LearningPath.completion_rate.desc(),
                LearningPath.total_nodes.desc(),
                LearningPath.created_at.desc(),
            )
            .offset(filters.offset)
            .limit(filters.limit)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def find_similar_paths(self, query: str, topic: str) -> List[LearningPath]:
        """Public paths on the same topic sharing a keyword with ``query``."""
        keywords = extract_keywords(query)
        stmt = select(LearningPath).where(
            LearningPath.topic == topic, LearningPath.is_public.is_(True)
        )
        if keywords:
            stmt = stmt.where(
                or_(
                    *[LearningPath.title.ilike(f"%{kw}%") for kw in keywords],
                    *[LearningPath.description.ilike(f"%{kw}%") for kw in keywords],
                )
            )
        try:
            result = await self.db.execute(stmt.limit(SIMILAR_PATH_LIMIT))
        except SQLAlchemyError as exc:
            logger.warning("similar_paths_failed", error=str(exc), topic=topic)
            return []
        return list(result.scalars().all())

    async def get_path_analytics(self, path_id: UUID) -> PathAnalytics:
        """Learner statistics for a path; zeroed on store failure."""
        try:
            result = await self.db.execute(
                select(UserProgress).where(UserProgress.path_id == path_id)
            )
            rows = list(result.scalars().all())

            nodes_result = await self.db.execute(
                select(LearningNode)
                .where(LearningNode.path_id == path_id)
                .order_by(LearningNode.order_index)
            )
            nodes = list(nodes_result.scalars().all())
        except SQLAlchemyError as exc:
            logger.warning("path_analytics_failed", error=str(exc), path_id=str(path_id))
            return PathAnalytics()

        learners = {row.user_id for row in rows}
        finishers = {row.user_id for row in rows if row.status == ProgressStatus.completed}
        popularity = Counter(row.node_id for row in rows)

        popular = sorted(nodes, key=lambda node: popularity[node.id], reverse=True)
        return PathAnalytics(
            total_users=len(learners),
            completion_rate=(len(finishers) / len(learners) * 100) if learners else 0.0,
            average_time_spent=(
                sum(row.time_spent or 0 for row in rows) / len(rows) if rows else 0.0
            ),
            popular_nodes=[
                PopularNode(
                    id=node.id,
                    title=node.title,
                    order_index=node.order_index,
                    popularity=popularity[node.id],
                )
                for node in popular[:POPULAR_NODE_LIMIT]
            ],
        )

    async def delete_path(self, path_id: UUID, user_id: UUID) -> None:
        """Owner-only delete.

        Resolves to "delete accepted": the whole cache is dropped and the call
        waits ``settle_delay`` so replicas catch up before callers re-read.
        Callers should still verify with an independent re-read.
        """
        log = logger.bind(path_id=str(path_id), user_id=str(user_id))
        path = await self._get_owned_path(path_id, user_id)
        log.info("path_delete_started", title=path.title)

        try:
            await self.db.execute(delete(LearningPath).where(LearningPath.id == path_id))
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            log.error("path_delete_failed", error=str(exc))
            raise UpstreamFailure(
                f"Failed to delete learning path: {exc}",
                details={"operation": "delete_path", "path_id": str(path_id)},
            ) from exc

        await self.cache.clear()
        if self.settle_delay > 0:
            await asyncio.sleep(self.settle_delay)
        log.info("path_delete_accepted")

    async def force_refresh(self) -> None:
        """Drop every cached view and wait for the store to settle."""
        await self.cache.clear()
        if self.settle_delay > 0:
            await asyncio.sleep(self.settle_delay)
        logger.info("cache_force_refreshed")

    async def health_check(self) -> bool:
        """Probe the store with a one-row read."""
        try:
            await self.db.execute(select(LearningPath.id).limit(1))
        except SQLAlchemyError as exc:
            logger.error("health_check_failed", error=str(exc))
            return False
        return True

    async def _get_owned_path(self, path_id: UUID, user_id: UUID) -> LearningPath:
        try:
            result = await self.db.execute(
                select(LearningPath).where(LearningPath.id == path_id)
            )
            path = result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise UpstreamFailure(
                f"Failed to load learning path: {exc}",
                details={"operation": "get_path", "path_id": str(path_id)},
            ) from exc

        if path is None:
            raise NotFound(
                "Learning path not found or already deleted",
                details={"path_id": str(path_id)},
            )
        if path.created_by != user_id:
            raise NotAuthorized(
                "You can only modify paths you created",
                details={"path_id": str(path_id)},
            )
        return path


def ensure_visible(path: Any, user_id: Optional[UUID]) -> None:
    """Raise NotFound unless the path is public or owned by ``user_id``."""
    if not path.is_public and path.created_by != user_id:
        raise NotFound("Learning path not found", details={"path_id": str(path.id)})


def _path_fields(path: LearningPath) -> dict[str, Any]:
    return {
        column.name: getattr(path, column.name)
        for column in LearningPath.__table__.columns
    }
