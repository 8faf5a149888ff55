"""Catalog search: intent parsing, filtered store read, re-ranking, suggestions."""

from typing import List, Optional, Union

import structlog
from sqlalchemy import String, cast, exists, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from microguide.config import Settings, get_settings
from microguide.models import LearningNode, LearningPath
from microguide.schemas.search import QueryIntent, RankedPath, SearchFilters, SearchResult
from microguide.services import ranking
from microguide.services.cache import QueryCache, RedisQueryCache, make_key
from microguide.services.intent import TOPIC_SYNONYMS, QueryIntentParser

logger = structlog.get_logger(__name__)


def empty_result() -> SearchResult:
    """Zero-confidence result served when the store cannot be read."""
    return SearchResult(
        paths=[],
        suggested_topics=[],
        estimated_duration=10,
        difficulty="beginner",
        confidence=0.0,
    )


class SearchService:
    def __init__(
        self,
        db: AsyncSession,
        cache: Union[QueryCache, RedisQueryCache],
        parser: QueryIntentParser,
        settings: Optional[Settings] = None,
    ):
        self.db = db
        self.cache = cache
        self.parser = parser
        self.settings = settings or get_settings()

    async def search(
        self, query: str, filters: Optional[SearchFilters] = None
    ) -> SearchResult:
        """Ranked public paths for a free-text query.

        Results are cached per (query, filters) for the cache TTL. A store
        failure yields `empty_result()` instead of an error.
        """
        filters = filters or SearchFilters()
        key = make_key(
            "search",
            {"query": query, "filters": filters.model_dump(mode="json")},
        )
        cached = await self.cache.get(key)
        if cached is not None:
            if isinstance(cached, dict):
                cached = SearchResult.model_validate(cached)
            logger.debug("search_cache_hit", query=query)
            return cached

        try:
            intent = await self.parser.parse_enhanced(query)
            if filters.topic:
                intent = intent.model_copy(update={"topic": filters.topic})
            if filters.difficulty:
                intent = intent.model_copy(update={"difficulty": filters.difficulty})

            paths = await self._fetch_candidates(intent, filters)
            ranked = [
                RankedPath.model_validate(path).model_copy(
                    update={"relevance_score": relevance}
                )
                for path, relevance in ranking.rank(paths, intent, query)
            ]
            suggestions = await self.suggest_topics(intent)
        except (SQLAlchemyError, OSError) as exc:
            logger.warning("search_failed", query=query, error=str(exc))
            return empty_result()

        result = SearchResult(
            paths=ranked,
            suggested_topics=suggestions,
            estimated_duration=intent.estimated_duration,
            difficulty=intent.difficulty,
            confidence=intent.confidence,
        )
        await self.cache.set(key, result)
        logger.info(
            "search_completed",
            query=query,
            topic=intent.topic,
            results=len(ranked),
        )
        return result

    async def _fetch_candidates(
        self, intent: QueryIntent, filters: SearchFilters
    ) -> List[LearningPath]:
        has_nodes = exists().where(LearningNode.path_id == LearningPath.id)
        stmt = select(LearningPath).where(LearningPath.is_public.is_(True), has_nodes)

        if intent.topic:
            # Tags are a JSON array; its text form holds each tag in double quotes
            tagged = cast(LearningPath.tags, String).ilike(f'%"{intent.topic}"%')
            stmt = stmt.where(or_(LearningPath.topic == intent.topic, tagged))
        if intent.difficulty:
            stmt = stmt.where(LearningPath.difficulty_level == intent.difficulty)
        if filters.duration is not None:
            stmt = stmt.where(
                LearningPath.estimated_duration >= filters.duration.min,
                LearningPath.estimated_duration <= filters.duration.max,
            )
        if intent.keywords:
            stmt = stmt.where(
                or_(
                    *[LearningPath.title.ilike(f"%{kw}%") for kw in intent.keywords],
                    *[LearningPath.description.ilike(f"%{kw}%") for kw in intent.keywords],
                )
            )

        stmt = stmt.order_by(
            LearningPath.completion_rate.desc(),
            LearningPath.total_nodes.desc(),
            LearningPath.created_at.desc(),
        ).limit(self.settings.search_result_limit)

        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def suggest_topics(self, intent: QueryIntent) -> List[str]:
        """Detected topic, synonym matches, then the most-complete public topics."""
        suggestions: List[str] = []

        def add(topic: str) -> None:
            if topic and topic not in suggestions:
                suggestions.append(topic)

        add(intent.topic)
        for keyword in intent.keywords:
            for phrase, topic in TOPIC_SYNONYMS:
                if keyword in phrase or phrase.split(" ")[0] in keyword:
                    add(topic)

        try:
            result = await self.db.execute(
                select(LearningPath.topic)
                .where(LearningPath.is_public.is_(True))
                .order_by(LearningPath.completion_rate.desc())
                .limit(self.settings.popular_topic_limit)
            )
            for topic in result.scalars().all():
                add(topic)
        except SQLAlchemyError as exc:
            logger.warning("popular_topics_failed", error=str(exc))

        return suggestions[: self.settings.suggestion_limit]
