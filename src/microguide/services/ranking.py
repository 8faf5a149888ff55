"""Relevance ranking for catalog search results."""

from typing import Any, List, Sequence, Tuple

from microguide.schemas.search import QueryIntent

TITLE_QUERY_WEIGHT = 10.0
TITLE_KEYWORD_WEIGHT = 5.0
DESCRIPTION_QUERY_WEIGHT = 5.0
DESCRIPTION_KEYWORD_WEIGHT = 2.0
TOPIC_WEIGHT = 8.0
DIFFICULTY_WEIGHT = 3.0
DURATION_BONUS_MAX = 5.0
COMPLETION_WEIGHT = 2.0
NODE_COUNT_CAP = 3.0
TAG_KEYWORD_WEIGHT = 1.0


def score(path: Any, intent: QueryIntent, raw_query: str) -> float:
    """Score one catalog entry against a parsed query. Pure and deterministic."""
    total = 0.0
    query = raw_query.lower()
    title = (path.title or "").lower()
    description = (path.description or "").lower()

    if query in title:
        total += TITLE_QUERY_WEIGHT
    total += TITLE_KEYWORD_WEIGHT * sum(1 for kw in intent.keywords if kw in title)

    if query in description:
        total += DESCRIPTION_QUERY_WEIGHT
    total += DESCRIPTION_KEYWORD_WEIGHT * sum(
        1 for kw in intent.keywords if kw in description
    )

    if path.topic == intent.topic:
        total += TOPIC_WEIGHT
    if path.difficulty_level == intent.difficulty:
        total += DIFFICULTY_WEIGHT

    delta = abs((path.estimated_duration or 0) - intent.estimated_duration)
    total += max(0.0, DURATION_BONUS_MAX - delta / 10)

    total += COMPLETION_WEIGHT * (path.completion_rate or 0.0)
    total += min((path.total_nodes or 0) / 10, NODE_COUNT_CAP)

    tags = [tag.lower() for tag in (path.tags or [])]
    total += TAG_KEYWORD_WEIGHT * sum(
        1 for kw in intent.keywords if any(kw in tag for tag in tags)
    )
    return total


def rank(
    paths: Sequence[Any], intent: QueryIntent, raw_query: str
) -> List[Tuple[Any, float]]:
    """Sort by descending score; equal scores keep the store's order."""
    scored = [(path, score(path, intent, raw_query)) for path in paths]
    # sorted() is stable, which preserves upstream order on ties
    return sorted(scored, key=lambda item: item[1], reverse=True)
