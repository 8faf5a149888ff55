"""Heuristic query-intent parsing with optional completion-service enhancement."""

from typing import List, Optional, Tuple

import structlog

from microguide.clients.completion import CompletionClient
from microguide.schemas.search import QueryIntent

logger = structlog.get_logger(__name__)

# Ordered: the first phrase contained in the query wins.
TOPIC_SYNONYMS: Tuple[Tuple[str, str], ...] = (
    ("web development", "web-development"),
    ("frontend", "web-development"),
    ("backend", "web-development"),
    ("react", "web-development"),
    ("javascript", "web-development"),
    ("python", "data-science"),
    ("machine learning", "ai-ml"),
    ("ai", "ai-ml"),
    ("blockchain", "web3"),
    ("crypto", "web3"),
    ("ui/ux", "design"),
    ("design", "design"),
    ("marketing", "business"),
    ("entrepreneurship", "business"),
)

# Phrases the completion service tends to use for our public topics.
AI_TOPIC_PHRASES: Tuple[Tuple[str, str], ...] = (
    ("web development", "web-development"),
    ("frontend", "web-development"),
    ("backend", "web-development"),
    ("data science", "data-science"),
    ("machine learning", "ai-ml"),
    ("artificial intelligence", "ai-ml"),
    ("blockchain", "web3"),
    ("cryptocurrency", "web3"),
    ("design", "design"),
    ("ui/ux", "design"),
    ("business", "business"),
    ("marketing", "business"),
)

# Highest priority first.
DIFFICULTY_MARKERS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("advanced", ("advanced", "expert")),
    ("intermediate", ("intermediate", "medium")),
    ("beginner", ("beginner", "basic", "intro")),
)

DURATION_MARKERS: Tuple[Tuple[int, Tuple[str, ...]], ...] = (
    (5, ("quick", "crash course")),
    (30, ("comprehensive", "complete")),
    (50, ("deep", "master")),
)
DEFAULT_DURATION = 10

PRACTICAL_MARKERS = ("hands-on", "project", "build")
THEORETICAL_MARKERS = ("theory", "concept", "understand")

STOP_WORDS = frozenset(
    ["learn", "how", "to", "the", "a", "an", "and", "or", "but", "in", "on", "at", "for", "with"]
)

TOPIC_MATCH_CONFIDENCE = 0.8
BASE_CONFIDENCE = 0.5
DIFFICULTY_BONUS = 0.1
ENHANCED_CONFIDENCE = 0.8


def extract_keywords(query: str) -> List[str]:
    """Lower-cased tokens longer than two characters, minus stop words."""
    return [
        word
        for word in query.lower().split()
        if len(word) > 2 and word not in STOP_WORDS
    ]


def map_topic_from_ai(label: Optional[str]) -> str:
    """Map a free-form topic label onto the public taxonomy ("" if unknown)."""
    if not label:
        return ""
    lowered = label.lower()
    for phrase, topic in AI_TOPIC_PHRASES:
        if phrase in lowered:
            return topic
    return ""


class QueryIntentParser:
    """Turns free text into a `QueryIntent`."""

    def __init__(self, completion: Optional[CompletionClient] = None):
        self.completion = completion

    def parse(self, query: str) -> QueryIntent:
        """Pure heuristic parse; never raises for string input."""
        lowered = query.lower()

        topic = ""
        confidence = BASE_CONFIDENCE
        for phrase, mapped in TOPIC_SYNONYMS:
            if phrase in lowered:
                topic = mapped
                confidence = TOPIC_MATCH_CONFIDENCE
                break

        difficulty = "beginner"
        for level, markers in DIFFICULTY_MARKERS:
            if any(marker in lowered for marker in markers):
                difficulty = level
                confidence += DIFFICULTY_BONUS
                break

        estimated_duration = DEFAULT_DURATION
        for hours, markers in DURATION_MARKERS:
            if any(marker in lowered for marker in markers):
                estimated_duration = hours
                break

        if any(marker in lowered for marker in PRACTICAL_MARKERS):
            learning_type = "practical"
        elif any(marker in lowered for marker in THEORETICAL_MARKERS):
            learning_type = "theoretical"
        else:
            learning_type = "mixed"

        return QueryIntent(
            topic=topic,
            difficulty=difficulty,
            keywords=extract_keywords(query),
            estimated_duration=estimated_duration,
            confidence=min(max(confidence, 0.0), 1.0),
            learning_type=learning_type,
        )

    async def parse_enhanced(self, query: str) -> QueryIntent:
        """Heuristic parse, overridden by the completion service when it answers.

        Any completion failure keeps the heuristic result.
        """
        intent = self.parse(query)
        if self.completion is None or not self.completion.is_configured:
            return intent

        try:
            enhanced = await self.completion.enhance_search_query(query)
        except Exception as exc:
            logger.warning("query_enhancement_failed", error=str(exc), query=query)
            return intent

        suggested = enhanced.suggested_topics[0] if enhanced.suggested_topics else None
        return intent.model_copy(
            update={
                "topic": map_topic_from_ai(suggested) or intent.topic,
                "difficulty": enhanced.difficulty,
                "estimated_duration": enhanced.estimated_duration,
                "confidence": min(max(intent.confidence, ENHANCED_CONFIDENCE), 1.0),
            }
        )
