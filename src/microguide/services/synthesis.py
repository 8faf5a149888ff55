"""Curriculum synthesis: free-text request to an ordered path document.

Known topics are built from curated templates; anything else gets a generic
four-step sequence pointing at search-engine results for the extracted topic.
`generate` never raises: internal failures degrade to a minimal three-node
path.
"""

import math
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
from urllib.parse import quote_plus

import structlog

from microguide.clients.completion import CompletionClient, CompletionPathDraft
from microguide.config import get_settings
from microguide.errors import UpstreamFailure
from microguide.schemas.paths import GeneratePathRequest, NodeDraft, PathDocument
from microguide.services.intent import map_topic_from_ai
from microguide.services.topic_templates import (
    TOPIC_KEYWORDS,
    TOPIC_TEMPLATES,
    TopicModule,
    TopicTemplate,
    map_category_to_topic,
)

logger = structlog.get_logger(__name__)

DIRECT_MATCH_CONFIDENCE = 0.9
KEYWORD_MATCH_CONFIDENCE = 0.8
NO_MATCH_CONFIDENCE = 0.3
MATCH_THRESHOLD = 0.7

MODULES_BY_DIFFICULTY = {"beginner": 3, "intermediate": 5}
PRACTICE_SHARE = 0.3
ASSESSMENT_SHARE = 0.2

CUSTOM_DEFAULT_HOURS = 20
FALLBACK_DEFAULT_HOURS = 15

_LEADING_VERBS = re.compile(
    r"^(learn|how to|guide to|tutorial|course|master|study)\s*", re.IGNORECASE
)
_TRAILING_QUALIFIERS = re.compile(
    r"\s+(basics?|fundamentals?|introduction|beginner|advanced)$", re.IGNORECASE
)
_TAG_SKIP_WORDS = {"learn", "how", "guide", "tutorial"}


@dataclass
class TopicMatch:
    template: Optional[TopicTemplate]
    key: Optional[str]
    confidence: float
    category: str


def extract_main_topic(query: str) -> str:
    """Strip leading verbs and trailing level qualifiers from a query."""
    topic = _LEADING_VERBS.sub("", query.strip())
    topic = _TRAILING_QUALIFIERS.sub("", topic)
    return topic.strip() or "Topic"


def capitalize_words(text: str) -> str:
    return " ".join(word[:1].upper() + word[1:].lower() for word in text.split(" "))


def select_modules(modules: List[TopicModule], difficulty: str) -> List[TopicModule]:
    """Contiguous module prefix sized by difficulty; advanced takes everything."""
    limit = MODULES_BY_DIFFICULTY.get(difficulty)
    if limit is None:
        return list(modules)
    return list(modules[:limit])


def _bullets(items: List[str]) -> str:
    return "\n".join(f"- {item}" for item in items)


class PathGenerator:
    """Builds `PathDocument`s from templates, the completion service or heuristics."""

    def __init__(
        self,
        templates: Optional[Dict[str, TopicTemplate]] = None,
        keywords: Tuple[Tuple[str, Tuple[str, ...]], ...] = TOPIC_KEYWORDS,
        completion: Optional[CompletionClient] = None,
        use_completion: Optional[bool] = None,
    ):
        self.templates = templates if templates is not None else TOPIC_TEMPLATES
        self.keywords = keywords
        self.completion = completion
        if use_completion is None:
            use_completion = get_settings().use_completion_for_generation
        self.use_completion = use_completion

    def detect_topic(self, query: str) -> TopicMatch:
        lowered = query.lower()

        for key, template in self.templates.items():
            if key in lowered:
                return TopicMatch(
                    template, key, DIRECT_MATCH_CONFIDENCE, template.category
                )

        for key, phrases in self.keywords:
            template = self.templates.get(key)
            if template is None:
                continue
            if any(phrase in lowered for phrase in phrases):
                return TopicMatch(
                    template, key, KEYWORD_MATCH_CONFIDENCE, template.category
                )

        return TopicMatch(None, None, NO_MATCH_CONFIDENCE, "general")

    async def generate(self, request: GeneratePathRequest) -> PathDocument:
        """Synthesize a curriculum. Never raises past this boundary."""
        try:
            match = self.detect_topic(request.query)
            if match.template is not None and match.confidence >= MATCH_THRESHOLD:
                document = self.build_structured_path(match.template, match.key, request)
            else:
                document = await self.build_custom_path(request, match.category)
            if not document.nodes:
                raise ValueError("synthesized path has no nodes")
            return document
        except Exception:
            logger.exception("path_generation_failed", query=request.query)
            return self.build_fallback_path(request)

    def build_structured_path(
        self, template: TopicTemplate, key: str, request: GeneratePathRequest
    ) -> PathDocument:
        difficulty = request.difficulty or "beginner"
        duration = request.duration or template.estimated_hours
        modules = select_modules(template.modules, difficulty)
        module_share = math.ceil(duration / len(modules)) if modules else duration

        nodes: List[NodeDraft] = []
        for module in modules:
            for resource in module.resources:
                nodes.append(
                    NodeDraft(
                        title=resource.title,
                        description=(
                            f"{resource.description}\n\n"
                            f"**What you'll learn:**\n{_bullets(module.concepts[:3])}\n\n"
                            f"**Skills you'll develop:**\n{_bullets(module.skills[:3])}\n\n"
                            f"Platform: {resource.platform} | "
                            f"Difficulty: {resource.difficulty}"
                        ),
                        content_type=resource.type,
                        resource_url=resource.url,
                        estimated_duration=resource.duration,
                        order_index=len(nodes) + 1,
                    )
                )

            if module.exercises:
                nodes.append(
                    NodeDraft(
                        title=f"{module.title} - Hands-On Practice",
                        description=(
                            "Apply what you've learned through practical exercises:\n\n"
                            f"{_bullets(module.exercises)}"
                        ),
                        content_type="exercise",
                        estimated_duration=math.ceil(module_share * PRACTICE_SHARE),
                        order_index=len(nodes) + 1,
                    )
                )

            if module.assessments:
                nodes.append(
                    NodeDraft(
                        title=f"{module.title} - Knowledge Assessment",
                        description=(
                            "Test your understanding and track your progress:\n\n"
                            f"{_bullets(module.assessments)}"
                        ),
                        content_type="exercise",
                        estimated_duration=math.ceil(module_share * ASSESSMENT_SHARE),
                        order_index=len(nodes) + 1,
                        is_required=False,
                    )
                )

        return PathDocument(
            title=self._structured_title(key, difficulty),
            description=self._structured_description(template, difficulty, duration),
            topic=map_category_to_topic(template.category),
            difficulty_level=difficulty,
            estimated_duration=duration,
            tags=self._structured_tags(key, template, request.query),
            nodes=nodes,
        )

    async def build_custom_path(
        self, request: GeneratePathRequest, category: str
    ) -> PathDocument:
        difficulty = request.difficulty or "beginner"
        duration = request.duration or CUSTOM_DEFAULT_HOURS

        if self.use_completion and self.completion and self.completion.is_configured:
            try:
                draft = await self.completion.generate_learning_path(
                    request, duration, difficulty
                )
                document = self._document_from_draft(draft, difficulty, duration)
                if document.nodes:
                    return document
                logger.warning("completion_path_empty", query=request.query)
            except UpstreamFailure as exc:
                logger.warning(
                    "completion_path_failed", error=str(exc), query=request.query
                )

        main_topic = extract_main_topic(request.query)
        steps = self._generic_steps(main_topic, difficulty)
        share = math.ceil(duration / len(steps))
        nodes = [
            NodeDraft(
                title=title,
                description=description,
                content_type=content_type,
                resource_url=url,
                estimated_duration=share,
                order_index=index,
            )
            for index, (title, description, content_type, url) in enumerate(steps, 1)
        ]

        return PathDocument(
            title=f"{self._custom_prefix(difficulty)} {capitalize_words(main_topic)}",
            description=(
                f"A structured {duration}-hour {difficulty}-level learning path "
                f"for {main_topic}.\n\n"
                "**What you'll get:**\n"
                + _bullets(
                    [
                        "Curated learning resources",
                        "Hands-on practice exercises",
                        "Progressive skill development",
                    ]
                )
            ),
            topic=map_category_to_topic(category),
            difficulty_level=difficulty,
            estimated_duration=duration,
            tags=self._custom_tags(request.query, category),
            nodes=nodes,
        )

    def build_fallback_path(self, request: GeneratePathRequest) -> PathDocument:
        """Minimal three-node path used when synthesis itself fails."""
        difficulty = request.difficulty or "beginner"
        duration = request.duration or FALLBACK_DEFAULT_HOURS
        main_topic = extract_main_topic(request.query)
        name = capitalize_words(main_topic)
        search = quote_plus(main_topic.lower())

        return PathDocument(
            title=f"Learn {name}",
            description=(
                f"A {duration}-hour course to learn {main_topic} through "
                "structured study and practical application."
            ),
            topic="business",
            difficulty_level=difficulty,
            estimated_duration=duration,
            tags=[main_topic.lower(), "custom", difficulty, "resources"],
            nodes=[
                NodeDraft(
                    title=f"{name} Fundamentals",
                    description=f"Core concepts, terminology and principles of {main_topic}.",
                    content_type="article",
                    resource_url=(
                        f"https://www.google.com/search?q={search}+fundamentals+guide+tutorial"
                    ),
                    estimated_duration=math.ceil(duration * 0.4),
                    order_index=1,
                ),
                NodeDraft(
                    title=f"{name} Video Learning",
                    description="Video instruction and demonstrations.",
                    content_type="video",
                    resource_url=(
                        "https://www.youtube.com/results?search_query="
                        f"{search}+tutorial+{difficulty}"
                    ),
                    estimated_duration=math.ceil(duration * 0.4),
                    order_index=2,
                ),
                NodeDraft(
                    title=f"{name} Practical Application",
                    description="Hands-on exercises and small real-world projects.",
                    content_type="exercise",
                    estimated_duration=math.floor(duration * 0.2),
                    order_index=3,
                ),
            ],
        )

    def _document_from_draft(
        self, draft: CompletionPathDraft, difficulty: str, duration: int
    ) -> PathDocument:
        nodes: List[NodeDraft] = []
        for module in draft.modules:
            if not module.resources:
                continue
            per_resource = max(1, math.ceil(module.duration * 60 / len(module.resources)))
            for resource in module.resources:
                nodes.append(
                    NodeDraft(
                        title=resource.title,
                        description=f"{resource.description}\n\nModule: {module.title}",
                        content_type=resource.type,
                        resource_url=resource.url,
                        estimated_duration=per_resource,
                        order_index=len(nodes) + 1,
                    )
                )
        return PathDocument(
            title=draft.title,
            description=draft.description,
            topic=map_topic_from_ai(draft.topic) or draft.topic or "business",
            difficulty_level=difficulty,
            estimated_duration=duration,
            tags=list(dict.fromkeys([*draft.tags, "ai-generated"]))[:8],
            nodes=nodes,
        )

    def _generic_steps(
        self, main_topic: str, difficulty: str
    ) -> List[Tuple[str, str, str, Optional[str]]]:
        name = capitalize_words(main_topic)
        search = quote_plus(main_topic.lower())
        return [
            (
                f"{name} Fundamentals",
                f"Core concepts and principles of {main_topic}: terminology, "
                "common practices and the essential tools.",
                "article",
                f"https://www.google.com/search?q={search}+fundamentals+guide+tutorial",
            ),
            (
                f"{name} Video Tutorial",
                f"Learn {main_topic} through step-by-step video instruction. "
                "Take notes and practice along.",
                "video",
                f"https://www.youtube.com/results?search_query={search}+tutorial+{difficulty}",
            ),
            (
                f"{name} Hands-On Practice",
                "Guided exercises, mini-projects and skill-building challenges. "
                "Start simple and increase complexity gradually.",
                "exercise",
                None,
            ),
            (
                f"{name} Advanced Resources",
                "Best practices, advanced techniques and professional workflows "
                "to take your skills further.",
                "course",
                f"https://www.coursera.org/search?query={search}",
            ),
        ]

    @staticmethod
    def _structured_title(key: str, difficulty: str) -> str:
        prefixes = {
            "beginner": "Complete Beginner's Guide to",
            "intermediate": "Intermediate",
            "advanced": "Advanced Mastery of",
        }
        return f"{prefixes[difficulty]} {capitalize_words(key)}"

    @staticmethod
    def _custom_prefix(difficulty: str) -> str:
        return {"beginner": "Learn", "intermediate": "Master", "advanced": "Advanced"}[
            difficulty
        ]

    @staticmethod
    def _structured_description(
        template: TopicTemplate, difficulty: str, duration: int
    ) -> str:
        return (
            f"A {duration}-hour {difficulty}-level course with curated resources "
            "and practical exercises.\n\n"
            f"**What you'll achieve:**\n{_bullets(template.outcomes[:3])}\n\n"
            f"Learning approach: {template.learning_type}, with hands-on practice "
            "and assessments after each module."
        )

    @staticmethod
    def _query_tags(query: str) -> List[str]:
        return [
            word
            for word in query.lower().split(" ")
            if len(word) > 3 and word not in _TAG_SKIP_WORDS
        ]

    def _structured_tags(self, key: str, template: TopicTemplate, query: str) -> List[str]:
        tags = [
            key,
            template.category,
            template.subcategory,
            template.learning_type,
            "structured",
            "resources",
            "practical",
            *self._query_tags(query),
        ]
        return list(dict.fromkeys(tags))[:8]

    def _custom_tags(self, query: str, category: str) -> List[str]:
        tags = [
            category,
            "custom",
            "structured",
            "resources",
            extract_main_topic(query).lower(),
            *self._query_tags(query),
        ]
        return list(dict.fromkeys(tags))[:8]
