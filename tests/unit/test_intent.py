from unittest.mock import AsyncMock

import httpx
import pytest

from microguide.clients import completion as completion_module
from microguide.clients.completion import CompletionClient, QueryEnhancement
from microguide.errors import MalformedUpstreamResponse, UpstreamFailure
from microguide.services.intent import QueryIntentParser, extract_keywords, map_topic_from_ai


class FakeCompletion:
    def __init__(self, result=None, error=None):
        self.is_configured = True
        self.enhance_search_query = AsyncMock(return_value=result, side_effect=error)


def test_advanced_machine_learning_deep_dive():
    intent = QueryIntentParser().parse("advanced machine learning deep dive")

    assert intent.topic == "ai-ml"
    assert intent.difficulty == "advanced"
    assert intent.estimated_duration == 50
    assert intent.confidence == pytest.approx(0.9)


@pytest.mark.parametrize(
    "query",
    [
        "",
        "learn",
        "advanced expert intermediate beginner python machine learning",
        "quick crash course comprehensive deep master",
        "x" * 400,
    ],
)
def test_confidence_is_bounded(query):
    intent = QueryIntentParser().parse(query)
    assert 0.0 <= intent.confidence <= 1.0


def test_unknown_query_keeps_defaults():
    intent = QueryIntentParser().parse("knitting scarves")

    assert intent.topic == ""
    assert intent.difficulty == "beginner"
    assert intent.estimated_duration == 10
    assert intent.confidence == 0.5
    assert intent.keywords == ["knitting", "scarves"]


def test_first_synonym_wins():
    # "react" is listed before "python"
    intent = QueryIntentParser().parse("react and python dashboards")
    assert intent.topic == "web-development"


def test_difficulty_priority_prefers_advanced():
    intent = QueryIntentParser().parse("beginner to expert sql")
    assert intent.difficulty == "advanced"


def test_learning_type_markers():
    parser = QueryIntentParser()
    assert parser.parse("build a hands-on project").learning_type == "practical"
    assert parser.parse("understand the theory of music").learning_type == "theoretical"
    assert parser.parse("spanish").learning_type == "mixed"


def test_extract_keywords_drops_stop_words_and_short_tokens():
    assert extract_keywords("Learn how to bake a sourdough loaf") == [
        "bake",
        "sourdough",
        "loaf",
    ]


def test_map_topic_from_ai():
    assert map_topic_from_ai("Frontend Engineering") == "web-development"
    assert map_topic_from_ai("Intro to Artificial Intelligence") == "ai-ml"
    assert map_topic_from_ai("Pottery") == ""
    assert map_topic_from_ai(None) == ""


@pytest.mark.asyncio
async def test_parse_enhanced_overrides_with_completion():
    completion = FakeCompletion(
        QueryEnhancement(
            enhanced_query="data science with pandas",
            suggested_topics=["Data Science", "Statistics"],
            difficulty="intermediate",
            estimated_duration=24,
        )
    )
    intent = await QueryIntentParser(completion).parse_enhanced("pandas tables")

    assert intent.topic == "data-science"
    assert intent.difficulty == "intermediate"
    assert intent.estimated_duration == 24
    assert intent.confidence >= 0.8
    completion.enhance_search_query.assert_awaited_once_with("pandas tables")


@pytest.mark.asyncio
async def test_parse_enhanced_keeps_heuristic_topic_when_label_unknown():
    completion = FakeCompletion(
        QueryEnhancement(enhanced_query="q", suggested_topics=["Gardening"])
    )
    intent = await QueryIntentParser(completion).parse_enhanced("react hooks")
    assert intent.topic == "web-development"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        UpstreamFailure("timeout"),
        MalformedUpstreamResponse("not json"),
        AttributeError("'list' object has no attribute 'get'"),
    ],
)
async def test_parse_enhanced_falls_back_on_completion_failure(error):
    parser = QueryIntentParser(FakeCompletion(error=error))

    intent = await parser.parse_enhanced("advanced machine learning deep dive")

    assert intent == parser.parse("advanced machine learning deep dive")


@pytest.mark.asyncio
async def test_parse_enhanced_without_configured_completion():
    completion = FakeCompletion()
    completion.is_configured = False

    intent = await QueryIntentParser(completion).parse_enhanced("python")

    assert intent.topic == "data-science"
    completion.enhance_search_query.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        ["not", "an", "object"],
        {"choices": ["plain text"]},
        {"choices": [{"message": "plain text"}]},
    ],
)
async def test_parse_enhanced_survives_odd_completion_bodies(monkeypatch, body):
    real_client = httpx.AsyncClient

    def client_factory(**kwargs):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json=body))
        return real_client(transport=transport, **kwargs)

    monkeypatch.setattr(completion_module.httpx, "AsyncClient", client_factory)
    parser = QueryIntentParser(CompletionClient(api_key="sk-test"))

    intent = await parser.parse_enhanced("advanced machine learning deep dive")

    assert intent == parser.parse("advanced machine learning deep dive")
