import json

import httpx
import pytest

from microguide.clients import completion as completion_module
from microguide.clients.completion import CompletionClient
from microguide.errors import MalformedUpstreamResponse, UpstreamFailure
from microguide.schemas.paths import GeneratePathRequest

RealAsyncClient = httpx.AsyncClient


def chat_reply(content: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


@pytest.fixture
def mock_transport(monkeypatch):
    """Route the client's httpx calls to a handler set by the test."""
    state = {"handler": None, "requests": []}

    def dispatch(request: httpx.Request) -> httpx.Response:
        state["requests"].append(request)
        return state["handler"](request)

    def client_factory(**kwargs):
        return RealAsyncClient(transport=httpx.MockTransport(dispatch), **kwargs)

    monkeypatch.setattr(completion_module.httpx, "AsyncClient", client_factory)
    return state


@pytest.fixture
def client():
    return CompletionClient(api_key="sk-test", base_url="https://completion.test/v1/")


@pytest.mark.asyncio
async def test_enhance_search_query_parses_embedded_json(client, mock_transport):
    reply = 'Sure! {"enhancedQuery": "python for data analysis", ' \
        '"suggestedTopics": ["Data Science"], "difficulty": "Intermediate", ' \
        '"estimatedDuration": 25} Hope this helps.'
    mock_transport["handler"] = lambda request: httpx.Response(200, json=chat_reply(reply))

    enhancement = await client.enhance_search_query("python data")

    assert enhancement.enhanced_query == "python for data analysis"
    assert enhancement.suggested_topics == ["Data Science"]
    assert enhancement.difficulty == "intermediate"
    assert enhancement.estimated_duration == 25

    request = mock_transport["requests"][0]
    assert str(request.url) == "https://completion.test/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer sk-test"
    body = json.loads(request.content)
    assert body["messages"][1]["content"].startswith('Analyze this learning query: "python data"')


@pytest.mark.asyncio
async def test_http_error_becomes_upstream_failure(client, mock_transport):
    mock_transport["handler"] = lambda request: httpx.Response(500, json={"error": "boom"})

    with pytest.raises(UpstreamFailure) as excinfo:
        await client.enhance_search_query("python")

    assert not isinstance(excinfo.value, MalformedUpstreamResponse)
    assert excinfo.value.details["operation"] == "complete_json"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "content",
    [
        "I cannot help with that.",
        '{"enhancedQuery": "x", "difficulty": "wizard"}',
        '{"enhancedQuery": broken',
    ],
)
async def test_unusable_reply_is_malformed(client, mock_transport, content):
    mock_transport["handler"] = lambda request: httpx.Response(200, json=chat_reply(content))

    with pytest.raises(MalformedUpstreamResponse):
        await client.enhance_search_query("python")


@pytest.mark.asyncio
async def test_missing_choices_is_malformed(client, mock_transport):
    mock_transport["handler"] = lambda request: httpx.Response(200, json={"choices": []})

    with pytest.raises(MalformedUpstreamResponse):
        await client.enhance_search_query("python")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        ["not", "an", "object"],
        {"choices": ["plain text"]},
        {"choices": [{"message": None}]},
        {"choices": [{"message": ["content"]}]},
    ],
)
async def test_odd_reply_shapes_are_malformed(client, mock_transport, body):
    mock_transport["handler"] = lambda request: httpx.Response(200, json=body)

    with pytest.raises(MalformedUpstreamResponse):
        await client.enhance_search_query("python")


@pytest.mark.asyncio
async def test_generate_learning_path_validates_plan(client, mock_transport):
    plan = {
        "title": "Beekeeping 101",
        "description": "Start a hive",
        "topic": "business",
        "tags": ["bees"],
        "modules": [
            {
                "title": "Hive basics",
                "duration": 3,
                "resources": [{"title": "Intro", "type": "video", "url": "https://v.test"}],
            }
        ],
    }
    mock_transport["handler"] = lambda request: httpx.Response(
        200, json=chat_reply(json.dumps(plan))
    )

    draft = await client.generate_learning_path(
        GeneratePathRequest(query="beekeeping", goals=["harvest honey"]), 12, "beginner"
    )

    assert draft.title == "Beekeeping 101"
    assert draft.modules[0].resources[0].type == "video"
    prompt = json.loads(mock_transport["requests"][0].content)["messages"][1]["content"]
    assert "Target Duration: 12 hours" in prompt
    assert "harvest honey" in prompt


@pytest.mark.asyncio
async def test_plan_without_modules_is_malformed(client, mock_transport):
    plan = {"title": "Empty", "description": "", "modules": []}
    mock_transport["handler"] = lambda request: httpx.Response(
        200, json=chat_reply(json.dumps(plan))
    )

    with pytest.raises(MalformedUpstreamResponse):
        await client.generate_learning_path(GeneratePathRequest(query="x"), 5, "beginner")


@pytest.mark.asyncio
async def test_unconfigured_client_refuses():
    client = CompletionClient(api_key="")

    assert client.is_configured is False
    with pytest.raises(UpstreamFailure):
        await client.complete_json("system", "prompt")
