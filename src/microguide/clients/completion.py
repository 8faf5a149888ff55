"""Text-completion service client (OpenAI-compatible chat completions)."""

import json
import re
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from microguide.config import get_settings
from microguide.errors import MalformedUpstreamResponse, UpstreamFailure
from microguide.schemas.paths import ContentType, GeneratePathRequest

_JSON_BLOCK = re.compile(r"\{[\s\S]*\}")

SEARCH_SYSTEM_PROMPT = (
    "You are an expert at understanding learning queries and providing "
    "educational guidance."
)
PATH_SYSTEM_PROMPT = (
    "You are an expert learning path designer and educational content curator. "
    "Create comprehensive, structured learning paths that are practical and "
    "engaging."
)


class QueryEnhancement(BaseModel):
    """Completion-service reading of a search query."""

    model_config = ConfigDict(populate_by_name=True)

    enhanced_query: str = Field(alias="enhancedQuery")
    suggested_topics: List[str] = Field(default=[], alias="suggestedTopics")
    difficulty: str = "beginner"
    estimated_duration: int = Field(default=10, alias="estimatedDuration")

    @field_validator("difficulty")
    @classmethod
    def known_difficulty(cls, value: str) -> str:
        value = value.lower().strip()
        if value not in ("beginner", "intermediate", "advanced"):
            raise ValueError(f"unknown difficulty {value!r}")
        return value


class DraftResource(BaseModel):
    title: str
    type: ContentType
    url: Optional[str] = None
    description: str = ""


class DraftModule(BaseModel):
    title: str
    description: str = ""
    duration: float = 1.0  # hours
    resources: List[DraftResource] = []


class CompletionPathDraft(BaseModel):
    """Completion-service learning path plan."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    description: str
    topic: str = ""
    estimated_duration: int = Field(default=20, alias="estimatedDuration")
    tags: List[str] = []
    modules: List[DraftModule] = Field(min_length=1)


class CompletionClient:
    """Client for the text-completion collaborator."""

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None):
        self.settings = get_settings()
        self.api_key = api_key if api_key is not None else self.settings.completion_api_key
        self.base_url = (base_url or self.settings.completion_base).rstrip("/")
        self.timeout = httpx.Timeout(self.settings.completion_timeout)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def complete_json(
        self,
        system_prompt: str,
        prompt: str,
        *,
        model: Optional[str] = None,
        temperature: float = 0.3,
        max_tokens: int = 300,
    ) -> Dict[str, Any]:
        """Send a chat completion and decode the first JSON object in the reply."""
        if not self.is_configured:
            raise UpstreamFailure("Completion service is not configured")

        payload = {
            "model": model or self.settings.completion_model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    json=payload,
                    headers=self._get_headers(),
                )
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPError as exc:
            raise UpstreamFailure(
                f"Completion request failed: {exc}",
                details={"operation": "complete_json"},
            ) from exc
        except ValueError as exc:
            raise MalformedUpstreamResponse(
                "Completion service returned a non-JSON body"
            ) from exc

        return self._parse_reply(self._extract_text(body))

    async def enhance_search_query(self, query: str) -> QueryEnhancement:
        """Ask the completion service to interpret a search query."""
        data = await self.complete_json(
            SEARCH_SYSTEM_PROMPT,
            self._build_search_prompt(query),
            model=self.settings.completion_search_model,
            temperature=0.3,
            max_tokens=300,
        )
        try:
            return QueryEnhancement.model_validate(data)
        except ValidationError as exc:
            raise MalformedUpstreamResponse(
                "Query enhancement did not match the expected shape",
                details={"errors": exc.errors(include_url=False)},
            ) from exc

    async def generate_learning_path(
        self, request: GeneratePathRequest, duration: int, difficulty: str
    ) -> CompletionPathDraft:
        """Ask the completion service for a module and resource plan."""
        data = await self.complete_json(
            PATH_SYSTEM_PROMPT,
            self._build_path_prompt(request, duration, difficulty),
            temperature=0.7,
            max_tokens=2000,
        )
        try:
            return CompletionPathDraft.model_validate(data)
        except ValidationError as exc:
            raise MalformedUpstreamResponse(
                "Learning path plan did not match the expected shape",
                details={"errors": exc.errors(include_url=False)},
            ) from exc

    @staticmethod
    def _extract_text(body: Any) -> str:
        if not isinstance(body, dict):
            raise MalformedUpstreamResponse("Completion reply is not a JSON object")
        choices = body.get("choices")
        if not isinstance(choices, list) or not choices:
            raise MalformedUpstreamResponse("Completion reply has no choices")
        if not isinstance(choices[0], dict):
            raise MalformedUpstreamResponse("Completion choice is not a JSON object")
        message = choices[0].get("message")
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str) or not content.strip():
            raise MalformedUpstreamResponse("Completion reply has no content")
        return content

    @staticmethod
    def _parse_reply(text: str) -> Dict[str, Any]:
        match = _JSON_BLOCK.search(text)
        if not match:
            raise MalformedUpstreamResponse("No JSON object found in completion reply")
        try:
            parsed = json.loads(match.group(0))
        except json.JSONDecodeError as exc:
            raise MalformedUpstreamResponse(
                f"Completion reply is not valid JSON: {exc.msg}"
            ) from exc
        if not isinstance(parsed, dict):
            raise MalformedUpstreamResponse("Completion reply is not a JSON object")
        return parsed

    def _build_search_prompt(self, query: str) -> str:
        return f"""Analyze this learning query: "{query}"

Provide a JSON response with:
{{
  "enhancedQuery": "improved version of the query",
  "suggestedTopics": ["topic1", "topic2", "topic3"],
  "difficulty": "beginner|intermediate|advanced",
  "estimatedDuration": number of hours
}}

Return only valid JSON."""

    def _build_path_prompt(
        self, request: GeneratePathRequest, duration: int, difficulty: str
    ) -> str:
        goals = f"- User Goals: {', '.join(request.goals)}\n" if request.goals else ""
        return f"""Create a comprehensive learning path for: "{request.query}"

Requirements:
- Difficulty Level: {difficulty}
- Target Duration: {duration} hours
- Learning Style: {request.learning_style}
{goals}
Respond with JSON in this shape:
{{
  "title": "Engaging title for the learning path",
  "description": "What learners will achieve",
  "topic": "one of web-development, data-science, design, business, web3, ai-ml",
  "estimatedDuration": {duration},
  "tags": ["relevant", "tags"],
  "modules": [
    {{
      "title": "Module title",
      "description": "What this module covers",
      "duration": estimated hours for this module,
      "resources": [
        {{
          "title": "Resource title",
          "type": "video|article|course|exercise",
          "url": "URL of a free resource, or null for exercises",
          "description": "What this resource teaches"
        }}
      ]
    }}
  ]
}}

Guidelines:
1. Create 4-8 modules that build progressively
2. Mix theory with hands-on exercises
3. Only link real, freely accessible resources
4. Keep the path {difficulty}-friendly and favor {request.learning_style} learning

Return only valid JSON without any additional text."""

    def _get_headers(self) -> Dict[str, str]:
        """Get headers for API calls."""
        return {
            "Authorization": f"Bearer {self.api_key}",
            "X-Service": "microguide",
            "Content-Type": "application/json",
        }
