"""Search and query-intent schemas."""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from microguide.schemas.paths import Difficulty, LearningPath

LearningType = Literal["practical", "theoretical", "mixed"]


class QueryIntent(BaseModel):
    """Structured interpretation of a free-text learning query. Never persisted."""

    topic: str = ""
    difficulty: Difficulty = "beginner"
    keywords: List[str] = []
    estimated_duration: int = 10  # hours
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    learning_type: LearningType = "mixed"


class DurationRange(BaseModel):
    min: int = Field(ge=0)
    max: int = Field(ge=0)

    @model_validator(mode="after")
    def check_bounds(self) -> "DurationRange":
        if self.min > self.max:
            raise ValueError("duration min must not exceed max")
        return self


class SearchFilters(BaseModel):
    """Optional caller-supplied search filters."""

    topic: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    duration: Optional[DurationRange] = None
    tags: List[str] = []


class RankedPath(LearningPath):
    relevance_score: float = 0.0


class SearchResult(BaseModel):
    """Ranked search response."""

    paths: List[RankedPath] = []
    suggested_topics: List[str] = []
    estimated_duration: int = 10
    difficulty: str = "beginner"
    confidence: float = 0.0
