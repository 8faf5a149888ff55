"""Learning path and node schemas."""

from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

Difficulty = Literal["beginner", "intermediate", "advanced"]
ContentType = Literal["video", "article", "course", "exercise"]


class NodeDraft(BaseModel):
    """A learning node before it is attached to a stored path."""

    title: str
    description: str = ""
    content_type: ContentType
    resource_url: Optional[str] = None
    estimated_duration: int = Field(default=0, ge=0)  # minutes
    order_index: int = Field(ge=1)
    prerequisites: List[UUID] = []
    is_required: bool = True


class PathDocument(BaseModel):
    """Output of curriculum synthesis, ready to be persisted."""

    title: str
    description: str
    topic: str
    difficulty_level: Difficulty
    estimated_duration: int  # hours
    tags: List[str] = []
    nodes: List[NodeDraft]


class GeneratePathRequest(BaseModel):
    """Free-text learning request."""

    query: str = Field(min_length=1, max_length=500)
    difficulty: Optional[Difficulty] = None
    duration: Optional[int] = Field(default=None, gt=0)
    learning_style: Literal["visual", "auditory", "kinesthetic", "mixed"] = "mixed"
    goals: List[str] = []


class PathCreate(BaseModel):
    """Directly authored learning path."""

    title: str = Field(min_length=1)
    description: str = ""
    topic: str
    difficulty_level: Difficulty = "beginner"
    estimated_duration: int = Field(default=10, ge=0)
    is_public: bool = True
    tags: List[str] = []
    nodes: List[NodeDraft] = []


class NodeBatchCreate(BaseModel):
    """Nodes appended to an existing path."""

    nodes: List[NodeDraft] = Field(min_length=1)


class LearningNode(BaseModel):
    """Stored learning node."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    path_id: UUID
    title: str
    description: Optional[str] = None
    content_type: ContentType
    resource_url: Optional[str] = None
    estimated_duration: int
    order_index: int
    prerequisites: List[UUID] = []
    is_required: bool
    created_at: datetime


class LearningPath(BaseModel):
    """Stored learning path header."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    description: Optional[str] = None
    topic: str
    difficulty_level: Difficulty
    estimated_duration: Optional[int] = None
    created_by: UUID
    is_public: bool
    total_nodes: int
    completion_rate: float
    tags: List[str] = []
    created_at: datetime
    updated_at: datetime


class PathWithNodes(LearningPath):
    """Path header plus its nodes in `order_index` order."""

    nodes: List[LearningNode] = []


class PathList(BaseModel):
    """List of learning paths."""

    items: List[LearningPath]


class PathFilters(BaseModel):
    """Catalog listing filters."""

    topic: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    is_public: Optional[bool] = None
    created_by: Optional[UUID] = None
    limit: int = Field(default=20, ge=1, le=100)
    offset: int = Field(default=0, ge=0)


class DeleteAccepted(BaseModel):
    """Response for an accepted delete."""

    id: UUID
    status: Literal["accepted"] = "accepted"


class PopularNode(BaseModel):
    id: UUID
    title: str
    order_index: int
    popularity: int


class PathAnalytics(BaseModel):
    """Aggregate learner statistics for one path."""

    total_users: int = 0
    completion_rate: float = 0.0
    average_time_spent: float = 0.0
    popular_nodes: List[PopularNode] = []
