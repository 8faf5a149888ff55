"""Progress tracking schemas."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from microguide.models import ProgressStatus


class ProgressUpdate(BaseModel):
    """Progress report for one node."""

    path_id: UUID
    node_id: UUID
    status: ProgressStatus
    progress_percentage: float = Field(default=0.0, ge=0.0, le=100.0)
    time_spent: int = Field(default=0, ge=0)
    notes: Optional[str] = None


class UserProgress(BaseModel):
    """Stored progress record."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    path_id: UUID
    node_id: UUID
    status: ProgressStatus
    progress_percentage: float
    time_spent: int
    notes: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    updated_at: datetime


class ProgressList(BaseModel):
    items: List[UserProgress]
