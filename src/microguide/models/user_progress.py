"""User progress model."""

import enum
from datetime import datetime
from uuid import uuid4

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from microguide.db.base import Base


class ProgressStatus(enum.Enum):
    """Lifecycle status of a learner on one node."""

    not_started = "not_started"
    in_progress = "in_progress"
    completed = "completed"
    skipped = "skipped"


class UserProgress(Base):
    """Per (user, node) progress record."""

    __tablename__ = "user_progress"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(UUID(as_uuid=True), nullable=False)
    path_id = Column(
        UUID(as_uuid=True),
        ForeignKey("learning_paths.id", ondelete="CASCADE"),
        nullable=False,
    )
    node_id = Column(
        UUID(as_uuid=True),
        ForeignKey("learning_nodes.id", ondelete="CASCADE"),
        nullable=False,
    )
    status = Column(
        Enum(ProgressStatus, name="progress_status"),
        nullable=False,
        default=ProgressStatus.not_started,
    )
    progress_percentage = Column(Float, nullable=False, default=0.0)
    time_spent = Column(Integer, nullable=False, default=0)  # minutes
    notes = Column(Text, nullable=True)
    started_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=datetime.utcnow
    )
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=datetime.utcnow
    )

    # Relationships
    node = relationship("LearningNode", back_populates="progress")

    __table_args__ = (
        UniqueConstraint("user_id", "node_id", name="unique_user_node"),
        Index("idx_user_progress_user_path", "user_id", "path_id"),
    )
