"""Learning path model."""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import relationship
from sqlalchemy.types import JSON

from microguide.db.base import Base

# JSONB for Postgres with JSON fallback
JSONType = JSON().with_variant(JSONB, "postgresql")


class LearningPath(Base):
    """A curriculum composed of ordered learning nodes."""

    __tablename__ = "learning_paths"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    topic = Column(String(64), nullable=False)
    difficulty_level = Column(String(20), nullable=False, default="beginner")
    estimated_duration = Column(Integer, nullable=True)  # hours
    created_by = Column(UUID(as_uuid=True), nullable=False)
    is_public = Column(Boolean, nullable=False, default=True)
    total_nodes = Column(Integer, nullable=False, default=0)
    completion_rate = Column(Float, nullable=False, default=0.0)
    tags = Column(JSONType, nullable=False, default=list)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=datetime.utcnow
    )
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=datetime.utcnow
    )

    # Relationships
    nodes = relationship(
        "LearningNode",
        back_populates="path",
        cascade="all",
        passive_deletes=True,
        order_by="LearningNode.order_index",
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint(
            "difficulty_level IN ('beginner', 'intermediate', 'advanced')",
            name="check_path_difficulty",
        ),
        Index("idx_learning_paths_public_topic", "is_public", "topic"),
        Index("idx_learning_paths_created_by", "created_by"),
    )
