"""Learning node model."""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import relationship
from sqlalchemy.types import JSON

from microguide.db.base import Base

# JSONB for Postgres with JSON fallback
JSONType = JSON().with_variant(JSONB, "postgresql")


class LearningNode(Base):
    """One learning step within a path."""

    __tablename__ = "learning_nodes"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    path_id = Column(
        UUID(as_uuid=True),
        ForeignKey("learning_paths.id", ondelete="CASCADE"),
        nullable=False,
    )
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    content_type = Column(Text, nullable=False)
    resource_url = Column(Text, nullable=True)
    estimated_duration = Column(Integer, nullable=False, default=0)  # minutes
    order_index = Column(Integer, nullable=False)
    prerequisites = Column(JSONType, nullable=False, default=list)
    is_required = Column(Boolean, nullable=False, default=True)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=datetime.utcnow
    )
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=datetime.utcnow
    )

    # Relationships
    path = relationship("LearningPath", back_populates="nodes")
    progress = relationship(
        "UserProgress",
        back_populates="node",
        cascade="all",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint(
            "content_type IN ('video', 'article', 'course', 'exercise')",
            name="check_node_content_type",
        ),
        CheckConstraint("order_index >= 1", name="check_node_order_index"),
        UniqueConstraint("path_id", "order_index", name="unique_path_order"),
        Index("idx_learning_nodes_path_order", "path_id", "order_index"),
    )
