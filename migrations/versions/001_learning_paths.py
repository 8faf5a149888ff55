"""Learning paths, nodes and user progress

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "learning_paths",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("topic", sa.String(length=64), nullable=False),
        sa.Column("difficulty_level", sa.String(length=20), server_default="beginner", nullable=False),
        sa.Column("estimated_duration", sa.Integer(), nullable=True),
        sa.Column("created_by", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("is_public", sa.Boolean(), server_default="true", nullable=False),
        sa.Column("total_nodes", sa.Integer(), server_default="0", nullable=False),
        sa.Column("completion_rate", sa.Float(), server_default="0", nullable=False),
        sa.Column("tags", postgresql.JSONB(), server_default="[]", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint(
            "difficulty_level IN ('beginner', 'intermediate', 'advanced')",
            name="check_path_difficulty",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_learning_paths_public_topic", "learning_paths", ["is_public", "topic"])
    op.create_index("idx_learning_paths_created_by", "learning_paths", ["created_by"])

    op.create_table(
        "learning_nodes",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("path_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("content_type", sa.Text(), nullable=False),
        sa.Column("resource_url", sa.Text(), nullable=True),
        sa.Column("estimated_duration", sa.Integer(), server_default="0", nullable=False),
        sa.Column("order_index", sa.Integer(), nullable=False),
        sa.Column("prerequisites", postgresql.JSONB(), server_default="[]", nullable=False),
        sa.Column("is_required", sa.Boolean(), server_default="true", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint(
            "content_type IN ('video', 'article', 'course', 'exercise')",
            name="check_node_content_type",
        ),
        sa.CheckConstraint("order_index >= 1", name="check_node_order_index"),
        sa.ForeignKeyConstraint(["path_id"], ["learning_paths.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("path_id", "order_index", name="unique_path_order"),
    )
    op.create_index("idx_learning_nodes_path_order", "learning_nodes", ["path_id", "order_index"])

    progress_status = postgresql.ENUM(
        "not_started", "in_progress", "completed", "skipped", name="progress_status"
    )
    progress_status.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "user_progress",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("path_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("node_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            "status",
            postgresql.ENUM(name="progress_status", create_type=False),
            server_default="not_started",
            nullable=False,
        ),
        sa.Column("progress_percentage", sa.Float(), server_default="0", nullable=False),
        sa.Column("time_spent", sa.Integer(), server_default="0", nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["path_id"], ["learning_paths.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["node_id"], ["learning_nodes.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "node_id", name="unique_user_node"),
    )
    op.create_index("idx_user_progress_user_path", "user_progress", ["user_id", "path_id"])


def downgrade() -> None:
    op.drop_index("idx_user_progress_user_path", table_name="user_progress")
    op.drop_table("user_progress")
    postgresql.ENUM(name="progress_status").drop(op.get_bind(), checkfirst=True)
    op.drop_index("idx_learning_nodes_path_order", table_name="learning_nodes")
    op.drop_table("learning_nodes")
    op.drop_index("idx_learning_paths_created_by", table_name="learning_paths")
    op.drop_index("idx_learning_paths_public_topic", table_name="learning_paths")
    op.drop_table("learning_paths")
