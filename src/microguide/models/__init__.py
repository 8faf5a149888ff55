"""SQLAlchemy models for learning paths and progress."""

from .learning_node import LearningNode
from .learning_path import LearningPath
from .user_progress import ProgressStatus, UserProgress

__all__ = [
    "LearningPath",
    "LearningNode",
    "ProgressStatus",
    "UserProgress",
]
