"""
Database models package.

Exports all SQLAlchemy models for use across the application.
"""

from .achievement import Achievement
from .base import Base
from .code_execution import CodeExecution
from .tool_progress import ProgressStatus, ToolProgress
from .user import User

__all__ = [
    "Achievement",
    "Base",
    "CodeExecution",
    "ProgressStatus",
    "ToolProgress",
    "User",
]
