"""Database models for Swimlane."""

from .database import Base, get_db, init_db
from .board import Board, BoardStatus
from .column import Column
from .task import Task, TaskPriority

__all__ = [
    "Base",
    "get_db",
    "init_db",
    "Board",
    "BoardStatus",
    "Column",
    "Task",
    "TaskPriority",
]
