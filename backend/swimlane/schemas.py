"""Pydantic views of board records, shared by the API and the drag controller."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ColumnSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    board_id: int
    name: str
    position: int
    color: str
    status_value: Optional[str] = None


class TaskSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    board_id: int
    title: str
    description: Optional[str] = None
    status: str
    priority: str
    assignee: Optional[str] = None
    due_date: Optional[datetime] = None
    is_subtask: bool = False
    parent_task_id: Optional[int] = None
    kanban_position: Optional[int] = None


class StatusSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    color: str
    position: int


class BoardSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


def column_to_schema(column) -> ColumnSchema:
    """Convert a Column model to ColumnSchema."""
    return ColumnSchema.model_validate(column)


def task_to_schema(task) -> TaskSchema:
    """Convert a Task model to TaskSchema."""
    return TaskSchema.model_validate(task)
