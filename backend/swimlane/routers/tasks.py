"""Task placement API routes."""

from datetime import datetime
from typing import Optional
from fastapi import APIRouter, HTTPException, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.board import Board
from ..models.database import get_db
from ..models.task import TaskPriority
from ..schemas import TaskSchema, task_to_schema
from ..services.column import ColumnService
from ..services.placement import naive_utc
from ..services.status_mapping import StatusMapper
from ..services.task import TaskService
from .boards import get_board_or_404


router = APIRouter(prefix="/api", tags=["tasks"])


class CreateTaskRequest(BaseModel):
    title: str
    status: Optional[str] = None
    description: Optional[str] = None
    assignee: Optional[str] = None
    due_date: Optional[datetime] = None
    priority: str = TaskPriority.MEDIUM.value
    parent_task_id: Optional[int] = None
    kanban_position: Optional[int] = None


class MoveTaskRequest(BaseModel):
    column_id: int
    position: Optional[int] = None


@router.get("/boards/{board_id}/tasks", response_model=list[TaskSchema])
async def get_tasks(
    board: Board = Depends(get_board_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Get every item of the board."""
    tasks = await TaskService(db).get_board_tasks(board.id)
    return [task_to_schema(t) for t in tasks]


@router.post("/boards/{board_id}/tasks", response_model=TaskSchema)
async def create_task(
    request: CreateTaskRequest,
    board: Board = Depends(get_board_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Create an item, in the first column when no status is given."""
    if not request.title.strip():
        raise HTTPException(status_code=400, detail="Title is required")

    status = (request.status or "").strip()
    if not status:
        columns = await ColumnService(db).load(board.id)
        status = StatusMapper(columns).status_of(columns[0].name)

    task = await TaskService(db).create_task(
        board.id,
        title=request.title.strip(),
        status=status,
        description=request.description,
        assignee=request.assignee,
        due_date=naive_utc(request.due_date),
        priority=request.priority,
        is_subtask=request.parent_task_id is not None,
        parent_task_id=request.parent_task_id,
        kanban_position=request.kanban_position,
    )
    return task_to_schema(task)


@router.post("/tasks/{task_id}/move", response_model=TaskSchema)
async def move_task(
    task_id: int,
    request: MoveTaskRequest,
    db: AsyncSession = Depends(get_db),
):
    """Move an item into a column (drag-and-drop)."""
    task_service = TaskService(db)
    column_service = ColumnService(db)

    task = await task_service.get_task_by_id(task_id)
    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")

    column = await column_service.get_column_by_id(request.column_id)
    if column is None or column.board_id != task.board_id:
        raise HTTPException(status_code=404, detail="Column not found")

    columns = await column_service.list_columns(task.board_id)
    status = StatusMapper(columns).status_of(column.name)

    task = await task_service.move_task(task_id, status, request.position)
    return task_to_schema(task)
