"""Board, status configuration and board view API routes."""

from datetime import datetime
from typing import Optional
from fastapi import APIRouter, HTTPException, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.board import Board
from ..models.database import get_db
from ..schemas import (
    BoardSchema,
    ColumnSchema,
    StatusSchema,
    TaskSchema,
    column_to_schema,
    task_to_schema,
)
from ..services.column import ColumnService
from ..services.placement import PlacementFilter, TaskFilters
from ..services.status import StatusService
from ..services.task import TaskService


router = APIRouter(prefix="/api/boards", tags=["boards"])


class CreateBoardRequest(BaseModel):
    name: str


class StatusEntry(BaseModel):
    name: str
    color: Optional[str] = None


class ReplaceStatusesRequest(BaseModel):
    statuses: list[StatusEntry]
    regenerate_columns: bool = True


class BoardColumnView(BaseModel):
    column: ColumnSchema
    tasks: list[TaskSchema]


async def get_board_or_404(
    board_id: int,
    db: AsyncSession = Depends(get_db),
) -> Board:
    """Resolve the board in the path or respond 404."""
    board = await StatusService(db).get_board(board_id)
    if board is None:
        raise HTTPException(status_code=404, detail="Board not found")
    return board


@router.get("", response_model=list[BoardSchema])
async def get_boards(db: AsyncSession = Depends(get_db)):
    """Get all boards."""
    boards = await StatusService(db).list_boards()
    return [BoardSchema.model_validate(b) for b in boards]


@router.post("", response_model=BoardSchema)
async def create_board(
    request: CreateBoardRequest,
    db: AsyncSession = Depends(get_db),
):
    """Create a board. Its columns are derived on first load."""
    if not request.name.strip():
        raise HTTPException(status_code=400, detail="Name is required")

    board = await StatusService(db).create_board(request.name.strip())
    return BoardSchema.model_validate(board)


@router.get("/{board_id}", response_model=BoardSchema)
async def get_board(board: Board = Depends(get_board_or_404)):
    """Get a single board."""
    return BoardSchema.model_validate(board)


@router.get("/{board_id}/statuses", response_model=list[StatusSchema])
async def get_statuses(
    board: Board = Depends(get_board_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Get the board's status configuration."""
    statuses = await StatusService(db).get_statuses(board.id)
    return [StatusSchema.model_validate(s) for s in statuses]


@router.put("/{board_id}/statuses", response_model=list[StatusSchema])
async def replace_statuses(
    request: ReplaceStatusesRequest,
    board: Board = Depends(get_board_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Replace the status configuration, regenerating columns by default."""
    names = [s.name.strip() for s in request.statuses]
    if any(not name for name in names):
        raise HTTPException(status_code=400, detail="Status names are required")
    if len(set(names)) != len(names):
        raise HTTPException(status_code=400, detail="Status names must be unique")

    statuses = await StatusService(db).replace_statuses(
        board.id,
        [{"name": name, "color": s.color} for name, s in zip(names, request.statuses)],
    )

    if request.regenerate_columns:
        await db.commit()
        await ColumnService(db).derive_from_status_configuration(board.id)

    return [StatusSchema.model_validate(s) for s in statuses]


@router.get("/{board_id}/view", response_model=list[BoardColumnView])
async def get_board_view(
    search: str = "",
    assignees: list[str] = Query(default=[]),
    priorities: list[str] = Query(default=[]),
    statuses: list[str] = Query(default=[]),
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    overdue: Optional[bool] = None,
    board: Board = Depends(get_board_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Get every column with the items placed in it."""
    filters = TaskFilters(
        search=search,
        assignees=assignees,
        priorities=priorities,
        statuses=statuses,
        date_from=date_from,
        date_to=date_to,
        overdue=overdue,
    )

    columns = await ColumnService(db).load(board.id)
    tasks = await TaskService(db).get_board_tasks(board.id)

    return [
        BoardColumnView(
            column=column_to_schema(column),
            tasks=[task_to_schema(t) for t in placed],
        )
        for column, placed in PlacementFilter.bucket(columns, tasks, filters)
    ]
