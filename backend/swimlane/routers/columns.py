"""Columns API routes for board columns."""

from typing import Optional
from fastapi import APIRouter, HTTPException, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import ColumnNotEmpty, DuplicateColumnName
from ..models.board import Board
from ..models.database import get_db
from ..schemas import ColumnSchema, column_to_schema
from ..services.column import ColumnService
from ..services.lifecycle import ColumnLifecycleManager
from ..services.task import TaskService
from .boards import get_board_or_404


router = APIRouter(prefix="/api", tags=["columns"])


class CreateColumnRequest(BaseModel):
    name: str
    color: Optional[str] = None
    status_value: Optional[str] = None
    position: Optional[int] = None


class UpdateColumnRequest(BaseModel):
    name: Optional[str] = None
    color: Optional[str] = None
    status_value: Optional[str] = None
    position: Optional[int] = None


class ReorderColumnsRequest(BaseModel):
    column_ids: list[int]


class ColumnSettingsEntry(BaseModel):
    id: Optional[int] = None
    name: str
    color: Optional[str] = None
    status_value: Optional[str] = None
    position: Optional[int] = None


class ColumnSettingsRequest(BaseModel):
    columns: list[ColumnSettingsEntry]


def _conflict(error: Exception) -> HTTPException:
    return HTTPException(status_code=409, detail=str(error))


@router.get("/boards/{board_id}/columns", response_model=list[ColumnSchema])
async def get_columns(
    board: Board = Depends(get_board_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Get all columns ordered by position."""
    columns = await ColumnService(db).load(board.id)
    return [column_to_schema(c) for c in columns]


@router.post("/boards/{board_id}/columns", response_model=ColumnSchema)
async def create_column(
    request: CreateColumnRequest,
    board: Board = Depends(get_board_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Create a new column."""
    if not request.name.strip():
        raise HTTPException(status_code=400, detail="Column name is required")

    try:
        column = await ColumnService(db).create_column(
            board.id,
            name=request.name.strip(),
            color=request.color,
            status_value=request.status_value,
            position=request.position,
        )
    except DuplicateColumnName as e:
        raise _conflict(e)

    return column_to_schema(column)


@router.post("/boards/{board_id}/columns/reorder", response_model=list[ColumnSchema])
async def reorder_columns(
    request: ReorderColumnsRequest,
    board: Board = Depends(get_board_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Reorder columns by providing the new order of IDs."""
    column_service = ColumnService(db)
    current = await column_service.list_columns(board.id)

    if sorted(request.column_ids) != sorted(c.id for c in current):
        raise HTTPException(
            status_code=400,
            detail="column_ids must list every column of the board exactly once",
        )

    columns = await column_service.reindex(request.column_ids)
    return [column_to_schema(c) for c in columns]


@router.post("/boards/{board_id}/columns/regenerate", response_model=list[ColumnSchema])
async def regenerate_columns(
    board: Board = Depends(get_board_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Replace the board's columns with one per configured status."""
    columns = await ColumnService(db).derive_from_status_configuration(board.id)
    return [column_to_schema(c) for c in columns]


@router.put("/boards/{board_id}/columns/settings", response_model=list[ColumnSchema])
async def save_column_settings(
    request: ColumnSettingsRequest,
    board: Board = Depends(get_board_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Save the column settings form in one go."""
    column_service = ColumnService(db)
    try:
        await column_service.save_settings(
            board.id, [entry.model_dump() for entry in request.columns]
        )
    except DuplicateColumnName as e:
        raise _conflict(e)

    columns = await column_service.list_columns(board.id)
    return [column_to_schema(c) for c in columns]


@router.put("/columns/{column_id}", response_model=ColumnSchema)
async def update_column(
    column_id: int,
    request: UpdateColumnRequest,
    db: AsyncSession = Depends(get_db),
):
    """Update a column."""
    if request.name is not None and not request.name.strip():
        raise HTTPException(status_code=400, detail="Column name is required")

    try:
        column = await ColumnService(db).update_column(
            column_id=column_id,
            name=request.name.strip() if request.name else None,
            color=request.color,
            status_value=request.status_value,
            position=request.position,
        )
    except DuplicateColumnName as e:
        raise _conflict(e)

    if column is None:
        raise HTTPException(status_code=404, detail="Column not found")

    return column_to_schema(column)


@router.delete("/columns/{column_id}")
async def delete_column(
    column_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Delete a column that has no items placed in it."""
    column_service = ColumnService(db)

    column = await column_service.get_column_by_id(column_id)
    if column is None:
        raise HTTPException(status_code=404, detail="Column not found")

    columns = await column_service.list_columns(column.board_id)
    tasks = await TaskService(db).get_board_tasks(column.board_id)

    check = ColumnLifecycleManager.can_delete(column, tasks, columns)
    if not check.allowed:
        error = ColumnNotEmpty(column.name, check.blocking_count)
        raise HTTPException(
            status_code=409,
            detail={"message": str(error), "blocking_count": error.blocking_count},
        )

    await column_service.delete_column(column_id)
    return {"message": "Column deleted"}
