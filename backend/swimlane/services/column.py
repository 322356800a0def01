"""Column service: the ordered column set of a board."""

import asyncio
import logging
import weakref
from typing import Optional, Sequence, TypeVar

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import get_config
from ..exceptions import DuplicateColumnName
from ..models.column import Column
from .status import StatusService

logger = logging.getLogger(__name__)

T = TypeVar("T")


# Used when a board has no status configuration
DEFAULT_STATUSES = [
    {"name": "To Do", "color": "#6b7280"},
    {"name": "In Progress", "color": "#0ea5e9"},
    {"name": "Review", "color": "#f59e0b"},
    {"name": "Done", "color": "#22c55e"},
]

# One bootstrap lock per board, shared by every session in this process.
# Entries vanish once no caller holds the lock.
_board_locks: "weakref.WeakValueDictionary[int, asyncio.Lock]" = weakref.WeakValueDictionary()


def _board_lock(board_id: int) -> asyncio.Lock:
    lock = _board_locks.get(board_id)
    if lock is None:
        lock = _board_locks[board_id] = asyncio.Lock()
    return lock


def reordered(items: Sequence[T], from_index: int, to_index: int) -> list[T]:
    """Remove the element at from_index and reinsert it at to_index.

    to_index refers to the list after removal, so dropping onto a later index
    lands just after the element that used to sit there.
    """
    result = list(items)
    moved = result.pop(from_index)
    result.insert(to_index, moved)
    return result


class ColumnService:
    """Service for managing a board's columns."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_columns(self, board_id: int) -> list[Column]:
        """Get the board's columns ordered by position."""
        result = await self.db.execute(
            select(Column)
            .where(Column.board_id == board_id)
            .order_by(Column.position, Column.id)
        )
        return list(result.scalars().all())

    async def load(self, board_id: int) -> list[Column]:
        """Get the board's columns, deriving them first if the board has none."""
        columns = await self.list_columns(board_id)
        if columns:
            return columns

        async with _board_lock(board_id):
            # Another caller may have finished the bootstrap while we waited
            columns = await self.list_columns(board_id)
            if columns:
                return columns
            return await self._derive(board_id)

    async def derive_from_status_configuration(self, board_id: int) -> list[Column]:
        """Replace the board's columns with one column per configured status.

        Serialized per board within this process. Callers in other processes
        are not coordinated, so treat this as a single-caller bootstrap step.
        """
        async with _board_lock(board_id):
            return await self._derive(board_id)

    async def _derive(self, board_id: int) -> list[Column]:
        statuses = await self._statuses_or_defaults(board_id)

        await self.db.execute(delete(Column).where(Column.board_id == board_id))

        columns = []
        for index, status in enumerate(statuses):
            column = Column(
                board_id=board_id,
                name=status["name"],
                color=status["color"],
                position=index,
                status_value=status["name"],
            )
            self.db.add(column)
            columns.append(column)

        await self.db.flush()
        await self.db.commit()

        logger.info(f"Derived {len(columns)} columns for board {board_id}")
        return columns

    async def _statuses_or_defaults(self, board_id: int) -> list[dict]:
        default_color = get_config().board.default_color
        try:
            configured = await StatusService(self.db).get_statuses(board_id)
        except SQLAlchemyError as e:
            logger.warning(f"Could not read statuses for board {board_id}, using defaults: {e}")
            await self.db.rollback()
            configured = []

        if not configured:
            return [dict(status) for status in DEFAULT_STATUSES]

        return [
            {"name": status.name, "color": status.color or default_color}
            for status in configured
        ]

    async def get_column_by_id(self, column_id: int) -> Optional[Column]:
        """Get a column by ID."""
        result = await self.db.execute(
            select(Column).where(Column.id == column_id)
        )
        return result.scalar_one_or_none()

    async def _name_taken(
        self, board_id: int, name: str, exclude_id: Optional[int] = None
    ) -> bool:
        query = select(Column.id).where(Column.board_id == board_id, Column.name == name)
        if exclude_id is not None:
            query = query.where(Column.id != exclude_id)
        result = await self.db.execute(query)
        return result.first() is not None

    async def create_column(
        self,
        board_id: int,
        name: str,
        color: Optional[str] = None,
        status_value: Optional[str] = None,
        position: Optional[int] = None,
    ) -> Column:
        """Create a new column, appended after the last one by default."""
        if await self._name_taken(board_id, name):
            raise DuplicateColumnName(board_id, name)

        if position is None:
            result = await self.db.execute(
                select(func.max(Column.position)).where(Column.board_id == board_id)
            )
            max_pos = result.scalar()
            position = 0 if max_pos is None else max_pos + 1

        column = Column(
            board_id=board_id,
            name=name,
            color=color or get_config().board.default_color,
            position=position,
            status_value=status_value or name,
        )
        self.db.add(column)
        await self.db.flush()

        return column

    async def update_column(
        self,
        column_id: int,
        name: Optional[str] = None,
        color: Optional[str] = None,
        status_value: Optional[str] = None,
        position: Optional[int] = None,
    ) -> Optional[Column]:
        """Partially update a column."""
        column = await self.get_column_by_id(column_id)
        if column is None:
            return None

        if name is not None and name != column.name:
            if await self._name_taken(column.board_id, name, exclude_id=column_id):
                raise DuplicateColumnName(column.board_id, name)
            column.name = name

        if color is not None:
            column.color = color

        if status_value is not None:
            column.status_value = status_value

        if position is not None:
            column.position = position

        await self.db.flush()
        return column

    async def delete_column(self, column_id: int) -> bool:
        """Delete a column. Callers must run the deletion guard first."""
        column = await self.get_column_by_id(column_id)
        if column is None:
            return False

        await self.db.delete(column)
        await self.db.flush()
        return True

    async def reindex(self, column_ids: Sequence[int]) -> list[Column]:
        """Give each column its index in column_ids as its position.

        Changed columns are committed one at a time, in order. If commit k
        fails, columns before it keep their new positions and the error
        propagates; reload to see what was persisted.
        """
        result = await self.db.execute(select(Column).where(Column.id.in_(column_ids)))
        by_id = {column.id: column for column in result.scalars().all()}

        columns = []
        for index, column_id in enumerate(column_ids):
            column = by_id.get(column_id)
            if column is None:
                continue
            if column.position != index:
                await self._persist_position(column, index)
            columns.append(column)

        return columns

    async def _persist_position(self, column: Column, position: int) -> None:
        column.position = position
        await self.db.flush()
        await self.db.commit()

    async def save_settings(self, board_id: int, entries: list[dict]) -> list[Column]:
        """Apply a column settings form: update listed columns, create new ones.

        Entries with an ``id`` update that column; entries without one are
        created. Columns left out of the form are not touched. Names are
        checked against the board as it will look once the whole form is
        applied, so two columns may swap names.
        """
        current = {column.id: column for column in await self.list_columns(board_id)}

        final_names = {column_id: column.name for column_id, column in current.items()}
        for entry in entries:
            column_id = entry.get("id")
            if column_id is None:
                continue
            if column_id not in current:
                logger.warning(f"Skipping unknown column {column_id} for board {board_id}")
            elif entry.get("name") is not None:
                final_names[column_id] = entry["name"]

        seen = set()
        new_names = [entry["name"] for entry in entries if entry.get("id") is None]
        for name in [*final_names.values(), *new_names]:
            if name in seen:
                raise DuplicateColumnName(board_id, name)
            seen.add(name)

        # Park renamed columns under unique placeholders so that no
        # intermediate flush holds two rows with the same name
        renamed = [
            column for column_id, column in current.items()
            if final_names[column_id] != column.name
        ]
        for column in renamed:
            column.name = f"__renaming_{column.id}"
        if renamed:
            await self.db.flush()

        saved = []
        for entry in entries:
            column_id = entry.get("id")
            if column_id is None:
                saved.append(await self.create_column(
                    board_id,
                    name=entry["name"],
                    color=entry.get("color"),
                    status_value=entry.get("status_value"),
                    position=entry.get("position"),
                ))
                continue

            column = current.get(column_id)
            if column is None:
                continue
            column.name = final_names[column_id]
            if entry.get("color") is not None:
                column.color = entry["color"]
            if entry.get("status_value") is not None:
                column.status_value = entry["status_value"]
            if entry.get("position") is not None:
                column.position = entry["position"]
            saved.append(column)

        await self.db.flush()
        return saved
