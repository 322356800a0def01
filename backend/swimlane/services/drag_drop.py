"""Drag-and-drop controller for a board view.

A board view holds the columns and items the user currently sees and reacts
to one drag gesture at a time. Two gestures share the same drop surface:

- dragging an item onto a column changes the item's status;
- dragging a column onto a column slot reorders the columns.

Each gesture carries exactly one payload variant (``ItemDrag`` or
``ColumnDrag``). Drop handlers only act on the variant they expect and ignore
the other, so an item dropped on a column slot never reorders columns and a
column dropped on a column body never moves items.

Persistence is optimistic: the view is updated first, then written through
the column and task services, each write in its own session. When a write
fails the view is not rolled back locally; it is reloaded from the database.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Mapping, Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..exceptions import DuplicateColumnName
from ..schemas import ColumnSchema, TaskSchema, column_to_schema, task_to_schema
from .column import ColumnService, reordered
from .lifecycle import ColumnLifecycleManager, DeleteCheck
from .placement import PlacementFilter, TaskFilters, apply_filters
from .status_mapping import StatusMapper
from .task import TaskService

logger = logging.getLogger(__name__)


# Named drag data channels exposed to the UI layer
ITEM_CHANNEL = "item/id"
COLUMN_CHANNEL = "column/id"


@dataclass(frozen=True)
class ItemDrag:
    item_id: int


@dataclass(frozen=True)
class ColumnDrag:
    column_id: int


DragPayload = Union[ItemDrag, ColumnDrag]


def payload_from_channels(data: Mapping[str, str]) -> Optional[DragPayload]:
    """Decode drag data channels into a payload.

    Either channel, both or none may be populated. A column id wins over an
    item id because only column headers set the column channel. Empty or
    non-numeric values count as absent.
    """
    column_id = _channel_id(data, COLUMN_CHANNEL)
    if column_id is not None:
        return ColumnDrag(column_id)

    item_id = _channel_id(data, ITEM_CHANNEL)
    if item_id is not None:
        return ItemDrag(item_id)

    return None


def _channel_id(data: Mapping[str, str], channel: str) -> Optional[int]:
    raw = data.get(channel)
    if raw is None:
        return None
    try:
        return int(str(raw).strip())
    except ValueError:
        return None


def channels_for(payload: DragPayload) -> dict[str, str]:
    """Encode a payload onto its own channel."""
    if isinstance(payload, ColumnDrag):
        return {COLUMN_CHANNEL: str(payload.column_id)}
    return {ITEM_CHANNEL: str(payload.item_id)}


class DragState(str, Enum):
    IDLE = "idle"
    DRAGGING_ITEM = "dragging_item"
    DRAGGING_COLUMN = "dragging_column"


class NoticeLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class Notice:
    """User-visible notification (a toast in the browser)."""
    level: NoticeLevel
    title: str
    message: str


class DragDropController:
    """Board view state plus the handlers for one drag gesture at a time."""

    def __init__(
        self,
        board_id: int,
        session_factory: async_sessionmaker[AsyncSession],
        on_notice: Optional[Callable[[Notice], None]] = None,
    ):
        self.board_id = board_id
        self._session_factory = session_factory
        self._on_notice = on_notice

        self.columns: list[ColumnSchema] = []
        self.items: list[TaskSchema] = []
        self.filters = TaskFilters()
        self.notices: list[Notice] = []

        self.state = DragState.IDLE
        self.drag: Optional[DragPayload] = None
        self.hover_index: Optional[int] = None

    @property
    def is_dragging(self) -> bool:
        return self.state is not DragState.IDLE

    # Loading

    async def load(self) -> list[ColumnSchema]:
        """Replace the column view with what the database holds."""
        async with self._session_factory() as db:
            columns = await ColumnService(db).load(self.board_id)
            await db.commit()
        self.columns = [column_to_schema(c) for c in columns]
        return self.columns

    async def refresh_items(self) -> list[TaskSchema]:
        """Replace the item view with what the database holds."""
        async with self._session_factory() as db:
            tasks = await TaskService(db).get_board_tasks(self.board_id)
        self.items = [task_to_schema(t) for t in tasks]
        return self.items

    async def refresh(self) -> None:
        await self.load()
        await self.refresh_items()

    # Placement

    def mapper(self) -> StatusMapper:
        return StatusMapper(self.columns)

    def column_by_id(self, column_id: int) -> Optional[ColumnSchema]:
        return next((c for c in self.columns if c.id == column_id), None)

    def bucket(self, column: ColumnSchema) -> list[TaskSchema]:
        """Items shown in a column under the active filters."""
        visible = apply_filters(self.items, self.filters)
        return PlacementFilter.items_for(column, visible, self.columns)

    def board(self) -> list[tuple[ColumnSchema, list[TaskSchema]]]:
        return PlacementFilter.bucket(self.columns, self.items, self.filters)

    # Gesture

    def drag_start(self, payload: Optional[DragPayload]) -> None:
        if isinstance(payload, ItemDrag):
            self.state = DragState.DRAGGING_ITEM
        elif isinstance(payload, ColumnDrag):
            self.state = DragState.DRAGGING_COLUMN
        else:
            return
        self.drag = payload
        self.hover_index = None

    def drag_over(self, index: int) -> None:
        """Mark a column slot as the insertion point of a column drag."""
        if self.state is DragState.DRAGGING_COLUMN:
            self.hover_index = index

    def drag_leave(self) -> None:
        self.hover_index = None

    def drag_end(self) -> None:
        """End the gesture without dropping; nothing is persisted."""
        self._reset()

    cancel = drag_end

    def _reset(self) -> None:
        self.state = DragState.IDLE
        self.drag = None
        self.hover_index = None

    async def drop_item(self, column_id: int, payload: Optional[DragPayload] = None) -> bool:
        """Drop on a column body: move the dragged item into that column.

        Returns True when the new status was persisted.
        """
        if payload is None:
            payload = self.drag
        if not isinstance(payload, ItemDrag):
            return False
        self._reset()

        column = self.column_by_id(column_id)
        if column is None:
            return False

        status = self.mapper().status_of(column.name)
        self.items = [
            item.model_copy(update={"status": status}) if item.id == payload.item_id else item
            for item in self.items
        ]

        try:
            async with self._session_factory() as db:
                task = await TaskService(db).update_task_status(payload.item_id, status)
                await db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Error moving task {payload.item_id} to '{column.name}': {e}")
            self._notify(NoticeLevel.ERROR, "Error", "Failed to move task")
            await self.refresh_items()
            return False

        if task is None:
            logger.warning(f"Task {payload.item_id} disappeared before it could be moved")
            self._notify(NoticeLevel.ERROR, "Error", "Failed to move task")
            await self.refresh_items()
            return False

        self._notify(NoticeLevel.SUCCESS, "Success", "Task moved successfully")
        return True

    async def drop_column(self, index: int, payload: Optional[DragPayload] = None) -> bool:
        """Drop on a column slot: place the dragged column before slot ``index``.

        Returns True when the new order was persisted.
        """
        if payload is None:
            payload = self.drag
        if not isinstance(payload, ColumnDrag):
            return False
        self._reset()

        source = next(
            (i for i, column in enumerate(self.columns) if column.id == payload.column_id), -1
        )
        if source == -1 or source == index:
            return False

        new_order = reordered(self.columns, source, index)
        self.columns = [
            column.model_copy(update={"position": position})
            for position, column in enumerate(new_order)
        ]

        try:
            async with self._session_factory() as db:
                await ColumnService(db).reindex([column.id for column in self.columns])
                await db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Error updating column positions for board {self.board_id}: {e}")
            self._notify(NoticeLevel.ERROR, "Error", "Failed to update column order")
            await self.load()
            return False

        self._notify(NoticeLevel.SUCCESS, "Success", "Column order updated successfully")
        return True

    # Column management

    async def create_column(self, name: str, color: Optional[str] = None) -> Optional[ColumnSchema]:
        """Append a new column to the board."""
        position = ColumnLifecycleManager.insertion_position(self.columns)
        try:
            async with self._session_factory() as db:
                column = await ColumnService(db).create_column(
                    self.board_id, name=name, color=color, position=position
                )
                await db.commit()
        except DuplicateColumnName as e:
            self._notify(NoticeLevel.ERROR, "Error", str(e))
            return None
        except SQLAlchemyError as e:
            logger.error(f"Error creating column '{name}' on board {self.board_id}: {e}")
            self._notify(NoticeLevel.ERROR, "Error", "Failed to create column")
            await self.load()
            return None

        await self.load()
        return column_to_schema(column)

    async def update_column(
        self,
        column_id: int,
        name: Optional[str] = None,
        color: Optional[str] = None,
        status_value: Optional[str] = None,
    ) -> Optional[ColumnSchema]:
        """Rename, recolor or remap a column."""
        try:
            async with self._session_factory() as db:
                column = await ColumnService(db).update_column(
                    column_id, name=name, color=color, status_value=status_value
                )
                await db.commit()
        except DuplicateColumnName as e:
            self._notify(NoticeLevel.ERROR, "Error", str(e))
            return None
        except SQLAlchemyError as e:
            logger.error(f"Error updating column {column_id}: {e}")
            self._notify(NoticeLevel.ERROR, "Error", "Failed to update column")
            await self.load()
            return None

        await self.load()
        return column_to_schema(column) if column is not None else None

    async def delete_column(self, column_id: int) -> Optional[DeleteCheck]:
        """Delete a column if no item is placed in it.

        Items are fetched again first so the check sees current placement.
        Returns None when the column is not on this board view.
        """
        column = self.column_by_id(column_id)
        if column is None:
            logger.warning(f"Column {column_id} is not on board {self.board_id}")
            self._notify(NoticeLevel.ERROR, "Error", "Column not found")
            return None

        await self.refresh_items()
        check = ColumnLifecycleManager.can_delete(column, self.items, self.columns)
        if not check.allowed:
            self._notify(
                NoticeLevel.ERROR,
                "Cannot delete column",
                f"This column contains {check.blocking_count} task(s). "
                "Move them to another column first.",
            )
            return check

        try:
            async with self._session_factory() as db:
                await ColumnService(db).delete_column(column_id)
                await db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Error deleting column {column_id}: {e}")
            self._notify(NoticeLevel.ERROR, "Error", "Failed to delete column")
            await self.load()
            return DeleteCheck(allowed=False)

        self._notify(NoticeLevel.SUCCESS, "Success", "Column deleted successfully")
        await self.load()
        return check

    def _notify(self, level: NoticeLevel, title: str, message: str) -> None:
        notice = Notice(level=level, title=title, message=message)
        self.notices.append(notice)
        if self._on_notice is not None:
            self._on_notice(notice)
