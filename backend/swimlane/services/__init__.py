"""Services for Swimlane."""

from .status_mapping import StatusMapper
from .placement import PlacementFilter, TaskFilters
from .lifecycle import ColumnLifecycleManager, DeleteCheck
from .column import ColumnService
from .status import StatusService
from .task import TaskService
from .drag_drop import (
    DragDropController,
    DragState,
    ItemDrag,
    ColumnDrag,
    payload_from_channels,
)

__all__ = [
    "StatusMapper",
    "PlacementFilter",
    "TaskFilters",
    "ColumnLifecycleManager",
    "DeleteCheck",
    "ColumnService",
    "StatusService",
    "TaskService",
    "DragDropController",
    "DragState",
    "ItemDrag",
    "ColumnDrag",
    "payload_from_channels",
]
