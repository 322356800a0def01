"""Creation and deletion rules for board columns."""

from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from .placement import PlacementFilter


@dataclass(frozen=True)
class DeleteCheck:
    """Outcome of a deletion check."""
    allowed: bool
    blocking_count: int = 0


class ColumnLifecycleManager:
    """Validates column creation and deletion against item placement."""

    @staticmethod
    def can_delete(column: Any, items: Iterable[Any], columns: Sequence[Any]) -> DeleteCheck:
        """Reject deletion while any item is placed in the column.

        Call with freshly fetched items; placement may have changed since the
        column list was last shown.
        """
        blocking = PlacementFilter.items_for(column, items, columns)
        if blocking:
            return DeleteCheck(allowed=False, blocking_count=len(blocking))
        return DeleteCheck(allowed=True)

    @staticmethod
    def insertion_position(columns: Sequence[Any]) -> int:
        """New columns are always appended after the last one."""
        return max([0, *(column.position for column in columns)]) + 1
