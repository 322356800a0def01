"""Placement of board items into columns, with secondary filters."""

from datetime import datetime, timezone
from typing import Any, Iterable, Optional, Sequence

from pydantic import BaseModel

from .status_mapping import StatusMapper


# Assignee filter value matching items with no assignee
UNASSIGNED = "unassigned"


def naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Express a datetime as naive UTC, the form SQLite hands back."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class TaskFilters(BaseModel):
    """Secondary board filters. Empty values place no constraint."""

    search: str = ""
    assignees: list[str] = []
    priorities: list[str] = []
    statuses: list[str] = []
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    overdue: Optional[bool] = None

    def is_active(self) -> bool:
        return bool(
            self.search
            or self.assignees
            or self.priorities
            or self.statuses
            or self.date_from
            or self.date_to
            or self.overdue
        )


def is_sub_item(item: Any) -> bool:
    """Sub-items are never placed on the board."""
    return bool(getattr(item, "is_subtask", False) or getattr(item, "parent_task_id", None))


def matches_filters(item: Any, filters: TaskFilters, now: Optional[datetime] = None) -> bool:
    """Check an item against every active filter (logical AND)."""
    if filters.search:
        needle = filters.search.lower()
        title = (item.title or "").lower()
        description = (item.description or "").lower()
        if needle not in title and needle not in description:
            return False

    if filters.assignees:
        matched = any(
            not item.assignee if assignee == UNASSIGNED else item.assignee == assignee
            for assignee in filters.assignees
        )
        if not matched:
            return False

    if filters.priorities and item.priority not in filters.priorities:
        return False

    if filters.statuses and item.status not in filters.statuses:
        return False

    due_date = naive_utc(item.due_date)
    date_from = naive_utc(filters.date_from)
    date_to = naive_utc(filters.date_to)

    if date_from or date_to:
        if due_date is None:
            return False
        if date_from and due_date < date_from:
            return False
        if date_to and due_date > date_to:
            return False

    if filters.overdue:
        if due_date is None:
            return False
        if due_date >= naive_utc(now or datetime.now(timezone.utc)):
            return False

    return True


def apply_filters(
    items: Iterable[Any], filters: Optional[TaskFilters], now: Optional[datetime] = None
) -> list[Any]:
    """Drop items that fail any active filter."""
    if filters is None or not filters.is_active():
        return list(items)
    return [item for item in items if matches_filters(item, filters, now)]


class PlacementFilter:
    """Buckets items into columns by status."""

    @staticmethod
    def items_for(column: Any, items: Iterable[Any], columns: Sequence[Any]) -> list[Any]:
        """Items placed in a column, ordered by their position within it."""
        status = StatusMapper(columns).status_of(column.name)
        placed = [
            item for item in items
            if item.status == status and not is_sub_item(item)
        ]
        # sorted() is stable, so ties keep fetch order
        return sorted(placed, key=lambda item: item.kanban_position or 0)

    @classmethod
    def bucket(
        cls,
        columns: Sequence[Any],
        items: Iterable[Any],
        filters: Optional[TaskFilters] = None,
        now: Optional[datetime] = None,
    ) -> list[tuple[Any, list[Any]]]:
        """Every column paired with its filtered bucket, in column order."""
        visible = apply_filters(items, filters, now)
        return [(column, cls.items_for(column, visible, columns)) for column in columns]
