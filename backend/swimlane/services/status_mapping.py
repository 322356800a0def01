"""Bidirectional mapping between board columns and item status values."""

from typing import Iterable, Protocol, Optional


class ColumnLike(Protocol):
    name: str
    status_value: Optional[str]


def derived_status(column: ColumnLike) -> str:
    """Status carried by items in a column: its status_value, else its name."""
    return column.status_value or column.name


class StatusMapper:
    """Lookup tables built from the current column list.

    Build a new mapper whenever the column list changes; it holds no state
    beyond the two tables. When several columns share a status value, the
    first column in list order owns it.
    """

    def __init__(self, columns: Iterable[ColumnLike]):
        self.column_name_to_status: dict[str, str] = {}
        self.status_to_column_name: dict[str, str] = {}

        for column in columns:
            status = derived_status(column)
            self.column_name_to_status.setdefault(column.name, status)
            self.status_to_column_name.setdefault(status, column.name)

    def status_of(self, column_name: str) -> str:
        """Status for a column name; unknown names map to themselves."""
        return self.column_name_to_status.get(column_name, column_name)

    def column_for(self, status: str) -> str:
        """Column name for a status; unmapped statuses are returned unchanged."""
        return self.status_to_column_name.get(status, status)
