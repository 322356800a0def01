"""Domain errors raised by the board services."""


class BoardError(Exception):
    """Base class for board engine errors."""


class DuplicateColumnName(BoardError):
    """A column with this name already exists on the board."""

    def __init__(self, board_id: int, name: str):
        self.board_id = board_id
        self.name = name
        super().__init__(f"Column '{name}' already exists on board {board_id}")


class ColumnNotEmpty(BoardError):
    """A column cannot be deleted while items are placed in it."""

    def __init__(self, column_name: str, blocking_count: int):
        self.column_name = column_name
        self.blocking_count = blocking_count
        super().__init__(
            f"This column contains {blocking_count} task(s). "
            "Move them to another column first."
        )
