"""Status configuration source for boards."""

import logging
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import get_config
from ..models.board import Board, BoardStatus

logger = logging.getLogger(__name__)


class StatusService:
    """Reads and replaces a board's ordered status configuration."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_board(self, board_id: int) -> Optional[Board]:
        result = await self.db.execute(select(Board).where(Board.id == board_id))
        return result.scalar_one_or_none()

    async def list_boards(self) -> list[Board]:
        result = await self.db.execute(select(Board).order_by(Board.id))
        return list(result.scalars().all())

    async def create_board(self, name: str) -> Board:
        board = Board(name=name)
        self.db.add(board)
        await self.db.flush()
        return board

    async def get_statuses(self, board_id: int) -> list[BoardStatus]:
        """Get the board's statuses in configuration order."""
        result = await self.db.execute(
            select(BoardStatus)
            .where(BoardStatus.board_id == board_id)
            .order_by(BoardStatus.position, BoardStatus.id)
        )
        return list(result.scalars().all())

    async def replace_statuses(
        self, board_id: int, statuses: list[dict]
    ) -> list[BoardStatus]:
        """Replace the configuration with the given ordered entries.

        Each entry is a dict with ``name`` and optional ``color``. Positions
        follow list order.
        """
        default_color = get_config().board.default_color

        await self.db.execute(
            delete(BoardStatus).where(BoardStatus.board_id == board_id)
        )

        created = []
        for index, entry in enumerate(statuses):
            status = BoardStatus(
                board_id=board_id,
                name=entry["name"],
                color=entry.get("color") or default_color,
                position=index,
            )
            self.db.add(status)
            created.append(status)

        await self.db.flush()
        logger.info(f"Board {board_id} status configuration replaced ({len(created)} statuses)")
        return created
