"""Column model for board columns."""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .database import Base


class Column(Base):
    """A named, colored board column bound to a status value."""

    __tablename__ = "columns"
    __table_args__ = (
        UniqueConstraint("board_id", "name", name="uq_columns_board_name"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    board_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("boards.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    color: Mapped[str] = mapped_column(String(20), default="#6b7280", nullable=False)
    # Not unique at the database level: reindex writes positions one row at a time
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    # Status carried by items in this column; falls back to name when unset
    status_value: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )
