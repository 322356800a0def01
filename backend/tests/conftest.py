"""Shared fixtures for Swimlane tests."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from swimlane.config import reset_config
from swimlane.models import Base, Board, BoardStatus, Column, Task
from swimlane.schemas import ColumnSchema, TaskSchema
from swimlane.services import column as column_module


@pytest.fixture(autouse=True)
def fresh_state(monkeypatch, tmp_path):
    """Isolate configuration and bootstrap locks per test."""
    monkeypatch.setenv("SWIMLANE_CONFIG", str(tmp_path / "missing.yml"))
    monkeypatch.delenv("SWIMLANE_DEFAULT_COLOR", raising=False)
    reset_config()
    column_module._board_locks.clear()
    yield
    column_module._board_locks.clear()
    reset_config()


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'board.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def board(db):
    board = Board(name="Launch")
    db.add(board)
    await db.commit()
    return board


@pytest.fixture
async def default_columns(db, board):
    """The four default columns, as a fresh board derives them."""
    columns = [
        Column(board_id=board.id, name=name, color=color, position=i, status_value=name)
        for i, (name, color) in enumerate(
            [
                ("To Do", "#6b7280"),
                ("In Progress", "#0ea5e9"),
                ("Review", "#f59e0b"),
                ("Done", "#22c55e"),
            ]
        )
    ]
    db.add_all(columns)
    await db.commit()
    return columns


async def add_task(db, board, title, status, **fields) -> Task:
    task = Task(board_id=board.id, title=title, status=status, **fields)
    db.add(task)
    await db.commit()
    return task


async def add_statuses(db, board, entries) -> list[BoardStatus]:
    statuses = [
        BoardStatus(board_id=board.id, name=name, color=color, position=i)
        for i, (name, color) in enumerate(entries)
    ]
    db.add_all(statuses)
    await db.commit()
    return statuses


def make_column(id, name, position, status_value=None, board_id=1, color="#6b7280"):
    return ColumnSchema(
        id=id,
        board_id=board_id,
        name=name,
        position=position,
        color=color,
        status_value=status_value,
    )


def make_task(id, status, title="Task", board_id=1, priority="medium", **fields):
    return TaskSchema(
        id=id,
        board_id=board_id,
        title=title,
        status=status,
        priority=priority,
        **fields,
    )
