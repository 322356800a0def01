"""Tests for the drag-and-drop controller."""

import pytest
from sqlalchemy.exc import OperationalError

from swimlane.services.column import ColumnService
from swimlane.services.drag_drop import (
    COLUMN_CHANNEL,
    ITEM_CHANNEL,
    ColumnDrag,
    DragDropController,
    DragState,
    ItemDrag,
    NoticeLevel,
    channels_for,
    payload_from_channels,
)
from swimlane.services.task import TaskService

from conftest import add_task


def _names(controller):
    return [c.name for c in controller.columns]


@pytest.fixture
async def controller(session_factory, default_columns):
    controller = DragDropController(default_columns[0].board_id, session_factory)
    await controller.refresh()
    return controller


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Payload channels
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_payload_from_item_channel():
    assert payload_from_channels({ITEM_CHANNEL: "7"}) == ItemDrag(7)


def test_payload_from_column_channel():
    assert payload_from_channels({COLUMN_CHANNEL: "3"}) == ColumnDrag(3)


def test_column_channel_wins_when_both_present():
    assert payload_from_channels({ITEM_CHANNEL: "7", COLUMN_CHANNEL: "3"}) == ColumnDrag(3)


def test_missing_or_garbled_channels_give_no_payload():
    assert payload_from_channels({}) is None
    assert payload_from_channels({ITEM_CHANNEL: ""}) is None
    assert payload_from_channels({COLUMN_CHANNEL: "abc"}) is None


def test_channels_for_uses_one_channel_per_variant():
    assert channels_for(ItemDrag(7)) == {ITEM_CHANNEL: "7"}
    assert channels_for(ColumnDrag(3)) == {COLUMN_CHANNEL: "3"}
    assert payload_from_channels(channels_for(ColumnDrag(3))) == ColumnDrag(3)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Gesture state
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


async def test_drag_start_picks_state_from_payload(controller):
    controller.drag_start(ItemDrag(1))
    assert controller.state is DragState.DRAGGING_ITEM

    controller.drag_end()
    controller.drag_start(ColumnDrag(1))
    assert controller.state is DragState.DRAGGING_COLUMN
    assert controller.is_dragging


async def test_hover_index_tracks_column_drags_only(controller):
    controller.drag_start(ItemDrag(1))
    controller.drag_over(2)
    assert controller.hover_index is None

    controller.drag_end()
    controller.drag_start(ColumnDrag(1))
    controller.drag_over(2)
    assert controller.hover_index == 2

    controller.drag_leave()
    assert controller.hover_index is None


async def test_cancel_persists_nothing(controller, session_factory, monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("no persistence expected")

    monkeypatch.setattr(ColumnService, "reindex", fail)
    monkeypatch.setattr(TaskService, "update_task_status", fail)

    before = list(controller.columns)
    controller.drag_start(ColumnDrag(controller.columns[3].id))
    controller.drag_over(0)
    controller.cancel()

    assert controller.state is DragState.IDLE
    assert controller.hover_index is None
    assert not controller.is_dragging
    assert controller.columns == before


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Item drops
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


async def test_item_drop_moves_item_to_column(session_factory, board):
    async with session_factory() as db:
        service = ColumnService(db)
        await service.create_column(board.id, "To Do", status_value="todo")
        done = await service.create_column(board.id, "Done", status_value="done")
        task = await add_task(db, board, "A", "todo")

    controller = DragDropController(board.id, session_factory)
    await controller.refresh()
    todo_column = controller.columns[0]

    controller.drag_start(ItemDrag(task.id))
    assert await controller.drop_item(done.id)

    assert controller.state is DragState.IDLE
    assert [t.status for t in controller.items] == ["done"]
    assert controller.bucket(todo_column) == []

    await controller.refresh_items()
    assert controller.items[0].status == "done"
    assert controller.notices[-1].level is NoticeLevel.SUCCESS


async def test_item_drop_changes_only_status(controller, session_factory, board):
    async with session_factory() as db:
        await add_task(db, board, "A", "To Do", assignee="ana", kanban_position=4)
    await controller.refresh_items()
    before = controller.items[0]
    review = controller.columns[2]

    await controller.drop_item(review.id, ItemDrag(before.id))
    await controller.refresh_items()
    after = controller.items[0]

    assert after.status == "Review"
    assert after.model_dump(exclude={"status"}) == before.model_dump(exclude={"status"})


async def test_item_drop_failure_refetches_ground_truth(controller, session_factory, board, monkeypatch):
    async with session_factory() as db:
        task = await add_task(db, board, "A", "To Do")
    await controller.refresh_items()

    async def broken(self, task_id, status):
        raise OperationalError("UPDATE tasks", {}, Exception("database is locked"))

    monkeypatch.setattr(TaskService, "update_task_status", broken)

    assert not await controller.drop_item(controller.columns[3].id, ItemDrag(task.id))

    assert controller.items[0].status == "To Do"
    assert controller.notices[-1].level is NoticeLevel.ERROR


async def test_item_drop_ignores_column_payload(controller, monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("no persistence expected")

    monkeypatch.setattr(TaskService, "update_task_status", fail)

    assert not await controller.drop_item(
        controller.columns[0].id, ColumnDrag(controller.columns[3].id)
    )


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Column drops
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


async def test_column_drop_moves_done_to_front(controller):
    controller.drag_start(ColumnDrag(controller.columns[3].id))
    controller.drag_over(0)

    assert await controller.drop_column(0)

    expected = [("Done", 0), ("To Do", 1), ("In Progress", 2), ("Review", 3)]
    assert [(c.name, c.position) for c in controller.columns] == expected
    assert controller.hover_index is None
    assert controller.state is DragState.IDLE

    await controller.load()
    assert [(c.name, c.position) for c in controller.columns] == expected


async def test_column_drop_to_later_index_lands_after_removal(controller):
    assert await controller.drop_column(2, ColumnDrag(controller.columns[0].id))

    assert _names(controller) == ["In Progress", "Review", "To Do", "Done"]
    assert [c.position for c in controller.columns] == [0, 1, 2, 3]


async def test_column_drop_on_own_slot_is_a_no_op(controller, monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("no persistence expected")

    monkeypatch.setattr(ColumnService, "reindex", fail)

    assert not await controller.drop_column(1, ColumnDrag(controller.columns[1].id))
    assert not await controller.drop_column(0, ColumnDrag(999))


async def test_column_drop_ignores_item_payload(controller, monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("no persistence expected")

    monkeypatch.setattr(ColumnService, "reindex", fail)

    assert not await controller.drop_column(0, ItemDrag(1))
    assert _names(controller) == ["To Do", "In Progress", "Review", "Done"]


async def test_column_drop_failure_reloads_partial_order(controller, monkeypatch):
    original = ColumnService._persist_position
    calls = []

    async def flaky(self, column, position):
        calls.append(column.id)
        if len(calls) == 2:
            raise OperationalError("UPDATE columns", {}, Exception("disk I/O error"))
        await original(self, column, position)

    monkeypatch.setattr(ColumnService, "_persist_position", flaky)

    assert not await controller.drop_column(0, ColumnDrag(controller.columns[3].id))

    # Only the first write landed; the view shows what the store holds
    assert _names(controller) == ["To Do", "Done", "In Progress", "Review"]
    assert controller.notices[-1].level is NoticeLevel.ERROR


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Column management
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


async def test_delete_review_blocked_until_items_leave(controller, session_factory, board):
    async with session_factory() as db:
        first = await add_task(db, board, "A", "Review")
        second = await add_task(db, board, "B", "Review")
    review = controller.columns[2]
    done = controller.columns[3]

    check = await controller.delete_column(review.id)
    assert not check.allowed
    assert check.blocking_count == 2
    assert "Review" in _names(controller)

    for task in (first, second):
        await controller.drop_item(done.id, ItemDrag(task.id))

    check = await controller.delete_column(review.id)
    assert check.allowed
    assert _names(controller) == ["To Do", "In Progress", "Done"]


async def test_delete_check_uses_fresh_items(controller, session_factory, board):
    # The view has no items yet; the item arrives behind its back
    async with session_factory() as db:
        await add_task(db, board, "A", "To Do")

    check = await controller.delete_column(controller.columns[0].id)

    assert not check.allowed
    assert check.blocking_count == 1


async def test_create_column_appends(controller):
    column = await controller.create_column("Blocked", "#ef4444")

    assert column.position == 4
    assert column.status_value == "Blocked"
    assert _names(controller)[-1] == "Blocked"


async def test_create_duplicate_column_notifies(controller):
    assert await controller.create_column("Review") is None
    assert controller.notices[-1].level is NoticeLevel.ERROR


async def test_update_column_recolors(controller):
    column = await controller.update_column(controller.columns[0].id, color="#000000")

    assert column.color == "#000000"
    assert controller.columns[0].color == "#000000"


async def test_notice_callback_receives_notices(session_factory, default_columns):
    received = []
    controller = DragDropController(
        default_columns[0].board_id, session_factory, on_notice=received.append
    )
    await controller.refresh()

    await controller.drop_column(0, ColumnDrag(controller.columns[3].id))

    assert received == controller.notices
    assert received[0].message == "Column order updated successfully"


async def test_filters_apply_to_buckets(controller, session_factory, board):
    async with session_factory() as db:
        await add_task(db, board, "Fix login", "To Do")
        await add_task(db, board, "Write docs", "To Do")
    await controller.refresh_items()

    controller.filters = controller.filters.model_copy(update={"search": "login"})

    assert [t.title for t in controller.bucket(controller.columns[0])] == ["Fix login"]
    assert [len(placed) for _, placed in controller.board()] == [1, 0, 0, 0]


async def test_delete_unknown_column_is_reported(controller):
    missing_id = max(c.id for c in controller.columns) + 100

    assert await controller.delete_column(missing_id) is None
    assert controller.notices[-1].level is NoticeLevel.ERROR
    assert controller.notices[-1].message == "Column not found"
    assert len(controller.columns) == 4
