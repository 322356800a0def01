"""Task service: board items as seen by the board engine."""

from datetime import datetime
from typing import Optional

from sqlalchemy import select, update, and_
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.task import Task


class TaskService:
    """Bulk fetch of board items and updates to their placement."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_board_tasks(self, board_id: int) -> list[Task]:
        """Get every item of a board, sub-items included."""
        query = (
            select(Task)
            .where(Task.board_id == board_id)
            .order_by(Task.kanban_position, Task.created_at, Task.id)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_task_by_id(self, task_id: int) -> Optional[Task]:
        """Get a single task by ID."""
        result = await self.db.execute(select(Task).where(Task.id == task_id))
        return result.scalar_one_or_none()

    async def create_task(
        self,
        board_id: int,
        title: str,
        status: str,
        description: Optional[str] = None,
        assignee: Optional[str] = None,
        due_date: Optional[datetime] = None,
        priority: str = "medium",
        is_subtask: bool = False,
        parent_task_id: Optional[int] = None,
        kanban_position: Optional[int] = None,
    ) -> Task:
        """Create a new task."""
        task = Task(
            board_id=board_id,
            title=title,
            status=status,
            description=description,
            assignee=assignee,
            due_date=due_date,
            priority=priority,
            is_subtask=is_subtask,
            parent_task_id=parent_task_id,
            kanban_position=kanban_position,
        )
        self.db.add(task)
        await self.db.flush()
        return task

    async def update_task_status(self, task_id: int, status: str) -> Optional[Task]:
        """Set a task's status, leaving every other field as it was."""
        task = await self.get_task_by_id(task_id)
        if task is None:
            return None

        task.status = status
        task.updated_at = datetime.utcnow()
        await self.db.flush()
        return task

    async def move_task(
        self, task_id: int, new_status: str, new_position: Optional[int] = None
    ) -> Optional[Task]:
        """Move a task to a new status, optionally at a position within it."""
        if new_position is None:
            return await self.update_task_status(task_id, new_status)

        task = await self.get_task_by_id(task_id)
        if task is None:
            return None

        # Make room in the target column
        await self.db.execute(
            update(Task)
            .where(
                and_(
                    Task.board_id == task.board_id,
                    Task.status == new_status,
                    Task.kanban_position >= new_position,
                    Task.id != task_id,
                )
            )
            .values(kanban_position=Task.kanban_position + 1)
            .execution_options(synchronize_session="fetch")
        )

        task.status = new_status
        task.kanban_position = new_position
        task.updated_at = datetime.utcnow()

        await self.db.flush()
        return task
