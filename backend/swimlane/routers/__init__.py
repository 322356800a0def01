"""API routers for Swimlane."""

from .boards import router as boards_router
from .columns import router as columns_router
from .tasks import router as tasks_router

__all__ = [
    "boards_router",
    "columns_router",
    "tasks_router",
]
