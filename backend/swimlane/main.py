"""Main FastAPI application for Swimlane."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import load_config
from .models.database import init_db, dispose_db
from .utils.logging import setup_logging
from .routers import boards_router, columns_router, tasks_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    config = load_config()
    setup_logging()
    logger.info("Starting Swimlane...")

    await init_db()
    logger.info("Database initialized")

    logger.info(f"Server: {config.server.host}:{config.server.port}")
    logger.info(f"Debug mode: {config.server.debug}")

    yield

    logger.info("Shutting down Swimlane...")
    await dispose_db()


app = FastAPI(
    title="Swimlane",
    description="Board ordering engine: columns, status mapping and drag-and-drop placement",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware (for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=load_config().board.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(boards_router)
app.include_router(columns_router)
app.include_router(tasks_router)


@app.get("/api/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {"status": "healthy", "service": "swimlane"}


if __name__ == "__main__":
    import uvicorn

    config = load_config()
    uvicorn.run(
        "swimlane.main:app",
        host=config.server.host,
        port=config.server.port,
        reload=config.server.debug,
    )
