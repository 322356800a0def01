"""Configuration loader for Swimlane."""

import os
from pathlib import Path
from typing import Optional
import yaml
from pydantic import BaseModel


class ServerConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False


class DatabaseConfig(BaseModel):
    path: str = "/app/data/swimlane.db"


class LoggingConfig(BaseModel):
    level: str = "info"


class BoardConfig(BaseModel):
    """Board defaults."""
    # Used when a status or a new column arrives without a color
    default_color: str = "#6b7280"
    # Allowed origins for the browser front end
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]


class Config(BaseModel):
    server: ServerConfig = ServerConfig()
    database: DatabaseConfig = DatabaseConfig()
    logging: LoggingConfig = LoggingConfig()
    board: BoardConfig = BoardConfig()


_config: Optional[Config] = None


def load_config(config_path: Optional[str] = None) -> Config:
    """Load configuration from YAML file and environment variables."""
    global _config

    if _config is not None:
        return _config

    # Determine config path
    if config_path is None:
        config_path = os.environ.get("SWIMLANE_CONFIG", "/app/config.yml")

    config_data = {}

    # Load from file if exists
    if Path(config_path).exists():
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}

    config = Config(**config_data)

    # Override with environment variables
    if os.environ.get("SWIMLANE_DB_PATH"):
        config.database.path = os.environ["SWIMLANE_DB_PATH"]

    if os.environ.get("SWIMLANE_LOG_LEVEL"):
        config.logging.level = os.environ["SWIMLANE_LOG_LEVEL"]

    if os.environ.get("SWIMLANE_DEFAULT_COLOR"):
        config.board.default_color = os.environ["SWIMLANE_DEFAULT_COLOR"]

    _config = config
    return config


def get_config() -> Config:
    """Get the loaded configuration."""
    global _config
    if _config is None:
        return load_config()
    return _config


def reset_config() -> None:
    """Forget the cached configuration so the next access reloads it."""
    global _config
    _config = None
