"""Configuration module for the Brain MCP server."""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from brain_mcp import __version__

# Load environment variables from the project root .env file.
# Anchored to __file__ so it works regardless of the process CWD.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
load_dotenv(_PROJECT_ROOT / ".env")

# User-level config, lives next to the default log directory
_USER_ENV = Path.home() / ".brain" / ".env"
load_dotenv(_USER_ENV)


logger = logging.getLogger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class BrainConfig(BaseModel):
    """Configuration for the Brain server."""

    # Base directory that relative paths are resolved against
    base_dir: Path = Field(
        default_factory=lambda: Path(os.getenv("BRAIN_BASE_DIR", "."))
    )
    # Root directory that new notes are written into
    vault_dir: Path = Field(
        default_factory=lambda: Path(os.getenv("BRAIN_VAULT_DIR", "data/vault"))
    )
    # SQLite database file
    database_path: Path = Field(
        default_factory=lambda: Path(
            os.getenv("BRAIN_DATABASE_PATH", "data/db/brain.db")
        )
    )
    # Seconds to wait for the storage lock; negative waits forever
    lock_timeout: float = Field(
        default_factory=lambda: float(os.getenv("BRAIN_LOCK_TIMEOUT", "30"))
    )
    # Logging
    log_level: str = Field(
        default_factory=lambda: os.getenv("BRAIN_LOG_LEVEL", "INFO"),
        validate_default=True,
    )
    log_dir: Path = Field(
        default_factory=lambda: Path(
            os.getenv("BRAIN_LOG_DIR", str(Path.home() / ".brain" / "logs"))
        )
    )
    # Server configuration
    server_name: str = Field(default=os.getenv("BRAIN_SERVER_NAME", "brain-mcp"))
    server_version: str = Field(default=__version__)

    model_config = {"validate_assignment": True}

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize the log level name and reject unknown levels."""
        level = v.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {', '.join(_LOG_LEVELS)}, got {v!r}"
            )
        return level

    def get_absolute_path(self, path: Path) -> Path:
        """Resolve a path against base_dir into its canonical absolute form.

        Stored resource paths are compared as strings, so every path that
        ends up in storage goes through here first.
        """
        return (self.base_dir / path).resolve()

    def get_db_url(self) -> str:
        """Get the database URL for SQLite."""
        db_path = self.get_absolute_path(self.database_path)
        db_path.parent.mkdir(parents=True, exist_ok=True)
        return f"sqlite:///{db_path}"

    def get_vault_dir(self) -> Path:
        """Get the absolute vault directory, creating it if needed."""
        vault_dir = self.get_absolute_path(self.vault_dir)
        vault_dir.mkdir(parents=True, exist_ok=True)
        return vault_dir


# Create a global config instance
config = BrainConfig()
