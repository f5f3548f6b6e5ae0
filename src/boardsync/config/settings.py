"""Application settings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    data_dir: Path = Field(
        default=Path(".boardsync"),
        description="Directory holding the persisted board and history slots",
    )

    api_base_url: str = Field(
        default="http://localhost:3001/api",
        description="Base URL of the remote board service",
    )

    api_timeout: float = Field(
        default=10.0,
        description="Timeout in seconds for remote requests",
    )

    local_only: bool = Field(
        default=False,
        description="Skip the remote service entirely and keep the board local",
    )

    persist_debounce: float = Field(
        default=0.25,
        description="Quiet interval in seconds before a pending snapshot is written",
    )

    board_slot: str = Field(
        default="kanban_board_state_v1",
        description="Storage slot for the serialized board",
    )

    history_slot: str = Field(
        default="kanban_board_history_v1",
        description="Storage slot for the serialized undo history",
    )

    verbose: int = Field(
        default=0,
        description="Verbosity level (0=off, 1=INFO, 2+=DEBUG)",
    )

    log_file: Path | None = Field(
        default=None,
        description="Optional path to write logs to file",
    )

    model_config = {
        "env_prefix": "BOARDSYNC_",
    }
