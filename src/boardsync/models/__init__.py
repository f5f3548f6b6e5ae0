"""Data models."""

from .board import (
    BOARD_CONTAINER,
    PROTECTED_COLUMNS,
    Board,
    Column,
    InvariantViolation,
    ProtectedColumnError,
    is_protected_title,
)
from .move import FieldChange, ItemKind, Move, MoveResult
from .sync import RemoteResult, SyncOutcome
from .task import Task

__all__ = [
    "BOARD_CONTAINER",
    "PROTECTED_COLUMNS",
    "Board",
    "Column",
    "FieldChange",
    "InvariantViolation",
    "ItemKind",
    "Move",
    "MoveResult",
    "ProtectedColumnError",
    "RemoteResult",
    "SyncOutcome",
    "Task",
    "is_protected_title",
]
