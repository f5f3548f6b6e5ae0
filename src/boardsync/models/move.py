"""Move events emitted by the UI and the resolver's output."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .board import Board
from .task import Task


class ItemKind(str, Enum):
    """What is being moved."""

    COLUMN = "column"
    TASK = "task"


@dataclass(frozen=True)
class Move:
    """A structured move event: where an item was picked up and dropped.

    For task moves the containers are column ids; for column moves both
    containers are the board container id.
    """

    item_kind: ItemKind
    source_container: str
    source_index: int
    dest_container: str
    dest_index: int

    @property
    def is_noop(self) -> bool:
        """Dropped exactly where it was picked up."""
        return (
            self.source_container == self.dest_container
            and self.source_index == self.dest_index
        )


@dataclass
class FieldChange:
    """A derived change to one field of a task."""

    task_id: str
    field: str
    old: Any
    new: Any


@dataclass
class MoveResult:
    """Outcome of resolving a move against a board."""

    board: Board | None  # None when the move is a no-op
    changes: list[FieldChange] = field(default_factory=list)
    task: Task | None = None  # The moved task (task moves only)

    @property
    def is_noop(self) -> bool:
        """Whether the caller should skip the apply and the remote call."""
        return self.board is None
