"""Board state models and the ordered-list operations on them."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils import new_id
from .task import Task

logger = logging.getLogger(__name__)

# Columns that must always exist, keyed by their case-insensitive title
PROTECTED_COLUMNS: tuple[tuple[str, str], ...] = (
    ("to do", "To Do"),
    ("in progress", "In Progress"),
    ("complete", "Complete"),
)

# Container id used by column moves
BOARD_CONTAINER = "board"


class InvariantViolation(Exception):
    """An operation referenced something the board does not contain."""

    pass


class ProtectedColumnError(InvariantViolation):
    """Attempt to remove one of the protected columns."""

    pass


def is_protected_title(title: str) -> bool:
    """Check whether a column title names one of the protected columns."""
    key = title.strip().lower()
    return any(key == protected for protected, _ in PROTECTED_COLUMNS)


def _clean_title(title: str) -> str:
    cleaned = title.strip()
    if not cleaned:
        raise ValueError("title must not be empty")
    return cleaned


def _renumber(items: list[Any]) -> None:
    """Dense, zero-based renormalization of a position-bearing sequence."""
    for index, item in enumerate(items):
        item.position = index


class Column(BaseModel):
    """An ordered list of tasks."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=new_id, alias="_id")
    title: str
    position: int = Field(default=0, ge=0, alias="order")
    tasks: list[Task] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        return _clean_title(value)

    @property
    def is_protected(self) -> bool:
        """Whether this column is one of the required ones."""
        return is_protected_title(self.title)

    def task_index(self, task_id: str) -> int:
        """Index of a task in this column, or -1 if absent."""
        for index, task in enumerate(self.tasks):
            if task.id == task_id:
                return index
        return -1

    def normalize(self) -> None:
        """Renumber task positions and point every task at this column."""
        for task in self.tasks:
            task.column_id = self.id
        _renumber(self.tasks)

    def to_wire(self) -> dict[str, Any]:
        """Convert to the JSON-ready dict used by storage and the remote service."""
        return self.model_dump(by_alias=True, mode="json")


class Board(BaseModel):
    """Full board: an ordered list of columns."""

    columns: list[Column] = Field(default_factory=list)

    @classmethod
    def from_wire(cls, columns: list[Any], sort: bool = False) -> Board:
        """
        Build a board from serialized columns.

        Args:
            columns: Column dicts (or Column instances)
            sort: Order columns and tasks by their stored position first,
                  as the remote service does not guarantee list order.
        """
        board = cls(columns=columns)
        if sort:
            board.columns.sort(key=lambda c: c.position)
            for column in board.columns:
                column.tasks.sort(key=lambda t: t.position)
        board.normalize()
        return board

    @classmethod
    def empty(cls) -> Board:
        """An empty board holding only the protected columns."""
        board = cls()
        board.ensure_protected_columns()
        return board

    def to_wire(self) -> list[dict[str, Any]]:
        """Serialized column list."""
        return [column.to_wire() for column in self.columns]

    def clone(self) -> Board:
        """Deep, independent copy; no column or task is shared."""
        return self.model_copy(deep=True)

    # --- Lookup ---

    def find_column(self, column_id: str) -> Column | None:
        """Get a column by id."""
        for column in self.columns:
            if column.id == column_id:
                return column
        return None

    def get_column(self, column_id: str) -> Column:
        """Get a column by id or raise InvariantViolation."""
        column = self.find_column(column_id)
        if column is None:
            raise InvariantViolation(f"Column not found: {column_id}")
        return column

    def column_index(self, column_id: str) -> int:
        """Index of a column, or -1 if absent."""
        for index, column in enumerate(self.columns):
            if column.id == column_id:
                return index
        return -1

    def column_of(self, task_id: str) -> Column | None:
        """The column currently holding a task."""
        for column in self.columns:
            if column.task_index(task_id) >= 0:
                return column
        return None

    def find_task(self, task_id: str) -> Task | None:
        """Get a task by id from any column."""
        column = self.column_of(task_id)
        if column is None:
            return None
        return column.tasks[column.task_index(task_id)]

    def get_task(self, task_id: str) -> Task:
        """Get a task by id or raise InvariantViolation."""
        task = self.find_task(task_id)
        if task is None:
            raise InvariantViolation(f"Task not found: {task_id}")
        return task

    def all_tasks(self) -> list[Task]:
        """Every task, column by column."""
        return [task for column in self.columns for task in column.tasks]

    # --- Invariants ---

    def normalize(self) -> None:
        """Renumber column positions and every column's task positions."""
        _renumber(self.columns)
        for column in self.columns:
            column.normalize()

    def ensure_protected_columns(self) -> list[Column]:
        """
        Synthesize any missing protected column.

        Missing columns are appended in the fixed order To Do, In Progress,
        Complete and all column positions are renormalized.

        Returns:
            The columns that were added.
        """
        titles = {column.title.strip().lower() for column in self.columns}
        added: list[Column] = []
        for key, title in PROTECTED_COLUMNS:
            if key not in titles:
                column = Column(title=title, position=len(self.columns))
                self.columns.append(column)
                added.append(column)
        if added:
            logger.info("Synthesized protected columns: %s", [c.title for c in added])
            _renumber(self.columns)
        return added

    # --- Column operations ---

    def insert_column(self, title: str, column_id: str | None = None) -> Column:
        """Append a new column at the end of the board."""
        column = Column(title=_clean_title(title), position=len(self.columns))
        if column_id is not None:
            column.id = column_id
        self.columns.append(column)
        return column

    def remove_column(self, column_id: str) -> Column:
        """Remove a column and everything in it."""
        column = self.get_column(column_id)
        if column.is_protected:
            raise ProtectedColumnError(f"Column '{column.title}' cannot be removed")
        self.columns.remove(column)
        _renumber(self.columns)
        return column

    def rename_column(self, column_id: str, title: str) -> Column:
        """Change a column's title."""
        column = self.get_column(column_id)
        column.title = _clean_title(title)
        return column

    def move_column(self, from_index: int, to_index: int) -> Column:
        """Reposition a column; the target index is clamped."""
        if not 0 <= from_index < len(self.columns):
            raise InvariantViolation(f"Column index out of range: {from_index}")
        column = self.columns.pop(from_index)
        to_index = max(0, min(to_index, len(self.columns)))
        self.columns.insert(to_index, column)
        _renumber(self.columns)
        return column

    # --- Task operations ---

    def insert_task(self, column_id: str, task: Task) -> Task:
        """Append a task to a column."""
        column = self.get_column(column_id)
        task.column_id = column.id
        task.position = len(column.tasks)
        column.tasks.append(task)
        return task

    def remove_task(self, task_id: str) -> Task:
        """Remove a task from whichever column holds it."""
        column = self.column_of(task_id)
        if column is None:
            raise InvariantViolation(f"Task not found: {task_id}")
        task = column.tasks.pop(column.task_index(task_id))
        _renumber(column.tasks)
        return task

    def move_task(
        self, task_id: str, from_column_id: str, to_column_id: str, to_index: int
    ) -> Task:
        """
        Move a task to an index in another (or the same) column.

        The index is clamped to [0, destination length] after removal.
        Positions of both affected columns are renormalized.
        """
        source = self.get_column(from_column_id)
        destination = self.get_column(to_column_id)
        index = source.task_index(task_id)
        if index < 0:
            raise InvariantViolation(f"Task {task_id} is not in column {from_column_id}")

        task = source.tasks.pop(index)
        to_index = max(0, min(to_index, len(destination.tasks)))
        task.column_id = destination.id
        destination.tasks.insert(to_index, task)

        _renumber(source.tasks)
        if destination is not source:
            _renumber(destination.tasks)
        return task

    def replace_column_id(self, old_id: str, new_id: str) -> bool:
        """Re-key a column (e.g. to the id assigned by the remote)."""
        column = self.find_column(old_id)
        if column is None:
            return False
        column.id = new_id
        for task in column.tasks:
            task.column_id = new_id
        for task in self.all_tasks():
            if task.previous_column_id == old_id:
                task.previous_column_id = new_id
        return True
