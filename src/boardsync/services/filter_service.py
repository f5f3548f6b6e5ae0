"""Service for parsing and applying search filters to the board."""

import re
from dataclasses import dataclass, field

from ..models import Board, Column, Task


@dataclass
class Filter:
    """Represents a parsed filter expression."""

    text: str | None = None  # Free text search
    tags: list[str] = field(default_factory=list)  # tag:value
    exclude_tags: list[str] = field(default_factory=list)  # -tag:value
    columns: list[str] = field(default_factory=list)  # column:value (substring)
    completed: bool | None = None  # done:true / done:false

    @property
    def is_empty(self) -> bool:
        """Whether the filter matches everything."""
        return (
            not self.text
            and not self.tags
            and not self.exclude_tags
            and not self.columns
            and self.completed is None
        )


class FilterService:
    """Service for parsing and applying filters to the board."""

    # Pattern for key:value tokens
    TOKEN_PATTERN = re.compile(r"(-?)(?:(tag|column|done):)?(\S+)")

    def parse(self, expression: str) -> Filter:
        """
        Parse a filter expression string.

        Syntax:
        - Free text: matches title, description, tags or due date
        - tag:value: filter by tag
        - -tag:value: exclude tag
        - column:value: only columns whose title contains value
        - done:true/false: completed or open tasks

        Multiple conditions are ANDed together.
        """
        f = Filter()
        text_parts: list[str] = []

        for match in self.TOKEN_PATTERN.finditer(expression):
            negated = match.group(1) == "-"
            key = match.group(2)
            value = match.group(3).lower()

            if key is None:
                if not negated:
                    text_parts.append(match.group(3))

            elif key == "tag":
                if negated:
                    f.exclude_tags.append(value)
                else:
                    f.tags.append(value)

            elif key == "column":
                f.columns.append(value)

            elif key == "done":
                f.completed = value in ("true", "yes", "1")

        if text_parts:
            f.text = " ".join(text_parts)

        return f

    def apply(self, board: Board, filter_: Filter) -> list[Column]:
        """
        Filter the board for display.

        Returns copies of the columns holding only matching tasks. A column
        is kept if its title matches the free text or any of its tasks do.
        The board itself is not modified.
        """
        if filter_.is_empty:
            return list(board.columns)

        result: list[Column] = []
        for column in board.columns:
            title = column.title.lower()
            if filter_.columns and not any(c in title for c in filter_.columns):
                continue

            tasks = [task for task in column.tasks if self._matches(task, filter_)]
            column_matches = bool(filter_.text) and filter_.text.lower() in title
            if column_matches or tasks or (filter_.columns and not self._filters_tasks(filter_)):
                result.append(column.model_copy(update={"tasks": tasks}))

        return result

    def _filters_tasks(self, f: Filter) -> bool:
        return bool(f.text or f.tags or f.exclude_tags or f.completed is not None)

    def _matches(self, task: Task, f: Filter) -> bool:
        """Check if a task matches the filter."""
        task_tags = [t.lower() for t in task.tags]

        if f.text:
            search_text = f.text.lower()
            haystacks = [
                task.title.lower(),
                (task.description or "").lower(),
                *task_tags,
                task.due_date.isoformat() if task.due_date else "",
            ]
            if not any(search_text in h for h in haystacks):
                return False

        # Tag inclusion (any match)
        if f.tags and not any(tag in task_tags for tag in f.tags):
            return False

        # Tag exclusion (no matches)
        if f.exclude_tags and any(tag in task_tags for tag in f.exclude_tags):
            return False

        if f.completed is not None and task.completed != f.completed:
            return False

        return True
