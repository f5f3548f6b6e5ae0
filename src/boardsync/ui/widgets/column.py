"""Kanban column widget."""

import re

from textual.actions import SkipAction
from textual.app import ComposeResult
from textual.containers import VerticalScroll
from textual.widget import Widget
from textual.widgets import Static

from ...models import Column, Task
from ...services import is_done_like
from .task_card import TaskCard


def css_id(value: str) -> str:
    """Generate a CSS-safe id fragment from an arbitrary identifier."""
    safe_id = re.sub(r"[^a-zA-Z0-9\-]", "-", value)
    safe_id = safe_id.strip("-").lower()
    return safe_id or "item"


class TaskListScroll(VerticalScroll):
    """Scroll container for task lists.

    Raises SkipAction for navigation keys so they bubble up to the App
    for task navigation instead of being handled as scroll actions.
    """

    def action_scroll_up(self) -> None:
        raise SkipAction()

    def action_scroll_down(self) -> None:
        raise SkipAction()

    def action_scroll_home(self) -> None:
        raise SkipAction()

    def action_scroll_end(self) -> None:
        raise SkipAction()


class EmptyColumnMessage(Static):
    """Displayed when a column has no tasks."""

    pass


class KanbanColumn(Widget):
    """A single column of the board.

    ``tasks`` may be a filtered subset of the column's tasks.
    """

    def __init__(self, column: Column, tasks: list[Task] | None = None, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.column = column
        self._tasks = list(column.tasks if tasks is None else tasks)

    def compose(self) -> ComposeResult:
        """Create column layout."""
        yield Static(self._header_text, classes="column-header")
        with TaskListScroll(classes="column-content"):
            if not self._tasks:
                yield EmptyColumnMessage("No tasks")
            for task in self._tasks:
                yield TaskCard(task, id=f"task-{css_id(task.id)}")

    @property
    def _header_text(self) -> str:
        """Header text with styled task count."""
        marker = " [green]✔[/]" if is_done_like(self.column.title) else ""
        return f"{self.column.title}{marker} [dim]({len(self._tasks)})[/]"

    @property
    def tasks(self) -> list[Task]:
        """The tasks shown in this column."""
        return self._tasks

    @property
    def task_count(self) -> int:
        return len(self._tasks)

    def get_task(self, index: int) -> Task | None:
        """Get task at index."""
        if 0 <= index < len(self._tasks):
            return self._tasks[index]
        return None

    def focus_task(self, index: int) -> bool:
        """
        Focus the task at the given index.

        Returns:
            True if a task was focused, False otherwise
        """
        task = self.get_task(index)
        if task is None:
            return False
        cards = self.query(f"#task-{css_id(task.id)}").results(TaskCard)
        for card in cards:
            card.focus()
            card.scroll_visible()
            return True
        return False
