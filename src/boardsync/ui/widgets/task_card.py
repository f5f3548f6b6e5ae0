"""Task card widget."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.widget import Widget
from textual.widgets import Static

from ...models import Task


class TaskCard(Widget, can_focus=True):
    """A task card displayed in a column."""

    def __init__(self, task_data: Task, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._task_data = task_data

    @property
    def task(self) -> Task:  # pyrefly: ignore[bad-override]
        """Get the task for this card."""
        return self._task_data

    def compose(self) -> ComposeResult:
        """Create card layout."""
        marker = "[green]✔[/] " if self._task_data.completed else ""
        yield Static(marker + self._truncate(self._task_data.title, 40), classes="task-title")

        meta = self._format_meta()
        if meta:
            yield Static(meta, classes="task-meta")

        if self._task_data.tags:
            yield Static(self._format_tags(), classes="task-tags")

        preview = self._get_description_preview()
        if preview:
            yield Static(preview, classes="task-preview")

    def _format_meta(self) -> str:
        """Due date and completion time."""
        parts: list[str] = []
        if self._task_data.due_date:
            parts.append(f"[yellow]due {self._task_data.due_date.isoformat()}[/]")
        if self._task_data.completed_at:
            parts.append(f"[dim]done {self._task_data.completed_at:%Y-%m-%d}[/]")
        return "  ".join(parts)

    def _truncate(self, text: str, max_len: int) -> str:
        """Truncate text with ellipsis."""
        if len(text) <= max_len:
            return text
        return text[: max_len - 1] + "…"

    def _format_tags(self) -> str:
        """Format tags for display as chips."""
        max_tags = 3
        tags = self._task_data.tags[:max_tags]
        formatted = " ".join(f"[dim]#{tag}[/]" for tag in tags)

        if len(self._task_data.tags) > max_tags:
            extra = len(self._task_data.tags) - max_tags
            formatted += f" [dim]+{extra}[/]"

        return formatted

    def _get_description_preview(self) -> str:
        """First non-empty line of the description."""
        for line in (self._task_data.description or "").split("\n"):
            line = line.strip()
            if line:
                return self._truncate(line, 50)
        return ""
