"""Modal form for creating and editing tasks."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Input, Label

from ...models import Task


@dataclass
class TaskForm:
    """Values entered in the task form."""

    title: str
    description: str | None = None
    tags: list[str] = field(default_factory=list)
    due_date: date | None = None


def parse_tags(value: str) -> list[str]:
    """Comma separated tags, blanks dropped."""
    return [tag.strip() for tag in value.split(",") if tag.strip()]


def parse_due_date(value: str) -> date | None:
    """YYYY-MM-DD or empty.

    Raises:
        ValueError: Not a valid ISO date
    """
    value = value.strip()
    if not value:
        return None
    return date.fromisoformat(value)


class TaskFormModal(ModalScreen[TaskForm | None]):
    """Title, description, tags and due date of a task."""

    DEFAULT_CSS = """
    TaskFormModal {
        align: center middle;
    }

    TaskFormModal > Vertical {
        width: 70;
        height: auto;
        padding: 1 2;
        background: $surface;
        border: solid $primary;
    }

    TaskFormModal .form-error {
        color: $error;
        height: auto;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    def __init__(self, heading: str, task: Task | None = None) -> None:
        super().__init__()
        self.heading = heading
        self._initial = task

    def compose(self) -> ComposeResult:
        task = self._initial
        with Vertical():
            yield Label(f"[b]{self.heading}[/]")
            yield Label("Title")
            yield Input(value=task.title if task else "", id="form-title")
            yield Label("Description")
            yield Input(value=(task.description or "") if task else "", id="form-description")
            yield Label("Tags (comma separated)")
            yield Input(value=", ".join(task.tags) if task else "", id="form-tags")
            yield Label("Due date (YYYY-MM-DD)")
            yield Input(
                value=task.due_date.isoformat() if task and task.due_date else "",
                id="form-due",
            )
            yield Label("", id="form-error", classes="form-error")

    def on_mount(self) -> None:
        self.query_one("#form-title", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        error_label = self.query_one("#form-error", Label)

        title = self.query_one("#form-title", Input).value.strip()
        if not title:
            error_label.update("Title is required")
            return

        try:
            due_date = parse_due_date(self.query_one("#form-due", Input).value)
        except ValueError:
            error_label.update("Due date must look like 2024-05-31")
            return

        description = self.query_one("#form-description", Input).value.strip()
        self.dismiss(
            TaskForm(
                title=title,
                description=description or None,
                tags=parse_tags(self.query_one("#form-tags", Input).value),
                due_date=due_date,
            )
        )

    def action_cancel(self) -> None:
        self.dismiss(None)
