"""Delete confirmation dialog."""

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Center, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Label


def split_prompt(message: str) -> tuple[str, str | None]:
    """Split a confirmation prompt into its headline and optional detail line."""
    headline, _, detail = message.partition("\n")
    return headline.strip(), detail.strip() or None


class ConfirmModal(ModalScreen[bool]):
    """Asks before a column or task is deleted; dismisses with True to delete.

    The first line of the prompt is the question, anything after it is shown
    dimmed below (e.g. how many tasks go with a column).
    """

    DEFAULT_CSS = """
    ConfirmModal {
        align: center middle;
    }

    ConfirmModal > Vertical {
        width: 56;
        height: auto;
        padding: 1 2;
        background: $surface;
        border: heavy $error;
    }

    ConfirmModal #confirm-headline {
        width: 100%;
        text-align: center;
        text-style: bold;
    }

    ConfirmModal #confirm-detail {
        width: 100%;
        text-align: center;
        color: $text-muted;
    }

    ConfirmModal .buttons {
        width: 100%;
        height: auto;
        margin-top: 1;
        align: center middle;
    }

    ConfirmModal Button {
        margin: 0 1;
    }
    """

    BINDINGS = [
        Binding("y", "delete", "Delete"),
        Binding("n", "keep", "Keep"),
        Binding("escape", "keep", "Keep", show=False),
    ]

    def __init__(self, message: str) -> None:
        super().__init__()
        self.headline, self.detail = split_prompt(message)

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Label(self.headline, id="confirm-headline")
            if self.detail:
                yield Label(self.detail, id="confirm-detail")
            with Center(classes="buttons"):
                yield Button("Delete", id="delete", variant="error")
                yield Button("Keep", id="keep", variant="primary")

    def on_mount(self) -> None:
        self.query_one("#keep", Button).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "delete")

    def action_delete(self) -> None:
        self.dismiss(True)

    def action_keep(self) -> None:
        self.dismiss(False)
