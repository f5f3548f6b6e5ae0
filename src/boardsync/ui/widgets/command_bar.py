"""Filter bar widget."""

from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.widget import Widget
from textual.widgets import Input, Static


class CommandBar(Widget):
    """Filter input docked at the bottom of the screen."""

    DEFAULT_CSS = """
    CommandBar {
        height: 1;
        dock: bottom;
        background: $surface;
        display: none;
        layer: command;
    }

    CommandBar.-visible {
        display: block;
    }

    CommandBar .mode-indicator {
        width: auto;
        padding: 0 1;
        background: $primary;
        color: $text;
    }

    CommandBar .filter-input {
        width: 1fr;
        border: none;
        background: $surface;
    }

    CommandBar .filter-input:focus {
        border: none;
    }
    """

    def __init__(self) -> None:
        super().__init__()
        self._active_filter: str = ""

    def compose(self) -> ComposeResult:
        with Horizontal():
            yield Static("Search:", classes="mode-indicator")
            yield Input(
                placeholder="text tag:bug -tag:later column:progress done:false",
                id="filter-input",
                classes="filter-input",
            )

    def enter_filter_mode(self) -> None:
        """Show the bar and focus the input."""
        self.add_class("-visible")
        input_widget = self.query_one("#filter-input", Input)
        input_widget.value = self._active_filter
        input_widget.focus()

    def exit_filter_mode(self) -> None:
        """Hide the bar without changing the active filter."""
        self.remove_class("-visible")

    def apply_filter(self, expression: str) -> None:
        self._active_filter = expression.strip()

    def clear_filter(self) -> None:
        self._active_filter = ""
        self.query_one("#filter-input", Input).value = ""

    @property
    def active_filter(self) -> str:
        return self._active_filter

    @property
    def is_visible(self) -> bool:
        return self.has_class("-visible")
