"""boardsync TUI Application."""

from pathlib import Path

from textual import work
from textual.app import App
from textual.binding import Binding
from textual.screen import ModalScreen

from .config import Settings
from .models import Column, Task
from .services import BOARD_CHANGED, NOTICE_RAISED, BoardSession, FilterService, ImportValidationError
from .ui.screens.board import BoardScreen
from .ui.widgets import (
    CommandBar,
    ConfirmModal,
    PromptModal,
    TaskForm,
    TaskFormModal,
)


class BoardsyncApp(App):
    """boardsync - Terminal Kanban board with remote sync."""

    TITLE = "boardsync"

    CSS_PATH = "ui/styles.tcss"

    BINDINGS = [
        # Core bindings
        Binding("q", "quit", "Quit", show=True),
        Binding("r", "refresh", "Refresh", show=True),
        Binding("ctrl+z", "undo", "Undo", show=True),
        Binding("ctrl+y", "redo", "Redo", show=True),
        # Navigation - vim style
        Binding("h", "nav_left", "← Column", show=False),
        Binding("j", "nav_down", "↓ Task", show=False),
        Binding("k", "nav_up", "↑ Task", show=False),
        Binding("l", "nav_right", "→ Column", show=False),
        # Navigation - arrow keys
        Binding("left", "nav_left", "← Column", show=False),
        Binding("down", "nav_down", "↓ Task", show=False),
        Binding("up", "nav_up", "↑ Task", show=False),
        Binding("right", "nav_right", "→ Column", show=False),
        # Task actions
        Binding("n", "new_task", "New", show=True),
        Binding("e", "edit_task", "Edit", show=True),
        Binding("d", "delete_task", "Delete", show=False),
        Binding("H", "move_task_left", "Move ←", show=False),
        Binding("L", "move_task_right", "Move →", show=False),
        Binding("shift+left", "move_task_left", "Move ←", show=False),
        Binding("shift+right", "move_task_right", "Move →", show=False),
        Binding("K", "move_task_up", "Move ↑", show=False),
        Binding("J", "move_task_down", "Move ↓", show=False),
        Binding("shift+up", "move_task_up", "Move ↑", show=False),
        Binding("shift+down", "move_task_down", "Move ↓", show=False),
        # Column actions
        Binding("c", "new_column", "Column", show=True),
        Binding("R", "rename_column", "Rename", show=False),
        Binding("D", "delete_column", "Delete column", show=False),
        Binding("less_than_sign", "move_column_left", "Column ←", show=False),
        Binding("greater_than_sign", "move_column_right", "Column →", show=False),
        # Backups
        Binding("x", "export", "Export", show=True),
        Binding("i", "import", "Import", show=False),
        # Filter mode
        Binding("/", "enter_filter", "Filter", show=True),
        Binding("escape", "escape", "Back", show=False, priority=True),
    ]

    def __init__(self, settings: Settings | None = None) -> None:
        super().__init__()
        self.settings = settings or Settings()
        self.session = BoardSession(self.settings, confirm=self._confirm)
        self.filter_service = FilterService()
        self._render_scheduled = False
        self._focus_task_id: str | None = None
        self._unsubscribers = [
            self.session.events.subscribe(BOARD_CHANGED, self._on_board_changed),
            self.session.events.subscribe(NOTICE_RAISED, self._on_notice),
        ]

    async def on_mount(self) -> None:
        """Load the board, then show it."""
        source = await self.session.load()
        await self.push_screen(BoardScreen())
        if source == "empty":
            self.notify("Started an empty board", timeout=3)

    async def on_unmount(self) -> None:
        """Write pending state and close the remote client, however the app exits."""
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        await self.session.close()

    # --- Session events ---

    async def _confirm(self, message: str) -> bool:
        """Confirmation used by deletes; must run inside a worker."""
        return bool(await self.push_screen_wait(ConfirmModal(message)))

    def _on_board_changed(self, board) -> None:
        if self._render_scheduled:
            return
        self._render_scheduled = True
        self.call_later(self._render_board)

    async def _render_board(self) -> None:
        self._render_scheduled = False
        screen = self._board_screen()
        if screen is None:
            return
        if self._focus_task_id is None:
            task = screen.get_current_task()
            self._focus_task_id = task.id if task else None
        await screen.render_board(focus_task_id=self._focus_task_id)
        self._focus_task_id = None

    def _on_notice(self, message: str) -> None:
        self.notify(message, severity="warning", timeout=4)

    def _board_screen(self) -> BoardScreen | None:
        screen = self.screen
        if isinstance(screen, BoardScreen):
            return screen
        return None

    def _current_task(self) -> Task | None:
        screen = self._board_screen()
        return screen.get_current_task() if screen else None

    def _current_column(self) -> Column | None:
        screen = self._board_screen()
        return screen.get_current_column() if screen else None

    # --- Navigation ---

    def action_nav_left(self) -> None:
        """Navigate to previous column."""
        screen = self._board_screen()
        if screen:
            screen.navigate_column(-1)

    def action_nav_right(self) -> None:
        """Navigate to next column."""
        screen = self._board_screen()
        if screen:
            screen.navigate_column(1)

    def action_nav_up(self) -> None:
        """Navigate to previous task."""
        screen = self._board_screen()
        if screen:
            screen.navigate_task(-1)

    def action_nav_down(self) -> None:
        """Navigate to next task."""
        screen = self._board_screen()
        if screen:
            screen.navigate_task(1)

    # --- History ---

    def action_undo(self) -> None:
        if not self.session.undo():
            self.notify("Nothing to undo", timeout=2)

    def action_redo(self) -> None:
        if not self.session.redo():
            self.notify("Nothing to redo", timeout=2)

    # --- Moves ---

    def _move_task(self, column_delta: int = 0, index_delta: int = 0) -> None:
        screen = self._board_screen()
        task = self._current_task()
        if screen is None or task is None:
            return

        move = screen.task_move(task, column_delta=column_delta, index_delta=index_delta)
        if move is None:
            return

        self._focus_task_id = task.id
        result = self.session.sync.apply_move(move)
        if result.is_noop:
            self._focus_task_id = None
            return
        for change in result.changes:
            if change.field == "completed":
                self.notify("Task completed" if change.new else "Task reopened", timeout=2)

    def action_move_task_left(self) -> None:
        """Move current task to previous column."""
        self._move_task(column_delta=-1)

    def action_move_task_right(self) -> None:
        """Move current task to next column."""
        self._move_task(column_delta=1)

    def action_move_task_up(self) -> None:
        """Move current task up in column."""
        self._move_task(index_delta=-1)

    def action_move_task_down(self) -> None:
        """Move current task down in column."""
        self._move_task(index_delta=1)

    def _move_column(self, delta: int) -> None:
        screen = self._board_screen()
        column = self._current_column()
        if screen is None or column is None or screen.is_filtered:
            return

        move = screen.column_move(column, delta)
        if move is None:
            return
        if not self.session.sync.apply_move(move).is_noop:
            screen.follow_column(delta)

    def action_move_column_left(self) -> None:
        self._move_column(-1)

    def action_move_column_right(self) -> None:
        self._move_column(1)

    # --- Tasks ---

    def action_new_task(self) -> None:
        """Create a task in the current column."""
        column = self._current_column()
        if column is None:
            return
        column_id = column.id

        def handle(form: TaskForm | None) -> None:
            if form is None:
                return
            task = self.session.sync.add_task(
                column_id, form.title, form.description, form.tags, form.due_date
            )
            if task:
                self._focus_task_id = task.id
                self.notify("Task created", timeout=2)

        self.push_screen(TaskFormModal(f"New task in {column.title}"), callback=handle)

    def action_edit_task(self) -> None:
        """Edit title, description, tags and due date of the current task."""
        task = self._current_task()
        if task is None:
            return
        task_id = task.id

        def handle(form: TaskForm | None) -> None:
            if form is None:
                return
            self._focus_task_id = task_id
            self.session.sync.save_task(
                task_id, form.title, form.description, form.tags, form.due_date
            )

        self.push_screen(TaskFormModal("Edit task", task), callback=handle)

    @work(exclusive=True, group="confirm")
    async def action_delete_task(self) -> None:
        """Delete the current task (with confirmation)."""
        task = self._current_task()
        if task is None:
            return
        if await self.session.sync.delete_task(task.id):
            self.notify("Task deleted", timeout=2)

    # --- Columns ---

    def action_new_column(self) -> None:
        def handle(title: str | None) -> None:
            if title and self.session.sync.add_column(title):
                self.notify(f"Column '{title}' added", timeout=2)

        self.push_screen(PromptModal("New column title", placeholder="Review"), callback=handle)

    def action_rename_column(self) -> None:
        column = self._current_column()
        if column is None:
            return
        column_id = column.id

        def handle(title: str | None) -> None:
            if title:
                self.session.sync.rename_column(column_id, title)

        self.push_screen(PromptModal("Rename column", value=column.title), callback=handle)

    @work(exclusive=True, group="confirm")
    async def action_delete_column(self) -> None:
        """Delete the current column and its tasks (with confirmation)."""
        column = self._current_column()
        if column is None:
            return
        if await self.session.sync.delete_column(column.id):
            self.notify("Column deleted", timeout=2)

    # --- Remote and backups ---

    @work(exclusive=True, group="refresh")
    async def action_refresh(self) -> None:
        """Replace the board with the remote's view."""
        outcome = await self.session.sync.refresh()
        if not outcome.has_error:
            self.notify("Board refreshed", timeout=2)

    def action_export(self) -> None:
        """Write a backup of the board to the working directory."""
        self.session.persistence.flush()
        path = self.session.persistence.export_file(Path.cwd())
        if path is None:
            self.notify("Export failed", severity="error")
        else:
            self.notify(f"Exported to {path.name}", timeout=3)

    def action_import(self) -> None:
        def handle(value: str | None) -> None:
            if not value:
                return
            try:
                parsed = self.session.persistence.import_file(Path(value).expanduser())
            except ImportValidationError as e:
                self.notify(str(e), severity="error")
                return
            self.notify(f"Imported {len(parsed.board.columns)} columns", timeout=3)

        self.push_screen(
            PromptModal("Import backup file", placeholder="kanban-backup-....json"),
            callback=handle,
        )

    # --- Filter ---

    def action_enter_filter(self) -> None:
        """Enter filter mode."""
        screen = self._board_screen()
        if screen:
            screen.command_bar.enter_filter_mode()

    def action_escape(self) -> None:
        """Handle escape: dismiss modal, exit filter mode, or clear filter."""
        screen = self.screen

        if isinstance(screen, ModalScreen):
            screen.dismiss()
            return

        if not isinstance(screen, BoardScreen):
            return

        command_bar = screen.command_bar
        if command_bar.is_visible:
            command_bar.exit_filter_mode()
        elif command_bar.active_filter:
            command_bar.clear_filter()
            self.call_later(self._apply_filter, "")

    async def on_input_submitted(self, event) -> None:
        """Handle filter input submission."""
        if event.input.id == "filter-input":
            screen = self._board_screen()
            if screen:
                command_bar = screen.query_one(CommandBar)
                command_bar.apply_filter(event.value)
                command_bar.exit_filter_mode()
                await self._apply_filter(event.value)

    async def _apply_filter(self, expression: str) -> None:
        """Apply filter to the board."""
        screen = self._board_screen()
        if screen is None:
            return

        if expression.strip():
            screen.set_filter(self.filter_service.parse(expression), expression)
        else:
            screen.set_filter(None, "")
        await screen.render_board()


def run(settings: Settings | None = None) -> None:
    """Run the boardsync application."""
    app = BoardsyncApp(settings)
    app.run()
