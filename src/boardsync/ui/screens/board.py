"""Main kanban board screen."""

from textual.app import ComposeResult
from textual.containers import Container, Horizontal
from textual.screen import Screen
from textual.widgets import Footer, Header, Static

from ...models import BOARD_CONTAINER, Board, Column, ItemKind, Move, Task
from ...services import Filter, FilterService, ProgressService
from ..widgets.column import KanbanColumn, css_id
from ..widgets.command_bar import CommandBar


class BoardScreen(Screen):
    """Board screen: renders the session's board and turns keys into moves."""

    LAYERS = ["base", "command"]

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._current_column = 0
        self._current_task = 0
        self._filter: Filter | None = None
        self._filter_service = FilterService()
        self._progress_service = ProgressService()
        self._pending_focus_task_id: str | None = None

    @property
    def board(self) -> Board:
        """The live board of the app's session."""
        return self.app.session.board  # pyrefly: ignore[missing-attribute]

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static("", id="progress-status", classes="progress-status-bar")
        with Container(id="board-container"):
            yield Horizontal(id="columns")
        yield Static("", id="filter-status", classes="filter-status-bar")
        yield CommandBar()
        yield Footer()

    async def on_mount(self) -> None:
        await self.render_board()

    # --- Rendering ---

    def visible_columns(self) -> list[Column]:
        """Columns as shown, after the active filter."""
        if self._filter is None:
            return list(self.board.columns)
        return self._filter_service.apply(self.board, self._filter)

    async def render_board(self, focus_task_id: str | None = None) -> None:
        """Rebuild the column widgets from the live board."""
        container = self.query_one("#columns", Horizontal)
        await container.remove_children()
        await container.mount_all(
            KanbanColumn(column, list(column.tasks), id=f"column-{css_id(column.id)}")
            for column in self.visible_columns()
        )
        self._update_progress()
        self._pending_focus_task_id = focus_task_id
        self.call_after_refresh(self._apply_pending_focus)

    def _update_progress(self) -> None:
        summary = self._progress_service.summary(self.board)
        sign = "+" if summary.change > 0 else ""
        spark = "".join(" ▁▂▃▄▅▆▇█"[min(v, 8)] for v in summary.values)
        status = self.query_one("#progress-status", Static)
        status.update(
            f"Completed (14d) [b]{summary.total}[/] {spark} "
            f"[dim]last 7d {summary.recent} ({sign}{summary.change}%)[/]"
        )

    def _apply_pending_focus(self) -> None:
        if self._pending_focus_task_id:
            position = self._find_task_position(self._pending_focus_task_id)
            if position:
                self._current_column, self._current_task = position
        self._clamp_position()
        self._update_focus()

    def _find_task_position(self, task_id: str) -> tuple[int, int] | None:
        for col_idx, column in enumerate(self._column_widgets()):
            for task_idx, task in enumerate(column.tasks):
                if task.id == task_id:
                    return (col_idx, task_idx)
        return None

    # --- Navigation ---

    def _column_widgets(self) -> list[KanbanColumn]:
        return list(self.query(KanbanColumn).results(KanbanColumn))

    def _get_column(self, index: int) -> KanbanColumn | None:
        widgets = self._column_widgets()
        if 0 <= index < len(widgets):
            return widgets[index]
        return None

    def _clamp_position(self) -> None:
        count = len(self._column_widgets())
        self._current_column = max(0, min(self._current_column, count - 1))
        column = self._get_column(self._current_column)
        if column and column.task_count > 0:
            self._current_task = max(0, min(self._current_task, column.task_count - 1))
        else:
            self._current_task = 0

    def _update_focus(self) -> None:
        column = self._get_column(self._current_column)
        if column and not column.focus_task(self._current_task):
            column.focus()

    def navigate_column(self, delta: int) -> None:
        """Navigate between columns."""
        self._current_column += delta
        self._clamp_position()
        self._update_focus()

    def navigate_task(self, delta: int) -> None:
        """Navigate between tasks in current column."""
        self._current_task += delta
        self._clamp_position()
        self._update_focus()

    def get_current_column(self) -> Column | None:
        """The live column under the cursor."""
        widget = self._get_column(self._current_column)
        if widget is None:
            return None
        return self.board.find_column(widget.column.id)

    def get_current_task(self) -> Task | None:
        """The live task under the cursor."""
        widget = self._get_column(self._current_column)
        if widget is None:
            return None
        task = widget.get_task(self._current_task)
        if task is None:
            return None
        return self.board.find_task(task.id)

    # --- Move events ---

    def task_move(self, task: Task, column_delta: int = 0, index_delta: int = 0) -> Move | None:
        """
        Move event for shifting a task.

        Indices refer to the full board, not the filtered view. Moving to
        another column drops the task at the end of it.
        """
        source = self.board.column_of(task.id)
        if source is None:
            return None
        source_index = source.task_index(task.id)

        if column_delta:
            dest_col_index = self.board.column_index(source.id) + column_delta
            if not 0 <= dest_col_index < len(self.board.columns):
                return None
            destination = self.board.columns[dest_col_index]
            dest_index = len(destination.tasks)
        else:
            destination = source
            dest_index = source_index + index_delta
            if not 0 <= dest_index < len(source.tasks):
                return None

        return Move(ItemKind.TASK, source.id, source_index, destination.id, dest_index)

    def column_move(self, column: Column, delta: int) -> Move | None:
        """Move event for shifting a column left or right."""
        source_index = self.board.column_index(column.id)
        dest_index = source_index + delta
        if source_index < 0 or not 0 <= dest_index < len(self.board.columns):
            return None
        return Move(ItemKind.COLUMN, BOARD_CONTAINER, source_index, BOARD_CONTAINER, dest_index)

    def follow_column(self, delta: int) -> None:
        """Keep the cursor on a column that was just moved."""
        self._current_column += delta

    # --- Filter ---

    def set_filter(self, filter_: Filter | None, expression: str = "") -> None:
        """Set the active filter."""
        self._filter = filter_
        status = self.query_one("#filter-status", Static)
        if expression.strip():
            status.update(f"[dim]Search:[/] {expression} [dim](Esc to clear)[/]")
            status.display = True
        else:
            status.update("")
            status.display = False

    @property
    def is_filtered(self) -> bool:
        return self._filter is not None

    @property
    def command_bar(self) -> CommandBar:
        return self.query_one(CommandBar)
