"""Tests for app action handlers and board screen move construction."""

from datetime import date
from pathlib import Path
import asyncio
from unittest.mock import AsyncMock, MagicMock, PropertyMock, patch

import pytest

from boardsync.models import BOARD_CONTAINER, Board, FieldChange, ItemKind, Move, MoveResult
from boardsync.ui.screens.board import BoardScreen
from boardsync.ui.widgets.column import css_id
from boardsync.ui.widgets.confirm_modal import split_prompt
from boardsync.ui.widgets.task_form_modal import parse_due_date, parse_tags


def make_app():
    from boardsync.app import BoardsyncApp

    app = BoardsyncApp.__new__(BoardsyncApp)
    app.notify = MagicMock()
    app.session = MagicMock()
    app._focus_task_id = None
    return app


@pytest.fixture
def screen(board: Board):
    """BoardScreen whose live board is the sample board."""
    with patch.object(BoardScreen, "board", new_callable=PropertyMock, return_value=board):
        yield BoardScreen.__new__(BoardScreen)


class TestFormHelpers:
    """Tests for form parsing helpers."""

    def test_parse_tags(self):
        assert parse_tags(" ui, bug ,, ") == ["ui", "bug"]
        assert parse_tags("") == []

    def test_parse_due_date(self):
        assert parse_due_date("2024-06-01") == date(2024, 6, 1)
        assert parse_due_date("  ") is None
        with pytest.raises(ValueError):
            parse_due_date("tomorrow")

    def test_css_id(self):
        assert css_id("abc_123") == "abc-123"
        assert css_id("___") == "item"

    def test_split_prompt(self):
        assert split_prompt("Delete 'A'?") == ("Delete 'A'?", None)
        assert split_prompt("Delete column 'R'?\n2 tasks will be deleted with it.") == (
            "Delete column 'R'?",
            "2 tasks will be deleted with it.",
        )


class TestMoveConstruction:
    """BoardScreen turns cursor moves into move events on the full board."""

    def test_move_right(self, screen: BoardScreen, board: Board):
        move = screen.task_move(board.get_task("t2"), column_delta=1)
        assert move == Move(ItemKind.TASK, "todo", 1, "doing", 0)

    def test_move_left_from_first_column(self, screen: BoardScreen, board: Board):
        assert screen.task_move(board.get_task("t1"), column_delta=-1) is None

    def test_move_down(self, screen: BoardScreen, board: Board):
        move = screen.task_move(board.get_task("t1"), index_delta=1)
        assert move == Move(ItemKind.TASK, "todo", 0, "todo", 1)

    def test_move_up_at_top(self, screen: BoardScreen, board: Board):
        assert screen.task_move(board.get_task("t1"), index_delta=-1) is None

    def test_column_move(self, screen: BoardScreen, board: Board):
        move = screen.column_move(board.get_column("doing"), 1)
        assert move == Move(ItemKind.COLUMN, BOARD_CONTAINER, 1, BOARD_CONTAINER, 2)
        assert screen.column_move(board.get_column("done"), 1) is None


class TestAppActions:
    """Tests for notifications raised by app actions."""

    def test_undo_with_empty_history(self):
        app = make_app()
        app.session.undo.return_value = False
        app.action_undo()
        app.notify.assert_called_once_with("Nothing to undo", timeout=2)

    def test_redo_success_is_silent(self):
        app = make_app()
        app.session.redo.return_value = True
        app.action_redo()
        app.notify.assert_not_called()

    def test_move_into_done_column_notifies(self, board: Board):
        from boardsync.app import BoardsyncApp

        app = make_app()
        mock_screen = MagicMock()
        mock_screen.task_move.return_value = Move(ItemKind.TASK, "doing", 0, "done", 0)
        app.session.sync.apply_move.return_value = MoveResult(
            board=board, changes=[FieldChange("t1", "completed", False, True)]
        )

        with (
            patch.object(BoardsyncApp, "_board_screen", return_value=mock_screen),
            patch.object(BoardsyncApp, "_current_task", return_value=board.get_task("t1")),
        ):
            app.action_move_task_right()

        mock_screen.task_move.assert_called_once_with(board.get_task("t1"), column_delta=1, index_delta=0)
        app.notify.assert_called_once_with("Task completed", timeout=2)
        assert app._focus_task_id == "t1"

    def test_noop_move_clears_focus_request(self, board: Board):
        from boardsync.app import BoardsyncApp

        app = make_app()
        mock_screen = MagicMock()
        app.session.sync.apply_move.return_value = MoveResult(board=None)

        with (
            patch.object(BoardsyncApp, "_board_screen", return_value=mock_screen),
            patch.object(BoardsyncApp, "_current_task", return_value=board.get_task("t1")),
        ):
            app.action_move_task_down()

        app.notify.assert_not_called()
        assert app._focus_task_id is None

    def test_export_notifies_file_name(self):
        app = make_app()
        app.session.persistence.export_file.return_value = Path("/tmp/kanban-backup-x.json")
        app.action_export()
        app.session.persistence.flush.assert_called_once()
        app.notify.assert_called_once_with("Exported to kanban-backup-x.json", timeout=3)

    def test_export_failure(self):
        app = make_app()
        app.session.persistence.export_file.return_value = None
        app.action_export()
        app.notify.assert_called_once_with("Export failed", severity="error")


class TestTeardown:
    """Session teardown when the app unmounts."""

    def test_unmount_closes_session_and_unsubscribes(self):
        app = make_app()
        app.session.close = AsyncMock()
        unsubscribe = MagicMock()
        app._unsubscribers = [unsubscribe, unsubscribe]

        asyncio.run(app.on_unmount())

        app.session.close.assert_awaited_once()
        assert unsubscribe.call_count == 2
        assert app._unsubscribers == []
