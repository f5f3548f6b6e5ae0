"""Tests for the move resolver."""

from datetime import datetime

import pytest

from boardsync.models import BOARD_CONTAINER, Board, InvariantViolation, ItemKind, Move, Task
from boardsync.services.move_resolver import is_done_like, resolve_move


def task_move(source: str, source_index: int, dest: str, dest_index: int) -> Move:
    return Move(ItemKind.TASK, source, source_index, dest, dest_index)


class TestDoneLike:
    """Tests for the done-like column predicate."""

    @pytest.mark.parametrize(
        "title",
        ["Done", "done", " COMPLETE ", "Completed", "Done ✅", "Not done yet", "Almost complete"],
    )
    def test_done_like_titles(self, title: str):
        assert is_done_like(title)

    @pytest.mark.parametrize("title", ["To Do", "In Progress", "Review", "", None])
    def test_other_titles(self, title):
        assert not is_done_like(title)


class TestNoOp:
    """Tests for moves that change nothing."""

    def test_same_place_is_noop(self, board: Board):
        result = resolve_move(board, task_move("todo", 0, "todo", 0))
        assert result.is_noop
        assert result.board is None
        assert result.changes == []

    def test_column_same_place_is_noop(self, board: Board):
        move = Move(ItemKind.COLUMN, BOARD_CONTAINER, 1, BOARD_CONTAINER, 1)
        assert resolve_move(board, move).is_noop


class TestTaskMoves:
    """Tests for task moves."""

    def test_input_board_untouched(self, board: Board, fixed_now: datetime):
        before = board.clone()
        resolve_move(board, task_move("todo", 0, "done", 0), now=fixed_now)
        assert board == before

    def test_reorder_within_column(self, board: Board):
        result = resolve_move(board, task_move("todo", 0, "todo", 1))
        column = result.board.get_column("todo")
        assert [t.id for t in column.tasks] == ["t2", "t1"]
        assert [t.position for t in column.tasks] == [0, 1]
        assert result.changes == []

    def test_move_into_done_column_completes(self, board: Board, fixed_now: datetime):
        """Entering a done-like column from elsewhere marks the task completed."""
        result = resolve_move(board, task_move("todo", 1, "done", 0), now=fixed_now)

        task = result.board.get_task("t2")
        assert task.completed is True
        assert task.completed_at == fixed_now
        assert task.previous_column_id == "todo"
        assert task.column_id == "done"
        assert result.task.id == "t2"

        fields = [(c.field, c.new) for c in result.changes]
        assert ("completed", True) in fields
        assert ("previous_column_id", "todo") in fields
        assert ("column_id", "done") in fields

    def test_move_out_of_done_column_reopens(self, board: Board, fixed_now: datetime):
        """Leaving a done-like column clears all completion fields."""
        done = resolve_move(board, task_move("todo", 0, "done", 0), now=fixed_now).board
        result = resolve_move(done, task_move("done", 0, "doing", 0), now=fixed_now)

        task = result.board.get_task("t1")
        assert task.completed is False
        assert task.completed_at is None
        assert task.previous_column_id is None
        assert ("completed", False) in [(c.field, c.new) for c in result.changes]

    def test_between_done_like_columns_keeps_completion(self, board: Board, fixed_now: datetime):
        board.insert_column("Done ✅", column_id="shipped")
        done = resolve_move(board, task_move("todo", 0, "done", 0), now=fixed_now).board
        result = resolve_move(done, task_move("done", 0, "shipped", 0))

        task = result.board.get_task("t1")
        assert task.completed is True
        assert task.completed_at == fixed_now
        assert task.previous_column_id == "todo"
        assert [c.field for c in result.changes] == ["column_id"]

    def test_between_open_columns_changes_only_column(self, board: Board):
        result = resolve_move(board, task_move("todo", 0, "doing", 0))
        assert [c.field for c in result.changes] == ["column_id"]
        assert result.board.get_task("t1").completed is False

    def test_destination_index_clamped(self, board: Board):
        result = resolve_move(board, task_move("todo", 0, "doing", 10))
        assert result.board.get_task("t1").position == 0

    def test_missing_source_index(self, board: Board):
        with pytest.raises(InvariantViolation):
            resolve_move(board, task_move("doing", 0, "todo", 0))

    def test_missing_container(self, board: Board):
        with pytest.raises(InvariantViolation):
            resolve_move(board, task_move("todo", 0, "nowhere", 0))

    def test_done_titles_detected_by_substring(self, fixed_now: datetime):
        board = Board.empty()
        board.insert_column("Completed", column_id="completed")
        todo = board.columns[0]
        board.insert_task(todo.id, Task(id="t", title="x"))

        result = resolve_move(board, task_move(todo.id, 0, "completed", 0), now=fixed_now)
        assert result.board.get_task("t").completed is True


class TestColumnMoves:
    """Tests for column moves."""

    def test_reorders_columns(self, board: Board):
        move = Move(ItemKind.COLUMN, BOARD_CONTAINER, 0, BOARD_CONTAINER, 2)
        result = resolve_move(board, move)
        assert [c.id for c in result.board.columns] == ["doing", "done", "todo"]
        assert [c.position for c in result.board.columns] == [0, 1, 2]
        assert [c.id for c in board.columns] == ["todo", "doing", "done"]

    def test_column_move_must_target_board(self, board: Board):
        move = Move(ItemKind.COLUMN, BOARD_CONTAINER, 0, "todo", 1)
        with pytest.raises(InvariantViolation):
            resolve_move(board, move)
