"""Tests for HistoryService."""

from boardsync.models import Board, Task
from boardsync.services import HistoryService


def titles(board: Board) -> list[str]:
    return [task.title for task in board.all_tasks()]


class TestHistoryBasics:
    """Tests for the empty stack and pushes."""

    def test_empty_history(self, board: Board):
        history = HistoryService()
        assert history.cursor == -1
        assert len(history) == 0
        assert not history.can_undo(board)
        assert not history.can_redo()
        assert history.undo(board) is None
        assert history.redo() is None

    def test_push_stores_independent_copy(self, board: Board):
        history = HistoryService()
        history.push(board)
        board.get_task("t1").title = "Mutated"
        assert titles(history.entries[0]) == ["Write docs", "Fix bug"]

    def test_identical_push_is_deduplicated(self, board: Board):
        history = HistoryService()
        history.push(board)
        history.push(board)
        assert len(history) == 1
        assert history.cursor == 0

    def test_on_change_called(self, board: Board):
        calls = []
        history = HistoryService(on_change=lambda: calls.append(True))
        history.push(board)
        assert calls

    def test_reset_moves_cursor_to_tail(self, board: Board):
        history = HistoryService()
        history.reset([board, Board.empty()])
        assert history.cursor == 1
        assert not history.can_redo()
        history.reset()
        assert history.cursor == -1


class TestUndoRedo:
    """Tests for undo/redo around mutations."""

    def test_undo_restores_pre_mutation_board(self, board: Board):
        """push, mutate, undo gives back the board as it was before the mutation."""
        history = HistoryService()
        history.push(board)
        board.insert_task("doing", Task(title="New"))

        assert history.can_undo(board)
        restored = history.undo(board)
        assert restored is not None
        assert titles(restored) == ["Write docs", "Fix bug"]

    def test_redo_returns_mutated_board(self, board: Board):
        history = HistoryService()
        history.push(board)
        board.insert_task("doing", Task(title="New"))
        restored = history.undo(board)

        assert history.can_redo()
        again = history.redo()
        assert titles(again) == ["Write docs", "Fix bug", "New"]
        assert restored is not None
        assert not history.can_redo()

    def test_undo_twice(self, board: Board):
        history = HistoryService()
        history.push(board)
        board.insert_task("doing", Task(title="One"))
        history.push(board)
        board.insert_task("doing", Task(title="Two"))

        first = history.undo(board)
        assert titles(first) == ["Write docs", "Fix bug", "One"]
        second = history.undo(first)
        assert titles(second) == ["Write docs", "Fix bug"]
        assert history.undo(second) is None

    def test_push_after_undo_discards_redo_branch(self, board: Board):
        history = HistoryService()
        history.push(board)
        board.insert_task("doing", Task(title="One"))
        live = history.undo(board)
        assert history.can_redo()

        history.push(live)
        live.insert_task("done", Task(title="Other"))

        assert not history.can_redo()
        restored = history.undo(live)
        assert titles(restored) == ["Write docs", "Fix bug"]
        again = history.redo()
        assert titles(again) == ["Write docs", "Fix bug", "Other"]

    def test_restores_are_copies(self, board: Board):
        history = HistoryService()
        history.push(board)
        board.insert_task("doing", Task(title="New"))
        restored = history.undo(board)
        restored.get_task("t1").title = "Changed"
        assert titles(history.entries[0])[0] == "Write docs"

    def test_can_undo_false_at_first_entry_without_changes(self, board: Board):
        history = HistoryService()
        history.push(board)
        assert not history.can_undo(board)
        assert not history.can_undo()
