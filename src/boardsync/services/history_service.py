"""Snapshot-based undo/redo history."""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..models import Board

logger = logging.getLogger(__name__)


class HistoryService:
    """
    Linear undo/redo stack of full-board snapshots.

    The cursor points at the entry matching the state the user is on; it is
    -1 while the stack is empty. Every entry is an independent deep copy and
    every restore hands out a fresh copy, so the live board and the stack
    never share mutable nodes.

    Snapshots are taken before a mutation, so right after one the live board
    is ahead of the entry at the cursor. ``undo`` records that unrecorded
    state first, which keeps it reachable through ``redo``.
    """

    def __init__(self, on_change: Callable[[], None] | None = None) -> None:
        """
        Args:
            on_change: Called whenever the stack changes (used to persist it)
        """
        self._entries: list[Board] = []
        self._cursor = -1
        self._on_change = on_change

    @property
    def entries(self) -> list[Board]:
        """The stored snapshots (read-only view; do not mutate)."""
        return self._entries

    @property
    def cursor(self) -> int:
        """Index of the active snapshot, -1 when empty."""
        return self._cursor

    def __len__(self) -> int:
        return len(self._entries)

    @staticmethod
    def snapshot(board: Board) -> Board:
        """Deep copy suitable for storing as an entry."""
        return board.clone()

    def push(self, board: Board) -> None:
        """Snapshot the board about to be mutated."""
        self.push_snapshot(self.snapshot(board))

    def push_snapshot(self, snapshot: Board) -> None:
        """
        Store an already-copied snapshot.

        Entries after the cursor are discarded. A snapshot equal to the entry
        at the cursor is not stored twice.
        """
        del self._entries[self._cursor + 1 :]
        if self._entries and self._entries[self._cursor] == snapshot:
            logger.debug("History push deduplicated at cursor %d", self._cursor)
        else:
            self._entries.append(snapshot)
            self._cursor = len(self._entries) - 1
        self._changed()

    def has_unrecorded(self, board: Board) -> bool:
        """Whether the live board differs from the entry at the cursor."""
        return self._cursor >= 0 and self._entries[self._cursor] != board

    def can_undo(self, board: Board | None = None) -> bool:
        """Whether undo would change anything."""
        if self._cursor > 0:
            return True
        return board is not None and self.has_unrecorded(board)

    def can_redo(self) -> bool:
        """Whether there is an entry after the cursor."""
        return self._cursor < len(self._entries) - 1

    def undo(self, board: Board) -> Board | None:
        """
        Step back one entry.

        Args:
            board: The live board

        Returns:
            A copy of the board to restore, or None if there is nothing to undo.
        """
        if self.has_unrecorded(board):
            del self._entries[self._cursor + 1 :]
            self._entries.append(self.snapshot(board))
            self._cursor = len(self._entries) - 1

        if self._cursor <= 0:
            return None

        self._cursor -= 1
        logger.debug("Undo -> entry %d of %d", self._cursor, len(self._entries))
        self._changed()
        return self._entries[self._cursor].clone()

    def redo(self) -> Board | None:
        """
        Step forward one entry.

        Returns:
            A copy of the board to restore, or None if there is nothing to redo.
        """
        if not self.can_redo():
            return None
        self._cursor += 1
        logger.debug("Redo -> entry %d of %d", self._cursor, len(self._entries))
        self._changed()
        return self._entries[self._cursor].clone()

    def reset(self, entries: list[Board] | None = None) -> None:
        """Replace the whole stack; the cursor moves to the last entry."""
        self._entries = [entry.clone() for entry in entries or []]
        self._cursor = len(self._entries) - 1

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()
