"""Translate move events into new board states."""

from __future__ import annotations

import logging
from datetime import datetime

from ..models import (
    BOARD_CONTAINER,
    Board,
    FieldChange,
    InvariantViolation,
    ItemKind,
    Move,
    MoveResult,
)
from ..utils import now_utc

logger = logging.getLogger(__name__)

DONE_TITLES = ("done", "complete", "completed")
DONE_SUBSTRINGS = ("done", "complete")


def normalize_title(title: str | None) -> str:
    """Trimmed, lower-cased title."""
    return (title or "").strip().lower()


def is_done_like(title: str | None) -> bool:
    """
    Whether a column title marks finished work.

    Exact matches on "done", "complete", "completed", plus any title
    containing "done" or "complete" ("Completed", "Done ✅", "Not done yet").
    """
    value = normalize_title(title)
    return value in DONE_TITLES or any(part in value for part in DONE_SUBSTRINGS)


def resolve_move(board: Board, move: Move, now: datetime | None = None) -> MoveResult:
    """
    Compute the board that results from a move.

    The input board is never modified; the result carries a new board (or
    None for a no-op) and the completion changes derived from the move.

    Args:
        board: Current board
        move: The move event
        now: Completion timestamp to use (defaults to the current UTC time)

    Raises:
        InvariantViolation: The move references a missing container or index
    """
    if move.is_noop:
        logger.debug("Move is a no-op: %s", move)
        return MoveResult(board=None)

    if move.item_kind == ItemKind.COLUMN:
        return _resolve_column_move(board, move)
    return _resolve_task_move(board, move, now or now_utc())


def _resolve_column_move(board: Board, move: Move) -> MoveResult:
    if move.source_container != BOARD_CONTAINER or move.dest_container != BOARD_CONTAINER:
        raise InvariantViolation(
            f"Column moves must stay on the board: {move.source_container} -> {move.dest_container}"
        )
    result = board.clone()
    result.move_column(move.source_index, move.dest_index)
    return MoveResult(board=result)


def _resolve_task_move(board: Board, move: Move, now: datetime) -> MoveResult:
    result = board.clone()
    source = result.get_column(move.source_container)
    destination = result.get_column(move.dest_container)

    if not 0 <= move.source_index < len(source.tasks):
        raise InvariantViolation(
            f"No task at index {move.source_index} in column '{source.title}'"
        )

    task = source.tasks[move.source_index]
    changes: list[FieldChange] = []

    src_done = is_done_like(source.title)
    dest_done = is_done_like(destination.title)

    if not src_done and dest_done:
        changes += [
            FieldChange(task.id, "completed", task.completed, True),
            FieldChange(task.id, "completed_at", task.completed_at, now),
            FieldChange(task.id, "previous_column_id", task.previous_column_id, source.id),
        ]
        task.mark_completed(now, source.id)
    elif src_done and not dest_done:
        changes += [
            FieldChange(task.id, "completed", task.completed, False),
            FieldChange(task.id, "completed_at", task.completed_at, None),
            FieldChange(task.id, "previous_column_id", task.previous_column_id, None),
        ]
        task.mark_incomplete()

    if source.id != destination.id:
        changes.append(FieldChange(task.id, "column_id", source.id, destination.id))

    result.move_task(task.id, source.id, destination.id, move.dest_index)
    logger.debug(
        "Resolved task move %s: %s[%d] -> %s[%d] (%d derived changes)",
        task.id,
        source.title,
        move.source_index,
        destination.title,
        move.dest_index,
        len(changes),
    )
    return MoveResult(board=result, changes=changes, task=task)
