"""Durable snapshots of the board and its history, plus import/export."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..models import Board
from ..repositories import StorageProtocol
from ..utils import backup_stamp, now_utc, to_iso
from .events import BOARD_IMPORTED, EventBus

logger = logging.getLogger(__name__)

StateSource = Callable[[], tuple[Board, list[Board]]]


class ImportValidationError(ValueError):
    """An import payload was rejected; nothing was changed."""

    pass


@dataclass
class LocalSnapshot:
    """Board and history read back from storage."""

    board: Board
    history: list[Board]


@dataclass
class ImportPayload:
    """A validated import."""

    board: Board
    history: list[Board] | None  # None when the payload carried no history


def _first_present(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


def _board_from_entry(entry: Any) -> Board:
    """A history entry is either a column list or a ``{"columns": [...]}`` dict."""
    if isinstance(entry, dict):
        entry = entry.get("columns")
    if not isinstance(entry, list):
        raise ImportValidationError("history entry is not a list of columns")
    return Board.from_wire(entry)


class PersistenceService:
    """
    Writes the board and history to storage and handles backup files.

    Saves are debounced: ``schedule_save`` (re)arms a timer on the running
    event loop so a burst of changes produces a single write once things go
    quiet. ``close`` cancels the timer and writes whatever is pending.
    """

    def __init__(
        self,
        storage: StorageProtocol,
        board_slot: str = "kanban_board_state_v1",
        history_slot: str = "kanban_board_history_v1",
        debounce: float = 0.25,
        events: EventBus | None = None,
        source: StateSource | None = None,
    ) -> None:
        """
        Args:
            storage: Slot storage backend
            board_slot: Slot holding ``{"columns": [...]}``
            history_slot: Slot holding the list of history snapshots
            debounce: Quiet interval in seconds before a scheduled write
            events: Bus used to announce imports
            source: Returns the (board, history) pair to write
        """
        self.storage = storage
        self.board_slot = board_slot
        self.history_slot = history_slot
        self.debounce = debounce
        self.events = events or EventBus()
        self.source = source
        self._handle: asyncio.TimerHandle | None = None
        self._closed = False

    # --- Debounced writer ---

    @property
    def has_pending_write(self) -> bool:
        """Whether a write is scheduled but not yet done."""
        return self._handle is not None

    def schedule_save(self) -> None:
        """Arm (or re-arm) the debounce timer.

        Outside an event loop there is no timer to arm, so the write happens
        immediately.
        """
        if self._closed:
            return
        self.cancel_pending()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.flush()
            return
        self._handle = loop.call_later(self.debounce, self._write_pending)

    def cancel_pending(self) -> None:
        """Drop a scheduled write without performing it."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _write_pending(self) -> None:
        self._handle = None
        self.flush()

    def flush(self) -> None:
        """Write the current state now."""
        self.cancel_pending()
        if self.source is None:
            return
        board, history = self.source()
        try:
            self.save(board, history)
        except OSError as e:
            logger.error("Failed to persist board snapshot: %s", e)

    def close(self) -> None:
        """Teardown: write anything pending and stop accepting schedules."""
        pending = self._handle is not None
        self.cancel_pending()
        if pending:
            self.flush()
        self._closed = True

    # --- Codec ---

    def save(self, board: Board, history: list[Board]) -> None:
        """Serialize both slots."""
        board_bytes = json.dumps({"columns": board.to_wire()}).encode()
        history_bytes = json.dumps([entry.to_wire() for entry in history]).encode()
        self.storage.set(self.board_slot, board_bytes)
        self.storage.set(self.history_slot, history_bytes)
        logger.debug(
            "Persisted board (%d columns) and history (%d entries)",
            len(board.columns),
            len(history),
        )

    def load_local(self) -> LocalSnapshot | None:
        """
        Read the persisted board and history.

        Returns:
            The snapshot, or None when no valid board is stored. A damaged
            history slot yields an empty history rather than failing the load.
        """
        raw = self.storage.get(self.board_slot)
        if raw is None:
            return None

        try:
            parsed = json.loads(raw)
            if not isinstance(parsed, dict) or not isinstance(parsed.get("columns"), list):
                logger.warning("Stored board has no column list, ignoring it")
                return None
            board = Board.from_wire(parsed["columns"])
        except (ValueError, ValidationError) as e:
            logger.warning("Stored board is unreadable, ignoring it: %s", e)
            return None
        board.ensure_protected_columns()

        history: list[Board] = []
        raw_history = self.storage.get(self.history_slot)
        if raw_history:
            try:
                entries = json.loads(raw_history)
                if isinstance(entries, list):
                    history = [_board_from_entry(entry) for entry in entries]
            except (ValueError, ValidationError) as e:
                logger.warning("Stored history is unreadable, starting fresh: %s", e)
                history = []

        logger.info(
            "Loaded local board (%d columns, %d history entries)",
            len(board.columns),
            len(history),
        )
        return LocalSnapshot(board=board, history=history)

    # --- Import ---

    def parse_import(self, payload: Any) -> ImportPayload:
        """
        Validate an import payload.

        Accepted shapes:
        - export artifact: ``{"state": {"columns": [...]}, "history": [...]}``
        - top level: ``{"columns": [...], "history": [...]}``
        - nested: ``{"board": {"columns": [...], "history": [...]}}``

        Raises:
            ImportValidationError: The payload has no usable column list
        """
        if not isinstance(payload, dict):
            raise ImportValidationError("Invalid import file: expected a JSON object")

        state = payload.get("state")
        nested = payload.get("board")
        state = state if isinstance(state, dict) else {}
        nested = nested if isinstance(nested, dict) else {}

        columns = _first_present(state.get("columns"), payload.get("columns"), nested.get("columns"))
        raw_history = _first_present(
            payload.get("history"), payload.get("history_v1"), nested.get("history")
        )

        if not isinstance(columns, list):
            raise ImportValidationError("Invalid import file: missing columns")

        try:
            board = Board.from_wire(columns)
            history = (
                [_board_from_entry(entry) for entry in raw_history]
                if isinstance(raw_history, list)
                else None
            )
        except ValidationError as e:
            raise ImportValidationError(f"Invalid import file: {e}") from e

        board.ensure_protected_columns()
        return ImportPayload(board=board, history=history)

    def import_payload(self, payload: Any) -> ImportPayload:
        """
        Validate a payload, persist it and announce it.

        Subscribers of ``board_imported`` receive ``board`` and ``history``.

        Raises:
            ImportValidationError: Nothing was changed
        """
        parsed = self.parse_import(payload)
        self.cancel_pending()
        self.save(parsed.board, parsed.history or [])
        logger.info(
            "Imported board (%d columns, %s history entries)",
            len(parsed.board.columns),
            len(parsed.history) if parsed.history is not None else "no",
        )
        self.events.publish(BOARD_IMPORTED, board=parsed.board, history=parsed.history)
        return parsed

    def import_file(self, path: Path) -> ImportPayload:
        """Read a JSON backup file and import it."""
        try:
            payload = json.loads(path.read_text())
        except (OSError, ValueError) as e:
            raise ImportValidationError(f"Failed to import file: {e}") from e
        return self.import_payload(payload)

    # --- Export ---

    def export_payload(self, now: datetime | None = None) -> dict[str, Any]:
        """Backup artifact built from what is persisted, not the live board."""
        raw_state = self.storage.get(self.board_slot)
        raw_history = self.storage.get(self.history_slot)
        return {
            "state": json.loads(raw_state) if raw_state else None,
            "history": json.loads(raw_history) if raw_history else None,
            "exportedAt": to_iso(now or now_utc()),
        }

    def export_file(self, directory: Path, now: datetime | None = None) -> Path | None:
        """
        Write a backup file into a directory.

        Export is best-effort: failures are logged and None is returned.
        """
        now = now or now_utc()
        path = directory / f"kanban-backup-{backup_stamp(now)}.json"
        try:
            payload = self.export_payload(now)
            directory.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(payload, indent=2))
        except (OSError, ValueError) as e:
            logger.error("Export failed: %s", e)
            return None
        logger.info("Exported board to %s", path)
        return path
