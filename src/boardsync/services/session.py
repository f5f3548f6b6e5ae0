"""The board session: live state plus the services that act on it."""

from __future__ import annotations

import logging
from typing import Any

from ..api import BoardApiClient, OfflineRemote, RemoteProtocol
from ..config import Settings
from ..models import Board
from ..repositories import FilesystemStorage, StorageProtocol
from .events import BOARD_CHANGED, BOARD_IMPORTED, NOTICE_RAISED, EventBus
from .history_service import HistoryService
from .persistence_service import PersistenceService
from .sync_service import Confirmer, SyncService

logger = logging.getLogger(__name__)

SOURCE_LOCAL = "local"
SOURCE_REMOTE = "remote"
SOURCE_EMPTY = "empty"


class BoardSession:
    """
    Owns the live board for the lifetime of the program.

    Create it, ``await load()``, use ``sync`` for mutations and
    ``undo``/``redo`` for history, then ``await close()`` so the pending
    snapshot is written and the remote client released.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        remote: RemoteProtocol | None = None,
        storage: StorageProtocol | None = None,
        events: EventBus | None = None,
        confirm: Confirmer | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.storage: StorageProtocol = storage or FilesystemStorage(self.settings.data_dir)
        if remote is None:
            remote = (
                OfflineRemote()
                if self.settings.local_only
                else BoardApiClient(self.settings.api_base_url, self.settings.api_timeout)
            )
        self.remote: RemoteProtocol = remote
        self.events = events or EventBus()

        self.board = Board()
        self.notice: str | None = None
        self.loaded_from: str | None = None

        self.history = HistoryService(on_change=self._schedule_save)
        self.persistence = PersistenceService(
            self.storage,
            board_slot=self.settings.board_slot,
            history_slot=self.settings.history_slot,
            debounce=self.settings.persist_debounce,
            events=self.events,
            source=self._current_state,
        )
        self.sync = SyncService(
            self,
            confirm=confirm,
            quiet_failures=getattr(remote, "offline", False),
        )
        self._unsubscribe_import = self.events.subscribe(BOARD_IMPORTED, self._on_board_imported)
        self._closed = False

    async def __aenter__(self) -> BoardSession:
        await self.load()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    # --- Lifecycle ---

    async def load(self) -> str:
        """
        Populate the board.

        Prefers the locally persisted board and history, then the remote
        service, then an empty board with the protected columns.

        Returns:
            Where the board came from: "local", "remote" or "empty".
        """
        local = self.persistence.load_local()
        if local is not None:
            self.board = local.board
            self.history.reset(local.history)
            self.loaded_from = SOURCE_LOCAL
        else:
            outcome = await self.sync.refresh()
            if outcome.ok:
                self.loaded_from = SOURCE_REMOTE
            else:
                self.board = Board.empty()
                self.loaded_from = SOURCE_EMPTY
            self.history.reset()

        logger.info(
            "Board loaded from %s (%d columns, %d tasks)",
            self.loaded_from,
            len(self.board.columns),
            len(self.board.all_tasks()),
        )
        return self.loaded_from

    async def close(self) -> None:
        """Teardown: settle remote calls, write the pending snapshot, close the client."""
        if self._closed:
            return
        self._closed = True
        await self.sync.drain()
        self.persistence.close()
        self._unsubscribe_import()
        await self.remote.aclose()

    # --- State changes ---

    def replace_board(self, board: Board) -> None:
        """Swap in a new live board."""
        self.board = board

    def commit(self) -> None:
        """A user mutation was applied: clear the notice and persist."""
        self.notice = None
        self.touch()

    def touch(self) -> None:
        """The live board changed: persist and announce it."""
        self._schedule_save()
        self.events.publish(BOARD_CHANGED, board=self.board)

    def set_notice(self, message: str) -> None:
        """Surface a non-fatal error to the user."""
        self.notice = message
        self.events.publish(NOTICE_RAISED, message=message)

    def clear_notice(self) -> None:
        self.notice = None

    # --- History ---

    def can_undo(self) -> bool:
        return self.history.can_undo(self.board)

    def can_redo(self) -> bool:
        return self.history.can_redo()

    def undo(self) -> bool:
        """Restore the previous snapshot. Returns False if there is none."""
        restored = self.history.undo(self.board)
        if restored is None:
            return False
        self.replace_board(restored)
        self.commit()
        return True

    def redo(self) -> bool:
        """Restore the next snapshot. Returns False if there is none."""
        restored = self.history.redo()
        if restored is None:
            return False
        self.replace_board(restored)
        self.commit()
        return True

    # --- Internals ---

    def _current_state(self) -> tuple[Board, list[Board]]:
        return self.board, self.history.entries

    def _schedule_save(self) -> None:
        self.persistence.schedule_save()

    def _on_board_imported(self, board: Board, history: list[Board] | None) -> None:
        self.replace_board(board.clone())
        self.history.reset(history)
        self.commit()
        logger.info("Session switched to imported board")
