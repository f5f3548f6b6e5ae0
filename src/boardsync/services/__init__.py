"""Service layer for business logic."""

from .events import BOARD_CHANGED, BOARD_IMPORTED, MOVE_COMPLETED, NOTICE_RAISED, EventBus
from .filter_service import Filter, FilterService
from .history_service import HistoryService
from .move_resolver import is_done_like, resolve_move
from .persistence_service import ImportPayload, ImportValidationError, PersistenceService
from .progress_service import ProgressService, ProgressSummary
from .session import BoardSession
from .sync_service import SyncService

__all__ = [
    "BOARD_CHANGED",
    "BOARD_IMPORTED",
    "MOVE_COMPLETED",
    "NOTICE_RAISED",
    "BoardSession",
    "EventBus",
    "Filter",
    "FilterService",
    "HistoryService",
    "ImportPayload",
    "ImportValidationError",
    "PersistenceService",
    "ProgressService",
    "ProgressSummary",
    "SyncService",
    "is_done_like",
    "resolve_move",
]
