"""Headless import/export commands."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from ..api import OfflineRemote
from ..config import Settings
from ..services import BoardSession, ImportValidationError
from .output import board_summary, error, info, success

logger = logging.getLogger(__name__)


def run_export(settings: Settings, directory: Path) -> int:
    """Write a backup of the persisted board into ``directory``.

    Returns:
        Process exit code.
    """
    session = BoardSession(settings, remote=OfflineRemote())
    path = session.persistence.export_file(directory)
    if path is None:
        error("Export failed, see log for details")
        return 1
    success(f"Exported board to {path}")
    snapshot = session.persistence.load_local()
    if snapshot is not None:
        board_summary(
            len(snapshot.board.columns), len(snapshot.board.all_tasks()), len(snapshot.history)
        )
    return 0


def run_import(settings: Settings, path: Path) -> int:
    """Replace the persisted board (and history) with a backup file.

    Returns:
        Process exit code.
    """
    return asyncio.run(_import(settings, path))


async def _import(settings: Settings, path: Path) -> int:
    session = BoardSession(settings, remote=OfflineRemote())
    try:
        parsed = session.persistence.import_file(path)
    except ImportValidationError as e:
        error(str(e))
        return 1
    finally:
        await session.close()

    success(f"Imported {len(parsed.board.columns)} columns from {path}")
    board_summary(len(parsed.board.columns), len(parsed.board.all_tasks()))
    if parsed.history is None:
        info("No history in file, undo history was reset")
    else:
        info(f"Restored {len(parsed.history)} history entries")
    return 0
