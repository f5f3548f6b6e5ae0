"""Remote stand-in for local-only mode."""

from __future__ import annotations

from typing import Any

from ..models import RemoteResult

OFFLINE_ERROR = "Remote service disabled (local-only mode)"


class OfflineRemote:
    """Answers every operation with a failure without touching the network."""

    offline = True

    async def _fail(self, *args: Any, **kwargs: Any) -> RemoteResult:
        return RemoteResult.failure(OFFLINE_ERROR)

    fetch_board = _fail
    create_column = _fail
    rename_column = _fail
    delete_column = _fail
    create_task = _fail
    update_task = _fail
    delete_task = _fail
    reorder_columns = _fail
    reorder_task = _fail

    async def aclose(self) -> None:
        return None
