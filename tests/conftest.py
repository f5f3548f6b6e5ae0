"""Shared fixtures: sample boards, a scripted remote and in-memory storage."""

import asyncio
from datetime import UTC, datetime
from typing import Any

import pytest

from boardsync.config import Settings
from boardsync.models import Board, RemoteResult
from boardsync.repositories import MemoryStorage
from boardsync.services import BoardSession


def sample_board() -> Board:
    """Board with the three protected columns and two tasks in To Do."""
    return Board.from_wire(
        [
            {
                "_id": "todo",
                "title": "To Do",
                "order": 0,
                "tasks": [
                    {"_id": "t1", "title": "Write docs", "columnId": "todo", "order": 0},
                    {"_id": "t2", "title": "Fix bug", "columnId": "todo", "order": 1},
                ],
            },
            {"_id": "doing", "title": "In Progress", "order": 1, "tasks": []},
            {"_id": "done", "title": "Complete", "order": 2, "tasks": []},
        ]
    )


class FakeRemote:
    """Remote double that records calls and answers from a script.

    ``responses`` maps an operation name to a RemoteResult (or an exception
    to raise). Unscripted operations succeed with no data. ``gate`` can hold
    every call until the test releases it.
    """

    offline = False

    def __init__(self, board: Board | None = None) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.responses: dict[str, RemoteResult | Exception] = {}
        self.board = board
        self.gate: asyncio.Event | None = None
        self.closed = False

    async def _answer(self, name: str, *args: Any) -> RemoteResult:
        self.calls.append((name, args))
        if self.gate is not None:
            await self.gate.wait()
        response = self.responses.get(name)
        if isinstance(response, Exception):
            raise response
        if response is not None:
            return response
        if name == "fetch_board":
            if self.board is None:
                return RemoteResult.failure("no board")
            return RemoteResult.ok(self.board.to_wire())
        return RemoteResult.ok()

    def names(self) -> list[str]:
        return [name for name, _ in self.calls]

    async def fetch_board(self) -> RemoteResult:
        return await self._answer("fetch_board")

    async def create_column(self, title: str) -> RemoteResult:
        return await self._answer("create_column", title)

    async def rename_column(self, column_id: str, title: str) -> RemoteResult:
        return await self._answer("rename_column", column_id, title)

    async def delete_column(self, column_id: str) -> RemoteResult:
        return await self._answer("delete_column", column_id)

    async def create_task(self, column_id: str, title: str, description: str | None = None) -> RemoteResult:
        return await self._answer("create_task", column_id, title, description)

    async def update_task(self, task_id: str, title: str, description: str | None = None) -> RemoteResult:
        return await self._answer("update_task", task_id, title, description)

    async def delete_task(self, task_id: str) -> RemoteResult:
        return await self._answer("delete_task", task_id)

    async def reorder_columns(self, ordered_ids: list[str]) -> RemoteResult:
        return await self._answer("reorder_columns", ordered_ids)

    async def reorder_task(
        self, task_id: str, source_column_id: str, dest_column_id: str, dest_index: int
    ) -> RemoteResult:
        return await self._answer("reorder_task", task_id, source_column_id, dest_column_id, dest_index)

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def board() -> Board:
    """A fresh sample board."""
    return sample_board()


@pytest.fixture
def remote() -> FakeRemote:
    """A remote that knows the sample board."""
    return FakeRemote(sample_board())


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(data_dir=tmp_path / "data", persist_debounce=0.01)


@pytest.fixture
def make_session(settings: Settings, storage: MemoryStorage, remote: FakeRemote):
    """Factory for a session on the sample board, bypassing load()."""

    def _make(confirm=None, board: Board | None = None) -> BoardSession:
        session = BoardSession(settings, remote=remote, storage=storage, confirm=confirm)
        session.board = board if board is not None else sample_board()
        session.history.reset()
        return session

    return _make


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 5, 1, 12, 30, tzinfo=UTC)
