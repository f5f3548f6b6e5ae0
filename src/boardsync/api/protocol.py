"""Remote service protocol."""

from typing import Protocol

from ..models import RemoteResult


class RemoteProtocol(Protocol):
    """Interface for the remote board service.

    Every operation resolves to a ``RemoteResult``. Implementations may also
    raise (e.g. on network failure); the sync layer treats both the same.
    """

    async def fetch_board(self) -> RemoteResult:
        """Fetch the full board as a list of serialized columns."""
        ...

    async def create_column(self, title: str) -> RemoteResult:
        """Create a column; data is the created column."""
        ...

    async def rename_column(self, column_id: str, title: str) -> RemoteResult:
        """Rename a column; data is the updated column."""
        ...

    async def delete_column(self, column_id: str) -> RemoteResult:
        """Delete a column and its tasks."""
        ...

    async def create_task(
        self, column_id: str, title: str, description: str | None = None
    ) -> RemoteResult:
        """Create a task; data is the created task."""
        ...

    async def update_task(
        self, task_id: str, title: str, description: str | None = None
    ) -> RemoteResult:
        """Update a task's title and description; data is the updated task."""
        ...

    async def delete_task(self, task_id: str) -> RemoteResult:
        """Delete a task."""
        ...

    async def reorder_columns(self, ordered_ids: list[str]) -> RemoteResult:
        """Persist the column order."""
        ...

    async def reorder_task(
        self,
        task_id: str,
        source_column_id: str,
        dest_column_id: str,
        dest_index: int,
    ) -> RemoteResult:
        """Persist a task move."""
        ...

    async def aclose(self) -> None:
        """Release any held connections."""
        ...
