"""Optimistic board mutations reconciled against the remote service."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from datetime import date
from typing import TYPE_CHECKING, Any, TypeVar

import httpx
from pydantic import ValidationError

from ..api import BoardApiError, RemoteError
from ..models import (
    Board,
    Column,
    InvariantViolation,
    ItemKind,
    Move,
    MoveResult,
    RemoteResult,
    SyncOutcome,
    Task,
)
from ..utils import now_utc
from .events import MOVE_COMPLETED
from .move_resolver import resolve_move

if TYPE_CHECKING:
    from .session import BoardSession

logger = logging.getLogger(__name__)

T = TypeVar("T")

Confirmer = Callable[[str], Awaitable[bool]]
RemoteCall = Callable[[], Awaitable[RemoteResult]]
SuccessHandler = Callable[[RemoteResult], Awaitable[None] | None]


async def _always_confirm(message: str) -> bool:
    return True


class SyncService:
    """
    Applies board mutations optimistically and syncs them in the background.

    Every operation runs in two phases. ``_apply_local`` snapshots the board
    for undo, mutates the live board and schedules persistence; the caller
    sees the result immediately. ``reconcile_remote`` then runs as an
    asyncio task: on success it merges what the server returned into the
    live board as it is at that moment, on failure it keeps the local state
    and raises a notice on the session. Nothing is ever rolled back.

    Entities created locally carry a local id until the remote assigns one.
    Calls touching such an entity wait for its create to settle and are sent
    with the server id, whichever id the caller captured.

    The mutating methods must be called from a running event loop.
    """

    def __init__(
        self,
        session: BoardSession,
        confirm: Confirmer | None = None,
        quiet_failures: bool = False,
    ) -> None:
        """
        Args:
            session: The board session to operate on
            confirm: Async yes/no prompt used before deletions
            quiet_failures: Don't raise notices for remote failures
                            (local-only mode)
        """
        self.session = session
        self.confirm = confirm or _always_confirm
        self.quiet_failures = quiet_failures
        self._pending: set[asyncio.Task[SyncOutcome]] = set()
        self._server_ids: dict[str, str] = {}  # local id -> remote id
        self._creates: dict[str, asyncio.Task[SyncOutcome]] = {}  # local id -> create in flight

    # --- Columns ---

    def add_column(self, title: str) -> Column | None:
        """Append a column and create it remotely."""
        column = self._apply_local("add column", lambda board: board.insert_column(title))
        if column is None:
            return None

        local_id = column.id
        sent_title = column.title
        create = self._dispatch(
            "create column",
            lambda: self.session.remote.create_column(sent_title),
            lambda result: self._adopt_column(local_id, result.data, sent_title),
        )
        self._track_create(local_id, create)
        logger.info("Column added: %s (%s)", sent_title, local_id)
        return column

    def rename_column(self, column_id: str, title: str) -> Column | None:
        """Rename a column and sync the new title."""
        column = self._apply_local(
            "rename column", lambda board: board.rename_column(column_id, title)
        )
        if column is None:
            return None

        sent_title = column.title

        async def call() -> RemoteResult:
            await self._settled(column_id)
            return await self.session.remote.rename_column(self.remote_id(column_id), sent_title)

        self._dispatch(
            "rename column",
            call,
            lambda result: self._adopt_column(column_id, result.data, sent_title),
        )
        return column

    async def delete_column(self, column_id: str) -> bool:
        """
        Delete a column and its tasks after confirmation.

        Returns:
            True if the column was removed locally.
        """
        column = self.session.board.find_column(column_id)
        if column is None:
            self._invariant_failed("delete column", InvariantViolation(f"Column not found: {column_id}"))
            return False
        if column.is_protected:
            self.session.set_notice(f"Column '{column.title}' cannot be removed")
            return False

        prompt = f"Delete column '{column.title}'?"
        if column.tasks:
            count = len(column.tasks)
            prompt += f"\n{count} task{'' if count == 1 else 's'} will be deleted with it."
        if not await self.confirm(prompt):
            logger.debug("delete_column: declined for %s", column_id)
            return False

        if self._apply_local("delete column", lambda board: board.remove_column(column_id)) is None:
            return False

        async def call() -> RemoteResult:
            await self._settled(column_id)
            return await self.session.remote.delete_column(self.remote_id(column_id))

        self._dispatch("delete column", call)
        logger.info("Column deleted: %s", column_id)
        return True

    # --- Tasks ---

    def add_task(
        self,
        column_id: str,
        title: str,
        description: str | None = None,
        tags: list[str] | None = None,
        due_date: date | None = None,
    ) -> Task | None:
        """Append a task to a column and create it remotely."""

        def mutate(board: Board) -> Task:
            task = Task(title=title, description=description, tags=tags or [], due_date=due_date)
            return board.insert_task(column_id, task)

        task = self._apply_local("add task", mutate)
        if task is None:
            return None

        local_id = task.id
        sent_title, sent_description = task.title, task.description

        async def call() -> RemoteResult:
            await self._settled(column_id)
            return await self.session.remote.create_task(
                self.remote_id(column_id), sent_title, sent_description
            )

        create = self._dispatch(
            "create task",
            call,
            lambda result: self._adopt_task(local_id, result.data, sent_title, sent_description),
        )
        self._track_create(local_id, create)
        logger.info("Task added: %s (%s) in %s", sent_title, local_id, column_id)
        return task

    def save_task(
        self,
        task_id: str,
        title: str,
        description: str | None,
        tags: list[str],
        due_date: date | None,
    ) -> Task | None:
        """Edit a task's fields and sync title/description.

        Tags and due date are local-only; the remote never sees them.
        """

        def mutate(board: Board) -> Task:
            task = board.get_task(task_id)
            cleaned = title.strip()
            if not cleaned:
                raise ValueError("title must not be empty")
            task.title = cleaned
            task.description = description
            task.tags = list(dict.fromkeys(tags))
            task.due_date = due_date
            return task

        task = self._apply_local("save task", mutate)
        if task is None:
            return None

        sent_title, sent_description = task.title, task.description

        async def call() -> RemoteResult:
            await self._settled(task_id)
            return await self.session.remote.update_task(
                self.remote_id(task_id), sent_title, sent_description
            )

        self._dispatch(
            "update task",
            call,
            lambda result: self._adopt_task(task_id, result.data, sent_title, sent_description),
        )
        return task

    async def delete_task(self, task_id: str) -> bool:
        """
        Delete a task after confirmation.

        Returns:
            True if the task was removed locally.
        """
        task = self.session.board.find_task(task_id)
        if task is None:
            self._invariant_failed("delete task", InvariantViolation(f"Task not found: {task_id}"))
            return False

        if not await self.confirm(f"Delete '{task.title}'?"):
            logger.debug("delete_task: declined for %s", task_id)
            return False

        if self._apply_local("delete task", lambda board: board.remove_task(task_id)) is None:
            return False

        async def call() -> RemoteResult:
            await self._settled(task_id)
            return await self.session.remote.delete_task(self.remote_id(task_id))

        self._dispatch("delete task", call)
        logger.info("Task deleted: %s", task_id)
        return True

    # --- Moves ---

    def apply_move(self, move: Move) -> MoveResult:
        """
        Apply a move event.

        No-ops skip history, the local apply and the remote call. A task move
        that the remote acknowledges is followed by a full refresh from the
        remote to correct ordering drift.
        """
        try:
            result = resolve_move(self.session.board, move, now=now_utc())
        except InvariantViolation as e:
            self._invariant_failed("move", e)
            return MoveResult(board=None)

        if result.board is None:
            return result

        self.session.history.push(self.session.board)
        self.session.replace_board(result.board)
        self.session.commit()
        self.session.events.publish(MOVE_COMPLETED, move=move, result=result)

        if move.item_kind == ItemKind.COLUMN:
            ordered_ids = [column.id for column in self.session.board.columns]

            async def reorder_columns() -> RemoteResult:
                await self._settled(*ordered_ids)
                return await self.session.remote.reorder_columns(
                    [self.remote_id(column_id) for column_id in ordered_ids]
                )

            self._dispatch("reorder columns", reorder_columns)
        else:
            moved = result.task
            assert moved is not None
            task_id = moved.id
            source, destination, index = move.source_container, move.dest_container, move.dest_index

            async def reorder_task() -> RemoteResult:
                await self._settled(task_id, source, destination)
                return await self.session.remote.reorder_task(
                    self.remote_id(task_id),
                    self.remote_id(source),
                    self.remote_id(destination),
                    index,
                )

            self._dispatch(
                "reorder task",
                reorder_task,
                lambda _result: self._refresh_after_reorder(),
            )
        return result

    async def refresh(self) -> SyncOutcome:
        """Replace the live board with the remote's view (no history entry)."""
        return await self.reconcile_remote(
            "fetch board",
            self.session.remote.fetch_board,
            lambda result: self._replace_from_remote(result.data),
        )

    async def _refresh_after_reorder(self) -> None:
        await self.refresh()

    # --- Two-phase machinery ---

    def _apply_local(self, operation: str, mutate: Callable[[Board], T]) -> T | None:
        """
        Phase one: snapshot, mutate the live board, persist.

        A mutation that violates an invariant leaves the board and history
        untouched and sets a notice instead.
        """
        board = self.session.board
        snapshot = self.session.history.snapshot(board)
        try:
            value = mutate(board)
        except (InvariantViolation, ValueError) as e:
            self._invariant_failed(operation, e)
            return None
        self.session.history.push_snapshot(snapshot)
        self.session.commit()
        return value

    def _dispatch(
        self,
        operation: str,
        call: RemoteCall,
        on_success: SuccessHandler | None = None,
    ) -> asyncio.Task[SyncOutcome]:
        """Fire the remote phase without waiting for it."""
        task = asyncio.get_running_loop().create_task(
            self.reconcile_remote(operation, call, on_success),
            name=f"sync:{operation}",
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def reconcile_remote(
        self,
        operation: str,
        call: RemoteCall,
        on_success: SuccessHandler | None = None,
    ) -> SyncOutcome:
        """
        Phase two: run the remote call and reconcile its result.

        Failures of any kind (error result, raised client error, malformed
        payload) keep the local state as it is.
        """
        try:
            result = await call()
        except (BoardApiError, httpx.HTTPError) as e:
            return self._remote_failed(operation, str(e))

        if not result.success:
            return self._remote_failed(operation, result.error or "Remote call failed")

        if on_success is not None:
            try:
                maybe_awaitable = on_success(result)
                if inspect.isawaitable(maybe_awaitable):
                    await maybe_awaitable
            except (ValidationError, RemoteError) as e:
                return self._remote_failed(operation, f"Malformed response: {e}")

        logger.debug("%s: remote acknowledged", operation)
        return SyncOutcome(operation=operation, ok=True, data=result.data)

    @property
    def pending_count(self) -> int:
        """Remote calls still in flight."""
        return len(self._pending)

    async def drain(self) -> None:
        """Wait until every in-flight remote call has been reconciled."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _remote_failed(self, operation: str, error: str) -> SyncOutcome:
        if self.quiet_failures:
            logger.debug("%s failed, keeping local state: %s", operation, error)
        else:
            logger.warning("%s failed, keeping local state: %s", operation, error)
            self.session.set_notice(f"Could not {operation}: {error}")
        return SyncOutcome(operation=operation, ok=False, error=error)

    def _invariant_failed(self, operation: str, error: Exception) -> None:
        logger.error("%s aborted: %s", operation, error)
        self.session.set_notice(str(error))

    # --- Identity ---

    def remote_id(self, entity_id: str) -> str:
        """The id the remote knows an entity by."""
        return self._server_ids.get(entity_id, entity_id)

    def _track_create(self, local_id: str, create: asyncio.Task[SyncOutcome]) -> None:
        self._creates[local_id] = create
        create.add_done_callback(lambda _task: self._creates.pop(local_id, None))

    async def _settled(self, *entity_ids: str) -> None:
        """Wait until no create is in flight for any of the given entities."""
        waiting = {self._creates[i] for i in entity_ids if i in self._creates}
        if waiting:
            logger.debug("Waiting for %d pending create(s)", len(waiting))
            await asyncio.wait(waiting)

    def _record_server_id(self, entity_id: str, data: dict[str, Any]) -> str | None:
        server_id = data.get("_id") or data.get("id")
        if not server_id:
            return None
        server_id = str(server_id)
        if server_id != entity_id:
            self._server_ids[entity_id] = server_id
        return server_id

    # --- Reconciliation ---

    def _adopt_column(self, entity_id: str, data: Any, sent_title: str) -> None:
        """
        Merge a column returned by the remote into the live board.

        The title is only taken over while the live column still carries the
        title that was sent; a newer local rename wins.
        """
        if not isinstance(data, dict):
            return
        server_id = self._record_server_id(entity_id, data)
        board = self.session.board
        column = board.find_column(entity_id) or board.find_column(self.remote_id(entity_id))
        if column is None:
            logger.debug("Column %s gone before the remote answered", entity_id)
            return

        changed = False
        if server_id and column.id != server_id and board.find_column(server_id) is None:
            logger.debug("Column %s adopted remote id %s", column.id, server_id)
            board.replace_column_id(column.id, server_id)
            changed = True

        title = data.get("title")
        if isinstance(title, str) and title.strip() and column.title == sent_title:
            if column.title != title.strip():
                column.title = title.strip()
                changed = True
        elif isinstance(title, str) and column.title != sent_title:
            logger.debug("Column %s renamed locally since the request, keeping it", column.id)

        if changed:
            self.session.touch()

    def _adopt_task(
        self,
        entity_id: str,
        data: Any,
        sent_title: str,
        sent_description: str | None,
    ) -> None:
        """
        Merge a task returned by the remote, keeping local-only fields.

        Title and description are only taken over while the live task still
        holds the values that were sent.
        """
        if not isinstance(data, dict):
            return
        remote = Task.model_validate({"title": sent_title, **data})
        server_id = self._record_server_id(entity_id, data)
        board = self.session.board
        task = board.find_task(entity_id) or board.find_task(self.remote_id(entity_id))
        if task is None:
            logger.debug("Task %s gone before the remote answered", entity_id)
            return

        changed = False
        if server_id and task.id != server_id and board.find_task(server_id) is None:
            logger.debug("Task %s adopted remote id %s", task.id, server_id)
            task.id = server_id
            changed = True

        if task.title == sent_title and task.title != remote.title:
            task.title = remote.title
            changed = True
        if (
            "description" in data
            and task.description == sent_description
            and task.description != remote.description
        ):
            task.description = remote.description
            changed = True

        if changed:
            self.session.touch()

    def _replace_from_remote(self, data: Any) -> None:
        columns = data.get("columns") if isinstance(data, dict) else data
        if not isinstance(columns, list):
            raise RemoteError("Board payload is not a list of columns")
        board = Board.from_wire(columns, sort=True)
        board.ensure_protected_columns()
        self.session.replace_board(board)
        self.session.touch()
        logger.info("Board refreshed from remote (%d columns)", len(board.columns))
