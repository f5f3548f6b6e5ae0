"""HTTP client for the remote board service."""

from __future__ import annotations

import json
import logging
import time
from typing import Any

import httpx

from ..models import RemoteResult

logger = logging.getLogger(__name__)


class BoardApiError(Exception):
    """Base exception for remote board service errors."""

    pass


class RemoteError(BoardApiError):
    """The service answered with an error status or an unusable body."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TransportError(BoardApiError):
    """The request never got an answer (connection refused, timeout...)."""

    pass


DEFAULT_ERROR = "Something went wrong"
HTML_ERROR = (
    "Server returned HTML instead of JSON "
    "(possible wrong endpoint or dev server directory listing)"
)


class BoardApiClient:
    """Async REST client for the board service.

    Low-level ``execute`` raises ``RemoteError`` / ``TransportError``. The
    operation methods wrap it and always return a ``RemoteResult`` so callers
    can treat a failing service as an ordinary outcome.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Service root, e.g. http://localhost:3001/api
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> BoardApiClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def execute(self, method: str, path: str, payload: dict[str, Any] | None = None) -> Any:
        """Send a request and decode the response body.

        Args:
            method: HTTP method
            path: Path relative to the base URL
            payload: Optional JSON body

        Returns:
            Decoded JSON body, or None for empty/non-JSON bodies.

        Raises:
            TransportError: Network failure or timeout
            RemoteError: Non-2xx status or malformed JSON body
        """
        op_name = f"{method} {path}"
        logger.debug("%s: payload=%s", op_name, payload)

        start_time = time.monotonic()
        try:
            response = await self._client.request(method, path, json=payload)
        except httpx.RequestError as e:
            elapsed_ms = (time.monotonic() - start_time) * 1000
            logger.error("%s failed after %.0fms: %s", op_name, elapsed_ms, e)
            raise TransportError(f"Request failed: {e}") from e

        elapsed_ms = (time.monotonic() - start_time) * 1000
        content_type = response.headers.get("content-type", "")

        if not response.is_success:
            message = self._error_message(response, content_type)
            logger.error(
                "%s: HTTP %d (%.0fms) %s", op_name, response.status_code, elapsed_ms, message
            )
            raise RemoteError(message, response.status_code)

        logger.info("%s: %d (%.0fms)", op_name, response.status_code, elapsed_ms)

        if response.status_code == 204:
            return None

        if "application/json" in content_type:
            try:
                return response.json()
            except ValueError as e:
                raise RemoteError(f"Invalid JSON response: {e}", response.status_code) from e

        # Some servers omit the header; treat the body as JSON if it parses
        text = response.text
        if not text:
            return None
        try:
            return json.loads(text)
        except ValueError:
            return None

    def _error_message(self, response: httpx.Response, content_type: str) -> str:
        """Best human-readable message for an error response."""
        if "application/json" in content_type:
            try:
                body = response.json()
            except ValueError:
                return DEFAULT_ERROR
            if isinstance(body, dict) and body.get("message"):
                return str(body["message"])
            return json.dumps(body) if body else DEFAULT_ERROR

        text = response.text
        if text.strip().startswith("<"):
            return HTML_ERROR
        return text or DEFAULT_ERROR

    async def _call(self, method: str, path: str, payload: dict[str, Any] | None = None) -> RemoteResult:
        try:
            data = await self.execute(method, path, payload)
        except BoardApiError as e:
            return RemoteResult.failure(str(e))
        return RemoteResult.ok(data)

    # --- Board ---

    async def fetch_board(self) -> RemoteResult:
        """Fetch all columns with their tasks."""
        return await self._call("GET", "/boards")

    async def reorder_columns(self, ordered_ids: list[str]) -> RemoteResult:
        """Persist a new column order."""
        return await self._call("PUT", "/boards/reorder-columns", {"columnIds": ordered_ids})

    async def reorder_task(
        self,
        task_id: str,
        source_column_id: str,
        dest_column_id: str,
        dest_index: int,
    ) -> RemoteResult:
        """Persist a task move."""
        return await self._call(
            "PUT",
            "/boards/reorder-tasks",
            {
                "taskId": task_id,
                "sourceColumnId": source_column_id,
                "destinationColumnId": dest_column_id,
                "newIndex": dest_index,
            },
        )

    # --- Columns ---

    async def create_column(self, title: str) -> RemoteResult:
        return await self._call("POST", "/columns", {"title": title})

    async def rename_column(self, column_id: str, title: str) -> RemoteResult:
        return await self._call("PATCH", f"/columns/{column_id}", {"title": title})

    async def delete_column(self, column_id: str) -> RemoteResult:
        return await self._call("DELETE", f"/columns/{column_id}")

    # --- Tasks ---

    async def create_task(
        self, column_id: str, title: str, description: str | None = None
    ) -> RemoteResult:
        return await self._call(
            "POST",
            "/tasks",
            {"columnId": column_id, "title": title, "description": description},
        )

    async def update_task(
        self, task_id: str, title: str, description: str | None = None
    ) -> RemoteResult:
        return await self._call(
            "PATCH", f"/tasks/{task_id}", {"title": title, "description": description}
        )

    async def delete_task(self, task_id: str) -> RemoteResult:
        return await self._call("DELETE", f"/tasks/{task_id}")
