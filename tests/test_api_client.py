"""Tests for the HTTP board client."""

import asyncio
import json

import httpx
import pytest

from boardsync.api import BoardApiClient, RemoteError, TransportError
from boardsync.api.client import DEFAULT_ERROR, HTML_ERROR


def make_client(handler) -> BoardApiClient:
    return BoardApiClient("http://board.test/api/", transport=httpx.MockTransport(handler))


def run(coro):
    return asyncio.run(coro)


class RecordingHandler:
    """MockTransport handler that records requests and replies with a fixed response."""

    def __init__(self, response: httpx.Response) -> None:
        self.response = response
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.response

    @property
    def last_json(self):
        return json.loads(self.requests[-1].content)


class TestRoutes:
    """Each operation hits the right endpoint with the right body."""

    def test_fetch_board(self):
        handler = RecordingHandler(httpx.Response(200, json=[{"_id": "c1", "title": "To Do"}]))

        async def scenario():
            async with make_client(handler) as client:
                return await client.fetch_board()

        result = run(scenario())
        assert result.success
        assert result.data == [{"_id": "c1", "title": "To Do"}]
        assert handler.requests[0].method == "GET"
        assert handler.requests[0].url == "http://board.test/api/boards"

    def test_reorder_task_body(self):
        handler = RecordingHandler(httpx.Response(200, json={"ok": True}))

        async def scenario():
            async with make_client(handler) as client:
                return await client.reorder_task("t1", "c1", "c2", 3)

        assert run(scenario()).success
        request = handler.requests[0]
        assert request.method == "PUT"
        assert request.url.path == "/api/boards/reorder-tasks"
        assert handler.last_json == {
            "taskId": "t1",
            "sourceColumnId": "c1",
            "destinationColumnId": "c2",
            "newIndex": 3,
        }

    def test_reorder_columns_body(self):
        handler = RecordingHandler(httpx.Response(200, json=[]))

        async def scenario():
            async with make_client(handler) as client:
                await client.reorder_columns(["a", "b"])

        run(scenario())
        assert handler.requests[0].url.path == "/api/boards/reorder-columns"
        assert handler.last_json == {"columnIds": ["a", "b"]}

    @pytest.mark.parametrize(
        ("call", "method", "path", "body"),
        [
            (lambda c: c.create_column("Review"), "POST", "/api/columns", {"title": "Review"}),
            (lambda c: c.rename_column("c1", "Doing"), "PATCH", "/api/columns/c1", {"title": "Doing"}),
            (lambda c: c.delete_column("c1"), "DELETE", "/api/columns/c1", None),
            (
                lambda c: c.create_task("c1", "Ship", "soon"),
                "POST",
                "/api/tasks",
                {"columnId": "c1", "title": "Ship", "description": "soon"},
            ),
            (
                lambda c: c.update_task("t1", "Ship", None),
                "PATCH",
                "/api/tasks/t1",
                {"title": "Ship", "description": None},
            ),
            (lambda c: c.delete_task("t1"), "DELETE", "/api/tasks/t1", None),
        ],
    )
    def test_entity_routes(self, call, method, path, body):
        handler = RecordingHandler(httpx.Response(204))

        async def scenario():
            async with make_client(handler) as client:
                return await call(client)

        result = run(scenario())
        assert result.success
        assert result.data is None
        request = handler.requests[0]
        assert request.method == method
        assert request.url.path == path
        if body is None:
            assert request.content == b""
        else:
            assert handler.last_json == body


class TestResponses:
    """Decoding of success and error bodies."""

    def test_json_without_content_type(self):
        handler = RecordingHandler(httpx.Response(200, content=b'{"_id": "x"}'))

        async def scenario():
            async with make_client(handler) as client:
                return await client.execute("GET", "/boards")

        assert run(scenario()) == {"_id": "x"}

    def test_plain_text_body_is_none(self):
        handler = RecordingHandler(httpx.Response(200, text="ok"))

        async def scenario():
            async with make_client(handler) as client:
                return await client.execute("GET", "/boards")

        assert run(scenario()) is None

    def test_error_message_from_json(self):
        handler = RecordingHandler(httpx.Response(400, json={"message": "Title required"}))

        async def scenario():
            async with make_client(handler) as client:
                with pytest.raises(RemoteError) as exc_info:
                    await client.execute("POST", "/columns", {})
                return exc_info.value

        error = run(scenario())
        assert str(error) == "Title required"
        assert error.status_code == 400

    def test_error_json_without_message(self):
        handler = RecordingHandler(httpx.Response(500, json={"code": 7}))

        async def scenario():
            async with make_client(handler) as client:
                return await client.create_column("x")

        result = run(scenario())
        assert not result.success
        assert result.error == '{"code": 7}'

    def test_html_error_body(self):
        handler = RecordingHandler(
            httpx.Response(404, text="<!DOCTYPE html><html></html>", headers={"content-type": "text/html"})
        )

        async def scenario():
            async with make_client(handler) as client:
                return await client.fetch_board()

        assert run(scenario()).error == HTML_ERROR

    def test_empty_error_body(self):
        handler = RecordingHandler(httpx.Response(502))

        async def scenario():
            async with make_client(handler) as client:
                return await client.fetch_board()

        assert run(scenario()).error == DEFAULT_ERROR

    def test_transport_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async def scenario():
            async with make_client(handler) as client:
                with pytest.raises(TransportError):
                    await client.execute("GET", "/boards")
                return await client.fetch_board()

        result = run(scenario())
        assert not result.success
        assert "connection refused" in result.error
