"""
hang: Request Body Extractor Tests
=====================================

What:  read_body / read_json / peek_body success and failure paths.
How:   Through the app for status codes, and against hand-built Starlette
       Requests for stream edge cases (disconnect, replay).

What we test:
    ✅ Missing body → 400, consumed stream → 500, disconnect → 400
    ✅ {"x":1} decodes into a pydantic model and a dataclass
    ✅ Malformed or mismatched JSON → 400
    ✅ peek_body leaves the body readable with identical bytes
"""

from dataclasses import dataclass

import pytest
from pydantic import BaseModel
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response

from hang.body import _adapter_for, peek_body, read_body, read_json
from hang.exceptions import BodyReadError, JSONDecodeError, MissingBodyError


class Point(BaseModel):
    x: int


@dataclass
class PointDC:
    x: int


def make_request(messages):
    """A Starlette Request whose receive channel replays `messages` in order."""
    queue = list(messages)

    async def receive():
        return queue.pop(0)

    scope = {
        "type": "http",
        "method": "POST",
        "path": "/echo",
        "headers": [],
        "query_string": b"",
    }
    return Request(scope, receive)


def body_message(body, more_body=False):
    return {"type": "http.request", "body": body, "more_body": more_body}


# ══════════════════════════════════════════════════════════════════════════
# Handlers registered on the test service
# ══════════════════════════════════════════════════════════════════════════

async def echo(request):
    return Response(await read_body(request))


async def point_model(request):
    point = await read_json(request, Point)
    return JSONResponse({"x": point.x})


async def point_dataclass(request):
    point = await read_json(request, PointDC)
    return JSONResponse({"x": point.x})


async def raw_json(request):
    return JSONResponse({"decoded": await read_json(request)})


async def drain_then_read(request):
    async for _ in request.stream():
        pass
    return Response(await read_body(request))


async def peek_then_read(request):
    peeked = await peek_body(request)
    body = await read_body(request)
    return PlainTextResponse(f"{peeked == body}:{body.decode()}")


@pytest.fixture
def body_routes(service):
    service.add_route("echo", "echo", echo)
    service.add_route("point", "point_model", point_model)
    service.add_route("point-dc", "point_dataclass", point_dataclass)
    service.add_route("raw", "raw_json", raw_json)
    service.add_route("drain", "drain_then_read", drain_then_read)
    service.add_route("peek", "peek_then_read", peek_then_read)
    return service


# ══════════════════════════════════════════════════════════════════════════
# read_body
# ══════════════════════════════════════════════════════════════════════════

class TestReadBody:

    @pytest.mark.asyncio
    async def test_returns_raw_bytes(self, client, body_routes):
        response = await client.post("/echo", content=b"\x00raw bytes\xff")
        assert response.status_code == 200
        assert response.content == b"\x00raw bytes\xff"

    @pytest.mark.asyncio
    async def test_missing_body_is_400(self, client, body_routes):
        response = await client.post("/echo")
        assert response.status_code == 400
        assert response.text == "Request body is missing"

    @pytest.mark.asyncio
    async def test_missing_body_raises(self):
        request = make_request([body_message(b"")])
        with pytest.raises(MissingBodyError):
            await read_body(request)

    @pytest.mark.asyncio
    async def test_consumed_stream_is_500(self, client, body_routes):
        response = await client.post("/drain", content=b"payload")
        assert response.status_code == 500
        assert "Stream consumed" in response.text

    @pytest.mark.asyncio
    async def test_client_disconnect_is_400(self):
        request = make_request([
            body_message(b"part", more_body=True),
            {"type": "http.disconnect"},
        ])
        with pytest.raises(BodyReadError) as exc_info:
            await read_body(request)
        assert exc_info.value.status_code == 400
        assert exc_info.value.consumed is False

    @pytest.mark.asyncio
    async def test_chunked_body_is_joined(self):
        request = make_request([
            body_message(b"hel", more_body=True),
            body_message(b"lo"),
        ])
        assert await read_body(request) == b"hello"


# ══════════════════════════════════════════════════════════════════════════
# read_json
# ══════════════════════════════════════════════════════════════════════════

class TestReadJSON:

    @pytest.mark.asyncio
    async def test_decodes_into_model(self, client, body_routes):
        response = await client.post("/point", content=b'{"x":1}')
        assert response.status_code == 200
        assert response.json() == {"x": 1}

    @pytest.mark.asyncio
    async def test_decodes_into_dataclass(self, client, body_routes):
        response = await client.post("/point-dc", content=b'{"x":1}')
        assert response.json() == {"x": 1}

    @pytest.mark.asyncio
    async def test_decodes_without_model(self, client, body_routes):
        response = await client.post("/raw", content=b'[1, "two", null]')
        assert response.json() == {"decoded": [1, "two", None]}

    @pytest.mark.asyncio
    async def test_malformed_json_is_400(self, client, body_routes):
        response = await client.post("/point", content=b'{"x":')
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_malformed_json_without_model_is_400(self, client, body_routes):
        response = await client.post("/raw", content=b'{"x":')
        assert response.status_code == 400
        assert "not valid JSON" in response.text

    @pytest.mark.asyncio
    async def test_wrong_type_is_400(self, client, body_routes):
        response = await client.post("/point", content=b'{"x":"not a number"}')
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_malformed_json_raises(self):
        request = make_request([body_message(b'{"x":')])
        with pytest.raises(JSONDecodeError):
            await read_json(request, Point)

    def test_adapter_reused_per_model(self):
        assert _adapter_for(Point) is _adapter_for(Point)
        assert _adapter_for(PointDC) is not _adapter_for(Point)

    @pytest.mark.asyncio
    async def test_missing_body_raises_missing_not_decode(self):
        request = make_request([body_message(b"")])
        with pytest.raises(MissingBodyError):
            await read_json(request, Point)


# ══════════════════════════════════════════════════════════════════════════
# peek_body
# ══════════════════════════════════════════════════════════════════════════

class TestPeekBody:

    @pytest.mark.asyncio
    async def test_peek_then_read_same_request(self, client, body_routes):
        response = await client.post("/peek", content=b"same bytes")
        assert response.status_code == 200
        assert response.text == "True:same bytes"

    @pytest.mark.asyncio
    async def test_peek_then_read_downstream_request(self):
        """A new Request on the same scope/receive sees the full body again."""
        request = make_request([
            body_message(b'{"x":', more_body=True),
            body_message(b"1}"),
        ])
        peeked = await peek_body(request)

        downstream = Request(request.scope, request.receive)
        assert await read_body(downstream) == peeked == b'{"x":1}'

    @pytest.mark.asyncio
    async def test_peek_then_read_json_downstream(self):
        request = make_request([body_message(b'{"x":1}')])
        await peek_body(request)

        downstream = Request(request.scope, request.receive)
        point = await read_json(downstream, Point)
        assert point.x == 1

    @pytest.mark.asyncio
    async def test_peek_empty_body(self):
        request = make_request([body_message(b"")])
        assert await peek_body(request) == b""
