"""
hang: Request Body Extractor
===============================

What:  Helpers for reading, decoding and peeking at request bodies.
How:   Thin wrappers around Starlette's `Request.body()` that translate every
       failure into a RequestBodyError carrying the HTTP status to answer with.
Who:   Called by route handlers and by middleware that inspects bodies.

Failure contract:
    read_body / read_json raise instead of returning an error value. The
    exception *is* the response: the Dispatcher converts it into a plain-text
    response with the error's status and message, so a handler that lets it
    propagate must not try to write anything else.

    read_body   → MissingBodyError (400) | BodyReadError (500 consumed / 400)
    read_json   → the above | JSONDecodeError (400)
"""

import functools
import json
from typing import Any, Optional, Type, TypeVar, overload

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from starlette.requests import ClientDisconnect, Request
from starlette.types import Message, Receive

from hang.exceptions import BodyReadError, JSONDecodeError, MissingBodyError

T = TypeVar("T")


async def read_body(request: Request) -> bytes:
    """
    Read the full request body.

    Raises:
        MissingBodyError:  the request carries no body (zero bytes)
        BodyReadError:     the stream was already consumed (500) or the
                           client went away before sending it all (400)
    """
    body = await _load_body(request)
    if not body:
        raise MissingBodyError(context={"path": request.url.path})
    return body


@overload
async def read_json(request: Request) -> Any: ...


@overload
async def read_json(request: Request, model: Type[T]) -> T: ...


async def read_json(request: Request, model: Optional[Type[Any]] = None) -> Any:
    """
    Read the body and decode it as JSON.

    Without `model` the decoded value is returned as-is (dict, list, ...).
    With `model` (a pydantic model, a dataclass, a TypedDict or any type
    pydantic's TypeAdapter accepts) the JSON is validated into an instance.

    Raises:
        Everything read_body raises, plus JSONDecodeError when the body is
        malformed or does not fit `model`.
    """
    body = await read_body(request)

    if model is None:
        try:
            return json.loads(body)
        except ValueError as exc:
            raise JSONDecodeError(
                f"Request body is not valid JSON: {exc}",
                context={"path": request.url.path},
            ) from exc

    try:
        return _adapter_for(model).validate_json(body)
    except PydanticValidationError as exc:
        raise JSONDecodeError(
            f"Request body could not be decoded: {exc.errors(include_url=False)}",
            context={"path": request.url.path, "model": getattr(model, "__name__", str(model))},
        ) from exc


@functools.lru_cache(maxsize=None)
def _adapter_for(model: Any) -> TypeAdapter:
    """Cached TypeAdapter for `model`, built on first use."""
    return TypeAdapter(model)


async def peek_body(request: Request) -> bytes:
    """
    Read the body without consuming it.

    The bytes stay cached on `request`, and its ASGI receive channel is
    replaced by one that replays them, so a downstream `Request` built from
    the same scope/receive reads the identical body from the start.

    An absent body peeks as b"" (no MissingBodyError): peeking never decides
    the response.
    """
    body = await _load_body(request)
    request._receive = _replay_receive(body, request.receive)
    return body


async def _load_body(request: Request) -> bytes:
    try:
        return await request.body()
    except ClientDisconnect as exc:
        raise BodyReadError(
            "Request body could not be read: client disconnected",
            context={"path": request.url.path},
        ) from exc
    except RuntimeError as exc:
        # Starlette raises RuntimeError("Stream consumed") once request.stream()
        # has been drained without caching
        raise BodyReadError(
            f"Request body could not be read: {exc}",
            consumed=True,
            context={"path": request.url.path},
        ) from exc


def _replay_receive(body: bytes, receive: Receive) -> Receive:
    """Receive callable yielding `body` as one complete message, then delegating."""
    replayed = False

    async def replay() -> Message:
        nonlocal replayed
        if not replayed:
            replayed = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return replay
