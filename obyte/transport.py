"""
Transport protocol for hub requests and notifications.

Defines the seam where the concrete connection plugs in. The API layer
depends on this protocol, not on websockets directly, so the transport
can be swapped for a test fake without editing client logic.

Concrete implementations:
    - WebSocketTransport (default, uses websockets' asyncio client)
    - FakeTransport (tests, returns canned responses)

Wire format (one JSON array per frame):
    ["request",    {"command": ..., "params": ..., "tag": ...}]
    ["response",   {"tag": ..., "response": ...}]
    ["justsaying", {"subject": ..., "body": ...}]

A response whose body is an object with an ``error`` key is a refusal,
raised as ServerError. Connection failures and timeouts are raised as
TransportError. There are no retries at this layer.
"""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
import uuid
from typing import Any, Callable, Protocol, runtime_checkable

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed, WebSocketException

from obyte.canonical_json import canonical_json
from obyte.errors import ServerError, TransportError

logger = logging.getLogger(__name__)

Message = list[Any]
Subscriber = Callable[[Message], Any]


@runtime_checkable
class TransportClient(Protocol):
    """Durable hub connection with request/response and notifications."""

    async def request(self, command: str, params: Any = None) -> Any:
        """Send a request and wait for its response.

        Raises:
            TransportError: Connection failure, timeout, bad frame.
            ServerError: The hub answered with an error.
        """
        ...

    def subscribe(self, callback: Subscriber) -> None:
        """Receive every inbound message that is not a response."""
        ...

    async def justsaying(self, subject: str, body: Any = None) -> None:
        """Send a fire-and-forget notification."""
        ...

    async def close(self) -> None:
        """Release the connection. Safe to call more than once."""
        ...


class WebSocketTransport:
    """Hub connection over a websocket.

    Connects lazily on first use. A single reader task routes responses
    to the pending request with the same tag, answers the hub's
    heartbeats, and hands everything else to subscribers.

    Args:
        url: Hub websocket URL (e.g. "wss://obyte.org/bb").
        timeout: Seconds to wait for connecting and for each response.
    """

    def __init__(self, url: str, timeout: float = 30.0) -> None:
        self._url = url
        self._timeout = timeout
        self._connection: ClientConnection | None = None
        self._reader: asyncio.Task[None] | None = None
        self._connect_lock = asyncio.Lock()
        self._pending: dict[str, tuple[str, asyncio.Future[Any]]] = {}
        self._subscribers: list[Subscriber] = []
        self._callback_tasks: set[asyncio.Future[Any]] = set()
        self._closed = False

    @property
    def url(self) -> str:
        """The hub websocket URL."""
        return self._url

    @property
    def connected(self) -> bool:
        return self._connection is not None

    # -----------------------------------------------------------------
    # Connection management
    # -----------------------------------------------------------------

    async def _ensure_connected(self) -> ClientConnection:
        if self._closed:
            raise TransportError("transport is closed")
        async with self._connect_lock:
            if self._connection is None:
                logger.debug("connecting to %s", self._url)
                try:
                    self._connection = await connect(self._url, open_timeout=self._timeout)
                except (OSError, TimeoutError, WebSocketException) as exc:
                    raise TransportError(f"cannot connect to {self._url}: {exc}") from exc
                self._reader = asyncio.create_task(self._read_loop(self._connection))
            return self._connection

    async def _read_loop(self, connection: ClientConnection) -> None:
        reason = "connection closed"
        try:
            async for raw in connection:
                await self._handle_frame(connection, raw)
        except ConnectionClosed as exc:
            reason = f"connection closed: {exc}"
        except Exception as exc:
            # Pending requests get a TransportError below; the socket is
            # not reused once its reader is gone.
            reason = f"reader failed: {exc!r}"
            logger.exception("reader for %s failed", self._url)
            await connection.close()
        finally:
            if self._connection is connection:
                self._connection = None
            if not self._closed:
                logger.warning("lost connection to %s (%s)", self._url, reason)
            self._fail_pending(TransportError(reason))

    def _fail_pending(self, exc: Exception) -> None:
        pending, self._pending = self._pending, {}
        for _command, future in pending.values():
            if not future.done():
                future.set_exception(exc)

    async def _send(self, message: Message) -> None:
        connection = await self._ensure_connected()
        try:
            await connection.send(canonical_json(message))
        except (ConnectionClosed, OSError) as exc:
            raise TransportError(f"send failed: {exc}") from exc

    # -----------------------------------------------------------------
    # Inbound frames
    # -----------------------------------------------------------------

    async def _handle_frame(self, connection: ClientConnection, raw: str | bytes) -> None:
        try:
            message = json.loads(raw)
        except ValueError:
            logger.warning("dropping non-JSON frame from %s", self._url)
            return
        if not (isinstance(message, list) and len(message) == 2 and isinstance(message[1], dict)):
            logger.warning("dropping malformed frame from %s", self._url)
            return

        kind, body = message
        if kind == "response":
            self._resolve(body)
        elif kind == "request" and body.get("command") == "heartbeat":
            await connection.send(canonical_json(["response", {"tag": body.get("tag")}]))
        else:
            self._notify(message)

    def _resolve(self, body: dict[str, Any]) -> None:
        entry = self._pending.pop(body.get("tag"), None)
        if entry is None:
            logger.debug("response for unknown tag %r", body.get("tag"))
            return
        command, future = entry
        if future.done():
            return
        response = body.get("response")
        if isinstance(response, dict) and "error" in response:
            future.set_exception(ServerError(command, response["error"]))
        else:
            future.set_result(response)

    def _notify(self, message: Message) -> None:
        for callback in list(self._subscribers):
            try:
                result = callback(message)
            except Exception:
                logger.exception("subscriber %r failed on %s", callback, message[0])
                continue
            if inspect.isawaitable(result):
                task = asyncio.ensure_future(result)
                self._callback_tasks.add(task)
                task.add_done_callback(self._callback_done)

    def _callback_done(self, task: asyncio.Future[Any]) -> None:
        self._callback_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("async subscriber failed", exc_info=exc)

    # -----------------------------------------------------------------
    # TransportClient protocol methods
    # -----------------------------------------------------------------

    async def request(self, command: str, params: Any = None) -> Any:
        """Send ``command`` and wait for the matching response."""
        tag = uuid.uuid4().hex
        body: dict[str, Any] = {"command": command, "tag": tag}
        if params is not None:
            body["params"] = params

        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        self._pending[tag] = (command, future)
        try:
            logger.debug("request %s tag=%s", command, tag)
            await self._send(["request", body])
            return await asyncio.wait_for(future, self._timeout)
        except TimeoutError as exc:
            raise TransportError(f"{command}: no response within {self._timeout}s") from exc
        finally:
            self._pending.pop(tag, None)

    def subscribe(self, callback: Subscriber) -> None:
        """Register a callback for justsaying messages and hub requests.

        Callbacks may be plain functions or coroutine functions.
        """
        self._subscribers.append(callback)

    async def justsaying(self, subject: str, body: Any = None) -> None:
        """Send a notification; no response is expected."""
        content: dict[str, Any] = {"subject": subject}
        if body is not None:
            content["body"] = body
        await self._send(["justsaying", content])

    async def close(self) -> None:
        """Close the connection and fail any in-flight requests."""
        if self._closed:
            return
        self._closed = True
        connection, self._connection = self._connection, None
        if connection is not None:
            await connection.close()
        if self._reader is not None:
            await asyncio.gather(self._reader, return_exceptions=True)
            self._reader = None
        self._fail_pending(TransportError("transport is closed"))
