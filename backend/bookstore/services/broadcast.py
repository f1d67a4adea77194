"""Live update fan-out to connected WebSocket listeners.

Each registered connection gets its own bounded outbound queue and a writer
task draining it, so a slow or dead listener never holds up the others.
Delivery is best-effort: failed writes and full queues remove the listener
instead of raising to the caller of ``broadcast``.

The hub is confined to the event loop: register, unregister and broadcast
must be called from it.
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

# WebSocket close code used when a listener cannot keep up
POLICY_VIOLATION = 1008


class EventType(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class UpdateEvent(BaseModel):
    """A book mutation notification. Serialized as {"type": ..., "book": ...}."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    event_type: EventType = Field(alias="type")
    payload: dict[str, Any] = Field(alias="book")

    def serialize(self) -> str:
        return self.model_dump_json(by_alias=True)


class Connection(Protocol):
    async def send_text(self, data: str) -> None: ...

    async def close(self, code: int = 1000) -> None: ...


class ListenerState(str, Enum):
    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"


class Listener:
    def __init__(self, connection: Connection, max_pending: int):
        self.connection = connection
        self.state = ListenerState.OPEN
        self.queue: asyncio.Queue[str] = asyncio.Queue(maxsize=max_pending)
        self.writer: asyncio.Task | None = None

    def discard_pending(self) -> None:
        while True:
            try:
                self.queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            self.queue.task_done()


class BroadcastHub:
    """Registry of live listeners receiving book update events."""

    def __init__(self, max_pending: int = 100, send_timeout: float = 5.0):
        self._max_pending = max_pending
        self._send_timeout = send_timeout
        # Keyed by id(): Starlette connections are unhashable Mappings
        self._listeners: dict[int, Listener] = {}
        self._closers: set[asyncio.Task] = set()

    def __len__(self) -> int:
        return len(self._listeners)

    def __contains__(self, connection: object) -> bool:
        return id(connection) in self._listeners

    def register(self, connection: Connection) -> Listener:
        """Add a connection to the live set. Registering twice is a no-op."""
        existing = self._listeners.get(id(connection))
        if existing is not None:
            return existing

        listener = Listener(connection, self._max_pending)
        self._listeners[id(connection)] = listener
        listener.writer = asyncio.get_running_loop().create_task(
            self._write_loop(listener)
        )
        logger.info(f"Listener registered ({len(self._listeners)} connected)")
        return listener

    def unregister(self, connection: Connection) -> None:
        """Remove a connection. Unknown or already removed connections are ignored."""
        listener = self._listeners.pop(id(connection), None)
        if listener is None:
            return
        listener.state = ListenerState.CLOSED
        listener.discard_pending()
        if listener.writer is not None and listener.writer is not asyncio.current_task():
            listener.writer.cancel()
        logger.info(f"Listener unregistered ({len(self._listeners)} connected)")

    def broadcast(self, event: UpdateEvent) -> int:
        """Queue ``event`` for every open listener. Returns how many accepted it."""
        message = event.serialize()
        delivered = 0
        for listener in list(self._listeners.values()):
            if listener.state is not ListenerState.OPEN:
                continue
            try:
                listener.queue.put_nowait(message)
            except asyncio.QueueFull:
                logger.warning(
                    f"Dropping listener with {self._max_pending} undelivered messages"
                )
                self._drop(listener)
                continue
            delivered += 1
        return delivered

    async def flush(self) -> None:
        """Wait until every registered listener has drained its queue."""
        listeners = list(self._listeners.values())
        await asyncio.gather(*(listener.queue.join() for listener in listeners))

    async def close(self) -> None:
        """Disconnect and forget every listener."""
        listeners = list(self._listeners.values())
        for listener in listeners:
            self.unregister(listener.connection)
            await self._close_connection(listener)
        writers = [listener.writer for listener in listeners if listener.writer is not None]
        if writers:
            await asyncio.gather(*writers, return_exceptions=True)
        if self._closers:
            await asyncio.gather(*self._closers, return_exceptions=True)
        logger.info(f"Broadcast hub closed, disconnected {len(listeners)} listeners")

    def _drop(self, listener: Listener) -> None:
        listener.state = ListenerState.CLOSING
        self.unregister(listener.connection)
        task = asyncio.get_running_loop().create_task(
            self._close_connection(listener, code=POLICY_VIOLATION)
        )
        self._closers.add(task)
        task.add_done_callback(self._closers.discard)

    async def _write_loop(self, listener: Listener) -> None:
        while True:
            message = await listener.queue.get()
            try:
                await asyncio.wait_for(
                    listener.connection.send_text(message), timeout=self._send_timeout
                )
            except Exception as e:
                logger.warning(f"Write to listener failed, unregistering: {e!r}")
                self.unregister(listener.connection)
                return
            finally:
                listener.queue.task_done()

    async def _close_connection(self, listener: Listener, code: int = 1000) -> None:
        listener.state = ListenerState.CLOSED
        try:
            await listener.connection.close(code=code)
        except Exception as e:
            logger.debug(f"Closing listener connection failed: {e!r}")
