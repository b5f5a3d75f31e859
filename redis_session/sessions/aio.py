"""
Asyncio front end for SessionHandler.

``SessionLock.acquire()`` spins on the calling thread for up to
``lock_max_wait_micros``. Calling it from a coroutine would stall the event
loop, so every handler call here runs on a worker thread via
``asyncio.to_thread`` and the coroutine awaits its result.

Calls on one AsyncSessionHandler are serialized by an ``asyncio.Lock``: a
handler tracks a single lock, and two concurrent acquisitions on the same
handle would race on that state. The lock is held until the worker thread
returns, even when the awaiting coroutine is cancelled.

Example:
    >>> handler = AsyncSessionHandler(SessionHandler(redis_client))
    >>> async with handler.session("abc"):
    ...     payload = await handler.read("abc")
    ...     await handler.write("abc", payload + "x")
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Optional

from redis_session.observability.logging import get_logger
from redis_session.sessions.handler import Payload, SessionHandler


class AsyncSessionHandler:
    """Runs a SessionHandler's blocking calls off the event loop."""

    def __init__(self, handler: SessionHandler) -> None:
        self._handler = handler
        self._serial = asyncio.Lock()
        self._logger = get_logger(__name__)

    @property
    def handler(self) -> SessionHandler:
        return self._handler

    async def acquire(self, session_id: str) -> bool:
        """
        Acquire the session lock on a worker thread.

        If the caller is cancelled while the worker spins, the lock the
        worker may still win is released before the cancellation propagates.
        """
        return await self._run(
            self._handler.lock.acquire, session_id, on_cancel=self._handler.close
        )

    async def read(self, session_id: str) -> Payload:
        return await self._run(self._handler.read, session_id)

    async def write(self, session_id: str, data: Payload) -> bool:
        return await self._run(self._handler.write, session_id, data)

    async def destroy(self, session_id: str) -> bool:
        return await self._run(self._handler.destroy, session_id)

    async def close(self) -> bool:
        return await self._run(self._handler.close)

    @asynccontextmanager
    async def session(self, session_id: str) -> AsyncIterator["AsyncSessionHandler"]:
        """Lock a session for the block and release it on every exit path."""
        try:
            await self.acquire(session_id)
            yield self
        finally:
            await self.close()

    async def _run(
        self,
        func: Callable[..., Any],
        *args: Any,
        on_cancel: Optional[Callable[[], Any]] = None,
    ) -> Any:
        async with self._serial:
            worker = asyncio.ensure_future(asyncio.to_thread(func, *args))
            try:
                return await asyncio.shield(worker)
            except asyncio.CancelledError:
                # A worker thread cannot be interrupted: wait until it has
                # settled the handler state before giving up _serial.
                await asyncio.wait({worker})
                if worker.exception() is not None:
                    self._logger.warning(
                        "cancelled session call failed",
                        call=getattr(func, "__name__", repr(func)),
                        error=str(worker.exception()),
                    )
                if on_cancel is not None:
                    await asyncio.to_thread(on_cancel)
                raise
