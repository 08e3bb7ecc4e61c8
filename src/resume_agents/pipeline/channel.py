"""Single-producer event channel drained by a transport adapter."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

from resume_agents.models.events import ProgressEvent

_CLOSED = object()


class EventChannel:
    """Unbounded async queue of ProgressEvents with an explicit close.

    Events sent after ``close()`` are dropped; iteration ends once every
    event queued before the close has been delivered.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, event: ProgressEvent) -> None:
        if self._closed:
            return
        self._queue.put_nowait(event)

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(_CLOSED)

    def __aiter__(self) -> AsyncIterator[ProgressEvent]:
        return self._drain()

    async def _drain(self) -> AsyncIterator[ProgressEvent]:
        while True:
            item = await self._queue.get()
            if item is _CLOSED:
                return
            yield item
