"""Server-sent library change notifications."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator, Callable

from pydantic import BaseModel

from app.schemas.library import ConnectedEvent, LibraryUpdateEvent

logger = logging.getLogger(__name__)

KEEPALIVE_COMMENT = ": keepalive\n\n"

VersionReader = Callable[[], int]


def format_sse_event(event: BaseModel) -> str:
    return f"data: {json.dumps(event.model_dump(mode='json'), separators=(',', ':'))}\n\n"


class LibraryUpdateChannel:
    """One client's live-update stream.

    ``events()`` yields a ``connected`` message first, then whatever the two
    timers enqueue: a ``library-update`` whenever the polled library version
    differs from the last one seen, and a keepalive comment on its own
    interval. Both timers belong to this channel and are cancelled together,
    exactly once, when the generator exits for any reason.
    """

    def __init__(
        self,
        read_version: VersionReader,
        *,
        poll_interval: float = 2.0,
        keepalive_interval: float = 15.0,
        label: str = "anonymous",
    ) -> None:
        self._read_version = read_version
        self._poll_interval = poll_interval
        self._keepalive_interval = keepalive_interval
        self._label = label
        self._last_seen: int | None = None
        self._timers: tuple[asyncio.Task[None], ...] = ()
        self._closed = False

    @property
    def last_seen(self) -> int | None:
        return self._last_seen

    @property
    def closed(self) -> bool:
        return self._closed

    def _current_version(self) -> int | None:
        try:
            return self._read_version()
        except Exception:
            logger.warning("library_events.version_read_failed subscriber=%s", self._label, exc_info=True)
            return None

    def open(self) -> None:
        """Capture the version the client starts from."""
        self._last_seen = self._current_version()

    def poll_once(self) -> LibraryUpdateEvent | None:
        version = self._current_version()
        if version is None:
            return None
        if self._last_seen is None:
            self._last_seen = version
            return None
        if version == self._last_seen:
            return None
        self._last_seen = version
        return LibraryUpdateEvent(timestamp=version)

    async def _poll_loop(self, queue: asyncio.Queue[str]) -> None:
        while True:
            await asyncio.sleep(self._poll_interval)
            event = self.poll_once()
            if event is not None:
                queue.put_nowait(format_sse_event(event))

    async def _keepalive_loop(self, queue: asyncio.Queue[str]) -> None:
        while True:
            await asyncio.sleep(self._keepalive_interval)
            queue.put_nowait(KEEPALIVE_COMMENT)

    async def _teardown(self) -> None:
        if self._closed:
            return
        self._closed = True
        for timer in self._timers:
            timer.cancel()
        await asyncio.gather(*self._timers, return_exceptions=True)
        logger.info("library_events.closed subscriber=%s", self._label)

    async def events(self) -> AsyncIterator[str]:
        if self._closed or self._timers:
            raise RuntimeError("Library update channel can only be streamed once")

        queue: asyncio.Queue[str] = asyncio.Queue()
        self.open()
        self._timers = (
            asyncio.create_task(self._poll_loop(queue)),
            asyncio.create_task(self._keepalive_loop(queue)),
        )
        logger.info("library_events.opened subscriber=%s library_version=%s", self._label, self._last_seen)
        try:
            yield format_sse_event(ConnectedEvent())
            while True:
                yield await queue.get()
        finally:
            await self._teardown()


__all__ = ["KEEPALIVE_COMMENT", "LibraryUpdateChannel", "format_sse_event"]
