from __future__ import annotations

import asyncio
from collections import deque
from typing import AsyncIterator

from erc20pump.models.log import LogRecord
from erc20pump.utils.errors import StreamClosed


class LogStream:
    """Bounded channel of matched log records, closed once by its producer.

    Records buffered before close() are still delivered; get() returns None
    after the last one.
    """

    def __init__(self, maxsize: int):
        if maxsize < 1:
            raise ValueError("stream capacity must be positive")
        self._maxsize = maxsize
        self._buffer: deque[LogRecord] = deque()
        self._cond = asyncio.Condition()
        self._closed = False

    async def put(self, record: LogRecord) -> None:
        """Append a record, waiting while the buffer is full."""
        async with self._cond:
            await self._cond.wait_for(
                lambda: self._closed or len(self._buffer) < self._maxsize
            )
            if self._closed:
                raise StreamClosed("put on a closed stream")
            self._buffer.append(record)
            self._cond.notify_all()

    async def close(self) -> bool:
        """Signal end of stream; returns False if it was already closed."""
        async with self._cond:
            if self._closed:
                return False
            self._closed = True
            self._cond.notify_all()
            return True

    async def get(self) -> LogRecord | None:
        async with self._cond:
            await self._cond.wait_for(lambda: self._buffer or self._closed)
            if not self._buffer:
                return None
            record = self._buffer.popleft()
            self._cond.notify_all()
            return record

    def __aiter__(self) -> AsyncIterator[LogRecord]:
        return self._iter()

    async def _iter(self) -> AsyncIterator[LogRecord]:
        while True:
            record = await self.get()
            if record is None:
                return
            yield record

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def maxsize(self) -> int:
        return self._maxsize

    def qsize(self) -> int:
        return len(self._buffer)
