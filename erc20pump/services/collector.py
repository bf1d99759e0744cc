from __future__ import annotations

import asyncio
import logging
from collections import deque

from erc20pump.config import settings
from erc20pump.models.log import LogRecord
from erc20pump.services.stream import LogStream

logger = logging.getLogger("collector")


class MatchCollector:
    """Drains a LogStream and keeps the most recent matches around."""

    def __init__(self, capacity: int | None = None):
        self._recent: deque[LogRecord] = deque(
            maxlen=capacity if capacity is not None else settings.recent_matches_capacity
        )
        self._total = 0
        self._stream_closed = False
        self._task: asyncio.Task | None = None

    async def consume(self, stream: LogStream) -> int:
        """Read until end of stream; returns how many records were seen."""
        self._stream_closed = False
        async for record in stream:
            self._recent.append(record)
            self._total += 1
            logger.info(
                f"Collected log #{record.log_index} of {record.tx_hash} "
                f"at block #{record.block_number}"
            )
        self._stream_closed = True
        logger.info(f"Match stream closed after {self._total} records")
        return self._total

    def start(self, stream: LogStream) -> asyncio.Task:
        self._task = asyncio.create_task(self.consume(stream), name="match-collector")
        return self._task

    async def wait(self) -> None:
        if self._task is not None:
            await self._task

    def recent(self, limit: int | None = None) -> list[LogRecord]:
        records = list(self._recent)
        if limit is not None:
            records = records[-limit:] if limit > 0 else []
        return records

    def reset(self) -> None:
        self._recent.clear()
        self._total = 0
        self._stream_closed = False

    @property
    def total(self) -> int:
        return self._total

    @property
    def stream_closed(self) -> bool:
        return self._stream_closed

    @property
    def capacity(self) -> int:
        return self._recent.maxlen or 0


match_collector = MatchCollector()
