from __future__ import annotations

import asyncio
import logging
from collections import deque
from enum import Enum

from erc20pump.config import settings
from erc20pump.models.log import LogRecord
from erc20pump.models.response import ScannerStatus
from erc20pump.models.topics import build_topic_set
from erc20pump.services.cache import RecipientCache
from erc20pump.services.fetcher import WindowFetcher
from erc20pump.services.matcher import MatchFilter
from erc20pump.services.rpc import CHAIN_ERRORS, ChainClient
from erc20pump.services.stream import LogStream
from erc20pump.utils.address import normalize_address

logger = logging.getLogger("scanner.puller")


class ScannerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPING = "stopping"
    TERMINATED = "terminated"


class LogPuller:
    """Background worker scanning the chain for records sent to one contract.

    The worker owns the cursor, the head and the pending batch. Each loop
    iteration checks the stop signal, refreshes the head and reports status
    when due, then either pulls the next window or processes exactly one
    pending record. Matches go to ``output``, which the worker closes once
    it exits.
    """

    def __init__(
        self,
        client: ChainClient,
        cache: RecipientCache,
        watched_contract: str,
        start_block: int = 0,
        window_size: int | None = None,
        buffer_capacity: int | None = None,
        head_refresh_seconds: float | None = None,
        status_report_seconds: float | None = None,
        idle_delay_seconds: float | None = None,
        backoff_base_seconds: float | None = None,
        backoff_max_seconds: float | None = None,
    ):
        if start_block < 0:
            raise ValueError("start block can not be negative")

        self._watched = normalize_address(watched_contract)
        self._topics = build_topic_set()
        self.output = LogStream(
            buffer_capacity if buffer_capacity is not None else settings.output_buffer_capacity
        )
        self._fetcher = WindowFetcher(
            client,
            self._topics,
            window_size if window_size is not None else settings.log_window_size,
        )
        self._matcher = MatchFilter(client, cache, self._watched, self.output)
        self._client = client

        self._head_interval = _or(head_refresh_seconds, settings.head_refresh_seconds)
        self._info_interval = _or(status_report_seconds, settings.status_report_seconds)
        self._idle_delay = _or(idle_delay_seconds, settings.idle_delay_seconds)
        self._backoff_base = _or(backoff_base_seconds, settings.backoff_base_seconds)
        self._backoff_max = _or(backoff_max_seconds, settings.backoff_max_seconds)

        self._current_block = start_block
        self._top_block = 0
        self._consecutive_failures = 0
        self._retry_at = 0.0

        self._sig_stop = asyncio.Event()
        self._task: asyncio.Task | None = None
        self._state = ScannerState.IDLE

        self.records_scanned = 0
        self.records_matched = 0
        self.fetch_failures = 0

    @property
    def current_block(self) -> int:
        return self._current_block

    @property
    def top_block(self) -> int:
        return self._top_block

    @property
    def topics(self) -> tuple[str, ...]:
        return self._topics

    @property
    def watched_contract(self) -> str:
        return self._watched

    @property
    def state(self) -> ScannerState:
        return self._state

    def start(self) -> asyncio.Task:
        """Spawn the worker; the returned task completes when it terminates."""
        if self._task is not None:
            raise RuntimeError("log puller already started")
        if self._state == ScannerState.IDLE:
            self._state = ScannerState.RUNNING
        self._task = asyncio.create_task(self._scan(), name="log-puller")
        return self._task

    def stop(self) -> None:
        """Ask the worker to terminate at its next iteration; does not wait."""
        if self._state in (ScannerState.IDLE, ScannerState.RUNNING):
            self._state = ScannerState.STOPPING
        self._sig_stop.set()

    async def wait(self) -> None:
        if self._task is not None:
            await self._task

    def status(self) -> ScannerStatus:
        return ScannerStatus(
            state=self._state.value,
            current_block=self._current_block,
            top_block=self._top_block,
            lag_blocks=max(0, self._top_block - self._current_block + 1),
            records_scanned=self.records_scanned,
            records_matched=self.records_matched,
            fetch_failures=self.fetch_failures,
            watched_contract=self._watched,
            window_size=self._fetcher.max_window,
        )

    async def _scan(self) -> None:
        loop = asyncio.get_running_loop()
        next_tick = loop.time()
        next_info = loop.time() + self._info_interval
        logs: deque[LogRecord] = deque()

        logger.info(
            f"Log puller started at #{self._current_block}, "
            f"watching {self._watched}"
        )
        try:
            while not self._sig_stop.is_set():
                now = loop.time()
                if now >= next_tick:
                    await self._fetch_head()
                    next_tick = loop.time() + self._head_interval

                if now >= next_info:
                    logger.info(
                        f"Scanner at #{self._current_block}, head at #{self._top_block}"
                    )
                    next_info = now + self._info_interval

                if not logs:
                    if now < self._retry_at:
                        await self._idle(min(self._retry_at, next_tick, next_info) - now)
                        continue
                    logs.extend(await self._next_logs())
                    await asyncio.sleep(0)
                    continue

                await self._process(logs.popleft())
                # let the consumer and stop requests in between records
                await asyncio.sleep(0)
        except Exception:
            logger.exception("Log puller failed")
            raise
        finally:
            await self.output.close()
            self._state = ScannerState.TERMINATED
            logger.info("Log puller terminated")

    async def _fetch_head(self) -> None:
        try:
            self._top_block = await self._client.head_height()
        except CHAIN_ERRORS as e:
            logger.warning(f"Error pulling the current head: {e}")

    async def _next_logs(self) -> list[LogRecord]:
        loop = asyncio.get_running_loop()
        batch = await self._fetcher.next_batch(self._current_block, self._top_block)
        if not batch.ok:
            self._consecutive_failures += 1
            self.fetch_failures += 1
            self._retry_at = loop.time() + self.backoff_delay(self._consecutive_failures)
            return []

        self._consecutive_failures = 0
        if batch.next_block == self._current_block:
            # caught up with the head
            self._retry_at = loop.time() + self._idle_delay
        self._current_block = max(self._current_block, batch.next_block)
        return batch.records

    async def _process(self, record: LogRecord) -> None:
        self.records_scanned += 1
        if await self._matcher.process(record):
            self.records_matched += 1

    async def _idle(self, delay: float) -> None:
        if delay <= 0:
            return
        try:
            await asyncio.wait_for(self._sig_stop.wait(), timeout=delay)
        except asyncio.TimeoutError:
            pass

    def backoff_delay(self, failures: int) -> float:
        if failures < 1:
            return 0.0
        return min(self._backoff_base * 2 ** min(failures - 1, 32), self._backoff_max)


def _or(value: float | None, default: float) -> float:
    return value if value is not None else default
