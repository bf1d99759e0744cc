from __future__ import annotations

import logging
from dataclasses import dataclass, field

from erc20pump.models.log import LogRecord
from erc20pump.services.rpc import CHAIN_ERRORS, ChainClient

logger = logging.getLogger("scanner.fetcher")


@dataclass
class Batch:
    records: list[LogRecord] = field(default_factory=list)
    next_block: int = 0
    ok: bool = True  # False when the node call failed


class WindowFetcher:
    """Pulls log records for bounded block windows starting at the cursor."""

    def __init__(self, client: ChainClient, topics: tuple[str, ...], max_window: int):
        if max_window < 1:
            raise ValueError("window size must be positive")
        self._client = client
        self._topics = topics
        self._max_window = max_window

    @property
    def max_window(self) -> int:
        return self._max_window

    def window(self, current_block: int, top_block: int) -> tuple[int, int] | None:
        """Inclusive block range to scan next, None if nothing new exists."""
        if current_block > top_block:
            return None
        target = min(current_block + self._max_window - 1, top_block)
        return current_block, target

    async def next_batch(self, current_block: int, top_block: int) -> Batch:
        window = self.window(current_block, top_block)
        if window is None:
            return Batch(next_block=current_block)

        from_block, target = window
        try:
            records = await self._client.logs(self._topics, from_block, target)
        except CHAIN_ERRORS as e:
            logger.warning(f"Failed to pull logs for blocks {from_block}-{target}: {e}")
            return Batch(next_block=current_block, ok=False)

        if records:
            logger.debug(f"Pulled {len(records)} logs for blocks {from_block}-{target}")

        # an empty window is still scanned
        return Batch(records=records, next_block=target + 1)
