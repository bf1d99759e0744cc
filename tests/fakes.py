from __future__ import annotations

import asyncio
from typing import Sequence

from erc20pump.models.log import LogRecord
from erc20pump.models.topics import KNOWN_EVENTS
from erc20pump.services.rpc import ChainClient
from erc20pump.utils.errors import RpcError

WATCHED = "0x04068da6c83afcfa0e13ba15a6696662335d5b75"
OTHER = "0x21be370d5312f44cb42ce377bc9b8a0cef1a4c83"
TRANSFER_TOPIC = KNOWN_EVENTS[0].topic0


def tx_hash(n: int) -> str:
    return "0x" + format(n, "064x")


class FakeChain(ChainClient):
    """In-memory chain client that records the calls it gets."""

    def __init__(self, head: int = 0):
        self.head = head
        self.records: list[LogRecord] = []
        self.recipients: dict[str, str] = {}
        self.senders: dict[str, str] = {}
        self.timestamps: dict[int, int] = {}
        self.head_failures = 0
        self.log_failures = 0
        self.log_calls: list[tuple[int, int]] = []
        self.recipient_calls: list[str] = []

    async def head_height(self) -> int:
        await asyncio.sleep(0)
        if self.head_failures > 0:
            self.head_failures -= 1
            raise RpcError("head not available")
        return self.head

    async def logs(
        self, topics: Sequence[str], from_block: int, to_block: int
    ) -> list[LogRecord]:
        await asyncio.sleep(0)
        self.log_calls.append((from_block, to_block))
        if self.log_failures > 0:
            self.log_failures -= 1
            raise RpcError("logs not available")
        return [
            r
            for r in self.records
            if from_block <= r.block_number <= to_block and r.topic0 in topics
        ]

    async def transaction_recipient(self, tx_hash: str) -> str:
        await asyncio.sleep(0)
        self.recipient_calls.append(tx_hash)
        if tx_hash not in self.recipients:
            raise RpcError(f"transaction {tx_hash} not found")
        return self.recipients[tx_hash]

    async def transaction_sender(self, tx_hash: str) -> str:
        if tx_hash not in self.senders:
            raise RpcError(f"transaction {tx_hash} not found")
        return self.senders[tx_hash]

    async def block_timestamp(self, height: int) -> int:
        if height not in self.timestamps:
            raise RpcError(f"block {height} not found")
        return self.timestamps[height]

    def add_log(self, record: LogRecord, recipient: str | None = None) -> LogRecord:
        self.records.append(record)
        if recipient is not None:
            self.recipients[record.tx_hash] = recipient
        return record
