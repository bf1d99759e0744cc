from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Sequence

import httpx

from erc20pump.config import settings
from erc20pump.models.log import LogRecord
from erc20pump.utils.address import ZERO_ADDRESS
from erc20pump.utils.errors import RpcError

logger = logging.getLogger("rpc")

# Everything a steady-state node call may raise
CHAIN_ERRORS = (RpcError, httpx.HTTPError)


class ChainClient(ABC):
    @abstractmethod
    async def head_height(self) -> int:
        ...

    @abstractmethod
    async def logs(
        self, topics: Sequence[str], from_block: int, to_block: int
    ) -> list[LogRecord]:
        ...

    @abstractmethod
    async def transaction_recipient(self, tx_hash: str) -> str:
        ...

    @abstractmethod
    async def transaction_sender(self, tx_hash: str) -> str:
        ...

    @abstractmethod
    async def block_timestamp(self, height: int) -> int:
        ...


class EvmRpcClient(ChainClient):
    """JSON-RPC adapter for the node the scanner reads from."""

    def __init__(
        self,
        rpc_url: str,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._url = rpc_url
        self._id = 0
        self._timeout = timeout if timeout is not None else settings.rpc_timeout_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        # Block timestamps are immutable, keep them forever
        self._block_ts_cache: dict[int, int] = {}

    @property
    def url(self) -> str:
        return self._url

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            )
        return self._client

    async def _call(self, method: str, params: list | None = None) -> Any:
        self._id += 1
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params or [],
            "id": self._id,
        }
        client = self._get_client()
        resp = await client.post(self._url, json=payload)
        resp.raise_for_status()
        try:
            data = resp.json()
        except ValueError as e:
            raise RpcError(f"Malformed {method} response: {e}") from e
        if not isinstance(data, dict):
            raise RpcError(f"Malformed {method} response: {data!r}")
        if "error" in data:
            raise RpcError(f"RPC error: {data['error']}")
        return data.get("result")

    async def connect(self) -> int:
        """Check the node is reachable; returns its chain id."""
        try:
            chain_id = int(await self._call("eth_chainId"), 16)
        except (httpx.HTTPError, RpcError, ValueError, TypeError) as e:
            logger.error(f"Can not connect node at {self._url}: {e}")
            raise ConnectionError(f"Failed to connect to {self._url}: {e}") from e
        logger.info(f"Node connected at {self._url}, chain id {chain_id}")
        return chain_id

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()

    async def head_height(self) -> int:
        result = await self._call("eth_blockNumber")
        return _hex_int("eth_blockNumber", result)

    async def logs(
        self, topics: Sequence[str], from_block: int, to_block: int
    ) -> list[LogRecord]:
        """Log records matching any of the topics within [from_block, to_block]."""
        result = await self._call(
            "eth_getLogs",
            [
                {
                    "fromBlock": hex(from_block),
                    "toBlock": hex(to_block),
                    "topics": [list(topics)],
                }
            ],
        )
        try:
            return [LogRecord.from_rpc(raw) for raw in result or []]
        except (TypeError, ValueError, KeyError, AttributeError) as e:
            raise RpcError(f"Malformed eth_getLogs response: {e}") from e

    async def _get_transaction(self, tx_hash: str) -> dict:
        trx = await self._call("eth_getTransactionByHash", [tx_hash])
        if not trx:
            logger.warning(f"Transaction {tx_hash} not found")
            raise RpcError(f"transaction {tx_hash} not found")
        if not isinstance(trx, dict):
            raise RpcError(f"Malformed transaction {tx_hash}: {trx!r}")
        return trx

    async def transaction_recipient(self, tx_hash: str) -> str:
        trx = await self._get_transaction(tx_hash)
        to = trx.get("to")
        if to is None:
            logger.info(f"Contract deployment at {tx_hash}")
            return ZERO_ADDRESS
        if not isinstance(to, str):
            raise RpcError(f"Malformed recipient of {tx_hash}: {to!r}")
        return to.lower()

    async def transaction_sender(self, tx_hash: str) -> str:
        trx = await self._get_transaction(tx_hash)
        sender = trx.get("from")
        if not sender or not isinstance(sender, str):
            raise RpcError(f"transaction {tx_hash} has no sender")
        return sender.lower()

    async def block_timestamp(self, height: int) -> int:
        if height in self._block_ts_cache:
            return self._block_ts_cache[height]
        block = await self._call("eth_getBlockByNumber", [hex(height), False])
        if not block:
            raise RpcError(f"block {height} not found")
        if not isinstance(block, dict):
            raise RpcError(f"Malformed block {height}: {block!r}")
        ts = _hex_int("eth_getBlockByNumber", block.get("timestamp", "0x0"))
        self._block_ts_cache[height] = ts
        return ts


def _hex_int(method: str, value: Any) -> int:
    try:
        return int(value, 16)
    except (TypeError, ValueError) as e:
        raise RpcError(f"Malformed {method} response: {value!r}") from e


chain_rpc = EvmRpcClient(settings.rpc_url)
