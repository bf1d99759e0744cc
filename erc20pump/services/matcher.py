from __future__ import annotations

import logging

from erc20pump.models.log import LogRecord
from erc20pump.services.cache import RecipientCache
from erc20pump.services.rpc import CHAIN_ERRORS, ChainClient
from erc20pump.services.stream import LogStream
from erc20pump.utils.address import address_bytes

logger = logging.getLogger("scanner.matcher")


class MatchFilter:
    def __init__(
        self,
        client: ChainClient,
        cache: RecipientCache,
        watched_contract: str,
        output: LogStream,
    ):
        self._client = client
        self._cache = cache
        self._watched = address_bytes(watched_contract)
        self._output = output

    def matches(self, recipient: str) -> bool:
        return address_bytes(recipient) == self._watched

    async def process(self, record: LogRecord) -> bool:
        """Forward the record if its transaction was sent to the watched contract."""
        try:
            recipient = await self._cache.resolve(
                record.tx_hash, self._client.transaction_recipient
            )
        except CHAIN_ERRORS as e:
            logger.warning(f"Recipient not available for {record.tx_hash}: {e}")
            return False

        try:
            matched = self.matches(recipient)
        except ValueError as e:
            logger.warning(f"Invalid recipient for {record.tx_hash}: {e}")
            return False
        if not matched:
            return False

        logger.info(f"Match {recipient} on {record.tx_hash}")
        await self._output.put(record)
        return True
