from __future__ import annotations

import pytest

from erc20pump.models.log import LogRecord
from tests.fakes import TRANSFER_TOPIC, FakeChain, tx_hash


@pytest.fixture
def make_log():
    """Factory fixture for creating LogRecord instances."""

    def _make(
        block_number: int = 1,
        tx: int = 1,
        log_index: int = 0,
        address: str = "0x" + "ab" * 20,
        topic0: str = TRANSFER_TOPIC,
        data: str = "0x" + "00" * 32,
    ) -> LogRecord:
        return LogRecord(
            tx_hash=tx_hash(tx),
            address=address,
            block_number=block_number,
            log_index=log_index,
            topics=(topic0,),
            data=data,
        )

    return _make


@pytest.fixture
def fake_chain():
    return FakeChain(head=100)
