from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class LogRecord(BaseModel):
    tx_hash: str
    address: str  # emitting contract
    block_number: int
    log_index: int = 0
    topics: tuple[str, ...] = ()
    data: str = "0x"
    removed: bool = False

    model_config = {"frozen": True}

    @classmethod
    def from_rpc(cls, raw: dict[str, Any]) -> LogRecord:
        """Build a record from an eth_getLogs result entry."""
        return cls(
            tx_hash=raw["transactionHash"],
            address=raw["address"].lower(),
            block_number=int(raw["blockNumber"], 16),
            log_index=int(raw.get("logIndex") or "0x0", 16),
            topics=tuple(raw.get("topics") or ()),
            data=raw.get("data") or "0x",
            removed=bool(raw.get("removed", False)),
        )

    @property
    def topic0(self) -> str | None:
        return self.topics[0] if self.topics else None
