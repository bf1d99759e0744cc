from __future__ import annotations

from pydantic import BaseModel

from erc20pump.models.log import LogRecord
from erc20pump.models.topics import event_type_for


class ScannerStatus(BaseModel):
    state: str  # idle, running, stopping, terminated
    current_block: int
    top_block: int
    lag_blocks: int = 0
    records_scanned: int = 0
    records_matched: int = 0
    fetch_failures: int = 0
    watched_contract: str
    window_size: int

    model_config = {
        "json_schema_extra": {
            "example": {
                "state": "running",
                "current_block": 41250006,
                "top_block": 41250010,
                "lag_blocks": 5,
                "records_scanned": 812,
                "records_matched": 17,
                "fetch_failures": 0,
                "watched_contract": "0x04068da6c83afcfa0e13ba15a6696662335d5b75",
                "window_size": 5,
            }
        }
    }


class MatchedLog(BaseModel):
    tx_hash: str
    block_number: int
    log_index: int
    token: str
    event: str | None = None

    @classmethod
    def from_record(cls, record: LogRecord) -> MatchedLog:
        event_type = event_type_for(record.topic0)
        return cls(
            tx_hash=record.tx_hash,
            block_number=record.block_number,
            log_index=record.log_index,
            token=record.address,
            event=event_type.value if event_type else None,
        )


class MatchesResponse(BaseModel):
    total_matched: int = 0
    stream_closed: bool = False
    matches: list[MatchedLog] = []
