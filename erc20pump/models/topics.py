from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class EventType(str, Enum):
    TRANSFER = "transfer"
    APPROVAL = "approval"


class EventSignature(BaseModel):
    topic0: str
    signature: str
    event_type: EventType

    model_config = {"frozen": True}


# Known ERC20 events; topic0 is keccak256 of the canonical signature
KNOWN_EVENTS: tuple[EventSignature, ...] = (
    EventSignature(
        topic0="0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef",
        signature="Transfer(address,address,uint256)",
        event_type=EventType.TRANSFER,
    ),
    EventSignature(
        topic0="0x8c5be1e5ebec7d5bd14f71427d1e84f3dd0314c0f7b2291e5b200ac8c7c3b925",
        signature="Approval(address,address,uint256)",
        event_type=EventType.APPROVAL,
    ),
)


def build_topic_set(events: tuple[EventSignature, ...] = KNOWN_EVENTS) -> tuple[str, ...]:
    """Ordered, duplicate-free topic0 hashes for the given events."""
    seen: dict[str, None] = {}
    for event in events:
        seen.setdefault(event.topic0.lower(), None)
    return tuple(seen)


def event_type_for(topic0: str | None) -> EventType | None:
    if topic0 is None:
        return None
    for event in KNOWN_EVENTS:
        if event.topic0 == topic0.lower():
            return event.event_type
    return None
