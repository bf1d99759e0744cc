from __future__ import annotations

import logging

from fastapi import APIRouter, Request

from erc20pump.models.response import MatchedLog, MatchesResponse, ScannerStatus
from erc20pump.services.collector import match_collector
from erc20pump.utils.errors import error_response

logger = logging.getLogger("routes.scanner")

router = APIRouter(prefix="/v1/scanner")


@router.get("/status", response_model=ScannerStatus)
async def scanner_status(request: Request):
    puller = getattr(request.app.state, "puller", None)
    if puller is None:
        return error_response(503, "Scanner is not running")
    return puller.status()


@router.get("/matches", response_model=MatchesResponse)
async def scanner_matches(limit: int | None = None):
    """Most recent records sent to the watched contract, oldest first."""
    capacity = match_collector.capacity
    if limit is None:
        limit = capacity
    if limit < 1 or limit > capacity:
        return error_response(400, f"limit must be between 1 and {capacity}")

    return MatchesResponse(
        total_matched=match_collector.total,
        stream_closed=match_collector.stream_closed,
        matches=[MatchedLog.from_record(r) for r in match_collector.recent(limit)],
    )
