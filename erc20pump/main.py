import logging
import time

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware

from erc20pump.config import settings
from erc20pump.routes.scanner import router as scanner_router
from erc20pump.services.cache import recipient_cache
from erc20pump.services.collector import match_collector
from erc20pump.services.puller import LogPuller
from erc20pump.services.rpc import chain_rpc

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s | %(name)-20s | %(levelname)-7s | %(message)s",
)
logger = logging.getLogger("app")


class RequestTimingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"{request.method} {request.url.path} → {response.status_code} "
            f"({duration_ms:.1f}ms)"
        )
        return response


app = FastAPI(
    title="ERC20 Pump",
    description=(
        "Scan the chain for ERC20 event logs of transactions "
        "sent to a watched contract."
    ),
    version="0.1.0",
)

app.add_middleware(RequestTimingMiddleware)

app.include_router(scanner_router)


@app.on_event("startup")
async def startup():
    puller = LogPuller(
        chain_rpc,
        recipient_cache,
        settings.scan_contract,
        start_block=settings.start_block,
    )

    # a node we can not reach is fatal, the scanner never starts
    try:
        await chain_rpc.connect()
    except ConnectionError:
        await chain_rpc.close()
        raise

    app.state.puller = puller
    puller.start()
    match_collector.start(puller.output)
    logger.info(
        f"Ready, scanning from #{settings.start_block} "
        f"for {puller.watched_contract}"
    )


@app.on_event("shutdown")
async def shutdown():
    puller = getattr(app.state, "puller", None)
    try:
        if puller is not None:
            puller.stop()
            await puller.wait()
            await match_collector.wait()
    finally:
        await chain_rpc.close()


@app.get("/health")
async def health():
    puller = getattr(app.state, "puller", None)
    return {
        "status": "ok",
        "scanner": puller.state.value if puller is not None else "idle",
    }
