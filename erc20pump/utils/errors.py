from __future__ import annotations

from fastapi.responses import JSONResponse


class RpcError(RuntimeError):
    """Error reported by the node, as opposed to a transport failure."""


class StreamClosed(RuntimeError):
    pass


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})
