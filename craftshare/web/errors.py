"""Map core error kinds to HTTP responses."""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from craftshare.errors import CraftShareError, ErrorKind

logger = structlog.get_logger(__name__)

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INVALID_QUANTITY: 400,
    ErrorKind.INSUFFICIENT_STOCK: 400,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INTERNAL: 500,
}


async def craftshare_error_handler(request: Request, exc: CraftShareError) -> JSONResponse:
    status_code = STATUS_BY_KIND.get(exc.kind, 500)
    if status_code >= 500:
        logger.error("request_error", kind=exc.kind.value, message=exc.message)
    return JSONResponse(status_code=status_code, content=exc.to_dict())


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CraftShareError, craftshare_error_handler)
