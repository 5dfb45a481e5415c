"""
app/api/middleware.py

Request/response access logging.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response

from app.logging_utils import log_event

logger = logging.getLogger("app.access")


async def request_response_logger(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """
    Log method/URL on the way in and status/duration on the way out.

    Bodies are never logged.
    """

    started = time.perf_counter()
    log_event(
        logger,
        logging.INFO,
        "http_request",
        method=request.method,
        url=str(request.url),
    )
    response = await call_next(request)
    log_event(
        logger,
        logging.INFO,
        "http_response",
        method=request.method,
        path=request.url.path,
        status=response.status_code,
        duration_ms=round((time.perf_counter() - started) * 1000, 3),
    )
    return response
