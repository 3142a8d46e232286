"""
Request Logging Middleware
Assigns a request ID to every request and logs its outcome.
"""

import logging
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log each request with a request ID.

    The incoming X-Request-ID header is reused when present, otherwise a new
    one is generated. The ID is stored on request.state so handlers and error
    responses can refer to it, and echoed back on the response.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id

        start_time = time.perf_counter()
        context = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
        }

        logger.debug(
            "Request started",
            extra={
                **context,
                "query": str(request.url.query) if request.url.query else None,
                "client": request.client.host if request.client else None,
            },
        )

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                "Request failed",
                exc_info=True,
                extra={**context, "duration_ms": duration_ms, "error": str(e)},
            )
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            f"{request.method} {request.url.path} -> {response.status_code}",
            extra={**context, "status_code": response.status_code, "duration_ms": duration_ms},
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
