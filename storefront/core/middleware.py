"""HTTP middleware for request ID propagation and access logging.

Every request/response pair carries a correlation id:
- Accepts the incoming request-id header or generates a UUID
- Stores request_id in contextvars so service and guard logs pick it up
- Echoes the id and the total duration back in response headers
- Emits one ``http.request`` log line per request

Requests whose declared Content-Length exceeds ``max_body_bytes`` are
rejected with 413 before any route runs.

Usage:
    app.middleware("http")(body_size_limit_middleware)
    app.middleware("http")(request_id_middleware)
"""

from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse

from storefront.core.config import settings
from storefront.core.logging import (
    clear_request_id,
    get_request_id,
    hash_identifier,
    set_request_id,
)

logger = logging.getLogger(__name__)


async def request_id_middleware(request: Request, call_next) -> Response:
    """HTTP middleware for request ID generation and propagation.

    Args:
        request: The incoming HTTP request object.
        call_next: The next middleware/route handler in the stack.

    Returns:
        Response: The response from the next handler with request id and
            duration headers added.
    """

    header_name = settings.log.request_id_header
    request_id = request.headers.get(header_name) or str(uuid.uuid4())
    set_request_id(request_id)
    start = time.perf_counter()
    try:
        response: Response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "http.request",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
                "client_hash": hash_identifier(request.client.host) if request.client else None,
            },
        )
    finally:
        clear_request_id()

    response.headers[header_name] = request_id
    response.headers.setdefault("X-Request-Duration-ms", f"{duration_ms:.2f}")
    return response


async def body_size_limit_middleware(request: Request, call_next) -> Response:
    """Reject requests whose declared body is larger than ``max_body_bytes``."""

    limit = request.app.state.max_body_bytes
    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > limit:
        logger.warning(
            "http.body_too_large",
            extra={"path": request.url.path, "content_length": int(declared), "limit": limit},
        )
        return JSONResponse(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            content={
                "error": {
                    "code": "payload_too_large",
                    "message": f"Request body exceeds {limit} bytes",
                    "request_id": get_request_id(),
                }
            },
        )
    return await call_next(request)
