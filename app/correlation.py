# app/correlation.py
"""
Request tracing middleware.

Provides:
- X-Request-Id header handling (accepts client-provided or generates UUID4)
- One access log line per request with status and duration
- X-Response-Time-Ms header so slow upstream refreshes are visible
"""
from __future__ import annotations

import logging
import re
import time
import uuid
from typing import Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

MAX_REQUEST_ID_LENGTH = 64
SAFE_REQUEST_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")


def validate_request_id(request_id: Optional[str]) -> Optional[str]:
    """Return request_id when it is short and log-safe, else None."""
    if not request_id or len(request_id) > MAX_REQUEST_ID_LENGTH:
        return None
    if not SAFE_REQUEST_ID_PATTERN.match(request_id):
        return None
    return request_id


def get_request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or "unknown"


class RequestTracingMiddleware(BaseHTTPMiddleware):
    """Tag each request with an ID and log its outcome."""

    async def dispatch(self, request: Request, call_next):
        request_id = validate_request_id(request.headers.get("x-request-id")) or str(uuid.uuid4())
        request.state.request_id = request_id

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        response.headers["X-Request-Id"] = request_id
        response.headers["X-Response-Time-Ms"] = f"{elapsed_ms:.1f}"
        logger.info(
            f"[REQUEST] id={request_id} method={request.method} path={request.url.path} "
            f"status={response.status_code} duration_ms={elapsed_ms:.1f}"
        )
        return response
