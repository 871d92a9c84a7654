"""Request context middleware: request id, timing, rate limiting, admin headers.

One pass per request:
- propagate or mint ``X-Request-ID`` and expose it to log records
- throttle each client with a token bucket (``check_rate_limit`` is pure)
- mark admin responses as uncacheable and unframeable
- log method, path, status and duration
"""

import logging
import threading
import time
import uuid
from typing import Dict, Optional, Tuple

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from ..core.config import settings
from ..core.logging_config import request_id_var
from ..exceptions import ErrorCode

logger = logging.getLogger(__name__)

Bucket = Dict[str, Tuple[float, float]]

# {client_key: (tokens_left, last_seen)}
_rate_buckets: Bucket = {}
_rate_lock = threading.Lock()

_STALE_AFTER = 120.0
_SWEEP_EVERY = 100
_calls = 0

_UNTHROTTLED = frozenset({"/", "/health", "/docs", "/redoc", "/openapi.json"})
_ADMIN_PREFIX = "/api/admin"

_ADMIN_HEADERS = {
    "Cache-Control": "no-store",
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "X-Robots-Tag": "noindex, nofollow",
}


def check_rate_limit(
    bucket: Bucket,
    key: str,
    max_per_minute: int,
    now: Optional[float] = None,
) -> Tuple[bool, float]:
    """Take one token for *key*; refill continuously at ``max_per_minute / 60`` per second.

    Returns ``(allowed, retry_after_seconds)``. A limit of 0 or less disables
    throttling. *bucket* is mutated in place.
    """
    global _calls

    if max_per_minute <= 0:
        return True, 0.0
    now = time.monotonic() if now is None else now

    _calls += 1
    if _calls % _SWEEP_EVERY == 0:
        for stale_key in [k for k, (_, seen) in bucket.items() if seen < now - _STALE_AFTER]:
            del bucket[stale_key]

    per_second = max_per_minute / 60.0
    tokens, seen = bucket.get(key, (float(max_per_minute), now))
    tokens = min(float(max_per_minute), tokens + (now - seen) * per_second)

    if tokens < 1.0:
        bucket[key] = (tokens, now)
        return False, (1.0 - tokens) / per_second

    bucket[key] = (tokens - 1.0, now)
    return True, 0.0


def _client_key(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def _too_many_requests(rid: str, retry_after: float) -> JSONResponse:
    return JSONResponse(
        status_code=429,
        content={
            "error": ErrorCode.RATE_LIMITED.value,
            "message": "Too many requests",
            "details": {"retry_after": round(retry_after, 1)},
        },
        headers={"Retry-After": str(int(retry_after) + 1), "X-Request-ID": rid},
    )


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        rid = request.headers.get("x-request-id") or uuid.uuid4().hex[:16]
        request_id_var.set(rid)
        path = request.url.path

        if path not in _UNTHROTTLED:
            client = _client_key(request)
            with _rate_lock:
                allowed, retry_after = check_rate_limit(
                    _rate_buckets, client, settings.rate_limit_per_minute
                )
            if not allowed:
                logger.warning(
                    "Rate limit exceeded",
                    extra={"client": client, "path": path, "retry_after": round(retry_after, 1)},
                )
                return _too_many_requests(rid, retry_after)

        started = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - started) * 1000, 1)

        response.headers["X-Request-ID"] = rid
        response.headers["X-Response-Time"] = f"{duration_ms}ms"
        if path.startswith(_ADMIN_PREFIX):
            for name, value in _ADMIN_HEADERS.items():
                response.headers.setdefault(name, value)

        logger.info(
            f"{request.method} {path} {response.status_code}",
            extra={
                "method": request.method,
                "path": path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        return response
