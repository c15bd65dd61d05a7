"""Request context middleware: request id, timing, access log and model-call budget.

What costs money here is model calls, not requests. A generate or edit
request can make up to ``2 * max_attempts`` calls (initial retries, then
continuation rounds) and a continue request up to ``max_attempts``, while
analyze and the draft routes make none. Each client therefore gets a token
bucket of model calls per minute, and a generation route is charged its
worst-case call count before it runs. Free routes are never throttled.
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


# ---------------------------------------------------------------------------
# Model-call budget
# ---------------------------------------------------------------------------


class ModelCallBudget:
    """Per-client token buckets, one token per model call.

    A bucket starts full at ``per_minute`` tokens and refills continuously.
    Idle buckets are dropped once ``max_clients`` is reached, so rotating
    client IPs cannot grow the table without bound.
    """

    def __init__(self, max_clients: int = 10000, idle_ttl: float = 300.0):
        self.max_clients = max_clients
        self.idle_ttl = idle_ttl
        self._buckets: Dict[str, Tuple[float, float]] = {}
        self._lock = threading.Lock()

    def charge(self, key: str, cost: int, per_minute: int, now: Optional[float] = None) -> float:
        """Take *cost* tokens from *key*'s bucket.

        Returns 0.0 when the charge went through, otherwise the seconds until
        enough tokens will have refilled. A denied charge takes nothing.
        ``per_minute <= 0`` disables the budget. A cost above ``per_minute``
        is capped so a request is never refused forever.
        """
        if per_minute <= 0 or cost <= 0:
            return 0.0
        if now is None:
            now = time.monotonic()

        cost = min(cost, per_minute)
        rate = per_minute / 60.0

        with self._lock:
            if len(self._buckets) >= self.max_clients:
                self._prune(now)
            tokens, last = self._buckets.get(key, (float(per_minute), now))
            tokens = min(float(per_minute), tokens + (now - last) * rate)
            if tokens >= cost:
                self._buckets[key] = (tokens - cost, now)
                return 0.0
            self._buckets[key] = (tokens, now)
            return (cost - tokens) / rate

    def reset(self) -> None:
        with self._lock:
            self._buckets.clear()

    def __len__(self) -> int:
        return len(self._buckets)

    def _prune(self, now: float) -> None:
        cutoff = now - self.idle_ttl
        for key in [k for k, (_, last) in self._buckets.items() if last < cutoff]:
            del self._buckets[key]


model_call_budget = ModelCallBudget()

# Worst-case model calls per POST route, as a multiple of the attempt ceiling.
_MODEL_CALL_CEILINGS = {
    "/api/portfolios/generate": 2,
    "/api/portfolios/edit": 2,
    "/api/portfolios/continue": 1,
}


def request_cost(method: str, path: str, max_attempts: int) -> int:
    """Model calls *path* may make. Zero for every route that never calls the model."""
    if method != "POST":
        return 0
    return _MODEL_CALL_CEILINGS.get(path.rstrip("/"), 0) * max_attempts


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------


def _client_key(request: Request) -> str:
    """Budget key: first ``X-Forwarded-For`` hop, else the direct client IP."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Single middleware handling request-id, timing, logging, and the model-call budget."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        rid = request.headers.get("x-request-id") or uuid.uuid4().hex[:16]
        request_id_var.set(rid)

        cost = request_cost(request.method, request.url.path, settings.continuation_max_attempts)
        if cost:
            key = _client_key(request)
            retry_after = model_call_budget.charge(key, cost, settings.model_calls_per_minute)
            if retry_after:
                logger.warning(
                    "Model call budget exhausted",
                    extra={
                        "client": key,
                        "path": request.url.path,
                        "cost": cost,
                        "retry_after": round(retry_after, 1),
                    },
                )
                return JSONResponse(
                    status_code=429,
                    content={
                        "error": ErrorCode.RATE_LIMITED.value,
                        "message": "Model call budget exhausted, please try again later",
                        "details": {"retry_after": round(retry_after, 1), "cost": cost},
                    },
                    headers={
                        "Retry-After": str(int(retry_after) + 1),
                        "X-Request-ID": rid,
                    },
                )

        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000, 1)

        response.headers["X-Request-ID"] = rid
        response.headers["X-Response-Time"] = f"{duration_ms}ms"

        logger.info(
            f"{request.method} {request.url.path} {response.status_code}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )

        return response
