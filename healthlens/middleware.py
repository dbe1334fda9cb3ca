import json
import logging
import time
import uuid

from fastapi import Request
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from healthlens.config import Settings
from healthlens.errors import error_response

logger = logging.getLogger(__name__)


def build_limiter(settings: Settings) -> Limiter:
    """Per-IP limit applied to every route; counters live in the limits in-memory storage."""
    return Limiter(
        key_func=get_remote_address,
        default_limits=[f"{settings.rate_limit_per_minute}/minute"],
        storage_uri="memory://",
    )


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    logger.warning("Rate limit reached for IP: %s", get_remote_address(request))
    return error_response(
        request,
        "RATE_LIMIT_EXCEEDED",
        "Too many requests from this IP, please try again later.",
        429,
    )


def install_middleware(app, limiter: Limiter) -> None:
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    # Added before request_context so it runs inside it and can see the rid.
    app.add_middleware(SlowAPIMiddleware)

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        rid = str(uuid.uuid4())
        request.state.rid = rid
        start = time.monotonic()
        response = await call_next(request)
        duration = int((time.monotonic() - start) * 1000)
        response.headers["X-Request-ID"] = rid
        # Only non-PHI fields are logged.
        logger.info(json.dumps({"rid": rid, "endpoint": request.url.path, "status": response.status_code, "duration": duration}))
        return response
