"""Fixed-window rate limiting middleware backed by Redis.

Rule: RATE_LIMIT_PER_MINUTE requests per client per minute on /api/ routes.
  1. Client key: peer host. Behind a trusted proxy, the nearest X-Forwarded-For
     hop that is not itself a trusted proxy
  2. Redis key: "ratelimit:{client}:{epoch_minute}", INCR + EXPIRE 60s
  3. Over the limit: 429 RateLimitError envelope with a Retry-After header

Redis being unreachable must not take the API down: the request is let through
and a warning is logged.
"""

import logging
import time
from collections.abc import Awaitable, Callable, Iterable

import redis.asyncio as aioredis
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from config.settings import settings
from src.pf_common.errors import RateLimitError
from src.pf_common.redis_client import get_redis
from src.pf_common.response import error_response

logger = logging.getLogger(__name__)

_WINDOW_SECONDS = 60


def _client_key(request: Request, trusted_proxies: frozenset[str]) -> str:
    peer = request.client.host if request.client else "unknown"
    forwarded = request.headers.get("x-forwarded-for")
    if not forwarded or peer not in trusted_proxies:
        return peer
    hops = [h.strip() for h in forwarded.split(",") if h.strip()]
    for hop in reversed(hops):
        if hop not in trusted_proxies:
            return hop
    return peer


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        limit: int | None = None,
        redis_factory: Callable[[], Awaitable[aioredis.Redis]] = get_redis,
        trusted_proxies: Iterable[str] | None = None,
    ) -> None:
        super().__init__(app)
        self._limit = limit if limit is not None else settings.RATE_LIMIT_PER_MINUTE
        self._redis_factory = redis_factory
        self._trusted_proxies = frozenset(
            trusted_proxies if trusted_proxies is not None else settings.TRUSTED_PROXIES
        )

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not request.url.path.startswith("/api/"):
            return await call_next(request)

        window = int(time.time()) // _WINDOW_SECONDS
        key = f"ratelimit:{_client_key(request, self._trusted_proxies)}:{window}"
        try:
            redis = await self._redis_factory()
            count = await redis.incr(key)
            if count == 1:
                await redis.expire(key, _WINDOW_SECONDS)
        except RedisError as exc:
            logger.warning("Rate limiter unavailable, allowing request: %s", exc)
            return await call_next(request)

        if count > self._limit:
            err = RateLimitError()
            return JSONResponse(
                status_code=err.http_status,
                content=error_response(err.code, err.message).model_dump(),
                headers={"Retry-After": str(_WINDOW_SECONDS)},
            )
        return await call_next(request)
