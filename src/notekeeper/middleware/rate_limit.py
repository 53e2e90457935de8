"""Rate limiting middleware — Redis-based fixed window.

Learn: Uses a per-minute window counter stored in Redis.
Each IP gets a counter key like "notekeeper:rl:{ip}:{bucket}:{minute}".
The Google callback gets a stricter limit (10/min): every hit costs two
outbound calls to Google.

Skips rate limiting entirely if Redis is unavailable (e.g., in tests).
"""

import time
from typing import Iterable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from notekeeper.api.errors import error_body
from notekeeper.db.redis_pool import get_redis


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Redis-based rate limiting per IP per minute."""

    def __init__(
        self,
        app,
        default_rpm: int = 100,
        auth_rpm: int = 10,
        auth_paths: Iterable[str] = (),
    ):
        super().__init__(app)
        self.default_rpm = default_rpm
        self.auth_rpm = auth_rpm
        self.auth_paths = tuple(auth_paths)

    async def dispatch(self, request: Request, call_next) -> Response:
        try:
            redis = get_redis()
        except RuntimeError:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        is_auth = request.url.path.startswith(self.auth_paths) if self.auth_paths else False
        rpm = self.auth_rpm if is_auth else self.default_rpm

        window = int(time.time() // 60)
        bucket = "auth" if is_auth else "api"
        key = f"notekeeper:rl:{client_ip}:{bucket}:{window}"

        try:
            count = await redis.incr(key)
            if count == 1:
                await redis.expire(key, 120)  # 2-min TTL for safety
        except Exception:
            # Redis error: let the request through
            return await call_next(request)

        if count > rpm:
            return JSONResponse(
                status_code=429,
                content=error_body(429, "Rate limit exceeded. Try again later."),
                headers={"Retry-After": "60"},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(rpm)
        response.headers["X-RateLimit-Remaining"] = str(max(0, rpm - count))
        return response
