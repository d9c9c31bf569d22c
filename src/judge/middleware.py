"""Custom middleware for request handling."""

import logging
import time
import uuid
from typing import Awaitable, Callable, Optional

import jwt
from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from judge.auth import decode_user_id
from judge.config import Settings, get_settings

logger = logging.getLogger(__name__)


class AuthMiddleware(BaseHTTPMiddleware):
    """Extract user ID from JWT and attach to request state."""

    def __init__(self, app, settings: Optional[Settings] = None):
        super().__init__(app)
        self.settings = settings or get_settings()

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        auth = request.headers.get("Authorization")
        if auth and auth.startswith("Bearer "):
            token = auth.split(" ", 1)[1]
            try:
                request.state.user_id = decode_user_id(token, self.settings)
            except jwt.ExpiredSignatureError:
                return JSONResponse(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    content={"detail": "Token has expired"},
                )
            except jwt.InvalidTokenError as exc:
                return JSONResponse(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    content={"detail": f"Invalid token: {exc}"},
                )
            except ValueError:
                return JSONResponse(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    content={"detail": "Invalid token: bad user ID"},
                )
        return await call_next(request)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Add unique request ID to each request."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.perf_counter()
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        logger.debug(
            "%s %s -> %d in %.3fs [%s]",
            request.method, request.url.path, response.status_code,
            time.perf_counter() - start_time, request_id,
        )

        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Simple in-memory rate limiting middleware."""

    def __init__(self, app, settings: Optional[Settings] = None):
        super().__init__(app)
        self.requests = {}
        self.settings = settings or get_settings()

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        # Skip rate limiting for health checks
        if request.url.path == "/health":
            return await call_next(request)

        # Get user ID from request state set by AuthMiddleware
        user_id = getattr(request.state, "user_id", "anonymous")

        current_time = time.time()
        window_start = current_time - self.settings.rate_limit_window

        # Clean old entries
        self.requests[user_id] = [
            ts for ts in self.requests.get(user_id, []) if ts > window_start
        ]

        if len(self.requests[user_id]) >= self.settings.rate_limit_requests:
            logger.warning("Rate limit hit for user %s", user_id)
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={
                    "detail": {
                        "code": "RATE_LIMITED",
                        "message": "Too many requests",
                        "retry_after": self.settings.rate_limit_window,
                    }
                },
            )

        # Record request
        self.requests[user_id].append(current_time)

        return await call_next(request)
