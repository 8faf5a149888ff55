"""Request-scoped middleware: auth context, request ids, rate limiting."""

import time
import uuid
from typing import Awaitable, Callable, Dict, List

import jwt
import structlog
from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from microguide.auth import decode_token
from microguide.config import get_settings


def _error(status_code: int, code: str, message: str, details: dict) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": code, "message": message, "details": details}},
    )


class AuthMiddleware(BaseHTTPMiddleware):
    """Attach the token subject to `request.state.user_id`."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        auth = request.headers.get("Authorization")
        if auth and auth.startswith("Bearer "):
            try:
                payload = decode_token(auth.split(" ", 1)[1])
            except jwt.ExpiredSignatureError:
                return _error(401, "NOT_AUTHENTICATED", "Token has expired", {})
            except jwt.InvalidTokenError as exc:
                return _error(401, "NOT_AUTHENTICATED", f"Invalid token: {exc}", {})

            user_id = payload.get("sub")
            if not user_id:
                return _error(
                    401, "NOT_AUTHENTICATED", "Invalid token: missing user ID", {}
                )
            request.state.user_id = user_id
            structlog.contextvars.bind_contextvars(user_id=user_id)
        return await call_next(request)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Propagate or mint `X-Request-ID` and bind it to the log context."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id, path=request.url.path, method=request.method
        )
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.clear_contextvars()

        response.headers["X-Request-ID"] = request_id
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Sliding-window request limit per user (or "anonymous")."""

    def __init__(self, app):
        super().__init__(app)
        self.requests: Dict[str, List[float]] = {}
        self.settings = get_settings()

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if request.url.path == "/health":
            return await call_next(request)

        user_id = getattr(request.state, "user_id", "anonymous")
        now = time.time()
        window_start = now - self.settings.rate_limit_window

        recent = [ts for ts in self.requests.get(user_id, []) if ts > window_start]
        if len(recent) >= self.settings.rate_limit_requests:
            self.requests[user_id] = recent
            return _error(
                status.HTTP_429_TOO_MANY_REQUESTS,
                "RATE_LIMITED",
                "Too many requests",
                {"retry_after": self.settings.rate_limit_window},
            )

        recent.append(now)
        self.requests[user_id] = recent
        return await call_next(request)
