"""API key authentication middleware."""

import secrets
from collections.abc import Awaitable, Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from searchable.middleware.logging import route_context

logger = structlog.get_logger()

PUBLIC_PATHS = frozenset(
    {
        "/api/v1/health/live",
        "/api/v1/health/ready",
    }
)


class APIKeyMiddleware(BaseHTTPMiddleware):
    """Requires a matching X-API-Key header on search and admin requests.

    Health probes stay public so orchestrators can reach them without a key.
    """

    def __init__(self, app: Callable[..., Awaitable[Response]], api_key: str) -> None:
        """Initialize middleware with API key.

        Args:
            app: ASGI application.
            api_key: Expected API key value.
        """
        super().__init__(app)  # type: ignore[arg-type]
        self._api_key = api_key

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Reject requests without the expected key with 401.

        Args:
            request: Incoming HTTP request.
            call_next: Next middleware or route handler.

        Returns:
            HTTP response, or 401 if authentication fails.
        """
        if request.url.path in PUBLIC_PATHS:
            return await call_next(request)

        provided_key = request.headers.get("X-API-Key", "")
        if not provided_key or not secrets.compare_digest(provided_key, self._api_key):
            logger.warning(
                "api_key_rejected",
                method=request.method,
                key_provided=bool(provided_key),
                **route_context(request.url.path),
            )
            return JSONResponse(status_code=401, content={"error": "Invalid API key"})

        return await call_next(request)
