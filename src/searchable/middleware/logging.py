"""Request logging middleware."""
import re
import time
from collections.abc import Awaitable, Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger()

_TYPE_ROUTE = re.compile(r"^/api/v1/(?P<surface>search|admin)/(?P<document_type>[^/]+)(?:/(?P<action>[^/]+))?/?$")


def route_context(path: str) -> dict[str, str]:
    """Extract the document type, and the admin action if any, from a path.

    Args:
        path: Request path.

    Returns:
        ``document_type`` and ``action`` entries when the path targets a
        searchable type, otherwise an empty dict.
    """
    match = _TYPE_ROUTE.match(path)
    if match is None:
        return {}
    context = {"document_type": match["document_type"]}
    if match["surface"] == "admin" and match["action"]:
        context["action"] = match["action"]
    return context


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each API request with its document type, status and duration.

    The document type is bound to the structlog context for the request,
    so index and engine events logged while serving it carry it as well.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Process request and log details.

        Args:
            request: Incoming HTTP request.
            call_next: Next middleware or route handler.

        Returns:
            HTTP response from handler.
        """
        if request.url.path.startswith("/api/v1/health"):
            return await call_next(request)

        context = route_context(request.url.path)
        start = time.perf_counter()
        with structlog.contextvars.bound_contextvars(**context):
            response = await call_next(request)
            duration_ms = (time.perf_counter() - start) * 1000

            logger.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                query=request.url.query or None,
                status=response.status_code,
                duration_ms=round(duration_ms, 2),
            )
        return response
