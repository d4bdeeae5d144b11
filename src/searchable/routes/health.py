"""Health check endpoints for liveness and readiness probes."""

from typing import Literal

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from searchable.engine.client import EngineError, IndexClient

router = APIRouter(prefix="/health", tags=["health"])


class LivenessResponse(BaseModel):
    """Response model for liveness probe.

    Attributes:
        status: Always 'alive' when process is running.
    """

    status: Literal["alive"]


class ReadinessCheck(BaseModel):
    """Individual dependency check result.

    Attributes:
        name: Identifier for the dependency being checked.
        status: Result of the check ('ok' or 'failed').
        message: Error details when status is 'failed'.
    """

    name: str
    status: Literal["ok", "failed"]
    message: str | None = None


class ReadinessResponse(BaseModel):
    """Response model for readiness probe.

    Attributes:
        status: Overall readiness ('ready' or 'not_ready').
        checks: List of individual dependency check results.
    """

    status: Literal["ready", "not_ready"]
    checks: list[ReadinessCheck]


def _check_engine(client: IndexClient) -> ReadinessCheck:
    """Verify the search engine answers its root endpoint.

    Args:
        client: Engine client of the application.

    Returns:
        Check result with status and optional error message.
    """
    try:
        client.request("GET", "/")
        return ReadinessCheck(name="engine", status="ok")
    except EngineError as e:
        return ReadinessCheck(name="engine", status="failed", message=str(e))


@router.get("/live", response_model=LivenessResponse)
async def liveness() -> LivenessResponse:
    """Liveness probe endpoint.

    Returns:
        Liveness status response.
    """
    return LivenessResponse(status="alive")


@router.get("/ready", response_model=ReadinessResponse)
def readiness(request: Request) -> JSONResponse:
    """Readiness probe endpoint.

    Returns 200 if the search engine is reachable, 503 otherwise.

    Returns:
        Readiness status with individual check results.
    """
    checks = [_check_engine(request.app.state.registry.client)]
    all_ok = all(c.status == "ok" for c in checks)
    response = ReadinessResponse(
        status="ready" if all_ok else "not_ready",
        checks=checks,
    )
    code = status.HTTP_200_OK if all_ok else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(content=response.model_dump(), status_code=code)
