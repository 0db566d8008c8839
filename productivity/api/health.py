"""Health check endpoint with database connectivity check.

Accessible without authentication for load balancers and container probes.
"""

from datetime import UTC, datetime

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from productivity.core import database
from productivity.schemas.common import ApiResponse

router = APIRouter(tags=["health"])


class HealthStatus(BaseModel):
    """Health check payload."""

    status: str
    database: str
    timestamp: datetime


@router.get(
    "/health",
    response_model=ApiResponse[HealthStatus],
    responses={
        status.HTTP_200_OK: {"description": "Service is healthy"},
        status.HTTP_503_SERVICE_UNAVAILABLE: {"description": "Service is unhealthy"},
    },
)
async def health_check(response: Response) -> ApiResponse[HealthStatus]:
    """
    Health check endpoint.

    Returns 503 if the database is unavailable.
    """
    db_healthy = await database.check_db_connection()

    # Set appropriate status code for container orchestration
    if not db_healthy:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return ApiResponse(
        success=db_healthy,
        message="Service is healthy" if db_healthy else "Service is unhealthy",
        data=HealthStatus(
            status="healthy" if db_healthy else "unhealthy",
            database="connected" if db_healthy else "disconnected",
            timestamp=datetime.now(UTC),
        ),
    )
