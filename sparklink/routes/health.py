"""
Health check routes for SparkLink Backend.

These endpoints are PUBLIC (no authentication required) and provide
status checks for load balancers, monitoring, and deployment verification.

Endpoint Flow:
- Step 1: Auth -> SKIPPED (explicitly public endpoints)
- Step 2: Parse/Validate -> No request body needed
- Step 3: Domain Filter -> N/A
- Step 4: Call Service -> /health/db runs one trivial query
- Step 5: Map to ResponseModel -> HealthResponse / DatabaseHealthResponse
- Step 6: Persistence -> N/A
"""

from fastapi import APIRouter, HTTPException, status

from sparklink.db.client import get_service_role_client
from sparklink.schemas.health import DatabaseHealthResponse, HealthResponse
from sparklink.utils.logging import get_logger

logger = get_logger(__name__)

# Create router with no prefix (mounted at root level in main.py)
router = APIRouter(tags=["system"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check endpoint",
    description=(
        "Public health check endpoint (no authentication required). "
        "Returns a simple status indicator for monitoring and load balancing."
    ),
    status_code=200,
)
async def health_check() -> HealthResponse:
    """
    Public health check endpoint.

    Example response:
        {
            "status": "ok"
        }
    """
    logger.debug("Health check endpoint called")

    return HealthResponse(status="ok")


@router.get(
    "/health/db",
    response_model=DatabaseHealthResponse,
    summary="Database health check",
    description="Runs a one-row query against the template table; 503 when the database is unreachable.",
    status_code=200,
)
async def database_health_check() -> DatabaseHealthResponse:
    try:
        get_service_role_client().table("template").select("id").limit(1).execute()
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"error": "database_unavailable", "details": "Database is not reachable"}
        )

    return DatabaseHealthResponse()
